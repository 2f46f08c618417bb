import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from hierarchy import parse_location_path
from location_codes import build_location_code, find_code_in_text, level_index, parse_location_code
from models import LAYOUT, LocationTree, ParsedLocationCode, PickItem, Point3, WarehouseCfg
from positions import position_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveLine:
    id: int
    product_id: int
    product_name: str
    quantity: float
    location_id: int
    location_name: str


@dataclass(frozen=True)
class Quant:
    product_id: int
    location_id: int
    location_name: str
    quantity: float


@dataclass(frozen=True)
class UnresolvedPick:
    move_line_id: int
    product_name: str
    location_name: str


@dataclass
class PickResolution:
    items: List[PickItem] = field(default_factory=list)
    unresolved: List[UnresolvedPick] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.unresolved)

    @property
    def error_message(self) -> Optional[str]:
        if not self.unresolved:
            return None
        names = ", ".join(f"{u.product_name} (at {u.location_name})" for u in self.unresolved)
        return (
            f"{len(self.unresolved)} item(s) not in specific bin locations: {names}. "
            "These items are stored at a general location and cannot be shown on the route."
        )


def resolve_bin_location(tree: Optional[LocationTree], location_id: int, location_name: str,
                         wh: WarehouseCfg = LAYOUT) -> Optional[Tuple[Point3, Optional[ParsedLocationCode]]]:
    """
    Position of a storage bin, looked up in the tree first, then derived from
    the location path or a bin code embedded in its name. None when the
    location is a general area (WH/Stock, a row, ...) rather than a bin.
    """
    if tree is not None:
        node = tree.nodes.get(location_id)
        if node is not None and node.type == "bin" and node.position is not None:
            return node.position, node.parsed

    path = parse_location_path(location_name)
    # need at least row/bay/level below the container
    if len(path) < wh.root_depth + 3:
        return None

    code = build_location_code(path, wh.root_depth)
    parsed = parse_location_code(code, wh) if code else None
    if parsed is None:
        parsed = find_code_in_text(location_name, wh)
    if parsed is None:
        return None
    return position_of(parsed, wh), parsed


def _pick_item(line: MoveLine, location_id, location_name, resolved) -> PickItem:
    position, parsed = resolved
    return PickItem(
        id=line.id,
        product_id=line.product_id,
        product_name=line.product_name,
        quantity=line.quantity,
        location_id=location_id,
        location_name=location_name,
        position=position,
        parsed=parsed,
        level_index=level_index(parsed.level) if parsed else 0,
    )


def resolve_pick_items(move_lines: Sequence[MoveLine], quants: Iterable[Quant],
                       tree: Optional[LocationTree] = None, wh: WarehouseCfg = LAYOUT) -> PickResolution:
    """
    Resolve what to pick into positioned pick items.

    For each move line a quant of the product sitting in a real bin is
    preferred, the line's own location first. Without one, the line's own
    location is used if it is a bin. Lines that still have no bin are
    reported in ``unresolved`` and left out of the items.
    """
    quants_by_product = {}
    for q in quants:
        if q.quantity > 0:
            quants_by_product.setdefault(q.product_id, []).append(q)

    result = PickResolution()
    for line in move_lines:
        best = None
        for quant in quants_by_product.get(line.product_id, []):
            resolved = resolve_bin_location(tree, quant.location_id, quant.location_name, wh)
            if resolved is None:
                continue
            if quant.location_id == line.location_id:
                best = (quant, resolved)
                break
            if best is None:
                best = (quant, resolved)

        if best is not None:
            quant, resolved = best
            result.items.append(_pick_item(line, quant.location_id, quant.location_name, resolved))
            continue

        resolved = resolve_bin_location(tree, line.location_id, line.location_name, wh)
        if resolved is not None:
            logger.debug("Using move line location for %s: %s", line.product_name, line.location_name)
            result.items.append(_pick_item(line, line.location_id, line.location_name, resolved))
            continue

        logger.warning("No bin location for %s, source: %s", line.product_name, line.location_name)
        result.unresolved.append(UnresolvedPick(line.id, line.product_name, line.location_name))
    return result
