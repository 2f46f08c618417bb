"""
Hierarchy builder: flat ERP location records -> typed location tree.

A warehouse path looks like ``WH/Stock/AG/14/AF/01``. The first
``root_depth`` segments name the container itself; the rest map onto
row / bay / level / side. Floor areas (docks, staging, scrap, ...) are
detected from flags and names and typed ``zone``.
"""
import logging
import re
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional

from location_codes import LEVEL_CODES, build_location_code, parse_location_code
from models import LAYOUT, LocationNode, LocationRecord, LocationTree, Point3, WarehouseCfg
from positions import child_zone_position, position_of, zone_footprint, zone_position

logger = logging.getLogger(__name__)

STRUCTURAL_USAGES = ("internal", "view")

DEPTH_TYPES = {1: "row", 2: "bay", 3: "level"}

# ERP built-in location names that are floor areas, not racking
BUILTIN_ZONE_NAMES = {
    "input": "staging",
    "output": "staging",
    "packing zone": "packing",
    "quality control": "qc",
    "scrap": "scrap",
}

ZONE_NAME_PATTERNS = [
    ("dock", re.compile(r"\b(docks?|loading|shipping)\b", re.IGNORECASE)),
    ("staging", re.compile(r"\b(staging|stage|receiving)\b", re.IGNORECASE)),
    ("scrap", re.compile(r"\b(scrap|damaged|waste)\b", re.IGNORECASE)),
    ("qc", re.compile(r"\b(qc|quality|inspection)\b", re.IGNORECASE)),
    ("packing", re.compile(r"\b(pack|packing)\b", re.IGNORECASE)),
    ("floor", re.compile(r"\b(floor|bulk|yard)\b", re.IGNORECASE)),
]

DEFAULT_ROW_COUNT = 8

_DIGITS_RE = re.compile(r"(\d+)")


def parse_location_path(complete_name: str) -> List[str]:
    """'WH/Stock/AG/14/AF/01' -> ['WH', 'Stock', 'AG', '14', 'AF', '01']"""
    return [s.strip() for s in (complete_name or "").split("/") if s.strip()]


def natural_key(name: str):
    # "AG2" < "AG10"; digit runs compare numerically, text case-insensitively
    return [int(tok) if tok.isdigit() else tok.lower() for tok in _DIGITS_RE.split(name or "")]


def detect_zone_type(record: LocationRecord) -> Optional[str]:
    if record.zone_type:
        return record.zone_type.lower()
    if record.is_a_dock:
        return "dock"
    if record.scrap_location:
        return "scrap"
    name = (record.name or "").strip().lower()
    if name in BUILTIN_ZONE_NAMES:
        return BUILTIN_ZONE_NAMES[name]
    for zone_type, pattern in ZONE_NAME_PATTERNS:
        if pattern.search(name):
            return zone_type
    return None


def _belongs_to_warehouse(record: LocationRecord, warehouse_id, warehouse_code, wh: WarehouseCfg) -> bool:
    if record.usage not in STRUCTURAL_USAGES:
        return False
    by_id = warehouse_id is not None and record.warehouse_id == warehouse_id
    by_path = bool(warehouse_code) and (
        record.complete_name.startswith(f"{warehouse_code}/") or record.complete_name == warehouse_code
    )
    if not by_id and not by_path:
        return False
    # the container's own stock location is not part of the tree
    return len(parse_location_path(record.complete_name)) > wh.root_depth


def _make_node(record: LocationRecord, wh: WarehouseCfg) -> LocationNode:
    path = parse_location_path(record.complete_name)
    depth = len(path) - wh.root_depth
    node = LocationNode(
        id=record.id,
        name=record.name,
        complete_name=record.complete_name,
        usage=record.usage,
        type=DEPTH_TYPES.get(depth, "bin"),
        parent_id=record.parent_id,
        depth=depth,
    )

    zone_type = detect_zone_type(record)
    if zone_type is not None:
        _make_zone(node, zone_type, record.zone_width, record.zone_depth)
        node.position = record.coordinates
        return node

    code = build_location_code(path, wh.root_depth)
    parsed = parse_location_code(code, wh) if code else None
    if parsed is not None:
        node.parsed = parsed
        node.position = position_of(parsed, wh)
    return node


def _make_zone(node: LocationNode, zone_type: str, width=None, depth=None):
    footprint = zone_footprint(zone_type)
    node.type = "zone"
    node.zone_type = zone_type
    node.zone_width = width or footprint["width"]
    node.zone_depth = depth or footprint["depth"]


def _link(nodes: Dict[int, LocationNode]) -> LocationTree:
    tree = LocationTree(nodes=nodes)
    for node_id in sorted(nodes):
        node = nodes[node_id]
        parent = nodes.get(node.parent_id) if node.parent_id is not None else None
        if parent is not None and parent.id != node.id:
            parent.children.append(node.id)
        else:
            # parent filtered out (e.g. the container's stock location)
            tree.roots.append(node.id)
    _break_cycles(tree)
    return tree


def _break_cycles(tree: LocationTree):
    reachable = {n.id for n in tree.walk()}
    for node_id in sorted(tree.nodes):
        if node_id in reachable:
            continue
        # every unreachable node hangs below a loop; walk up until an id repeats
        chain = []
        current = node_id
        while current not in chain:
            chain.append(current)
            current = tree.nodes[current].parent_id
        loop = chain[chain.index(current):]
        node = tree.nodes[min(loop)]
        logger.warning("Location %s (%s) is part of a parent cycle; promoting to root", node.id, node.complete_name)
        tree.nodes[node.parent_id].children.remove(node.id)
        node.parent_id = None
        tree.roots.append(node.id)
        stack = [node.id]
        while stack:
            current = stack.pop()
            reachable.add(current)
            stack.extend(c for c in tree.nodes[current].children if c not in reachable)


def _inherit_zones(tree: LocationTree):
    # un-coded locations under a floor area belong to that area
    for node in tree.walk():
        if node.type != "zone":
            continue
        for child in tree.children_of(node.id):
            if child.type != "zone" and child.parsed is None:
                _make_zone(child, node.zone_type)


def reclassification_patches(tree: LocationTree, wh: WarehouseCfg = LAYOUT) -> Dict[int, dict]:
    """
    Field updates for every childless level: a level with nothing under it
    is itself the storage slot, so it becomes a bin with its code recomputed.
    """
    patches = {}
    for node in tree.nodes.values():
        if node.type != "level" or node.children:
            continue
        patch = {"type": "bin"}
        code = build_location_code(parse_location_path(node.complete_name), wh.root_depth)
        parsed = parse_location_code(code, wh) if code else None
        if parsed is not None:
            patch["parsed"] = parsed
            patch["position"] = position_of(parsed, wh)
        patches[node.id] = patch
    return patches


def apply_patches(tree: LocationTree, patches: Dict[int, dict]) -> LocationTree:
    nodes = {
        node_id: replace(node, **patches[node_id]) if node_id in patches else node
        for node_id, node in tree.nodes.items()
    }
    for node_id in patches:
        logger.debug("Reclassified level %s as bin", nodes[node_id].complete_name)
    return LocationTree(nodes=nodes, roots=list(tree.roots))


def _sort_tree(tree: LocationTree):
    def key(node_id):
        node = tree.nodes[node_id]
        return natural_key(node.name), node.id

    tree.roots.sort(key=key)
    for node in tree.nodes.values():
        node.children.sort(key=key)


def _position_zones(tree: LocationTree, counters: Dict[str, int], row_count: int,
                    wh: WarehouseCfg) -> Dict[str, int]:
    """
    Lay out zones without explicit coordinates. Top-level zones take the next
    slot for their kind from ``counters``; zones inside another zone line up
    along the parent's back edge. Returns the updated counters.
    """
    for node in tree.walk():
        if node.type != "zone":
            continue
        parent = tree.nodes.get(node.parent_id) if node.parent_id is not None else None
        if node.position is None and (parent is None or parent.type != "zone"):
            index = counters.get(node.zone_type, 0)
            counters[node.zone_type] = index + 1
            node.position = zone_position(node.zone_type, index, row_count, wh)

        child_index = 0
        for child in tree.children_of(node.id):
            if child.type == "zone" and child.position is None:
                child.position = child_zone_position(
                    node.position, node.zone_width, node.zone_depth,
                    child_index, child.zone_width, child.zone_depth,
                )
                child_index += 1
    return counters


def build_location_hierarchy(records: Iterable[LocationRecord], warehouse_id: Optional[int],
                             warehouse_code: Optional[str] = None,
                             wh: WarehouseCfg = LAYOUT) -> LocationTree:
    """
    Build the location tree of one warehouse.

    Records are matched to the warehouse by id or, when ids are missing, by
    the ``<code>/`` path prefix. Locations whose parent did not survive the
    filter become roots. Building never raises on malformed records: a node
    whose code cannot be parsed simply has no position.
    """
    nodes: Dict[int, LocationNode] = {}
    explicit: Dict[int, Point3] = {}
    for record in records:
        if not _belongs_to_warehouse(record, warehouse_id, warehouse_code, wh):
            continue
        if record.id in nodes:
            logger.warning("Duplicate location id %s (%s) ignored", record.id, record.complete_name)
            continue
        nodes[record.id] = _make_node(record, wh)
        if record.coordinates is not None:
            explicit[record.id] = record.coordinates
    logger.info("Warehouse %s: %d locations selected", warehouse_code or warehouse_id, len(nodes))

    tree = _link(nodes)
    _inherit_zones(tree)
    for node in tree.walk():
        if node.type == "zone" and node.position is None and node.id in explicit:
            node.position = explicit[node.id]

    tree = apply_patches(tree, reclassification_patches(tree, wh))
    _sort_tree(tree)

    row_count = sum(1 for n in tree.nodes.values() if n.type == "row") or DEFAULT_ROW_COUNT
    _position_zones(tree, {}, row_count, wh)

    logger.info(
        "Built hierarchy with %d roots, %d bins, %d zones",
        len(tree.roots),
        sum(1 for n in tree.nodes.values() if n.type == "bin"),
        sum(1 for n in tree.nodes.values() if n.type == "zone"),
    )
    return tree


def find_node_by_id(tree: LocationTree, node_id: int) -> Optional[LocationNode]:
    return tree.nodes.get(node_id)


def get_ancestor_ids(tree: LocationTree, node_id: int) -> Optional[List[int]]:
    """Ids from the root down to the node's parent, or None if unknown."""
    if node_id not in tree.nodes:
        return None
    ancestors = []
    current = tree.nodes[node_id].parent_id
    while current is not None and current in tree.nodes:
        ancestors.append(current)
        current = tree.nodes[current].parent_id
    return list(reversed(ancestors))


def flatten_to_bins(tree: LocationTree) -> List[LocationNode]:
    return [n for n in tree.walk() if n.type == "bin"]


def _prune(tree: LocationTree, keep: Callable[[LocationNode, List[int]], bool]) -> LocationTree:
    nodes: Dict[int, LocationNode] = {}

    def visit(node_id) -> bool:
        node = tree.nodes[node_id]
        kept_children = [c for c in node.children if visit(c)]
        if not keep(node, kept_children):
            return False
        nodes[node_id] = replace(node, children=kept_children)
        return True

    roots = [r for r in tree.roots if visit(r)]
    return LocationTree(nodes=nodes, roots=roots)


def filter_location_tree(tree: LocationTree, query: str) -> LocationTree:
    """Keep nodes whose name or path contains ``query``, plus their ancestors."""
    if not query.strip():
        return tree
    q = query.strip().lower()

    def keep(node, kept_children):
        return q in node.name.lower() or q in node.complete_name.lower() or bool(kept_children)

    return _prune(tree, keep)


def filter_by_visible_levels(tree: LocationTree, visible_levels) -> LocationTree:
    visible = set(visible_levels)
    if not visible or len(visible) == len(LEVEL_CODES):
        return tree

    def keep(node, kept_children):
        if node.type == "bin" and node.parsed is not None and node.parsed.level not in visible:
            return False
        if node.type == "level" and node.name not in visible:
            return False
        if node.type in ("row", "bay"):
            return bool(kept_children)
        return True

    return _prune(tree, keep)
