import json
from dataclasses import dataclass, field, fields
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple


class Point3(NamedTuple):
    x: float
    y: float
    z: float


@dataclass
class WarehouseCfg:
    # rack geometry (metres)
    row_spacing: float = 3.0        # aisle width between row pairs
    back_to_back_gap: float = 0.3
    bay_width: float = 1.2
    level_height: float = 0.8
    bin_width: float = 0.5
    bin_depth: float = 0.8
    bays_per_row: int = 20
    levels_per_rack: int = 7
    bins_per_level: int = 2
    # picker model
    speed_mps: float = 1.2
    pick_time_s: float = 15.0
    vertical_penalty: float = 2.0
    # path segments of the container itself, e.g. "WH/Stock"
    root_depth: int = 2

    @property
    def pair_width(self) -> float:
        return self.row_spacing + 2 * self.back_to_back_gap


LAYOUT = WarehouseCfg()


def load_warehouse_cfg(path: str) -> WarehouseCfg:
    """Read a JSON file of WarehouseCfg overrides."""
    with open(path) as f:
        overrides = json.load(f)
    known = {f.name for f in fields(WarehouseCfg)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"unknown warehouse config keys: {sorted(unknown)}")
    return WarehouseCfg(**overrides)


def _many2one_id(value):
    if isinstance(value, (list, tuple)) and value:
        return value[0]
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


@dataclass(frozen=True)
class LocationRecord:
    id: int
    name: str
    complete_name: str
    usage: str = "internal"
    parent_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    coordinates: Optional[Point3] = None
    scrap_location: bool = False
    is_a_dock: bool = False
    zone_type: Optional[str] = None
    zone_width: Optional[float] = None
    zone_depth: Optional[float] = None

    @classmethod
    def from_odoo(cls, raw: dict) -> "LocationRecord":
        """Map a stock.location dict as returned by the ERP."""
        posx, posy, posz = (raw.get("posx") or 0, raw.get("posy") or 0, raw.get("posz") or 0)
        coords = Point3(float(posx), float(posy), float(posz)) if (posx or posy or posz) else None
        parent = raw.get("location_id")
        if parent is None:
            parent = raw.get("parent_id")
        return cls(
            id=int(raw["id"]),
            name=raw.get("name") or "",
            complete_name=raw.get("complete_name") or raw.get("display_name") or raw.get("name") or "",
            usage=raw.get("usage") or "internal",
            parent_id=_many2one_id(parent),
            warehouse_id=_many2one_id(raw.get("warehouse_id")),
            coordinates=coords,
            scrap_location=bool(raw.get("scrap_location")),
            is_a_dock=bool(raw.get("is_a_dock")),
            zone_type=raw.get("zone_type") or None,
            zone_width=raw.get("zone_width") or None,
            zone_depth=raw.get("zone_depth") or None,
        )


@dataclass(frozen=True)
class ParsedLocationCode:
    row: str
    bay: int
    level: str
    side: int


@dataclass
class LocationNode:
    id: int
    name: str
    complete_name: str
    usage: str
    type: str                       # row | bay | level | bin | zone
    parent_id: Optional[int] = None
    children: List[int] = field(default_factory=list)
    depth: int = 0
    item_count: int = 0
    total_quantity: float = 0.0
    has_stock: bool = False
    parsed: Optional[ParsedLocationCode] = None
    position: Optional[Point3] = None
    zone_type: Optional[str] = None
    zone_width: Optional[float] = None
    zone_depth: Optional[float] = None


@dataclass
class LocationTree:
    """Arena of location nodes; parents own their children by id."""
    nodes: Dict[int, LocationNode] = field(default_factory=dict)
    roots: List[int] = field(default_factory=list)

    def node(self, node_id: int) -> LocationNode:
        return self.nodes[node_id]

    def children_of(self, node_id: int) -> List[LocationNode]:
        return [self.nodes[c] for c in self.nodes[node_id].children]

    def root_nodes(self) -> List[LocationNode]:
        return [self.nodes[r] for r in self.roots]

    def walk(self) -> Iterator[LocationNode]:
        # pre-order, sibling order preserved
        stack = list(reversed(self.roots))
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def __len__(self):
        return len(self.nodes)

    def __contains__(self, node_id):
        return node_id in self.nodes


@dataclass(frozen=True)
class PickItem:
    id: int
    product_id: int
    product_name: str
    quantity: float
    location_id: int
    location_name: str
    position: Point3
    parsed: Optional[ParsedLocationCode] = None
    level_index: int = 0


@dataclass(frozen=True)
class RouteStep:
    index: int
    item: PickItem
    distance_from_previous: float
    cumulative_distance: float


@dataclass(frozen=True)
class PickRoute:
    steps: Tuple[RouteStep, ...]
    total_distance: float
    estimated_time_s: float
    start_position: Point3
    end_position: Point3

    @property
    def items(self) -> List[PickItem]:
        return [s.item for s in self.steps]
