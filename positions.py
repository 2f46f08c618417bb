import math
from typing import NamedTuple

from location_codes import level_index, row_pair
from models import LAYOUT, ParsedLocationCode, Point3, WarehouseCfg

# Footprints (width along X, depth along Z) per zone kind
ZONE_DEFAULTS = {
    "dock": {"width": 6.0, "depth": 8.0},
    "staging": {"width": 8.0, "depth": 6.0},
    "scrap": {"width": 4.0, "depth": 4.0},
    "qc": {"width": 5.0, "depth": 5.0},
    "packing": {"width": 6.0, "depth": 5.0},
    "floor": {"width": 5.0, "depth": 5.0},
}
ZONE_TYPES = tuple(ZONE_DEFAULTS)

ZONE_GAP = 2.0
FLOOR_ZONE_GAP = 1.0
ZONE_CHILD_GAP = 0.5
PICKER_CLEARANCE = 0.6


class Bounds(NamedTuple):
    width: float
    depth: float
    height: float


def zone_footprint(zone_type):
    return ZONE_DEFAULTS.get(zone_type, ZONE_DEFAULTS["floor"])


def _row_z(row: str, wh: WarehouseCfg) -> float:
    pair_idx, is_second = row_pair(row)
    return pair_idx * wh.pair_width + (wh.back_to_back_gap if is_second else 0.0)


def position_of(parsed: ParsedLocationCode, wh: WarehouseCfg = LAYOUT) -> Point3:
    """
    Bin origin in layout space: X runs along the row (bay, then side),
    Y is shelf height, Z steps over back-to-back row pairs.
    """
    x = (parsed.bay - 1) * wh.bay_width + (parsed.side - 1) * wh.bin_width
    y = level_index(parsed.level) * wh.level_height
    return Point3(x, y, _row_z(parsed.row, wh))


def row_center(row: str, wh: WarehouseCfg = LAYOUT) -> Point3:
    x = (wh.bays_per_row * wh.bay_width) / 2
    y = (wh.levels_per_rack * wh.level_height) / 2
    return Point3(x, y, _row_z(row, wh))


def warehouse_bounds(row_count: int, wh: WarehouseCfg = LAYOUT) -> Bounds:
    pair_count = math.ceil(row_count / 2)
    return Bounds(
        width=wh.bays_per_row * wh.bay_width,
        depth=pair_count * wh.pair_width,
        height=wh.levels_per_rack * wh.level_height,
    )


def zone_position(zone_type: str, index: int, row_count: int = 8, wh: WarehouseCfg = LAYOUT) -> Point3:
    """
    Centre of the index-th zone of a kind, placed around the rack block.
    Docks and packing line up in front (negative Z), staging just behind the
    docks, scrap down the right side, qc down the left side; anything else
    lines up behind the racks.
    """
    bounds = warehouse_bounds(row_count, wh)
    footprint = zone_footprint(zone_type)
    w, d = footprint["width"], footprint["depth"]

    if zone_type == "dock":
        return Point3(index * (w + ZONE_GAP) + w / 2, 0.0, -d - ZONE_GAP)
    if zone_type == "staging":
        return Point3(index * (w + ZONE_GAP) + w / 2, 0.0, -d / 2 - 1)
    if zone_type == "scrap":
        return Point3(bounds.width + ZONE_GAP, 0.0, index * (d + ZONE_GAP) + d / 2)
    if zone_type == "qc":
        return Point3(-w - ZONE_GAP, 0.0, bounds.depth / 2 + index * (d + ZONE_GAP))
    if zone_type == "packing":
        return Point3(bounds.width / 2 + index * (w + ZONE_GAP), 0.0, -d - ZONE_GAP)
    return Point3(bounds.width / 2 + index * (w + FLOOR_ZONE_GAP), 0.0, bounds.depth + d / 2 + 2)


def child_zone_position(parent_pos: Point3, parent_w: float, parent_d: float,
                        child_index: int, child_w: float, child_d: float) -> Point3:
    # left to right along the parent's back (+Z) edge, inside its footprint
    x = parent_pos.x - parent_w / 2 + ZONE_CHILD_GAP + child_w / 2 + child_index * (child_w + ZONE_CHILD_GAP)
    z = parent_pos.z + parent_d / 2 - ZONE_CHILD_GAP - child_d / 2
    return Point3(x, parent_pos.y, z)


def row_front_direction(row: str) -> str:
    """Which aisle a row's bins open onto: 'lower' or 'higher' Z."""
    _, is_second = row_pair(row)
    return "higher" if is_second else "lower"


def pick_stand_position(bin_position: Point3, row: str, at_bin_height: bool = False,
                        wh: WarehouseCfg = LAYOUT) -> Point3:
    offset = wh.bin_depth / 2 + PICKER_CLEARANCE
    dz = offset if row_front_direction(row) == "higher" else -offset
    y = bin_position.y if at_bin_height else 0.0
    return Point3(bin_position.x + wh.bin_width / 2, y, bin_position.z + dz)


def camera_position_for_location(parsed: ParsedLocationCode, distance: float = 5.0,
                                 wh: WarehouseCfg = LAYOUT) -> Point3:
    p = position_of(parsed, wh)
    return Point3(p.x, p.y + 2, p.z + distance)


def camera_position_for_row(row: str, distance: float = 15.0, wh: WarehouseCfg = LAYOUT) -> Point3:
    c = row_center(row, wh)
    return Point3(c.x, c.y + 3, c.z + distance)


def camera_position_for_warehouse(row_count: int = 8, wh: WarehouseCfg = LAYOUT) -> Point3:
    b = warehouse_bounds(row_count, wh)
    return Point3(b.width / 2, b.height + 5, b.depth + 10)


def camera_position_for_zone(position: Point3, zone_width: float, zone_depth: float) -> Point3:
    distance = max(zone_width, zone_depth) * 1.5
    return Point3(position.x + zone_width / 2, distance / 2 + 3, position.z + zone_depth / 2 + distance)
