import math
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Sequence

import numpy as np

from models import LAYOUT, PickItem, PickRoute, Point3, RouteStep, WarehouseCfg


class RoutingAlgorithm(Enum):
    NEAREST = "nearest"
    S_PATTERN = "sPattern"
    LEVEL_FIRST = "levelFirst"


class RouteComparison(NamedTuple):
    algorithm: RoutingAlgorithm
    distance: float
    time: float


class BestRoute(NamedTuple):
    best_route: PickRoute
    algorithm: RoutingAlgorithm
    comparison: List[RouteComparison]


def aisle_center_z(z: float, wh: WarehouseCfg = LAYOUT) -> float:
    """Midline of the aisle that follows the row pair containing z."""
    pair_idx = math.floor(z / wh.pair_width)
    return pair_idx * wh.pair_width + wh.back_to_back_gap * 2 + wh.row_spacing / 2


def walking_distance(a: Point3, b: Point3, wh: WarehouseCfg = LAYOUT) -> float:
    """
    Walking distance between two pick positions.
    Within a row pair the picker walks straight along the racks; otherwise
    they step out into the aisle, walk along it, cross to the target aisle and
    step in. Vertical travel is weighted by the vertical penalty.
    """
    vertical = abs(b.y - a.y) * wh.vertical_penalty
    if abs(a.z - b.z) < wh.back_to_back_gap * 2:
        return abs(b.x - a.x) + vertical

    from_aisle = aisle_center_z(a.z, wh)
    to_aisle = aisle_center_z(b.z, wh)
    return (
        abs(a.z - from_aisle)
        + abs(b.x - a.x)
        + abs(to_aisle - from_aisle)
        + abs(b.z - to_aisle)
        + vertical
    )


def euclidean_distance(a: Point3, b: Point3) -> float:
    return float(np.linalg.norm(np.subtract(b, a)))


def build_route(ordered_items: Sequence[PickItem], start: Point3, wh: WarehouseCfg = LAYOUT) -> PickRoute:
    """Score a visiting order with the walking-distance model."""
    steps = []
    current = start
    total = 0.0
    for item in ordered_items:
        leg = walking_distance(current, item.position, wh)
        total += leg
        steps.append(RouteStep(index=len(steps), item=item, distance_from_previous=leg, cumulative_distance=total))
        current = item.position
    estimated = total / wh.speed_mps + len(steps) * wh.pick_time_s
    return PickRoute(
        steps=tuple(steps),
        total_distance=total,
        estimated_time_s=estimated,
        start_position=start,
        end_position=current,
    )


def _nearest_neighbor_order(items, start, distance_fn):
    unvisited = list(items)
    ordered = []
    current = start
    while unvisited:
        dists = [distance_fn(current, it.position) for it in unvisited]
        idx = int(np.argmin(dists))  # first minimum keeps input order on ties
        item = unvisited.pop(idx)
        ordered.append(item)
        current = item.position
    return ordered


def nearest_neighbor_route(items: Sequence[PickItem], start: Point3, wh: WarehouseCfg = LAYOUT) -> PickRoute:
    ordered = _nearest_neighbor_order(items, start, lambda a, b: walking_distance(a, b, wh))
    return build_route(ordered, start, wh)


def s_pattern_route(items: Sequence[PickItem], start: Point3, wh: WarehouseCfg = LAYOUT) -> PickRoute:
    """
    Serpentine: sweep rows in Z order, alternating direction along X each row.
    Items sharing an X position are taken ground level first.
    """
    row_groups = defaultdict(list)
    for item in items:
        # nearest multiple of the row spacing, halves rounded up
        row_key = math.floor(item.position.z / wh.row_spacing + 0.5)
        row_groups[row_key].append(item)

    ordered = []
    for bucket, row_key in enumerate(sorted(row_groups)):
        if bucket % 2 == 0:
            key = lambda it: (it.position.x, it.level_index)
        else:
            key = lambda it: (-it.position.x, it.level_index)
        ordered.extend(sorted(row_groups[row_key], key=key))
    return build_route(ordered, start, wh)


def level_first_route(items: Sequence[PickItem], start: Point3, wh: WarehouseCfg = LAYOUT) -> PickRoute:
    """
    Finish each shelf level before moving up, ground level first. Within a
    level, straight-line nearest neighbour from where the last level ended.
    """
    level_groups = defaultdict(list)
    for item in items:
        level_groups[item.level_index].append(item)

    ordered = []
    current = start
    for level in sorted(level_groups):
        level_order = _nearest_neighbor_order(level_groups[level], current, euclidean_distance)
        ordered.extend(level_order)
        current = level_order[-1].position
    return build_route(ordered, start, wh)


ROUTERS: Dict[RoutingAlgorithm, Callable[..., PickRoute]] = {
    RoutingAlgorithm.NEAREST: nearest_neighbor_route,
    RoutingAlgorithm.S_PATTERN: s_pattern_route,
    RoutingAlgorithm.LEVEL_FIRST: level_first_route,
}


def calculate_pick_route(items: Sequence[PickItem], start: Point3,
                         algorithm: RoutingAlgorithm = RoutingAlgorithm.NEAREST,
                         wh: WarehouseCfg = LAYOUT) -> PickRoute:
    return ROUTERS[RoutingAlgorithm(algorithm)](items, start, wh)


def find_best_route(items: Sequence[PickItem], start: Point3, wh: WarehouseCfg = LAYOUT,
                    parallel: bool = False) -> BestRoute:
    """
    Run every heuristic and keep the shortest. The comparison table lists all
    of them, shortest first; ties keep the RoutingAlgorithm order.
    """
    algorithms = list(RoutingAlgorithm)
    if parallel:
        with ThreadPoolExecutor(max_workers=len(algorithms)) as executor:
            routes = list(executor.map(lambda alg: ROUTERS[alg](items, start, wh), algorithms))
    else:
        routes = [ROUTERS[alg](items, start, wh) for alg in algorithms]

    ranked = sorted(zip(algorithms, routes), key=lambda pair: pair[1].total_distance)
    best_alg, best = ranked[0]
    comparison = [
        RouteComparison(algorithm=alg, distance=route.total_distance, time=route.estimated_time_s)
        for alg, route in ranked
    ]
    return BestRoute(best_route=best, algorithm=best_alg, comparison=comparison)
