from __future__ import annotations
from typing import Any, Dict, List, Optional

import pandas as pd

from data_io import check_stock_frame, move_lines_from_frame, quants_from_frame
from hierarchy import build_location_hierarchy
from models import LAYOUT, LocationRecord, LocationTree, PickRoute, Point3
from picking import resolve_pick_items
from routing import RoutingAlgorithm, calculate_pick_route, find_best_route
from stock import aggregate_stock, summarize_quants


def _point(p: Optional[Point3]):
    return None if p is None else [p.x, p.y, p.z]


def node_to_dict(tree: LocationTree, node_id: int) -> Dict[str, Any]:
    node = tree.node(node_id)
    return {
        "id": node.id,
        "name": node.name,
        "complete_name": node.complete_name,
        "usage": node.usage,
        "type": node.type,
        "parent_id": node.parent_id,
        "depth": node.depth,
        "item_count": node.item_count,
        "total_quantity": node.total_quantity,
        "has_stock": node.has_stock,
        "parsed": None if node.parsed is None else node.parsed.__dict__.copy(),
        "position": _point(node.position),
        "zone_type": node.zone_type,
        "zone_width": node.zone_width,
        "zone_depth": node.zone_depth,
        "children": [node_to_dict(tree, c) for c in node.children],
    }


def tree_to_dicts(tree: LocationTree) -> List[Dict[str, Any]]:
    return [node_to_dict(tree, r) for r in tree.roots]


def route_to_dict(route: PickRoute) -> Dict[str, Any]:
    return {
        "steps": [
            {
                "index": s.index,
                "item_id": s.item.id,
                "product_id": s.item.product_id,
                "product_name": s.item.product_name,
                "quantity": s.item.quantity,
                "location_id": s.item.location_id,
                "location_name": s.item.location_name,
                "position": _point(s.item.position),
                "distance_from_previous": s.distance_from_previous,
                "cumulative_distance": s.cumulative_distance,
            }
            for s in route.steps
        ],
        "total_distance": route.total_distance,
        "estimated_time_s": route.estimated_time_s,
        "start_position": _point(route.start_position),
        "end_position": _point(route.end_position),
    }


def _build_tree(locations, warehouse_id, warehouse_code, quants_df):
    records = [LocationRecord.from_odoo(raw) for raw in locations]
    tree = build_location_hierarchy(records, warehouse_id, warehouse_code, LAYOUT)
    aggregate_stock(tree, summarize_quants(quants_df))
    return tree


def _quants_frame(quants):
    if not quants:
        return pd.DataFrame(columns=["product_id", "location_id", "quantity", "location_name"])
    return pd.DataFrame(quants)


def run_hierarchy(locations: List[dict], warehouse_id: Optional[int], warehouse_code: Optional[str],
                  quants: Optional[List[dict]] = None) -> Dict[str, Any]:
    quants_df = _quants_frame(quants)
    if not quants_df.empty:
        check_stock_frame(quants_df)
    tree = _build_tree(locations, warehouse_id, warehouse_code, quants_df)
    return {"count": len(tree), "roots": tree_to_dicts(tree)}


def run_route(locations: List[dict], warehouse_id: Optional[int], warehouse_code: Optional[str],
              move_lines: List[dict], quants: Optional[List[dict]], start: List[float],
              algorithm: str = "best") -> Dict[str, Any]:
    if len(start) != 3:
        raise ValueError(f"start must have 3 coordinates, got {len(start)}")
    quants_df = _quants_frame(quants)
    quant_list = quants_from_frame(quants_df) if not quants_df.empty else []
    lines = move_lines_from_frame(pd.DataFrame(move_lines)) if move_lines else []

    tree = _build_tree(locations, warehouse_id, warehouse_code, quants_df)
    resolution = resolve_pick_items(lines, quant_list, tree, LAYOUT)
    start_point = Point3(*(float(v) for v in start))

    best = find_best_route(resolution.items, start_point, LAYOUT)
    if algorithm == "best":
        route = best.best_route
    else:
        route = calculate_pick_route(resolution.items, start_point, RoutingAlgorithm(algorithm), LAYOUT)

    return {
        "algorithm": algorithm if algorithm != "best" else best.algorithm.value,
        "best_algorithm": best.algorithm.value,
        "route": route_to_dict(route),
        "comparison": [
            {"algorithm": c.algorithm.value, "distance": c.distance, "time": c.time}
            for c in best.comparison
        ],
        "unresolved": [u.__dict__.copy() for u in resolution.unresolved],
        "error": resolution.error_message,
    }
