# main.py

import argparse
import logging
import random

import matplotlib.pyplot as plt
import pandas as pd

from data_io import quants_from_frame, read_locations, read_move_lines, read_quants
from hierarchy import build_location_hierarchy, flatten_to_bins
from kpis import comparison_frame, compute_route_kpis, format_distance, format_estimated_time
from models import LAYOUT, Point3, load_warehouse_cfg
from picking import resolve_pick_items
from routing import RoutingAlgorithm, calculate_pick_route, find_best_route
from stock import aggregate_stock, summarize_quants
from storage import gen_location_records, gen_pick_requests
from visualization import plot_route_plan


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Build a warehouse location tree and plan a pick route.")
    parser.add_argument("--locations", help="locations.csv; a synthetic warehouse is generated when omitted")
    parser.add_argument("--quants", help="quants.csv")
    parser.add_argument("--move-lines", help="move_lines.csv")
    parser.add_argument("--warehouse-id", type=int, default=1)
    parser.add_argument("--warehouse-code", default="WH")
    parser.add_argument("--algorithm", default="best",
                        choices=["best"] + [a.value for a in RoutingAlgorithm])
    parser.add_argument("--start", type=float, nargs=3, default=[0.0, 0.0, 0.0], metavar=("X", "Y", "Z"))
    parser.add_argument("--config", help="JSON file with warehouse layout overrides")
    parser.add_argument("--lines", type=int, default=12, help="pick lines for the synthetic warehouse")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--plot", action="store_true")
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    wh = load_warehouse_cfg(args.config) if args.config else LAYOUT

    # --- Input records ---
    if args.locations:
        records = read_locations(args.locations)
        quants_df = read_quants(args.quants) if args.quants else pd.DataFrame(columns=["product_id", "location_id", "quantity"])
        quants = quants_from_frame(quants_df)
        move_lines = read_move_lines(args.move_lines) if args.move_lines else []
    else:
        rng = random.Random(args.seed)
        records = gen_location_records(warehouse_id=args.warehouse_id, code=args.warehouse_code)
        move_lines, quants = gen_pick_requests(records, args.lines, rng)
        quants_df = pd.DataFrame([q.__dict__ for q in quants])

    # --- Tree + stock ---
    tree = build_location_hierarchy(records, args.warehouse_id, args.warehouse_code, wh)
    aggregate_stock(tree, summarize_quants(quants_df))
    print(f"Locations: {len(tree)}  roots: {len(tree.roots)}  bins: {len(flatten_to_bins(tree))}")

    # --- Picks ---
    resolution = resolve_pick_items(move_lines, quants, tree, wh)
    if resolution.has_errors:
        print(resolution.error_message)
    if not resolution.items:
        print("No items with valid bin locations to route.")
        return

    # --- Route ---
    start = Point3(*args.start)
    best = find_best_route(resolution.items, start, wh)
    if args.algorithm == "best":
        route = best.best_route
    else:
        route = calculate_pick_route(resolution.items, start, RoutingAlgorithm(args.algorithm), wh)

    print(comparison_frame(best).to_string(index=False))
    print(f"\nBest: {best.algorithm.value}")
    for step in route.steps:
        print(f"{step.index + 1:>3}. {step.item.location_name:<28} {step.item.product_name:<14} "
              f"x{step.item.quantity:<4} +{format_distance(step.distance_from_previous)}")
    kpis = compute_route_kpis(route)
    print(f"Total: {format_distance(route.total_distance)}, {format_estimated_time(route.estimated_time_s)}, "
          f"{kpis['Levels Visited']} level(s), rows {', '.join(kpis['Rows Visited'])}")

    if args.plot:
        plot_route_plan(tree, route, wh)
        plt.show()


if __name__ == "__main__":
    main()
