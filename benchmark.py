import argparse
import logging
import os
import random
from concurrent.futures import ProcessPoolExecutor
from datetime import datetime

import matplotlib.pyplot as plt
import pandas as pd
from tqdm import tqdm

from hierarchy import build_location_hierarchy
from models import Point3
from picking import resolve_pick_items
from routing import ROUTERS
from storage import gen_location_records, gen_pick_requests


def single_run(args):
    num_lines, iteration = args
    rng = random.Random(iteration)
    records = gen_location_records(num_rows=8, bays_per_row=20, with_zones=False)
    tree = build_location_hierarchy(records, 1, "WH")
    move_lines, quants = gen_pick_requests(records, num_lines, rng)
    items = resolve_pick_items(move_lines, quants, tree).items
    start = Point3(0.0, 0.0, 0.0)

    rows = []
    for algorithm, router in ROUTERS.items():
        route = router(items, start)
        rows.append({
            "Iteration": iteration,
            "Lines": num_lines,
            "Algorithm": algorithm.value,
            "Total Distance (m)": route.total_distance,
            "Time (min)": route.estimated_time_s / 60,
        })
    best = min(r["Total Distance (m)"] for r in rows)
    for r in rows:
        r["Best"] = r["Total Distance (m)"] == best
    return rows


def run_experiments(iterations=50, line_counts=(5, 10, 20, 40), results_dir="benchmark_results", show=True):
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(results_dir, exist_ok=True)
    csv_filename = os.path.join(results_dir, f"route_benchmark_{timestamp}.csv")

    all_args = [(n, it) for n in line_counts for it in range(1, iterations + 1)]
    rows = []
    with ProcessPoolExecutor() as executor:
        for run_rows in tqdm(executor.map(single_run, all_args), total=len(all_args), desc="Benchmark Progress"):
            rows.extend(run_rows)

    df = pd.DataFrame(rows)
    df.to_csv(csv_filename, index=False)

    summary = df.pivot_table(index="Lines", columns="Algorithm", values="Total Distance (m)", aggfunc="mean")
    wins = df[df["Best"]].groupby("Algorithm").size()
    print(summary.round(2).to_string())
    print("\nWins per algorithm:")
    print(wins.to_string())

    if show:
        fig, axes = plt.subplots(1, 2, figsize=(14, 6))
        summary.plot(kind="line", marker="o", ax=axes[0])
        axes[0].set_ylabel("Avg Total Distance (m)")
        axes[0].set_title("Average Route Distance by Pick Lines")
        wins.plot(kind="bar", ax=axes[1], legend=False)
        axes[1].set_title("Times Each Algorithm Was Best")
        plt.tight_layout()
        plt.show()
    return df


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Compare pick-route heuristics on random pick sets.")
    parser.add_argument("--iterations", type=int, default=50)
    parser.add_argument("--lines", type=int, nargs="+", default=[5, 10, 20, 40])
    parser.add_argument("--no-plot", action="store_true")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper())
    run_experiments(args.iterations, tuple(args.lines), show=not args.no_plot)
