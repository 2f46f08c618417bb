import math

import pandas as pd

from location_codes import ROW_CODES
from models import PickRoute


def compute_route_kpis(route: PickRoute):
    steps = route.steps
    legs = [s.distance_from_previous for s in steps]
    levels = {s.item.level_index for s in steps}
    rows = {s.item.parsed.row for s in steps if s.item.parsed is not None}
    time_s = route.estimated_time_s

    return {
        "Stops": len(steps),
        "Units Picked": sum(s.item.quantity for s in steps),
        "Distance Walked (m)": route.total_distance,
        "Time (s)": time_s,
        "Time (min)": time_s / 60 if time_s else 0,
        "Average Leg (m)": sum(legs) / len(legs) if legs else 0,
        "Longest Leg (m)": max(legs) if legs else 0,
        "Levels Visited": len(levels),
        "Rows Visited": sorted(rows, key=lambda r: ROW_CODES.index(r) if r in ROW_CODES else len(ROW_CODES)),
    }


def comparison_frame(best) -> pd.DataFrame:
    """Algorithm comparison table, shortest first, with the winner flagged."""
    df = pd.DataFrame(
        [
            {
                "Algorithm": row.algorithm.value,
                "Distance (m)": round(row.distance, 2),
                "Time (s)": round(row.time),
            }
            for row in best.comparison
        ]
    )
    if not df.empty:
        df["Best"] = df["Algorithm"] == best.algorithm.value
    return df


def format_estimated_time(seconds: float) -> str:
    # halves round up
    mins, secs = divmod(math.floor(seconds + 0.5), 60)
    if mins == 0:
        return f"{secs}s"
    return f"{mins}m {secs}s"


def format_distance(meters: float) -> str:
    if meters < 1:
        return f"{round(meters * 100)}cm"
    return f"{meters:.1f}m"
