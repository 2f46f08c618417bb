import math

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from hierarchy import build_location_hierarchy, flatten_to_bins
from location_codes import level_index, parse_location_code
from models import PickItem, Point3
from positions import pick_stand_position, position_of
from routing import build_route
from storage import gen_location_records
from visualization import GROUND_LEVEL, generate_path_points, plot_route_plan


def _item(id, code):
    parsed = parse_location_code(code)
    return PickItem(id=id, product_id=id, product_name=f"P{id}", quantity=1, location_id=id,
                    location_name=f"WH/Stock/{parsed.row}/{parsed.bay:02d}/{parsed.level}/{parsed.side:02d}",
                    position=position_of(parsed), parsed=parsed, level_index=level_index(parsed.level))


def test_no_path_for_empty_route():
    assert generate_path_points(build_route([], Point3(0.0, 0.0, 0.0))) == []


def test_path_runs_from_start_to_last_bin():
    items = [_item(1, "AH03AB01"), _item(2, "AN05AC02")]
    route = build_route(items, Point3(0.0, 0.0, 0.0))
    points = generate_path_points(route)

    assert points[0] == route.start_position
    last = items[-1]
    assert points[-1] == pick_stand_position(last.position, "AN", True)
    for a, b in zip(points, points[1:]):
        assert math.dist(a, b) > 0.1
    # long cross-aisle moves use the front corridor
    assert any(p.z == -1.5 and p.y == GROUND_LEVEL for p in points)


def test_row_taken_from_path_when_code_missing():
    item = _item(1, "AH03AB01")
    item = PickItem(**{**item.__dict__, "parsed": None})
    route = build_route([item], Point3(0.0, 0.0, 0.0))
    assert generate_path_points(route)[-1] == pick_stand_position(item.position, "AH", True)


def test_plot_route_plan():
    records = gen_location_records(num_rows=2, bays_per_row=2, levels=("AA",))
    tree = build_location_hierarchy(records, 1, "WH")
    route = build_route([_item(1, "AG01AA01")], Point3(0.0, 0.0, 0.0))
    fig, ax = plot_route_plan(tree, route)
    positioned = [n for n in tree.walk() if n.position is not None and n.type in ("bin", "zone")]
    assert len(ax.patches) == len(positioned)
    assert ax.get_title().startswith("Warehouse plan")
    bins = [p for p in ax.patches if p.get_width() == 0.5]
    assert len(bins) == len(flatten_to_bins(tree))
    assert all(p.get_height() == 0.8 for p in bins)
    plt.close(fig)
