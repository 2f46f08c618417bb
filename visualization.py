import matplotlib.patches as patches
import matplotlib.pyplot as plt

from models import LAYOUT, PickRoute, Point3
from positions import pick_stand_position

GROUND_LEVEL = 0.1


def _row_code(item):
    if item.parsed is not None:
        return item.parsed.row
    # "WH/Stock/AR/14/AF/01" -> "AR"
    parts = item.location_name.split("/")
    if len(parts) >= 4:
        code = parts[-4].strip()
        if len(code) == 2 and code.isalpha() and code.isupper():
            return code
    return None


def generate_path_points(route: PickRoute, wh=LAYOUT):
    """
    Poly-line for drawing a route. The picker walks on the ground between
    pick stands, leaves an aisle through the front corridor and rises to bin
    height at each stop.
    """
    if not route.steps:
        return []

    front_z = -wh.row_spacing / 2
    points = [route.start_position]
    for step in route.steps:
        last = points[-1]
        bin_pos = step.item.position
        row = _row_code(step.item)
        if row:
            stand = pick_stand_position(bin_pos, row, False, wh)._replace(y=GROUND_LEVEL)
        else:
            stand = Point3(bin_pos.x, GROUND_LEVEL, bin_pos.z)

        if last.y > GROUND_LEVEL:
            points.append(Point3(last.x, GROUND_LEVEL, last.z))
        if abs(last.z - stand.z) >= wh.row_spacing:
            points.append(Point3(last.x, GROUND_LEVEL, front_z))
            points.append(Point3(stand.x, GROUND_LEVEL, front_z))
        elif abs(last.z - stand.z) > 0.1:
            points.append(Point3(last.x, GROUND_LEVEL, stand.z))
        points.append(stand)
        points.append(pick_stand_position(bin_pos, row, True, wh) if row else bin_pos)

    cleaned = [points[0]]
    for p in points[1:]:
        prev = cleaned[-1]
        if ((p.x - prev.x) ** 2 + (p.y - prev.y) ** 2 + (p.z - prev.z) ** 2) ** 0.5 > 0.1:
            cleaned.append(p)
    return cleaned


def plot_route_plan(tree, route=None, wh=LAYOUT, ax=None):
    """Top-down plan (X along rows, Z across aisles) of bins, zones and a route."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(14, 8))
    else:
        fig = ax.figure

    for node in tree.walk():
        if node.position is None:
            continue
        if node.type == "bin":
            facecolor = "lightgreen" if node.has_stock else "lightblue"
            ax.add_patch(patches.Rectangle(
                (node.position.x, node.position.z), wh.bin_width, wh.bin_depth,
                linewidth=0.5, edgecolor="black", facecolor=facecolor,
            ))
        elif node.type == "zone":
            ax.add_patch(patches.Rectangle(
                (node.position.x - node.zone_width / 2, node.position.z - node.zone_depth / 2),
                node.zone_width, node.zone_depth,
                linewidth=1, edgecolor="gray", facecolor="#f0e68c", alpha=0.5, zorder=0,
            ))
            ax.text(node.position.x, node.position.z, node.name, ha="center", va="center", fontsize=8)

    if route is not None and route.steps:
        path = generate_path_points(route, wh)
        ax.plot([p.x for p in path], [p.z for p in path], "-", color="red", linewidth=2, alpha=0.7)
        for step in route.steps:
            pos = step.item.position
            ax.plot(pos.x, pos.z, "o", color="orange", markersize=6)
            ax.text(pos.x, pos.z, str(step.index + 1), ha="center", va="bottom", fontsize=8, fontweight="bold")
        ax.plot(route.start_position.x, route.start_position.z, "s", color="navy", markersize=8)

    ax.autoscale_view()
    ax.set_aspect("equal")
    ax.axis("off")
    ax.set_title("Warehouse plan (meters): bins, zones, pick route", fontsize=14)
    return fig, ax
