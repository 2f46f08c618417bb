import pytest

from location_codes import parse_location_code
from models import Point3
from positions import (
    ZONE_DEFAULTS,
    camera_position_for_location,
    camera_position_for_row,
    camera_position_for_warehouse,
    camera_position_for_zone,
    child_zone_position,
    pick_stand_position,
    position_of,
    row_center,
    row_front_direction,
    warehouse_bounds,
    zone_position,
)


def test_position_of_origin_bin():
    assert position_of(parse_location_code("AG01AA01")) == pytest.approx((0.0, 0.0, 0.0))


def test_position_of_second_row_of_pair():
    pos = position_of(parse_location_code("AH02AC02"))
    assert pos.x == pytest.approx(1.2 + 0.5)
    assert pos.y == pytest.approx(2 * 0.8)
    assert pos.z == pytest.approx(0.3)


def test_row_pairs_are_separated_by_an_aisle():
    ai = position_of(parse_location_code("AI01AA01"))
    aj = position_of(parse_location_code("AJ01AA01"))
    assert ai.z == pytest.approx(3.0 + 2 * 0.3)
    assert aj.z - ai.z == pytest.approx(0.3)


def test_bounds_and_row_center():
    b = warehouse_bounds(8)
    assert (b.width, b.depth, b.height) == pytest.approx((24.0, 14.4, 5.6))
    # an odd row count still reserves a whole pair
    assert warehouse_bounds(3).depth == pytest.approx(7.2)
    assert row_center("AG") == pytest.approx((12.0, 2.8, 0.0))
    assert row_center("AJ").z == pytest.approx(3.9)


def test_unknown_zone_type_steps_along_the_perimeter():
    p0, p1, p2 = (zone_position("mezzanine", i) for i in range(3))
    step = ZONE_DEFAULTS["floor"]["width"] + 1
    assert p1.x - p0.x == pytest.approx(step)
    assert p2.x - p0.x == pytest.approx(2 * step)
    assert p2.z == pytest.approx(p0.z)
    assert p2 == pytest.approx(zone_position("floor", 2))


def test_dock_and_side_zones():
    dock = zone_position("dock", 1)
    assert dock == pytest.approx((11.0, 0.0, -10.0))
    scrap0, scrap1 = zone_position("scrap", 0), zone_position("scrap", 1)
    assert scrap0.x == pytest.approx(24.0 + 2)
    assert scrap1.z - scrap0.z == pytest.approx(4 + 2)
    assert zone_position("qc", 0).x < 0


def test_child_zone_position_along_back_edge():
    parent = Point3(10.0, 0.0, 20.0)
    first = child_zone_position(parent, 6, 8, 0, 2, 2)
    second = child_zone_position(parent, 6, 8, 1, 2, 2)
    assert first == pytest.approx((8.5, 0.0, 22.5))
    assert second.x - first.x == pytest.approx(2.5)
    assert second.z == pytest.approx(first.z)


def test_pick_stand_faces_the_adjacent_aisle():
    assert row_front_direction("AG") == "lower"
    assert row_front_direction("AH") == "higher"

    bin_ah = Point3(1.2, 1.6, 0.3)
    stand = pick_stand_position(bin_ah, "AH", False)
    assert stand == pytest.approx((1.45, 0.0, 1.3))
    assert pick_stand_position(bin_ah, "AH", True).y == pytest.approx(1.6)

    stand_ag = pick_stand_position(Point3(0.0, 0.0, 0.0), "AG")
    assert stand_ag.z == pytest.approx(-1.0)


def test_warehouse_camera_frames_the_whole_block():
    assert camera_position_for_warehouse(8) == pytest.approx((12.0, 10.6, 24.4))


def test_camera_points():
    assert camera_position_for_location(parse_location_code("AG01AA01")) == pytest.approx((0.0, 2.0, 5.0))
    assert camera_position_for_row("AG") == pytest.approx((12.0, 5.8, 15.0))
    assert camera_position_for_zone(Point3(0.0, 0.0, 0.0), 6, 8) == pytest.approx((3.0, 9.0, 16.0))
