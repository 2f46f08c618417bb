import random

import pytest

from location_codes import LEVEL_CODES, ROW_CODES, format_location_code, level_index, parse_location_code
from models import ParsedLocationCode, PickItem, Point3
from positions import position_of
from routing import (
    RoutingAlgorithm,
    aisle_center_z,
    build_route,
    calculate_pick_route,
    find_best_route,
    level_first_route,
    nearest_neighbor_route,
    s_pattern_route,
    walking_distance,
)

ORIGIN = Point3(0.0, 0.0, 0.0)


def _item(id, code):
    parsed = parse_location_code(code)
    return PickItem(
        id=id, product_id=id, product_name=f"P{id}", quantity=1,
        location_id=id, location_name=f"WH/Stock/{code}",
        position=position_of(parsed), parsed=parsed, level_index=level_index(parsed.level),
    )


def _random_items(rng, n):
    items = []
    for i in range(n):
        parsed = ParsedLocationCode(
            row=rng.choice(ROW_CODES[:6]), bay=rng.randint(1, 20),
            level=rng.choice(LEVEL_CODES), side=rng.randint(1, 2),
        )
        items.append(_item(i + 1, format_location_code(parsed)))
    return items


def _ids(route):
    return [s.item.id for s in route.steps]


def test_walking_distance_within_a_row_pair():
    a = Point3(0.0, 0.0, 0.0)
    b = Point3(4.8, 1.6, 0.3)
    assert walking_distance(a, b) == pytest.approx(4.8 + 1.6 * 2.0)
    assert walking_distance(a, a) == 0


def test_walking_distance_across_aisles():
    assert aisle_center_z(0.0) == pytest.approx(2.1)
    assert aisle_center_z(3.6) == pytest.approx(5.7)
    a = Point3(0.0, 0.0, 0.0)
    b = Point3(2.4, 0.0, 3.6)
    assert walking_distance(a, b) == pytest.approx(2.1 + 2.4 + 3.6 + 2.1)


def test_nearest_neighbor_same_row():
    items = [_item(1, "AG05AA01"), _item(2, "AG01AA01")]
    route = nearest_neighbor_route(items, ORIGIN)
    assert _ids(route) == [2, 1]
    assert route.total_distance == pytest.approx(4.8)
    assert [s.distance_from_previous for s in route.steps] == pytest.approx([0.0, 4.8])
    assert route.end_position == items[0].position


def test_nearest_neighbor_ties_keep_input_order():
    a, b = _item(1, "AG03AA01"), _item(2, "AG03AA01")
    assert _ids(nearest_neighbor_route([a, b], ORIGIN)) == [1, 2]
    assert _ids(nearest_neighbor_route([b, a], ORIGIN)) == [2, 1]


def test_s_pattern_alternates_direction():
    items = [
        _item(1, "AG03AA01"), _item(2, "AG01AA01"), _item(3, "AI01AA01"), _item(4, "AI03AA01"),
        _item(5, "AG02AC01"), _item(6, "AG02AA01"), _item(7, "AI02AB01"), _item(8, "AI02AA01"),
    ]
    route = s_pattern_route(items, ORIGIN)
    # first row pair left to right, next one right to left; lowest level first on ties
    assert _ids(route) == [2, 6, 5, 1, 4, 8, 7, 3]


def test_level_first_finishes_each_level():
    items = [_item(1, "AG05AA01"), _item(2, "AG01AB01"), _item(3, "AG02AA01")]
    route = level_first_route(items, ORIGIN)
    assert _ids(route) == [3, 1, 2]
    levels = [s.item.level_index for s in route.steps]
    assert levels == sorted(levels)


@pytest.mark.parametrize("algorithm", list(RoutingAlgorithm))
def test_empty_route(algorithm):
    route = calculate_pick_route([], ORIGIN, algorithm)
    assert route.steps == ()
    assert route.total_distance == 0
    assert route.estimated_time_s == 0
    assert route.end_position == ORIGIN


@pytest.mark.parametrize("algorithm", list(RoutingAlgorithm))
def test_single_item(algorithm):
    item = _item(1, "AJ07AD02")
    route = calculate_pick_route([item], ORIGIN, algorithm)
    assert _ids(route) == [1]
    assert route.total_distance == pytest.approx(walking_distance(ORIGIN, item.position))
    assert route.estimated_time_s == pytest.approx(route.total_distance / 1.2 + 15)


@pytest.mark.parametrize("algorithm", list(RoutingAlgorithm))
def test_route_invariants_on_random_picks(algorithm):
    rng = random.Random(7)
    for n in (2, 5, 13, 30):
        items = _random_items(rng, n)
        start = Point3(rng.uniform(0, 20), 0.0, rng.uniform(0, 10))
        route = calculate_pick_route(items, start, algorithm)

        assert sorted(_ids(route)) == [i.id for i in items]
        assert [s.index for s in route.steps] == list(range(n))
        legs = [s.distance_from_previous for s in route.steps]
        assert all(leg >= 0 for leg in legs)
        cumulative = [s.cumulative_distance for s in route.steps]
        assert cumulative == sorted(cumulative)
        assert route.total_distance == pytest.approx(sum(legs))
        assert cumulative[-1] == pytest.approx(route.total_distance)
        assert route.estimated_time_s == pytest.approx(route.total_distance / 1.2 + n * 15)
        assert route.start_position == start
        assert route.end_position == route.steps[-1].item.position


def test_build_route_scores_the_given_order():
    items = [_item(1, "AG01AA01"), _item(2, "AG04AA01"), _item(3, "AG02AA01")]
    route = build_route(items, ORIGIN)
    assert _ids(route) == [1, 2, 3]
    assert route.total_distance == pytest.approx(3.6 + 2.4)


def test_best_route_is_the_shortest():
    rng = random.Random(11)
    for n in (1, 4, 9, 25):
        items = _random_items(rng, n)
        best = find_best_route(items, ORIGIN)
        distances = {c.algorithm: c.distance for c in best.comparison}

        assert set(distances) == set(RoutingAlgorithm)
        assert best.best_route.total_distance == min(distances.values())
        assert distances[best.algorithm] == best.best_route.total_distance
        assert [c.distance for c in best.comparison] == sorted(distances.values())
        assert best.comparison[0].algorithm == best.algorithm


def test_best_route_parallel_matches_sequential():
    items = _random_items(random.Random(5), 15)
    seq = find_best_route(items, ORIGIN)
    par = find_best_route(items, ORIGIN, parallel=True)
    assert par.algorithm == seq.algorithm
    assert par.comparison == seq.comparison
    assert _ids(par.best_route) == _ids(seq.best_route)


def test_algorithm_by_name():
    items = [_item(1, "AG05AA01"), _item(2, "AG01AA01")]
    route = calculate_pick_route(items, ORIGIN, "sPattern")
    assert _ids(route) == [2, 1]
    with pytest.raises(ValueError):
        calculate_pick_route(items, ORIGIN, "shortest")
