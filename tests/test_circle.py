"""
Tests for the solvability check and circle method.
"""

from conftest import make_participants

from heat_scheduler.circle import is_known_solvable, is_power_of_two, circle_method
from heat_scheduler.lanes import build_lane_usage_matrix


def test_known_solvable_sizes():
    """Curated roster sizes are solvable on any track."""
    for n in (6, 7, 8, 12, 16, 18, 24, 32):
        assert is_known_solvable(n, 4)


def test_power_of_two_and_lane_relations():
    """Powers of two, N == L and N == L + 1 are solvable."""
    assert is_known_solvable(64, 6)
    assert is_known_solvable(2, 6)
    assert is_known_solvable(5, 5)
    assert is_known_solvable(11, 10)

    assert not is_known_solvable(10, 6)
    assert not is_known_solvable(9, 6)
    assert not is_known_solvable(13, 4)


def test_is_power_of_two():
    assert [n for n in range(0, 20) if is_power_of_two(n)] == [1, 2, 4, 8, 16]


def test_circle_method_eight_cars_six_lanes():
    """Heat h puts participant (h + l) mod N in lane l + 1."""
    participants = make_participants(8)
    heats = circle_method(participants, 6)

    assert len(heats) == 8
    assert [heat.heat_number for heat in heats] == list(range(1, 9))
    assert all(len(heat.lanes) == 6 for heat in heats)

    assert heats[0].lanes[0].car_number == 1
    assert heats[1].lanes[0].car_number == 2
    # Wraps around the roster
    assert heats[7].lanes[1].car_number == 1
    assert heats[7].lanes[0].name == "Racer 8"


def test_circle_method_perfect_balance():
    """Every participant runs every lane exactly once."""
    heats = circle_method(make_participants(8), 6)
    matrix = build_lane_usage_matrix(heats)

    assert set(matrix) == set(range(1, 9))
    for lanes in matrix.values():
        assert lanes == {lane: 1 for lane in range(1, 7)}


def test_circle_method_more_lanes_than_cars():
    """Only as many lanes as participants are used."""
    heats = circle_method(make_participants(3), 6)

    assert len(heats) == 3
    for heat in heats:
        assert [entry.lane for entry in heat.lanes] == [1, 2, 3]
        assert len(set(heat.car_numbers)) == 3


def test_circle_method_follows_input_order():
    """Input order, not car number, drives the rotation."""
    participants = list(reversed(make_participants(4)))
    heats = circle_method(participants, 4)

    assert heats[0].car_numbers == [4, 3, 2, 1]
    assert heats[1].car_numbers == [3, 2, 1, 4]
