import heapq

import numpy as np
import pytest

from demfill.grid import (
    DIRECTION_CODES,
    NO_DATA_VALUE,
    Dem,
    Flag,
    Node,
    neighbour,
    step_length,
)


def test_neighbour_follows_layout():
    assert neighbour(0, 5, 5) == (5, 6)
    assert neighbour(2, 5, 5) == (6, 5)
    assert neighbour(4, 5, 5) == (5, 4)
    assert neighbour(6, 5, 5) == (4, 5)


def test_neighbours_are_the_eight_surrounding_cells():
    cells = {neighbour(d, 3, 3) for d in range(8)}
    expected = {(3 + dr, 3 + dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1)} - {(3, 3)}
    assert cells == expected


def test_step_length():
    assert step_length(0) == 1.0
    assert step_length(1) == 1.41421
    assert all(step_length(d) == 1.0 for d in (0, 2, 4, 6))


def test_node_equality_by_position_and_order_by_spill():
    assert Node(1, 2, 5.0) == Node(1, 2, 7.0)
    assert Node(1, 2, 5.0) != Node(2, 1, 5.0)
    assert Node(0, 0, 1.0) < Node(0, 0, 2.0)
    assert Node(0, 0, 3.0) >= Node(9, 9, 3.0)
    assert Node(4, 4).spill == NO_DATA_VALUE


def test_nodes_pop_from_heap_lowest_first():
    heap = []
    for spill in (5.0, 1.0, 3.0):
        heapq.heappush(heap, Node(0, 0, spill))
    assert [heapq.heappop(heap).spill for _ in range(3)] == [1.0, 3.0, 5.0]


def test_empty_dem_is_all_nodata():
    dem = Dem.empty(2, 3)
    assert (dem.height, dem.width) == (2, 3)
    assert all(dem.is_nodata(r, c) for r in range(2) for c in range(3))


def test_values_are_stored_as_float32():
    dem = Dem.empty(1, 1)
    dem[0, 0] = 0.1
    assert dem[0, 0] == float(np.float32(0.1))
    assert not dem.is_nodata(0, 0)


def test_in_grid_and_out_of_grid_access():
    dem = Dem(np.zeros((2, 2)))
    assert dem.in_grid(1, 1)
    assert not dem.in_grid(-1, 0)
    assert not dem.in_grid(0, 2)
    with pytest.raises(IndexError):
        dem[2, 0]
    with pytest.raises(IndexError):
        dem[0, -1] = 1.0


def test_dem_rejects_non_2d_data():
    with pytest.raises(ValueError):
        Dem(np.zeros(4))


def test_copy_is_independent():
    dem = Dem(np.ones((2, 2)))
    other = dem.copy()
    other[0, 0] = 5.0
    assert dem[0, 0] == 1.0
    assert other[0, 0] == 5.0


def test_flow_direction_single_lower_neighbour():
    data = np.full((3, 3), 10.0)
    data[1, 2] = 4.0
    dem = Dem(data)
    assert dem.flow_direction(1, 1, 10.0) == DIRECTION_CODES[0]


def test_flow_direction_prefers_steeper_drop():
    data = np.full((3, 3), 10.0)
    data[1, 2] = 9.0
    data[2, 1] = 1.0
    dem = Dem(data)
    assert dem.flow_direction(1, 1, 10.0) == DIRECTION_CODES[2]


def test_flow_direction_flat_corner_points_to_last_outlet():
    dem = Dem(np.full((3, 3), 10.0))
    assert dem.flow_direction(0, 0, 10.0) == DIRECTION_CODES[7]


def test_flow_direction_ignores_nodata_neighbours():
    data = np.full((3, 3), 10.0)
    data[1, 2] = NO_DATA_VALUE
    dem = Dem(data)
    assert dem.flow_direction(1, 1, 10.0) == DIRECTION_CODES[0]


def test_flag_set_and_query():
    flag = Flag(2, 3)
    assert not flag.is_processed(1, 1)
    flag.set(1, 1)
    assert flag.is_processed(1, 1)
    assert flag.is_processed_direct(1, 1)
    assert not flag.is_processed(0, 1)


def test_flag_outside_grid_counts_as_processed():
    flag = Flag(2, 2)
    assert flag.is_processed(-1, 0)
    assert flag.is_processed(0, 2)


def test_flag_direct_uses_flat_index():
    flag = Flag(2, 3)
    flag.set(1, 0)
    assert flag.is_processed_direct(0, 3)
    with pytest.raises(IndexError):
        flag.is_processed_direct(2, 0)


def test_flag_set_both_marks_two_flags():
    first, second = Flag(2, 2), Flag(2, 2)
    first.set_both(0, 1, second)
    assert first.is_processed(0, 1)
    assert second.is_processed(0, 1)
    assert not second.is_processed(1, 0)