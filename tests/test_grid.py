"""Tests for grid index math."""
from mineboard.grid import Grid


def test_index_round_trip_on_rectangular_grid():
    grid = Grid(4, 3)
    assert grid.size == 12
    assert grid.to_index(2, 1) == 7
    assert grid.to_row(7) == 2
    assert grid.to_column(7) == 1


def test_boundary_predicates():
    grid = Grid(3, 3)
    assert not grid.not_first_row(1)
    assert grid.not_first_row(4)
    assert not grid.not_last_row(7)
    assert not grid.not_first_column(3)
    assert not grid.not_last_column(5)
    assert grid.not_last_column(4)


def test_ungated_neighbor_aliases_into_adjacent_row():
    grid = Grid(3, 3)
    # index 3 is (1, 0); stepping west lands on (0, 2)
    assert grid.west(3) == 2
    assert grid.east(5) == 6
    assert 2 not in set(grid.neighbors(3))


def test_neighbors_are_clipped_at_edges():
    grid = Grid(3, 3)
    assert set(grid.neighbors(0)) == {1, 3, 4}
    assert set(grid.neighbors(4)) == {0, 1, 2, 3, 5, 6, 7, 8}
    assert set(grid.neighbors(3)) == {0, 1, 4, 6, 7}
    assert set(grid.neighbors(8)) == {4, 5, 7}


def test_diagonal_steps_compose_single_steps():
    grid = Grid(3, 3)
    assert grid.north_west(4) == 0
    assert grid.north_east(4) == 2
    assert grid.south_west(4) == 6
    assert grid.south_east(4) == 8


def test_single_row_grid():
    grid = Grid(1, 3)
    assert set(grid.neighbors(1)) == {0, 2}
    assert list(grid.neighbors(0)) == [1]


def test_contains():
    grid = Grid(2, 3)
    assert grid.contains(1, 2)
    assert not grid.contains(2, 0)
    assert not grid.contains(0, -1)
