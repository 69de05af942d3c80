"""Tests for random grid and maze generation."""

import pytest

from gridpath.domain.grid import Grid
from gridpath.domain.search import find_path
from gridpath.utils.grid_factory import (
    add_random_obstacles, add_random_weights, create_empty_grid, generate_maze_grid,
    generate_random_grid, path_exists, place_start_and_end
)
from gridpath.utils.rng import SeededRNG


def layout(grid):
    return [(cell.is_obstacle, cell.weight) for cell in grid]


class TestRandomPainting:

    def test_empty_grid(self):
        grid = create_empty_grid(5)
        assert grid.size == 5
        assert all(cell.is_default() for cell in grid)

    def test_obstacle_count_follows_density(self):
        grid = Grid(10)
        chosen = add_random_obstacles(grid, 0.2, SeededRNG(1))

        assert len(chosen) == 20
        assert grid.count_obstacles() == 20

    def test_excluded_cells_stay_free(self):
        grid = Grid(4)
        add_random_obstacles(grid, 1.0, SeededRNG(3), exclude=[(0, 0), (3, 3)])

        assert not grid.get_cell(0, 0).is_obstacle
        assert not grid.get_cell(3, 3).is_obstacle
        assert grid.count_obstacles() == 14

    def test_weights_are_in_range_and_skip_obstacles(self):
        grid = Grid(6)
        obstacles = set(add_random_obstacles(grid, 0.3, SeededRNG(5)))
        weighted = add_random_weights(grid, 0.3, max_weight=4, rng=SeededRNG(6))

        assert not obstacles & set(weighted)
        for row, col in weighted:
            assert 2 <= grid.get_cell(row, col).weight <= 4

    @pytest.mark.parametrize("density", [-0.1, 1.5])
    def test_density_out_of_range_raises(self, density):
        with pytest.raises(ValueError):
            add_random_obstacles(Grid(3), density)
        with pytest.raises(ValueError):
            add_random_weights(Grid(3), density)

    def test_max_weight_below_two_raises(self):
        with pytest.raises(ValueError):
            add_random_weights(Grid(3), 0.5, max_weight=1)


class TestPlacement:

    def test_random_endpoints_are_distinct_and_passable(self, make_grid):
        grid = make_grid("##.", "#..", "..#")
        for seed in range(20):
            start, end = place_start_and_end(grid, rng=SeededRNG(seed))
            assert start != end
            assert not grid.get_cell(*start).is_obstacle
            assert not grid.get_cell(*end).is_obstacle

    def test_explicit_endpoints_are_kept(self):
        assert place_start_and_end(Grid(3), (0, 0), (2, 1)) == ((0, 0), (2, 1))

    @pytest.mark.parametrize("start,end", [((1, 1), (1, 1)), ((0, 0), (9, 9)), ((0, 1), (2, 2))])
    def test_invalid_explicit_endpoints_raise(self, make_grid, start, end):
        grid = make_grid("...", "...", "...")
        grid.set_obstacle(0, 1, True)
        with pytest.raises(ValueError):
            place_start_and_end(grid, start, end)

    def test_too_few_passable_cells_raise(self, make_grid):
        with pytest.raises(ValueError):
            place_start_and_end(make_grid("##", "#."))

    def test_path_exists(self, make_grid):
        grid = make_grid(".#.", ".#.", "...")
        assert path_exists(grid, (0, 0), (0, 2))

        grid.set_obstacle(2, 1, True)
        assert not path_exists(grid, (0, 0), (0, 2))
        assert not path_exists(grid, (0, 0), (5, 5))


class TestGenerators:

    @pytest.mark.parametrize("seed", range(8))
    def test_random_grid_is_solvable(self, seed):
        grid, start, end = generate_random_grid(8, obstacle_density=0.3, seed=seed)

        assert grid.size == 8
        assert start != end
        assert find_path(grid, start, end).found

    def test_random_grid_is_reproducible(self):
        first, s1, e1 = generate_random_grid(9, seed=42)
        second, s2, e2 = generate_random_grid(9, seed=42)

        assert (s1, e1) == (s2, e2)
        assert layout(first) == layout(second)

    @pytest.mark.parametrize("seed", range(5))
    def test_full_density_still_yields_a_solvable_grid(self, seed):
        grid, start, end = generate_random_grid(4, obstacle_density=1.0, seed=seed)
        assert find_path(grid, start, end).found

    def test_random_grid_needs_two_cells(self):
        with pytest.raises(ValueError):
            generate_random_grid(1)

    @pytest.mark.parametrize("size", [7, 8, 11, 15])
    def test_maze_is_odd_sized_and_solvable(self, size):
        grid, start, end = generate_maze_grid(size, seed=size)

        assert grid.size % 2 == 1
        assert grid.size in (size, size - 1)
        assert start != end
        assert find_path(grid, start, end).found

    def test_maze_border_is_solid(self):
        grid, _, _ = generate_maze_grid(9, seed=4)
        last = grid.size - 1
        for i in range(grid.size):
            assert grid.get_cell(0, i).is_obstacle
            assert grid.get_cell(last, i).is_obstacle
            assert grid.get_cell(i, 0).is_obstacle
            assert grid.get_cell(i, last).is_obstacle

    def test_maze_passages_are_all_connected(self):
        grid, start, _ = generate_maze_grid(11, seed=9)
        for cell in grid:
            if not cell.is_obstacle:
                assert path_exists(grid, start, cell.coord)

    def test_maze_is_reproducible(self):
        assert layout(generate_maze_grid(13, seed=1)[0]) == layout(generate_maze_grid(13, seed=1)[0])

    def test_maze_too_small_raises(self):
        with pytest.raises(ValueError):
            generate_maze_grid(5)


class TestSeededRNG:

    def test_same_seed_same_draws(self):
        first, second = SeededRNG(12), SeededRNG(12)
        items = list(range(50))

        assert first.pick_many(items, 10) == second.pick_many(items, 10)
        assert first.pick(items) == second.pick(items)

    def test_reseed_restarts_the_sequence(self):
        rng = SeededRNG(3)
        before = [rng.weight(9) for _ in range(5)]

        rng.reseed(3)

        assert [rng.weight(9) for _ in range(5)] == before
        assert rng.seed == 3

    def test_pick_many_is_clamped_and_distinct(self):
        picked = SeededRNG(1).pick_many("abc", 10)
        assert sorted(picked) == ["a", "b", "c"]

    def test_weights_stay_in_range(self):
        rng = SeededRNG(8)
        assert all(2 <= rng.weight(4) <= 4 for _ in range(100))

    def test_pick_from_empty_raises(self):
        with pytest.raises(ValueError):
            SeededRNG().pick([])
