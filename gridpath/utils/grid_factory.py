"""Grid factory for creating and randomizing grids."""

from collections import deque
from typing import Iterable, List, Optional, Tuple

from ..domain.grid import DIRECTIONS, Grid
from ..domain.types import Coord
from .rng import SeededRNG, default_rng

# Weights painted by add_random_weights are drawn from [2, DEFAULT_MAX_WEIGHT]
DEFAULT_MAX_WEIGHT = 5


def create_empty_grid(size: int) -> Grid:
    """
    Create a new empty grid with the specified dimensions.

    Args:
        size: Number of rows and columns (must be > 0)

    Returns:
        New Grid instance with all default cells

    Raises:
        ValueError: If size <= 0
    """
    return Grid(size)


def _free_coords(grid: Grid, exclude: Iterable[Coord]) -> List[Coord]:
    excluded = set(exclude)
    return [
        cell.coord for cell in grid
        if cell.is_default() and cell.coord not in excluded
    ]


def add_random_obstacles(grid: Grid, density: float, rng: Optional[SeededRNG] = None,
                         exclude: Iterable[Coord] = ()) -> List[Coord]:
    """
    Paint obstacles on a random share of the unpainted cells.

    Args:
        grid: Grid to modify
        density: Obstacle density (0.0 to 1.0) relative to the whole grid
        rng: Random number generator to use (uses default if None)
        exclude: Coordinates that must stay free, such as start and end

    Returns:
        Coordinates that were turned into obstacles
    """
    if not (0.0 <= density <= 1.0):
        raise ValueError(f"Density must be between 0.0 and 1.0, got {density}")

    if rng is None:
        rng = default_rng

    candidates = _free_coords(grid, exclude)
    count = min(int(len(grid) * density), len(candidates))

    chosen = rng.pick_many(candidates, count)
    for row, col in chosen:
        grid.set_obstacle(row, col, True)
    return chosen


def add_random_weights(grid: Grid, density: float, max_weight: int = DEFAULT_MAX_WEIGHT,
                       rng: Optional[SeededRNG] = None,
                       exclude: Iterable[Coord] = ()) -> List[Coord]:
    """
    Paint weights in [2, max_weight] on a random share of the unpainted cells.

    Returns:
        Coordinates that received a weight
    """
    if not (0.0 <= density <= 1.0):
        raise ValueError(f"Density must be between 0.0 and 1.0, got {density}")
    if max_weight < 2:
        raise ValueError(f"max_weight must be at least 2, got {max_weight}")

    if rng is None:
        rng = default_rng

    candidates = _free_coords(grid, exclude)
    count = min(int(len(grid) * density), len(candidates))

    chosen = rng.pick_many(candidates, count)
    for row, col in chosen:
        grid.set_weight(row, col, rng.weight(max_weight))
    return chosen


def place_start_and_end(grid: Grid, start: Optional[Coord] = None,
                        end: Optional[Coord] = None,
                        rng: Optional[SeededRNG] = None) -> Tuple[Coord, Coord]:
    """
    Pick start and end positions on passable cells.

    Args:
        grid: Grid to place on
        start: Specific start coordinate (random if None)
        end: Specific end coordinate (random if None)
        rng: Random number generator to use

    Returns:
        Tuple of (start, end)

    Raises:
        ValueError: If no valid positions are available or positions overlap
    """
    if rng is None:
        rng = default_rng

    passable = [cell.coord for cell in grid if not cell.is_obstacle]
    if len(passable) < 2:
        raise ValueError("Not enough passable positions for start and end")

    for coord, role in ((start, "Start"), (end, "End")):
        if coord is None:
            continue
        cell = grid.get_cell(*coord)
        if cell is None:
            raise ValueError(f"{role} position {coord} is out of bounds")
        if cell.is_obstacle:
            raise ValueError(f"{role} position {coord} is not passable")

    if start is None:
        start = rng.pick([coord for coord in passable if coord != end])

    if end is None:
        end = rng.pick([coord for coord in passable if coord != start])
    elif end == start:
        raise ValueError("Start and end positions cannot be the same")

    return start, end


def path_exists(grid: Grid, start: Coord, end: Coord) -> bool:
    """
    Check if end is reachable from start using a 4-directional flood fill.
    Weights are ignored; only obstacles matter.
    """
    start_cell = grid.get_cell(*start)
    end_cell = grid.get_cell(*end)
    if start_cell is None or end_cell is None:
        return False
    if start_cell.is_obstacle or end_cell.is_obstacle:
        return False

    visited = {start}
    queue = deque([start_cell])

    while queue:
        current = queue.popleft()
        if current.coord == end:
            return True
        for neighbor in grid.neighbors(current):
            if neighbor.coord not in visited:
                visited.add(neighbor.coord)
                queue.append(neighbor)

    return False


def generate_random_grid(size: int, obstacle_density: float = 0.25,
                         weight_density: float = 0.1, max_weight: int = DEFAULT_MAX_WEIGHT,
                         seed: Optional[int] = None,
                         max_attempts: int = 10) -> Tuple[Grid, Coord, Coord]:
    """
    Generate a randomly painted grid whose end is reachable from its start.

    Falls back to an obstacle-free grid with the same weights if no solvable
    layout turns up within max_attempts.

    Returns:
        Tuple of (grid, start, end)
    """
    if size < 2:
        raise ValueError(f"Random grids need at least 2x2 cells, got {size}x{size}")

    rng = SeededRNG(seed)

    for _ in range(max_attempts):
        grid = create_empty_grid(size)
        start, end = place_start_and_end(grid, rng=rng)
        add_random_obstacles(grid, obstacle_density, rng, exclude=(start, end))
        add_random_weights(grid, weight_density, max_weight, rng, exclude=(start, end))
        if path_exists(grid, start, end):
            return grid, start, end

    grid = create_empty_grid(size)
    start, end = place_start_and_end(grid, rng=rng)
    add_random_weights(grid, weight_density, max_weight, rng, exclude=(start, end))
    return grid, start, end


def generate_maze_grid(size: int, seed: Optional[int] = None) -> Tuple[Grid, Coord, Coord]:
    """
    Generate a maze using the recursive backtracking algorithm.
    Every passage cell is connected, so the end is always reachable.

    Args:
        size: Grid size (minimum 7, even sizes are reduced by one)
        seed: Random seed for reproducibility

    Returns:
        Tuple of (grid, start, end)

    Raises:
        ValueError: If size is less than 7
    """
    if size < 7:
        raise ValueError(f"Maze size must be at least 7 for proper maze generation, got {size}")

    rng = SeededRNG(seed)
    maze_size = size if size % 2 == 1 else size - 1

    grid = create_empty_grid(maze_size)
    for cell in grid:
        cell.is_obstacle = True

    _carve_passages(grid, rng)
    start, end = _place_start_end_in_maze(grid, rng)
    return grid, start, end


def _carve_passages(grid: Grid, rng: SeededRNG):
    """Carve passages from (1, 1), moving two cells at a time to keep walls between."""
    start = (1, 1)
    grid.set_obstacle(*start, False)

    stack = [start]
    visited = {start}

    while stack:
        row, col = stack[-1]

        candidates = []
        for d_row, d_col in DIRECTIONS:
            next_row, next_col = row + 2 * d_row, col + 2 * d_col
            if (0 < next_row < grid.size - 1 and 0 < next_col < grid.size - 1
                    and (next_row, next_col) not in visited):
                candidates.append(((next_row, next_col), (row + d_row, col + d_col)))

        if candidates:
            next_cell, wall_between = rng.pick(candidates)
            grid.set_obstacle(*next_cell, False)
            grid.set_obstacle(*wall_between, False)
            visited.add(next_cell)
            stack.append(next_cell)
        else:
            stack.pop()


def _place_start_end_in_maze(grid: Grid, rng: SeededRNG) -> Tuple[Coord, Coord]:
    """Start near the top-left corner, end at least half the maze away."""
    open_cells = [cell.coord for cell in grid if not cell.is_obstacle]

    corner = [coord for coord in open_cells
              if coord[0] < grid.size // 3 and coord[1] < grid.size // 3]
    start = rng.pick(corner) if corner else rng.pick(open_cells)

    far = [coord for coord in open_cells
           if abs(coord[0] - start[0]) + abs(coord[1] - start[1]) > grid.size // 2]
    if far:
        end = rng.pick(far)
    else:
        end = max((coord for coord in open_cells if coord != start),
                  key=lambda c: abs(c[0] - start[0]) + abs(c[1] - start[1]))

    return start, end
