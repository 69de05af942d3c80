"""Path reconstruction and cost utilities for the A* search."""

from typing import List

from .grid import Grid
from .types import Coord


def reconstruct_path(end: Coord, grid: Grid) -> List[Coord]:
    """
    Reconstruct the path from end back to start using parent coordinates.
    Returns the path from start to end (reversed from parent chain).
    """
    path = []
    current = end
    visited = set()

    while current is not None and current not in visited:
        cell = grid.get_cell(*current)
        if cell is None:
            break
        path.append(current)
        visited.add(current)
        current = cell.parent

    path.reverse()
    return path


def calculate_path_cost(path: List[Coord], grid: Grid) -> int:
    """Sum of the weights of every cell entered after the first."""
    total = 0
    for coord in path[1:]:
        cell = grid.get_cell(*coord)
        if cell is not None:
            total += cell.weight
    return total


def validate_path(path: List[Coord], grid: Grid) -> bool:
    """
    Check that a path is walkable and made of orthogonal unit steps.
    Returns True if path is valid.
    """
    if not path:
        return False

    for coord in path:
        cell = grid.get_cell(*coord)
        if cell is None or cell.is_obstacle:
            return False

    for i in range(1, len(path)):
        d_row = abs(path[i][0] - path[i - 1][0])
        d_col = abs(path[i][1] - path[i - 1][1])
        if d_row + d_col != 1:
            return False

    return True
