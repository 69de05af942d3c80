"""Square grid of weighted cells with obstacle flags."""

import logging
from typing import Iterator, List, Mapping, Optional, Union

from .config import GridConfig, NodeConfig
from .errors import InvalidConfig
from .types import Cell

logger = logging.getLogger(__name__)

# Fixed neighbor order: up, right, down, left. Search tie-breaking depends on it.
DIRECTIONS = [(-1, 0), (0, 1), (1, 0), (0, -1)]


def _validate_size(size: int):
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise ValueError(f"Grid size must be a positive integer, got {size!r}")


def _validate_weight(weight: int):
    if isinstance(weight, bool) or not isinstance(weight, int) or weight < 1:
        raise ValueError(f"Weight must be an integer >= 1, got {weight!r}")


class Grid:
    """
    Owns an N x N array of cells.

    Accessors return None and mutators return False for coordinates outside
    the grid; callers are expected to check.
    """

    def __init__(self, size: int = 10):
        _validate_size(size)
        self._size = size
        self._cells: List[List[Cell]] = self._allocate(size)

    @staticmethod
    def _allocate(size: int) -> List[List[Cell]]:
        return [[Cell(row, col) for col in range(size)] for row in range(size)]

    @property
    def size(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Cell]:
        """Iterate over all cells in row-major order."""
        for row in self._cells:
            yield from row

    def __len__(self) -> int:
        return self._size * self._size

    def is_valid_coord(self, row: int, col: int) -> bool:
        """Check if coordinate is within grid bounds."""
        return 0 <= row < self._size and 0 <= col < self._size

    def get_cell(self, row: int, col: int) -> Optional[Cell]:
        """Get cell at coordinate, returns None if out of bounds."""
        if not self.is_valid_coord(row, col):
            return None
        return self._cells[row][col]

    def set_obstacle(self, row: int, col: int, is_obstacle: bool) -> bool:
        cell = self.get_cell(row, col)
        if cell is None:
            return False
        cell.is_obstacle = bool(is_obstacle)
        return True

    def set_weight(self, row: int, col: int, weight: int) -> bool:
        """
        Set the cost of entering a cell.

        Raises:
            ValueError: If weight is not an integer >= 1
        """
        _validate_weight(weight)
        cell = self.get_cell(row, col)
        if cell is None:
            return False
        cell.weight = weight
        return True

    def neighbors(self, cell: Cell) -> List[Cell]:
        """
        Get the passable orthogonal neighbors of a cell.
        Returned in up, right, down, left order.
        """
        result = []
        for d_row, d_col in DIRECTIONS:
            neighbor = self.get_cell(cell.row + d_row, cell.col + d_col)
            if neighbor is not None and not neighbor.is_obstacle:
                result.append(neighbor)
        return result

    def resize(self, new_size: int):
        """
        Replace the cells with a new_size x new_size set.
        Obstacle and weight carry over wherever the coordinate exists in both.
        """
        _validate_size(new_size)
        old_cells = self._cells
        overlap = min(self._size, new_size)

        new_cells = self._allocate(new_size)
        for row in range(overlap):
            for col in range(overlap):
                old_cell = old_cells[row][col]
                new_cells[row][col].is_obstacle = old_cell.is_obstacle
                new_cells[row][col].weight = old_cell.weight

        self._cells = new_cells
        self._size = new_size

    def clear(self):
        """Reset every cell to the default (no obstacle, weight 1)."""
        for cell in self:
            cell.is_obstacle = False
            cell.weight = 1
            cell.reset_costs()

    def reset_search_fields(self):
        """Reset g/h/f/parent on every cell."""
        for cell in self:
            cell.reset_costs()

    def count_obstacles(self) -> int:
        return sum(1 for cell in self if cell.is_obstacle)

    def export_config(self) -> GridConfig:
        """Sparse description listing only non-default cells, row-major."""
        nodes = [
            NodeConfig(cell.row, cell.col, cell.is_obstacle, cell.weight)
            for cell in self
            if not cell.is_default()
        ]
        return GridConfig(size=self._size, nodes=nodes)

    def import_config(self, config: Union[GridConfig, Mapping]) -> GridConfig:
        """
        Resize to the configuration's size and apply its entries.

        The configuration is fully validated before the grid is touched.
        Cells not listed keep whatever resize() preserves.

        Returns:
            The parsed configuration (start/end positions included)

        Raises:
            InvalidConfig: If the configuration is malformed
        """
        if isinstance(config, GridConfig):
            parsed = config.validated()
        elif isinstance(config, Mapping):
            parsed = GridConfig.from_dict(config)
        else:
            raise InvalidConfig(f"Unsupported configuration type: {type(config).__name__}")

        self.resize(parsed.size)

        for node in parsed.nodes:
            cell = self.get_cell(node.row, node.col)
            if cell is None:
                logger.warning("Skipping configuration entry %s outside a %dx%d grid",
                               node.coord, parsed.size, parsed.size)
                continue
            cell.is_obstacle = node.is_obstacle
            cell.weight = node.weight

        logger.debug("Imported %dx%d grid with %d painted cells",
                     parsed.size, parsed.size, len(parsed.nodes))
        return parsed

