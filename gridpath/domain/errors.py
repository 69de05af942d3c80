"""Exceptions raised by the grid and the search engine."""

from typing import Optional

from .types import Coord


class GridPathError(Exception):
    """Base exception class for gridpath."""

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        """Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            details: Optional additional error details
        """
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.error_code:
            return f"[{self.error_code}] {base_msg}"
        return base_msg


class InvalidCoordinate(GridPathError):
    """A row/col pair outside the grid."""

    def __init__(self, row: int, col: int, size: Optional[int] = None, **kwargs):
        if size is None:
            message = f"Coordinate ({row}, {col}) is out of bounds"
        else:
            message = f"Coordinate ({row}, {col}) is out of bounds for a {size}x{size} grid"
        kwargs.setdefault("error_code", "INVALID_COORDINATE")
        super().__init__(message, **kwargs)
        self.row = row
        self.col = col


class InvalidState(GridPathError):
    """The search was driven from a state that does not allow it."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "INVALID_STATE")
        super().__init__(message, **kwargs)


class StartOrEndIsObstacle(InvalidState):
    """The start or end cell is painted as an obstacle."""

    def __init__(self, coord: Coord, role: str = "start", **kwargs):
        kwargs.setdefault("error_code", "START_OR_END_IS_OBSTACLE")
        super().__init__(f"The {role} cell {coord} is an obstacle", **kwargs)
        self.coord = coord
        self.role = role


class NoPathFound(GridPathError):
    """The open set emptied before the end cell was reached."""

    def __init__(self, start: Coord, end: Coord, nodes_explored: int = 0, **kwargs):
        kwargs.setdefault("error_code", "NO_PATH_FOUND")
        super().__init__(
            f"No path from {start} to {end} ({nodes_explored} cells explored)",
            **kwargs
        )
        self.start = start
        self.end = end
        self.nodes_explored = nodes_explored


class InvalidConfig(GridPathError):
    """A serialized grid configuration could not be used."""

    def __init__(self, message: str, field: str = None, **kwargs):
        kwargs.setdefault("error_code", "INVALID_CONFIG")
        super().__init__(message, **kwargs)
        self.field = field
