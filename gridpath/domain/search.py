"""Incremental A* search over a weighted 4-connected grid."""

import logging
from typing import Callable, List, Optional, Set

from .errors import InvalidCoordinate, InvalidState, NoPathFound, StartOrEndIsObstacle
from .grid import Grid
from .heuristics import manhattan_distance
from .open_set import OpenSet
from .path import calculate_path_cost, reconstruct_path
from .types import (
    DEFAULT_SPEED, SPEED_PRESETS, Cell, Coord, PathfindingResult, SearchSnapshot, SearchState
)

logger = logging.getLogger(__name__)

SearchListener = Callable[[SearchSnapshot], None]


class SearchEngine:
    """
    A* search bound to one grid.

    The search advances one atomic step() at a time so a caller can animate
    it, or runs to completion through find_path(). Both driving modes leave
    identical open set, closed set and path behind. The grid must not be
    painted while a run is in progress; doing so is undefined behavior.
    """

    def __init__(self, grid: Grid, speed: str = DEFAULT_SPEED):
        self.grid = grid
        self.start: Optional[Coord] = None
        self.end: Optional[Coord] = None
        self.speed = speed if speed in SPEED_PRESETS else DEFAULT_SPEED
        self._listeners: List[SearchListener] = []
        self._clear_run_state()

    def _clear_run_state(self):
        self._open = OpenSet()
        self._closed: List[Coord] = []
        self._closed_members: Set[Coord] = set()
        self._path: List[Coord] = []
        self._current: Optional[Coord] = None
        self._steps = 0
        self._state = SearchState.IDLE

    # Properties

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def steps(self) -> int:
        """Number of cells selected from the open set in this run."""
        return self._steps

    @property
    def is_done(self) -> bool:
        return self._state in (SearchState.FOUND, SearchState.EXHAUSTED)

    @property
    def open_set(self) -> List[Cell]:
        """Open cells in insertion order."""
        return self._cells(self._open.get_all_items())

    @property
    def closed_set(self) -> List[Cell]:
        """Closed cells in the order they were finalized."""
        return self._cells(self._closed)

    @property
    def path(self) -> List[Cell]:
        """Cells from start to end inclusive; empty until the end is reached."""
        return self._cells(self._path)

    @property
    def current(self) -> Optional[Coord]:
        """The cell selected by the most recent step."""
        return self._current

    @property
    def delay_ms(self) -> int:
        """Advisory pause between steps for an animating caller."""
        return SPEED_PRESETS[self.speed]

    def _cells(self, coords: List[Coord]) -> List[Cell]:
        cells = []
        for coord in coords:
            cell = self.grid.get_cell(*coord)
            if cell is not None:
                cells.append(cell)
        return cells

    # Setup

    def set_speed(self, speed: str) -> bool:
        """Select a pacing preset; unknown names are ignored."""
        if speed not in SPEED_PRESETS:
            return False
        self.speed = speed
        return True

    def set_start_and_end(self, start_row: int, start_col: int, end_row: int, end_col: int):
        """
        Designate the endpoints and reset all transient state for a new run.

        Raises:
            InvalidCoordinate: If either endpoint is outside the grid
        """
        for row, col in ((start_row, start_col), (end_row, end_col)):
            if not self.grid.is_valid_coord(row, col):
                raise InvalidCoordinate(row, col, self.grid.size)

        self.start = (start_row, start_col)
        self.end = (end_row, end_col)
        self.reset()

    def clear_endpoints(self):
        """Forget start and end and return to IDLE."""
        self.start = None
        self.end = None
        self.reset()

    def reset(self):
        """Re-enter READY for the current endpoints (IDLE if none are set)."""
        self._clear_run_state()
        self.grid.reset_search_fields()

        if self.start is not None and self.end is not None:
            start_cell = self.grid.get_cell(*self.start)
            if start_cell is not None:
                start_cell.h = manhattan_distance(self.start, self.end)
                start_cell.f = start_cell.g + start_cell.h
            self._open.put(self.start, start_cell.f if start_cell else 0)
            self._state = SearchState.READY

        self._notify()

    # Observers

    def add_listener(self, listener: SearchListener):
        """Register a callback that receives a snapshot after every transition."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SearchListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> SearchSnapshot:
        return SearchSnapshot(
            state=self._state,
            open_set=tuple(self._open.get_all_items()),
            closed_set=tuple(self._closed),
            path=tuple(self._path),
            current=self._current,
            steps=self._steps,
        )

    def _notify(self):
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # Running

    def _check_endpoints(self):
        """Raise if an endpoint left the grid or is painted as an obstacle."""
        for coord, role in ((self.start, "start"), (self.end, "end")):
            cell = self.grid.get_cell(*coord)
            if cell is None:
                raise InvalidCoordinate(coord[0], coord[1], self.grid.size)
            if cell.is_obstacle:
                raise StartOrEndIsObstacle(coord, role)

    def _check_can_run(self):
        if self._state == SearchState.IDLE:
            raise InvalidState("Start and end must be set before searching")
        if self.is_done:
            raise InvalidState(
                f"Search already finished ({self._state.value}); "
                "call set_start_and_end() or reset() first"
            )

    def _result(self, found: bool) -> PathfindingResult:
        path = list(self._path) if found else None
        return PathfindingResult(
            path=path,
            path_cost=calculate_path_cost(path, self.grid) if path else 0,
            nodes_explored=len(self._closed),
            steps=self._steps,
            found=found,
        )

    def step(self) -> Optional[PathfindingResult]:
        """
        Execute one iteration of A*.

        Returns None while the search continues, or a PathfindingResult once
        the end is reached or the open set is exhausted. Exhaustion is
        reported through the result, not raised.

        Raises:
            InvalidState: If no endpoints are set or the run already finished
        """
        self._check_can_run()
        if self._state == SearchState.READY:
            self._check_endpoints()
            self._state = SearchState.RUNNING

        lowest = self._open.peek()
        if lowest is None:
            self._state = SearchState.EXHAUSTED
            self._current = None
            logger.debug("Open set exhausted after %d steps, %s unreachable from %s",
                         self._steps, self.end, self.start)
            self._notify()
            return self._result(found=False)

        current_coord = lowest[0]
        current_cell = self.grid.get_cell(*current_coord)
        self._current = current_coord
        self._steps += 1

        if current_coord == self.end:
            self._path = reconstruct_path(self.end, self.grid)
            self._state = SearchState.FOUND
            result = self._result(found=True)
            logger.debug("Path found after %d steps: %d cells, cost %d",
                         self._steps, len(self._path), result.path_cost)
            self._notify()
            return result

        self._open.remove(current_coord)
        self._closed.append(current_coord)
        self._closed_members.add(current_coord)

        for neighbor in self.grid.neighbors(current_cell):
            neighbor_coord = neighbor.coord
            if neighbor_coord in self._closed_members:
                continue

            tentative_g = current_cell.g + neighbor.weight

            if neighbor_coord in self._open and tentative_g >= neighbor.g:
                continue

            neighbor.g = tentative_g
            neighbor.h = manhattan_distance(neighbor_coord, self.end)
            neighbor.f = neighbor.g + neighbor.h
            neighbor.parent = current_coord
            self._open.put(neighbor_coord, neighbor.f)

        self._notify()
        return None

    def find_path(self) -> PathfindingResult:
        """
        Run the search to completion.

        Returns:
            PathfindingResult of the found path

        Raises:
            InvalidState: If no endpoints are set or the run already finished
            StartOrEndIsObstacle: If either endpoint is an obstacle
            InvalidCoordinate: If an endpoint no longer lies on the grid
            NoPathFound: If the end cannot be reached
        """
        self._check_can_run()
        self._check_endpoints()

        if self.start == self.end and self._state == SearchState.READY:
            self._path = [self.start]
            self._state = SearchState.FOUND
            self._notify()
            return self._result(found=True)

        result = None
        while result is None:
            result = self.step()

        if not result.found:
            raise NoPathFound(self.start, self.end, result.nodes_explored)
        return result


def find_path(grid: Grid, start: Coord, end: Coord) -> PathfindingResult:
    """
    Convenience function to run A* pathfinding from start to finish.

    Args:
        grid: Grid to search in
        start: Starting (row, col)
        end: Target (row, col)

    Returns:
        PathfindingResult with path and statistics

    Raises:
        The same errors as SearchEngine.set_start_and_end and SearchEngine.find_path
    """
    engine = SearchEngine(grid)
    engine.set_start_and_end(start[0], start[1], end[0], end[1])
    return engine.find_path()
