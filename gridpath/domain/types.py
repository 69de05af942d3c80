"""Core type definitions for the weighted A* grid search."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple

# Grid position as (row, col)
Coord = Tuple[int, int]

# Named pacing presets for callers that step the search on a timer
SpeedPreset = Literal["slow", "medium", "fast"]

SPEED_PRESETS: Dict[str, int] = {
    "slow": 300,
    "medium": 100,
    "fast": 10,
}

DEFAULT_SPEED: SpeedPreset = "medium"


@dataclass
class Cell:
    """A single grid cell plus the transient fields of the current search."""
    row: int
    col: int
    is_obstacle: bool = False
    weight: int = 1
    g: int = 0  # Cost from start
    h: int = 0  # Manhattan distance to end
    f: int = 0  # g + h
    parent: Optional[Coord] = None

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    def reset_costs(self):
        """Clear the search fields left over from a previous run."""
        self.g = 0
        self.h = 0
        self.f = 0
        self.parent = None

    def is_default(self) -> bool:
        """True for an unpainted cell (weight 1, no obstacle)."""
        return not self.is_obstacle and self.weight == 1


class SearchState(Enum):
    """Lifecycle of a single search run."""
    IDLE = "idle"
    READY = "ready"
    RUNNING = "running"
    FOUND = "found"
    EXHAUSTED = "exhausted"


@dataclass
class PathfindingResult:
    """Result of a pathfinding run."""
    path: Optional[List[Coord]] = None
    path_cost: int = 0
    nodes_explored: int = 0
    steps: int = 0
    found: bool = False

    @property
    def success(self) -> bool:
        """Whether pathfinding was successful."""
        return self.found and self.path is not None and len(self.path) > 0


@dataclass(frozen=True)
class SearchSnapshot:
    """Read-only view of the engine handed to listeners after each transition."""
    state: SearchState
    open_set: Tuple[Coord, ...] = ()
    closed_set: Tuple[Coord, ...] = ()
    path: Tuple[Coord, ...] = ()
    current: Optional[Coord] = None
    steps: int = 0

    @property
    def is_finished(self) -> bool:
        return self.state in (SearchState.FOUND, SearchState.EXHAUSTED)


@dataclass
class RunConfig:
    """Settings for a caller that animates the search."""
    speed: SpeedPreset = DEFAULT_SPEED
    step_mode: bool = False
    max_steps: Optional[int] = None

    @property
    def delay_ms(self) -> int:
        """Timer interval for the selected speed preset."""
        return SPEED_PRESETS[self.speed]
