"""Application controller connecting a user interface to the grid and search engine."""

import logging
from typing import List, Mapping, Optional, Union

from PySide6.QtCore import QObject, QTimer, Signal

from ..domain.config import GridConfig
from ..domain.errors import GridPathError, InvalidConfig, NoPathFound
from ..domain.search import SearchEngine
from ..domain.types import SPEED_PRESETS, Coord, PathfindingResult, RunConfig, SearchSnapshot
from ..utils.config_store import ConfigStore
from ..utils.grid_factory import create_empty_grid, generate_maze_grid, generate_random_grid
from .fsm import RunState, RunStateMachine

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 10


class PathfindingController(QObject):
    """
    Owns one grid and one search engine and paces the search on a QTimer.

    Signals:
        state_changed: Emitted with the new RunState
        snapshot_changed: Emitted with a SearchSnapshot after every engine transition
        search_finished: Emitted with the PathfindingResult when a run ends
        grid_updated: Emitted when cells, endpoints or grid size change
        error_occurred: Emitted with a message the user should see
    """

    state_changed = Signal(object)  # RunState
    snapshot_changed = Signal(object)  # SearchSnapshot
    search_finished = Signal(object)  # PathfindingResult
    grid_updated = Signal()
    error_occurred = Signal(str)

    def __init__(self, size: int = DEFAULT_GRID_SIZE, store: Optional[ConfigStore] = None,
                 config: Optional[RunConfig] = None, parent: Optional[QObject] = None):
        super().__init__(parent)

        self._config = config or RunConfig()
        self._grid = create_empty_grid(size)
        self._engine = SearchEngine(self._grid, speed=self._config.speed)
        self._state_machine = RunStateMachine()
        self._store = store if store is not None else ConfigStore()
        self._start_coord: Optional[Coord] = None
        self._end_coord: Optional[Coord] = None
        self._last_result: Optional[PathfindingResult] = None

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_timer_tick)

        self._engine.add_listener(self._on_engine_snapshot)
        for state in RunState:
            self._state_machine.on_state_enter(state, self._state_entry_callback(state))

    # Properties

    @property
    def grid(self):
        return self._grid

    @property
    def engine(self) -> SearchEngine:
        return self._engine

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def start_coord(self) -> Optional[Coord]:
        return self._start_coord

    @property
    def end_coord(self) -> Optional[Coord]:
        return self._end_coord

    @property
    def config(self) -> RunConfig:
        return self._config

    @property
    def current_state(self) -> RunState:
        return self._state_machine.current_state

    @property
    def speed(self) -> str:
        """Current speed preset name."""
        return self._config.speed

    @speed.setter
    def speed(self, preset: str):
        if preset not in SPEED_PRESETS:
            raise ValueError(f"Unknown speed preset {preset!r}, "
                             f"expected one of {sorted(SPEED_PRESETS)}")
        self._config.speed = preset
        self._engine.set_speed(preset)
        if self._timer.isActive():
            self._timer.setInterval(self.timer_interval)

    @property
    def timer_interval(self) -> int:
        """Milliseconds between steps while running."""
        return self._engine.delay_ms

    # Grid editing

    def _can_edit(self) -> bool:
        # Painting mid-run would change the grid under the search
        return not self._state_machine.is_active()

    def _grid_changed(self):
        if self._state_machine.is_finished():
            self.reset_search()
        self.grid_updated.emit()

    def new_grid(self, size: int) -> bool:
        """Replace the grid with an empty size x size grid."""
        if not self._can_edit():
            return False
        try:
            self._grid.resize(size)
        except ValueError as e:
            self._report(f"Failed to create grid: {e}")
            return False
        self._grid.clear()
        self._start_coord = None
        self._end_coord = None
        self._engine.clear_endpoints()
        self._grid_changed()
        return True

    def resize_grid(self, size: int) -> bool:
        """Resize keeping painted cells; endpoints that fall off the grid are dropped."""
        if not self._can_edit():
            return False
        try:
            self._grid.resize(size)
        except ValueError as e:
            self._report(f"Failed to resize grid: {e}")
            return False
        if self._start_coord and not self._grid.is_valid_coord(*self._start_coord):
            self._start_coord = None
        if self._end_coord and not self._grid.is_valid_coord(*self._end_coord):
            self._end_coord = None
        self._engine.clear_endpoints()
        self._grid_changed()
        return True

    def set_obstacle(self, row: int, col: int, is_obstacle: bool) -> bool:
        if not self._can_edit():
            return False
        if is_obstacle and (row, col) in (self._start_coord, self._end_coord):
            return False
        if not self._grid.set_obstacle(row, col, is_obstacle):
            return False
        self._grid_changed()
        return True

    def set_weight(self, row: int, col: int, weight: int) -> bool:
        if not self._can_edit():
            return False
        try:
            applied = self._grid.set_weight(row, col, weight)
        except ValueError as e:
            self._report(str(e))
            return False
        if applied:
            self._grid_changed()
        return applied

    def _can_place_endpoint(self, row: int, col: int, other: Optional[Coord]) -> bool:
        if not self._can_edit():
            return False
        cell = self._grid.get_cell(row, col)
        return cell is not None and not cell.is_obstacle and (row, col) != other

    def set_start(self, row: int, col: int) -> bool:
        if not self._can_place_endpoint(row, col, self._end_coord):
            return False
        self._start_coord = (row, col)
        self._grid_changed()
        return True

    def set_end(self, row: int, col: int) -> bool:
        if not self._can_place_endpoint(row, col, self._start_coord):
            return False
        self._end_coord = (row, col)
        self._grid_changed()
        return True

    def _replace_layout(self, config: GridConfig, start: Optional[Coord], end: Optional[Coord]):
        self._grid.clear()
        self._grid.import_config(config)
        self._start_coord = None
        self._end_coord = None
        self._engine.clear_endpoints()
        if start is not None:
            if self._can_place_endpoint(*start, None):
                self._start_coord = start
            else:
                logger.warning("Dropping start position %s: off the grid or an obstacle", start)
        if end is not None:
            if self._can_place_endpoint(*end, self._start_coord):
                self._end_coord = end
            else:
                logger.warning("Dropping end position %s: off the grid, an obstacle "
                               "or the start cell", end)
        self._grid_changed()

    def randomize(self, obstacle_density: float = 0.25, weight_density: float = 0.1,
                  seed: Optional[int] = None) -> bool:
        """Paint a random solvable layout at the current size."""
        if not self._can_edit():
            return False
        try:
            generated, start, end = generate_random_grid(
                self._grid.size, obstacle_density, weight_density, seed=seed
            )
        except ValueError as e:
            self._report(f"Failed to generate grid: {e}")
            return False
        self._replace_layout(generated.export_config(), start, end)
        return True

    def generate_maze(self, seed: Optional[int] = None) -> bool:
        """Carve a maze at the current size (even sizes shrink by one)."""
        if not self._can_edit():
            return False
        try:
            generated, start, end = generate_maze_grid(self._grid.size, seed=seed)
        except ValueError as e:
            self._report(f"Failed to generate maze: {e}")
            return False
        self._replace_layout(generated.export_config(), start, end)
        return True

    # Search control

    def can_start(self) -> bool:
        return (self._state_machine.is_idle()
                and self._start_coord is not None
                and self._end_coord is not None)

    def start_search(self) -> bool:
        """Begin a run; the timer drives it unless step_mode is set."""
        if not self.can_start():
            return False
        try:
            self._engine.set_start_and_end(*self._start_coord, *self._end_coord)
        except GridPathError as e:
            self._report(f"Failed to start search: {e}")
            return False
        return self._state_machine.transition_to(RunState.RUNNING)

    def step_search(self) -> bool:
        """Execute one search step, starting a run first if idle."""
        if self._state_machine.is_idle() and not self.start_search():
            return False
        if not self._state_machine.is_active():
            return False

        try:
            result = self._engine.step()
        except GridPathError as e:
            self._state_machine.transition_to(RunState.ERROR, {"error": str(e)})
            self._report(f"Search error: {e}")
            return False

        if result is not None:
            self._finish(result)
        elif self._budget_spent():
            result = PathfindingResult(found=False, steps=self._engine.steps,
                                       nodes_explored=len(self._engine.closed_set))
            self._state_machine.transition_to(RunState.BUDGET_EXHAUSTED, {"result": result})
        return True

    def _budget_spent(self) -> bool:
        max_steps = self._config.max_steps
        return max_steps is not None and self._engine.steps >= max_steps

    def _finish(self, result: PathfindingResult):
        target = RunState.FOUND if result.found else RunState.NO_PATH
        self._state_machine.transition_to(target, {"result": result})

    def run_to_completion(self) -> Optional[PathfindingResult]:
        """
        Finish the current run (or a new one) synchronously.

        Returns:
            The final result, or None if the run could not be started or failed
        """
        if self._state_machine.is_idle() and not self.start_search():
            return None
        if not self._state_machine.is_active():
            return None

        if self._config.max_steps is not None:
            while self._state_machine.is_active():
                if not self.step_search():
                    return None
            return self._last_result

        try:
            result = self._engine.find_path()
        except NoPathFound as e:
            result = PathfindingResult(found=False, steps=self._engine.steps,
                                       nodes_explored=e.nodes_explored)
        except GridPathError as e:
            self._state_machine.transition_to(RunState.ERROR, {"error": str(e)})
            self._report(f"Search error: {e}")
            return None

        self._finish(result)
        return result

    def pause_search(self) -> bool:
        return self._state_machine.transition_to(RunState.PAUSED)

    def resume_search(self) -> bool:
        if not self._state_machine.is_paused():
            return False
        return self._state_machine.transition_to(RunState.RUNNING)

    def reset_search(self) -> bool:
        """Discard the current run and return to idle."""
        self._timer.stop()
        self._engine.reset()
        if not self._state_machine.is_idle():
            self._state_machine.transition_to(RunState.IDLE)
        return True

    def update_config(self, **kwargs):
        """Update run settings; unknown keys are ignored."""
        for key, value in kwargs.items():
            if key == "speed":
                self.speed = value
            elif hasattr(self._config, key):
                setattr(self._config, key, value)

    # Persistence

    def export_config(self) -> GridConfig:
        """The grid layout including the current start and end."""
        config = self._grid.export_config()
        config.start_position = self._start_coord
        config.end_position = self._end_coord
        return config

    def import_config(self, config: Union[GridConfig, Mapping]) -> bool:
        """Replace the grid with a layout; the current grid is left alone if it is invalid."""
        if not self._can_edit():
            return False
        try:
            if isinstance(config, GridConfig):
                parsed = config.validated()
            else:
                parsed = GridConfig.from_dict(config)
            self._replace_layout(parsed, parsed.start_position, parsed.end_position)
        except InvalidConfig as e:
            self._report(f"Invalid layout: {e}")
            return False
        return True

    def save_layout(self, name: str) -> bool:
        try:
            saved = self._store.save(name, self.export_config())
        except (ValueError, InvalidConfig) as e:
            self._report(f"Failed to save layout: {e}")
            return False
        if not saved:
            self._report(f"Failed to save layout {name!r}")
        return saved

    def load_layout(self, name: str) -> bool:
        try:
            config = self._store.load(name)
        except InvalidConfig as e:
            self._report(f"Failed to load layout {name!r}: {e}")
            return False
        if config is None:
            self._report(f"No layout named {name!r}")
            return False
        return self.import_config(config)

    def delete_layout(self, name: str) -> bool:
        try:
            return self._store.delete(name)
        except InvalidConfig as e:
            self._report(f"Failed to delete layout {name!r}: {e}")
            return False

    def layout_names(self) -> List[str]:
        try:
            return self._store.names()
        except InvalidConfig as e:
            self._report(f"Failed to read layouts: {e}")
            return []

    # Callbacks

    def _state_entry_callback(self, state: RunState):
        def on_enter(context):
            self._on_state_entered(state, context)
        return on_enter

    def _on_state_entered(self, state: RunState, context: Optional[dict]):
        logger.debug("Run state -> %s", state.value)
        if state == RunState.RUNNING and not self._config.step_mode:
            self._timer.start(self.timer_interval)
        elif state != RunState.RUNNING:
            self._timer.stop()

        result = context.get("result") if context else None
        if result is not None:
            self._last_result = result
            self.search_finished.emit(result)
        self.state_changed.emit(state)

    def _on_engine_snapshot(self, snapshot: SearchSnapshot):
        self.snapshot_changed.emit(snapshot)

    def _on_timer_tick(self):
        if self._state_machine.is_running():
            self.step_search()

    def _report(self, message: str):
        logger.warning(message)
        self.error_occurred.emit(message)

    # Utility methods

    def get_statistics(self) -> dict:
        return {
            "steps": self._engine.steps,
            "open_set_size": len(self._engine.open_set),
            "closed_set_size": len(self._engine.closed_set),
            "path_length": len(self._engine.path),
            "obstacles": self._grid.count_obstacles(),
            "current_state": self._state_machine.current_state.value,
            "state_description": self._state_machine.get_state_description(),
        }
