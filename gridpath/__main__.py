"""Command line entry point for the grid pathfinding visualizer."""

import argparse
import logging
import sys
from typing import Iterable, List, Optional

from .domain.errors import GridPathError, InvalidConfig, NoPathFound
from .domain.grid import Grid
from .domain.search import SearchEngine
from .domain.types import SPEED_PRESETS, Coord, RunConfig, SearchSnapshot
from .utils.config_store import ConfigStore
from .utils.grid_factory import (
    create_empty_grid, generate_maze_grid, generate_random_grid, place_start_and_end
)
from .utils.rng import SeededRNG

logger = logging.getLogger("gridpath")

EXIT_FOUND = 0
EXIT_NO_PATH = 1
EXIT_INVALID = 2


def parse_coord(text: str) -> Coord:
    """Parse 'row,col' into a coordinate."""
    try:
        row, col = (int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected ROW,COL, got {text!r}")
    return (row, col)


def render_grid(grid: Grid, start: Optional[Coord] = None, end: Optional[Coord] = None,
                open_set: Iterable[Coord] = (), closed_set: Iterable[Coord] = (),
                path: Iterable[Coord] = ()) -> str:
    """
    Text picture of the grid.

    S/E endpoints, * path, o open, x closed, # obstacle,
    2-9 weight (heavier cells show 9), . empty.
    """
    path_cells = set(path)
    open_cells = set(open_set)
    closed_cells = set(closed_set)

    lines = []
    for row in range(grid.size):
        chars = []
        for col in range(grid.size):
            coord = (row, col)
            cell = grid.get_cell(row, col)
            if coord == start:
                chars.append("S")
            elif coord == end:
                chars.append("E")
            elif coord in path_cells:
                chars.append("*")
            elif coord in open_cells:
                chars.append("o")
            elif coord in closed_cells:
                chars.append("x")
            elif cell.is_obstacle:
                chars.append("#")
            elif cell.weight > 1:
                chars.append(str(min(cell.weight, 9)))
            else:
                chars.append(".")
        lines.append(" ".join(chars))
    return "\n".join(lines)


def render_snapshot(grid: Grid, snapshot: SearchSnapshot, start: Coord, end: Coord) -> str:
    return render_grid(grid, start, end, snapshot.open_set, snapshot.closed_set, snapshot.path)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridpath",
        description="Weighted A* pathfinding on a grid, step by step"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--store", help="Layout store file (default: $GRIDPATH_STORE or "
                                        "~/.gridpath/layouts.json)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve = subparsers.add_parser("solve", help="Find a path and print it")
    solve.add_argument("--layout", help="Name of a saved layout to solve")
    solve.add_argument("--size", type=int, default=10, help="Grid size for generated grids")
    solve.add_argument("--obstacles", type=float, default=0.0,
                       help="Obstacle density for a generated grid (0.0-1.0)")
    solve.add_argument("--weights", type=float, default=0.0,
                       help="Weighted cell density for a generated grid (0.0-1.0)")
    solve.add_argument("--seed", type=int, help="Random seed for reproducible grids")
    solve.add_argument("--start", type=parse_coord, help="Start as ROW,COL")
    solve.add_argument("--end", type=parse_coord, help="End as ROW,COL")
    solve.add_argument("--animate", action="store_true",
                       help="Print every step, paced by the speed preset")
    solve.add_argument("--speed", choices=sorted(SPEED_PRESETS), default="fast",
                       help="Animation speed preset")
    solve.add_argument("--max-steps", type=int, help="Give up after this many steps")

    generate = subparsers.add_parser("generate", help="Generate a layout")
    generate.add_argument("--size", type=int, default=15)
    generate.add_argument("--maze", action="store_true", help="Carve a maze instead of "
                                                              "scattering obstacles")
    generate.add_argument("--obstacles", type=float, default=0.25)
    generate.add_argument("--weights", type=float, default=0.1)
    generate.add_argument("--seed", type=int)
    generate.add_argument("--save", metavar="NAME", help="Save the layout under this name")

    subparsers.add_parser("list", help="List saved layouts")

    delete = subparsers.add_parser("delete", help="Delete a saved layout")
    delete.add_argument("name")

    return parser


def _load_or_generate(args, store: ConfigStore):
    """Grid plus the endpoints it carries (may be None)."""
    if args.layout:
        config = store.load(args.layout)
        if config is None:
            raise InvalidConfig(f"No layout named {args.layout!r}")
        grid = create_empty_grid(config.size)
        grid.import_config(config)
        return grid, config.start_position, config.end_position

    if args.obstacles or args.weights:
        return generate_random_grid(args.size, args.obstacles, args.weights, seed=args.seed)
    return create_empty_grid(args.size), None, None


def _solve(args, store: ConfigStore) -> int:
    grid, start, end = _load_or_generate(args, store)
    start = args.start or start
    end = args.end or end
    if start is None or end is None:
        start, end = place_start_and_end(grid, start, end, rng=SeededRNG(args.seed))

    # start == end is solved directly; the controller refuses it
    if (args.animate or args.max_steps is not None) and start != end:
        return _solve_animated(args, store, grid, start, end)

    engine = SearchEngine(grid)
    engine.set_start_and_end(start[0], start[1], end[0], end[1])
    try:
        result = engine.find_path()
    except NoPathFound as e:
        print(render_snapshot(grid, engine.snapshot(), start, end))
        print(f"\nDestination unreachable: {e}")
        return EXIT_NO_PATH

    print(render_snapshot(grid, engine.snapshot(), start, end))
    print(f"\nPath: {len(result.path)} cells, cost {result.path_cost}, "
          f"{result.steps} steps, {result.nodes_explored} cells explored")
    return EXIT_FOUND


def _solve_animated(args, store: ConfigStore, grid: Grid, start: Coord, end: Coord) -> int:
    """Drive the search through the Qt controller, one frame per timer tick."""
    from PySide6.QtCore import QCoreApplication

    from .app.controller import PathfindingController
    from .app.fsm import RunState

    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    config = RunConfig(speed=args.speed, step_mode=not args.animate, max_steps=args.max_steps)
    controller = PathfindingController(grid.size, store=store, config=config)

    layout = grid.export_config()
    layout.start_position = start
    layout.end_position = end
    if not controller.import_config(layout):
        return EXIT_INVALID
    for role, wanted, placed in (("start", start, controller.start_coord),
                                 ("end", end, controller.end_coord)):
        if placed != wanted:
            print(f"Error: the {role} cell {wanted} is off the grid or an obstacle")
            return EXIT_INVALID

    outcome = {}

    def on_snapshot(snapshot: SearchSnapshot):
        if args.animate and snapshot.steps:
            print(f"\nStep {snapshot.steps}")
            print(render_snapshot(controller.grid, snapshot, start, end))

    def on_finished(result):
        outcome["result"] = result
        app.quit()

    def on_error(message: str):
        print(f"Error: {message}")
        app.quit()

    controller.snapshot_changed.connect(on_snapshot)
    controller.search_finished.connect(on_finished)
    controller.error_occurred.connect(on_error)

    if args.animate:
        if not controller.start_search():
            return EXIT_INVALID
        app.exec()
    else:
        controller.run_to_completion()

    result = outcome.get("result")
    if result is None:
        return EXIT_INVALID

    snapshot = controller.engine.snapshot()
    print()
    print(render_snapshot(controller.grid, snapshot, start, end))
    if result.found:
        print(f"\nPath: {len(result.path)} cells, cost {result.path_cost}, "
              f"{result.steps} steps, {result.nodes_explored} cells explored")
        return EXIT_FOUND
    if controller.current_state == RunState.BUDGET_EXHAUSTED:
        print(f"\nNo path found within {args.max_steps} steps")
    else:
        print("\nDestination unreachable")
    return EXIT_NO_PATH


def _generate(args, store: ConfigStore) -> int:
    if args.maze:
        grid, start, end = generate_maze_grid(args.size, seed=args.seed)
    else:
        grid, start, end = generate_random_grid(args.size, args.obstacles, args.weights,
                                                seed=args.seed)
    print(render_grid(grid, start, end))

    if args.save:
        config = grid.export_config()
        config.start_position = start
        config.end_position = end
        if not store.save(args.save, config):
            return EXIT_INVALID
        print(f"\nSaved layout {args.save!r} to {store.path}")
    return EXIT_FOUND


def _list(store: ConfigStore) -> int:
    names = store.names()
    if not names:
        print("No saved layouts")
    for name in names:
        config = store.load(name)
        print(f"{name}\t{config.size}x{config.size}\t{len(config.nodes)} painted\t"
              f"{store.saved_at(name) or ''}")
    return EXIT_FOUND


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s"
    )
    store = ConfigStore(args.store) if args.store else ConfigStore()

    try:
        if args.command == "solve":
            return _solve(args, store)
        if args.command == "generate":
            return _generate(args, store)
        if args.command == "list":
            return _list(store)
        if args.command == "delete":
            if not store.delete(args.name):
                print(f"No layout named {args.name!r}")
                return EXIT_INVALID
            print(f"Deleted layout {args.name!r}")
            return EXIT_FOUND
    except (GridPathError, ValueError) as e:
        logger.error("%s", e)
        return EXIT_INVALID
    return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
