from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Sequence

from db import open_repo
from generator import GeneratorConfig, MazeGenerator, REFERENCE_UNIQUENESS_GATE
from maze import Grid, MazeError, Position
from mazefile import load_grid, save_grid
from route import Route
from solver import MazeSolver

logger = logging.getLogger(__name__)

PATH_GLYPH = "|"
OBSTACLE_GLYPH = "#"
OPEN_GLYPH = "."


@dataclass
class BenchmarkReport:
    """Timings of one batch of generated and solved mazes."""

    count: int
    generate_ms_total: float
    generate_ms_avg: float
    solve_ms_total: float
    solve_ms_avg: float
    avg_route_length: float

    def metrics(self) -> dict[str, float]:
        data = asdict(self)
        data.pop("count")
        return data


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


def analyze_mazes(generator: MazeGenerator, count: int) -> BenchmarkReport:
    started = time.perf_counter()
    grids = generator.generate_many(count)
    generate_ms = _elapsed_ms(started)

    solver = MazeSolver(grids[0]) if grids else None
    total_length = 0
    started = time.perf_counter()
    for grid in grids:
        solver.change_grid(grid)
        routes = solver.solve()
        total_length += len(routes[0])
    solve_ms = _elapsed_ms(started)

    per = max(count, 1)
    report = BenchmarkReport(
        count=count,
        generate_ms_total=generate_ms,
        generate_ms_avg=generate_ms / per,
        solve_ms_total=solve_ms,
        solve_ms_avg=solve_ms / per,
        avg_route_length=total_length / per,
    )
    logger.info(
        "%d mazes: %.3f ms/generate, %.3f ms/solve, avg route %.2f",
        count,
        report.generate_ms_avg,
        report.solve_ms_avg,
        report.avg_route_length,
    )
    return report


def time_generation(
    count: int,
    density: float,
    width: int = 20,
    height: int = 20,
    start: Position = Position(0, 0),
    dest: Position | None = None,
    seed: int | None = None,
) -> float:
    """Milliseconds needed to generate count mazes."""
    dest = dest if dest is not None else Position(height - 1, width - 1)
    generator = MazeGenerator(width, height, density, start, dest, seed=seed)
    started = time.perf_counter()
    generator.generate_many(count)
    return _elapsed_ms(started)


def render_route(
    route: Route,
    path_glyph: str = PATH_GLYPH,
    obstacle_glyph: str = OBSTACLE_GLYPH,
    open_glyph: str = OPEN_GLYPH,
) -> str:
    grid = route.grid
    if not len(route):
        return grid.serialize()

    on_route = {cell.pos for cell in route}
    lines = []
    for r in range(grid.height):
        glyphs = []
        for c in range(grid.width):
            cell = grid.cell(r, c)
            if cell.pos in on_route:
                glyphs.append(path_glyph)
            elif grid.is_passable(cell):
                glyphs.append(open_glyph)
            else:
                glyphs.append(obstacle_glyph)
        lines.append(" ".join(glyphs))
    return "\n".join(lines) + "\n"


def solve_report(grid: Grid) -> str:
    started = time.perf_counter()
    routes = MazeSolver(grid).solve()
    elapsed = _elapsed_ms(started)

    parts = [grid.serialize()]
    if not routes:
        parts.append("No solution.")
        return "\n".join(parts) + "\n"

    parts.append(f"{len(routes)} solution(s), found in {elapsed:.3f} ms:")
    for route in routes:
        parts.append("")
        parts.append(render_route(route))
        parts.append(f"Route length: {len(route)}")
    return "\n".join(parts) + "\n"


def solvers_agree(solver: MazeSolver) -> bool:
    """Check solve() against the exhaustive enumerator on the solver's grid."""
    fast = {route.coordinates() for route in solver.solve()}
    slow = {route.coordinates() for route in solver.solve_exhaustive()}
    return fast == slow


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


def build_generator_config(args, density: float) -> GeneratorConfig:
    dest = Position(*args.dest) if args.dest else Position(args.height - 1, args.width - 1)
    return GeneratorConfig(
        width=args.width,
        height=args.height,
        density=density,
        start=Position(*args.start),
        dest=dest,
        seed=args.seed,
        max_attempts=args.max_attempts,
        uniqueness_gate=None if args.no_uniqueness_gate else REFERENCE_UNIQUENESS_GATE,
    )


def _add_maze_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--width", type=int, default=20, help="Maze width in cells.")
    parser.add_argument("--height", type=int, default=20, help="Maze height in cells.")
    parser.add_argument("--start", type=int, nargs=2, default=(0, 0), metavar=("ROW", "COL"))
    parser.add_argument("--dest", type=int, nargs=2, default=None, metavar=("ROW", "COL"),
                        help="Destination cell (default: bottom-right corner).")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: random).")
    parser.add_argument("--max-attempts", type=int, default=None,
                        help="Give up after this many rejected attempts per maze.")
    parser.add_argument("--no-uniqueness-gate", action="store_true",
                        help="Accept 20x20 mazes with several shortest routes.")


def parse_args(argv: Sequence[str] | None = None):
    parser = argparse.ArgumentParser(description="Grid maze generator and all-shortest-routes solver.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Write generated mazes to text files.")
    _add_maze_options(gen)
    gen.add_argument("--density", type=float, default=30, help="Obstacle percentage (0-100).")
    gen.add_argument("--count", type=int, default=1, help="Number of mazes to write.")
    gen.add_argument("--out-dir", type=Path, default=Path("."), help="Directory for the maze files.")

    solve = sub.add_parser("solve", help="Print every shortest route of a maze file.")
    solve.add_argument("path", type=Path)
    solve.add_argument("--start", type=int, nargs=2, default=(0, 0), metavar=("ROW", "COL"))
    solve.add_argument("--dest", type=int, nargs=2, required=True, metavar=("ROW", "COL"))

    bench = sub.add_parser("bench", help="Time generation and solving.")
    _add_maze_options(bench)
    bench.add_argument("--densities", type=float, nargs="+", default=[30, 35, 40, 45, 50])
    bench.add_argument("--count", type=int, default=100, help="Mazes per density.")
    bench.add_argument("--record", type=Path, default=None,
                       help="Store results in a .db (SQLite) or JSON file.")

    return parser.parse_args(argv)


def _format_density(density: float) -> str:
    return f"{density:g}"


def run_generate(args) -> int:
    generator = MazeGenerator.from_config(build_generator_config(args, args.density))
    for i in range(args.count):
        grid = generator.generate()
        path = args.out_dir / f"Maze{_format_density(args.density)}_{i}.txt"
        save_grid(grid, path)
        print(path)
    return 0


def run_solve(args) -> int:
    grid = load_grid(args.path, Position(*args.start), Position(*args.dest))
    print(solve_report(grid), end="")
    return 0


def run_bench(args) -> int:
    repo = open_repo(args.record) if args.record else None
    try:
        for density in args.densities:
            generator = MazeGenerator.from_config(build_generator_config(args, density))
            report = analyze_mazes(generator, args.count)
            print(f"density = {_format_density(density)}")
            print(f"  generated {report.count} in {report.generate_ms_total:.1f} ms "
                  f"({report.generate_ms_avg:.3f} ms each)")
            print(f"  solved in {report.solve_ms_avg:.3f} ms each, "
                  f"average route length {report.avg_route_length:.2f}")
            if repo is not None:
                repo.record_run(
                    width=args.width,
                    height=args.height,
                    density=density,
                    count=report.count,
                    metrics=report.metrics(),
                )
    finally:
        if repo is not None and hasattr(repo, "close"):
            repo.close()
    return 0


COMMANDS = {
    "generate": run_generate,
    "solve": run_solve,
    "bench": run_bench,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return COMMANDS[args.command](args)
    except FileExistsError as e:
        print(f"A file named {e.filename} already exists, choose another location.", file=sys.stderr)
        return 1
    except MazeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
