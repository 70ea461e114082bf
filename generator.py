from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass

from maze import OBSTACLE, Cell, Grid, LabelMap, MazeError, Position
from route import Route
from solver import MazeSolver

logger = logging.getLogger(__name__)

# Region labels used while carving.
UNTOUCHED = 0
REGION_A = 1
REGION_B = 2
MIXED = 3

# Protection labels used while digging.
UNPROTECTED = 0
PROTECTED = 1


class InvalidDensity(MazeError):
    pass


class InfeasibleDensity(MazeError):
    pass


class GenerationExhausted(MazeError):
    pass


@dataclass(frozen=True)
class UniquenessGate:
    """Reject mazes with more than one shortest route for one configuration."""

    width: int = 20
    height: int = 20
    min_density: float = 29

    def applies(self, width: int, height: int, density: float) -> bool:
        return width == self.width and height == self.height and density > self.min_density


REFERENCE_UNIQUENESS_GATE = UniquenessGate()


@dataclass(frozen=True)
class GeneratorConfig:
    width: int = 20
    height: int = 20
    density: float = 30
    start: Position = Position(0, 0)
    dest: Position = Position(19, 19)
    seed: int | None = None
    max_attempts: int | None = None
    uniqueness_gate: UniquenessGate | None = REFERENCE_UNIQUENESS_GATE


def obstacle_budget(width: int, height: int, density: float) -> int:
    # Half-up rounding, matching int(x + 0.5) for non-negative x.
    return int(width * height * density / 100.0 + 0.5)


class MazeGenerator:
    def __init__(
        self,
        width: int,
        height: int,
        density: float,
        start: Position,
        dest: Position,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
        uniqueness_gate: UniquenessGate | None = REFERENCE_UNIQUENESS_GATE,
        max_attempts: int | None = None,
    ):
        if not 0 <= density <= 100:
            raise InvalidDensity(f"Density must be within 0..100, got {density}")

        grid = Grid(width, height, start, dest)
        self.target_passable = width * height - obstacle_budget(width, height, density)
        if self.target_passable < start.manhattan(dest) + 1:
            raise InfeasibleDensity(
                f"Density {density} leaves {self.target_passable} passable cells, "
                f"too few to join {start} and {dest}"
            )

        self.width = width
        self.height = height
        self.density = density
        self.uniqueness_gate = uniqueness_gate
        self.max_attempts = max_attempts
        self._grid = grid
        self._rng = rng if rng is not None else random.Random(seed)

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "MazeGenerator":
        return cls(
            config.width,
            config.height,
            config.density,
            config.start,
            config.dest,
            seed=config.seed,
            uniqueness_gate=config.uniqueness_gate,
            max_attempts=config.max_attempts,
        )

    def generate_many(self, count: int) -> list[Grid]:
        return [self.generate() for _ in range(count)]

    def generate(self) -> Grid:
        """Produce one solvable maze with exactly the requested density.

        Failed attempts (unreachable dest, route too long, density not
        reachable, or a non-unique solution under the uniqueness gate) are
        thrown away and generation starts over.
        """
        attempt = 0
        while self.max_attempts is None or attempt < self.max_attempts:
            attempt += 1
            length = self._carve()
            if length == -1 or length > self.target_passable:
                logger.debug("attempt %d: route length %d rejected", attempt, length)
                continue

            if not self._correct_density():
                logger.debug("attempt %d: density correction fell short", attempt)
                continue

            if self._gated():
                routes = MazeSolver(self._grid).solve()
                if len(routes) != 1:
                    logger.debug("attempt %d: %d shortest routes, need exactly one", attempt, len(routes))
                    continue

            logger.info(
                "generated %dx%d maze at density %s after %d attempt(s)",
                self.width,
                self.height,
                self.density,
                attempt,
            )
            return self._grid.copy()

        raise GenerationExhausted(f"No acceptable maze after {self.max_attempts} attempts")

    def _gated(self) -> bool:
        gate = self.uniqueness_gate
        return gate is not None and gate.applies(self.width, self.height, self.density)

    def _carve(self) -> int:
        """Carve a fresh maze into the working grid and return its route length."""
        grid = self._grid
        rng = self._rng
        grid.reset_all(OBSTACLE)
        regions = grid.new_labels(UNTOUCHED)
        grid.open(grid.start)
        grid.open(grid.dest)

        active = self._seed(regions)
        while active:
            cell = active.pop(rng.randrange(len(active)))

            candidates: list[Cell] = []
            for wall in grid.obstacle_neighbors(cell):
                if regions[wall] == UNTOUCHED:
                    regions[wall] = regions[cell]
                elif regions[wall] != regions[cell]:
                    regions[wall] = MIXED
                # Opening a wall with at most one open neighbor cannot close a loop.
                if grid.is_dead_end(wall):
                    candidates.append(wall)

            if candidates:
                chosen = candidates.pop(rng.randrange(len(candidates)))
                grid.open(chosen)
                active.append(chosen)
            for wall in candidates:
                if rng.randrange(2) != 1:
                    grid.open(wall)
                    active.append(wall)

        mixed = grid.all_obstacles(regions, MIXED)
        if mixed:
            grid.open(rng.choice(mixed))

        self._connect(grid.start)
        self._connect(grid.dest)

        return MazeSolver(grid).shortest_length()

    def _seed(self, regions: LabelMap) -> list[Cell]:
        grid = self._grid
        first = self._opposite_cell(grid.start)
        grid.open(first)
        regions[first] = REGION_A

        second = self._opposite_cell(grid.dest)
        grid.open(second)
        regions[second] = REGION_B

        if second is first:
            return [first]
        return [first, second]

    def _opposite_cell(self, anchor: Cell) -> Cell:
        """Pick a random cell in the quadrant facing away from anchor."""
        row = self._rng.choice(_opposite_half(anchor.row, self.height))
        col = self._rng.choice(_opposite_half(anchor.col, self.width))
        return self._grid.cell(row, col)

    def _connect(self, cell: Cell) -> None:
        grid = self._grid
        while grid.is_dead_end(cell):
            walls = grid.obstacle_neighbors(cell)
            if not walls:
                return
            cell = self._rng.choice(walls)
            grid.open(cell)

    def _correct_density(self) -> bool:
        amount = self.target_passable - len(self._grid.all_passable())
        if amount > 0:
            self._dig(amount)
        elif amount < 0:
            return self._fill(-amount)
        return True

    def _dig(self, amount: int) -> None:
        """Remove amount obstacles, sparing the walls along one shortest route."""
        grid = self._grid
        rng = self._rng
        route = _one_shortest_route(grid)

        shield = grid.new_labels(UNPROTECTED)
        for cell in route:
            for wall in grid.obstacle_neighbors(cell):
                shield[wall] = PROTECTED

        for label in (UNPROTECTED, PROTECTED):
            walls = grid.all_obstacles(shield, label)
            while amount > 0 and walls:
                grid.open(walls.pop(rng.randrange(len(walls))))
                amount -= 1

    def _fill(self, amount: int) -> bool:
        """Add amount obstacles by backfilling dead-end branches from their tips."""
        grid = self._grid
        rng = self._rng
        branches, protected = _dead_end_branches(grid)

        while amount > 0 and branches:
            index = rng.randrange(len(branches))
            branch = branches[index]
            if branch and branch.peek() not in protected and grid.is_passable(branch.peek()):
                grid.close(branch.pop())
                amount -= 1
            else:
                branches.pop(index)
        return amount == 0


def _opposite_half(index: int, size: int) -> range:
    mid = (size - 1) // 2
    low = range(0, max(mid, 1))
    high = range(mid + 1, size)
    if index > mid or not high:
        return low
    return high


def _one_shortest_route(grid: Grid) -> Route:
    parents: dict[Cell, Cell | None] = {grid.start: None}
    q = deque([grid.start])
    while q:
        cur = q.popleft()
        if grid.is_dest(cur):
            break
        for nxt in grid.passable_neighbors(cur):
            if nxt not in parents:
                parents[nxt] = cur
                q.append(nxt)

    route = Route(grid)
    cur: Cell | None = grid.dest if grid.dest in parents else None
    while cur is not None:
        route.push(cur)
        cur = parents[cur]
    route.reverse()
    return route


def _dead_end_branches(grid: Grid) -> tuple[list[Route], Route]:
    """Grow every simple route out of start, breadth first.

    Returns every route that ends in a dead end, plus the first (shortest)
    route that reaches dest. A cell is only excluded from routes that
    already contain it, so a dead end behind a loop shows up once per way
    around the loop.
    """
    first = Route(grid)
    first.push(grid.start)
    protected: Route | None = None
    branches: list[Route] = []

    q = deque([first])
    while q:
        route = q.popleft()
        for nxt in grid.passable_neighbors(route.peek()):
            if nxt in route:
                continue
            branch = route.copy()
            branch.push(nxt)
            if grid.is_dest(nxt):
                if protected is None:
                    protected = branch
            elif grid.is_dead_end(nxt):
                branches.append(branch)
            else:
                q.append(branch)
    return branches, protected if protected is not None else first
