from __future__ import annotations

import logging
from collections import deque

from maze import Grid
from route import Route

logger = logging.getLogger(__name__)


class MazeSolver:
    def __init__(self, grid: Grid):
        self.grid = grid

    def change_grid(self, grid: Grid) -> None:
        self.grid = grid

    def solve(self) -> list[Route]:
        """Return every shortest route from start to dest.

        Distances are one-based (the start is 1) so that 0 marks unvisited
        cells. Routes are rebuilt backwards from dest by stepping to any
        neighbor whose distance is exactly one lower, then reversed.
        """
        grid = self.grid
        if not grid.is_passable(grid.start):
            return []
        steps = grid.new_labels(0)

        start = grid.start
        q = deque([start])
        steps[start] = 1
        while q:
            cur = q.popleft()
            if grid.is_dest(cur):
                continue
            here = steps[cur]
            for nxt in grid.passable_neighbors(cur):
                if steps[nxt] == 0:
                    steps[nxt] = here + 1
                    q.append(nxt)

        dest = grid.dest
        if steps[dest] == 0:
            return []

        routes: list[Route] = []
        first = Route(grid)
        first.push(dest)
        pending = deque([first])
        while pending:
            route = pending.popleft()
            cur = route.peek()
            if grid.is_start(cur):
                route.reverse()
                routes.append(route)
                continue

            wanted = steps[cur] - 1
            for prev in grid.passable_neighbors(cur):
                if steps[prev] == wanted:
                    branch = route.copy()
                    branch.push(prev)
                    pending.append(branch)

        return routes

    def shortest_length(self) -> int:
        """Number of cells on a shortest route, start included; -1 if none."""
        grid = self.grid
        if not grid.is_passable(grid.start):
            return -1
        steps = grid.new_labels(0)
        start = grid.start
        steps[start] = 1

        q = deque([start])
        while q:
            cur = q.popleft()
            if grid.is_dest(cur):
                return steps[cur]
            for nxt in grid.passable_neighbors(cur):
                if steps[nxt] == 0:
                    steps[nxt] = steps[cur] + 1
                    q.append(nxt)
        return -1

    def solve_exhaustive(self) -> list[Route]:
        """Enumerate shortest routes by growing every simple route forward.

        Much slower than solve(); kept to cross-check it.
        """
        grid = self.grid
        limit = self.shortest_length()
        if limit == -1:
            logger.warning("No route from %s to %s", grid.start.pos, grid.dest.pos)
            return []

        first = Route(grid)
        first.push(grid.start)
        if grid.is_dest(grid.start):
            return [first]

        routes: list[Route] = []
        q = deque([first])
        while q:
            route = q.popleft()
            if len(route) >= limit:
                break
            for nxt in grid.passable_neighbors(route.peek()):
                if nxt in route:
                    continue
                branch = route.copy()
                branch.push(nxt)
                if grid.is_dest(nxt):
                    routes.append(branch)
                elif not grid.is_dead_end(nxt):
                    q.append(branch)
        return routes


def solve(grid: Grid) -> list[Route]:
    return MazeSolver(grid).solve()


def shortest_length(grid: Grid) -> int:
    return MazeSolver(grid).shortest_length()
