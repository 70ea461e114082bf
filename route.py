from __future__ import annotations

from typing import Iterator

from maze import Cell, ForeignCell, Grid


class Route:
    """An ordered run of cells of one grid.

    Cells are added and removed at the front. Indexing and iteration go from
    the oldest cell to the front, so a route grown from the start and ending
    at the destination reads start to destination.
    """

    def __init__(self, grid: Grid):
        self.grid = grid
        self._cells: list[Cell] = []

    def push(self, cell: Cell) -> None:
        if not self.grid.owns(cell):
            raise ForeignCell(f"{cell!r} does not belong to the route's grid")
        self._cells.append(cell)

    def peek(self) -> Cell:
        if not self._cells:
            raise IndexError("peek from an empty route")
        return self._cells[-1]

    def pop(self) -> Cell:
        if not self._cells:
            raise IndexError("pop from an empty route")
        return self._cells.pop()

    def reverse(self) -> None:
        self._cells.reverse()

    def copy(self) -> "Route":
        clone = Route(self.grid)
        clone._cells = list(self._cells)
        return clone

    def coordinates(self) -> tuple[tuple[int, int], ...]:
        return tuple((cell.row, cell.col) for cell in self._cells)

    def __contains__(self, cell: object) -> bool:
        return any(c is cell for c in self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __getitem__(self, index: int) -> Cell:
        return self._cells[index]

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Route):
            return NotImplemented
        return self.grid is other.grid and self._cells == other._cells

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Route({list(self.coordinates())})"
