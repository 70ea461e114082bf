from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence

MAX_SIZE = 50000

PASSABLE = 0
OBSTACLE = 1


class MazeError(ValueError):
    """Base class for every maze validation error."""


class InvalidDimension(MazeError):
    pass


class InvalidCoordinate(MazeError):
    pass


class InvalidCellValue(MazeError):
    pass


class ForeignCell(MazeError):
    pass


class MalformedGrid(MazeError):
    pass


class Direction(Enum):
    # Declaration order is the neighbor visiting order.
    S = (1, 0)
    E = (0, 1)
    N = (-1, 0)
    W = (0, -1)

    @property
    def delta(self) -> tuple[int, int]:
        return self.value


@dataclass(frozen=True)
class Position:
    row: int
    col: int

    def manhattan(self, other: "Position") -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)


class Cell:
    """One square of a Grid.

    Cells are created by their grid only. Equality is identity: every
    (grid, row, col) triple maps to exactly one Cell object.
    """

    __slots__ = ("_row", "_col", "_value")

    def __init__(self, row: int, col: int, value: int = PASSABLE):
        self._row = row
        self._col = col
        self._value = _checked_value(value)

    @property
    def row(self) -> int:
        return self._row

    @property
    def col(self) -> int:
        return self._col

    @property
    def value(self) -> int:
        return self._value

    @property
    def pos(self) -> Position:
        return Position(self.row, self.col)

    def __repr__(self) -> str:
        return f"Cell(row={self.row}, col={self.col}, value={self._value})"


def _checked_value(value: int) -> int:
    # bool and float compare equal to 0/1 but would not serialize as 0/1.
    if type(value) is not int or value not in (PASSABLE, OBSTACLE):
        raise InvalidCellValue(f"Cell value must be 0 or 1, got {value!r}")
    return value


class LabelMap:
    """Scratch integers keyed by cell coordinate, owned by one algorithm run."""

    def __init__(self, width: int, height: int, value: int = 0):
        self.width = width
        self.height = height
        self._values = [[value] * width for _ in range(height)]

    def __getitem__(self, cell: Cell) -> int:
        return self._values[cell.row][cell.col]

    def __setitem__(self, cell: Cell, value: int) -> None:
        self._values[cell.row][cell.col] = value

    def reset(self, value: int) -> None:
        for row in self._values:
            row[:] = [value] * self.width


class Grid:
    def __init__(self, width: int, height: int, start: Position, dest: Position):
        _check_dimension(width, height)
        self.width = width
        self.height = height
        self._cells: list[list[Cell]] = [
            [Cell(r, c) for c in range(width)] for r in range(height)
        ]
        self._start = self._anchor(start)
        self._dest = self._anchor(dest)

    @classmethod
    def from_matrix(cls, rows: Sequence[Sequence[int]], start: Position, dest: Position) -> "Grid":
        if not rows:
            raise InvalidDimension("Grid needs at least one row")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise MalformedGrid("All rows must have the same number of cells")
        grid = cls(width, len(rows), start, dest)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                grid._cells[r][c]._value = _checked_value(value)
        return grid

    @classmethod
    def parse(cls, text: str, start: Position, dest: Position) -> "Grid":
        """Build a grid from rows of space separated 0/1 tokens."""
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        lines = text.rstrip().split("\n")
        if not lines or not lines[0].strip():
            raise MalformedGrid("Grid text is empty")

        rows: list[list[int]] = []
        for lineno, line in enumerate(lines, start=1):
            tokens = line.split()
            if any(tok not in ("0", "1") for tok in tokens):
                raise MalformedGrid(f"Line {lineno}: tokens must be 0 or 1")
            if rows and len(tokens) != len(rows[0]):
                raise MalformedGrid(
                    f"Line {lineno}: expected {len(rows[0])} cells, found {len(tokens)}"
                )
            rows.append([int(tok) for tok in tokens])
        return cls.from_matrix(rows, start, dest)

    def copy(self) -> "Grid":
        clone = Grid(self.width, self.height, self._start.pos, self._dest.pos)
        for src_row, dst_row in zip(self._cells, clone._cells):
            for src, dst in zip(src_row, dst_row):
                dst._value = src._value
        return clone

    def serialize(self) -> str:
        return "\n".join(" ".join(str(v) for v in row) for row in self.matrix()) + "\n"

    def __str__(self) -> str:
        return self.serialize()

    def matrix(self) -> list[list[int]]:
        return [[cell.value for cell in row] for row in self._cells]

    # Cell access
    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.height and 0 <= col < self.width

    def cell_at(self, row: int, col: int) -> Cell | None:
        if not self.in_bounds(row, col):
            return None
        return self._cells[row][col]

    def cell(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise InvalidCoordinate(f"Out of bounds position: ({row}, {col})")
        return self._cells[row][col]

    def __iter__(self) -> Iterator[Cell]:
        for row in self._cells:
            yield from row

    def owns(self, cell: Cell) -> bool:
        return self.cell_at(cell.row, cell.col) is cell

    def _check_owned(self, cell: Cell) -> None:
        if not self.owns(cell):
            raise ForeignCell(f"{cell!r} does not belong to this grid")

    @property
    def start(self) -> Cell:
        return self._start

    @property
    def dest(self) -> Cell:
        return self._dest

    def set_start(self, pos: Position) -> None:
        self._start = self._anchor(pos)

    def set_dest(self, pos: Position) -> None:
        self._dest = self._anchor(pos)

    def _anchor(self, pos: Position) -> Cell:
        return self.cell(pos.row, pos.col)

    def is_start(self, cell: Cell) -> bool:
        return cell is self._start

    def is_dest(self, cell: Cell) -> bool:
        return cell is self._dest

    # Passability
    def set_passability(self, row: int, col: int, value: int) -> None:
        self.cell(row, col)._value = _checked_value(value)

    def open(self, cell: Cell) -> None:
        self._check_owned(cell)
        cell._value = PASSABLE

    def close(self, cell: Cell) -> None:
        self._check_owned(cell)
        cell._value = OBSTACLE

    def reset_all(self, value: int) -> None:
        value = _checked_value(value)
        for cell in self:
            cell._value = value

    def is_passable(self, cell: Cell) -> bool:
        self._check_owned(cell)
        return cell.value == PASSABLE

    # Labels
    def new_labels(self, value: int = 0) -> LabelMap:
        return LabelMap(self.width, self.height, value)

    # Neighborhood
    def neighbors(self, cell: Cell) -> list[Cell]:
        self._check_owned(cell)
        found: list[Cell] = []
        for direction in Direction:
            dr, dc = direction.delta
            nxt = self.cell_at(cell.row + dr, cell.col + dc)
            if nxt is not None:
                found.append(nxt)
        return found

    def passable_neighbors(self, cell: Cell) -> list[Cell]:
        return [n for n in self.neighbors(cell) if n.value == PASSABLE]

    def obstacle_neighbors(self, cell: Cell) -> list[Cell]:
        return [n for n in self.neighbors(cell) if n.value == OBSTACLE]

    def is_dead_end(self, cell: Cell) -> bool:
        return len(self.passable_neighbors(cell)) <= 1

    # Aggregates
    def all_obstacles(self, labels: LabelMap | None = None, label: int | None = None) -> list[Cell]:
        return list(_filtered(self, OBSTACLE, labels, label))

    def all_passable(self, labels: LabelMap | None = None, label: int | None = None) -> list[Cell]:
        return list(_filtered(self, PASSABLE, labels, label))

    def obstacle_count(self) -> int:
        return sum(cell.value for cell in self)

    def density(self) -> float:
        return self.obstacle_count() * 100.0 / self.width / self.height


def _filtered(cells: Iterable[Cell], value: int, labels: LabelMap | None, label: int | None) -> Iterator[Cell]:
    for cell in cells:
        if cell.value != value:
            continue
        if labels is not None and label is not None and labels[cell] != label:
            continue
        yield cell


def _check_dimension(width: int, height: int) -> None:
    for name, size in (("width", width), ("height", height)):
        if not 1 <= size <= MAX_SIZE:
            raise InvalidDimension(f"Grid {name} must be within 1..{MAX_SIZE}, got {size}")
