from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field

from connectn.errors import ColumnFull, OutOfBounds

Coord = tuple[int, int]


class Cell(IntEnum):
    empty = 0
    player_1 = 1
    player_2 = 2


def other_seat(seat: int) -> int:
    return 2 if seat == 1 else 1


class Board(BaseModel):
    """Fixed `rows x cols` grid of cell owners.

    Cells are stored as plain ints (0 = empty, 1/2 = seat) so the board
    serializes as a nested JSON array. Row 0 is the top row; pieces fall
    towards `rows - 1`.
    """

    rows: int
    cols: int
    cells: list[list[int]] = Field(default_factory=list)

    @classmethod
    def empty(cls, rows: int, cols: int) -> "Board":
        return cls(rows=rows, cols=cols, cells=[[Cell.empty.value] * cols for _ in range(rows)])

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise OutOfBounds(f"({row}, {col}) is outside the {self.rows}x{self.cols} board")
        return Cell(self.cells[row][col])

    def set(self, row: int, col: int, owner: int) -> None:
        if not self.in_bounds(row, col):
            raise OutOfBounds(f"({row}, {col}) is outside the {self.rows}x{self.cols} board")
        self.cells[row][col] = Cell(owner).value

    def lowest_empty_row(self, column: int) -> int | None:
        if not 0 <= column < self.cols:
            raise OutOfBounds(f"Column {column} is outside the board (0..{self.cols - 1})")
        for row in range(self.rows - 1, -1, -1):
            if self.cells[row][column] == Cell.empty:
                return row
        return None

    def drop(self, column: int, owner: int) -> int:
        """Commit `owner` to the lowest empty cell of `column` and return its row."""

        row = self.lowest_empty_row(column)
        if row is None:
            raise ColumnFull(column)
        self.cells[row][column] = Cell(owner).value
        return row

    def is_full(self) -> bool:
        return all(cell != Cell.empty for row in self.cells for cell in row)

    def snapshot(self) -> tuple[tuple[int, ...], ...]:
        return tuple(tuple(row) for row in self.cells)

