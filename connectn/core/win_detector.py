from __future__ import annotations

from dataclasses import dataclass

from connectn.core.board import Board, Cell, Coord

# Horizontal, vertical, diagonal down-right, diagonal down-left. Order matters:
# the first origin/direction pair in scan order wins.
DIRECTIONS: tuple[Coord, ...] = ((0, 1), (1, 0), (1, 1), (1, -1))


@dataclass(frozen=True, slots=True)
class Win:
    seat: int
    cells: list[Coord]


def _run_from(board: Board, row: int, col: int, dr: int, dc: int, connect_n: int) -> list[Coord]:
    owner = board.cells[row][col]
    cells: list[Coord] = [(row, col)]
    for i in range(1, connect_n):
        r, c = row + dr * i, col + dc * i
        if not board.in_bounds(r, c) or board.cells[r][c] != owner:
            break
        cells.append((r, c))
    return cells


def find_winner(board: Board, connect_n: int) -> Win | None:
    """Return the first `connect_n` window in row-major scan order, if any.

    Longer runs contain several valid windows; only the earliest one is
    reported, never the longest.
    """

    for row in range(board.rows):
        for col in range(board.cols):
            owner = board.cells[row][col]
            if owner == Cell.empty:
                continue
            for dr, dc in DIRECTIONS:
                cells = _run_from(board, row, col, dr, dc, connect_n)
                if len(cells) == connect_n:
                    return Win(seat=owner, cells=cells)
    return None
