"""Capture strategies layered on the board after a placement.

Both strategies are pure: they read a board snapshot and return the cells that
change owner. `apply_captures` performs the (simultaneous) ownership flip.
"""

from __future__ import annotations

from collections import deque
from typing import Callable

from connectn.core.board import Board, Cell, Coord, other_seat

CaptureStrategy = Callable[[Board, int], list[Coord]]

NEIGHBORS_8: tuple[Coord, ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)
NEIGHBORS_4: tuple[Coord, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


def adjacent_captures(board: Board, mover: int) -> list[Coord]:
    """Opponent cells whose 8 neighbours all belong to `mover`.

    Off-board neighbours count as the mover's, so edge and corner cells need
    fewer pieces to enclose. The whole board is rescanned on every call.
    """

    opponent = other_seat(mover)
    captured: list[Coord] = []
    for row in range(board.rows):
        for col in range(board.cols):
            if board.cells[row][col] != opponent:
                continue
            enclosed = all(
                not board.in_bounds(row + dr, col + dc) or board.cells[row + dr][col + dc] == mover
                for dr, dc in NEIGHBORS_8
            )
            if enclosed:
                captured.append((row, col))
    return captured


def groups_for(board: Board, owner: int) -> list[tuple[list[Coord], set[Coord]]]:
    """Maximal 4-connected groups of `owner` with their liberties, in scan order."""

    seen: set[Coord] = set()
    groups: list[tuple[list[Coord], set[Coord]]] = []
    for row in range(board.rows):
        for col in range(board.cols):
            if board.cells[row][col] != owner or (row, col) in seen:
                continue
            members: list[Coord] = []
            liberties: set[Coord] = set()
            queue: deque[Coord] = deque([(row, col)])
            seen.add((row, col))
            while queue:
                r, c = queue.popleft()
                members.append((r, c))
                for dr, dc in NEIGHBORS_4:
                    nr, nc = r + dr, c + dc
                    if not board.in_bounds(nr, nc):
                        continue
                    neighbour = board.cells[nr][nc]
                    if neighbour == Cell.empty:
                        liberties.add((nr, nc))
                    elif neighbour == owner and (nr, nc) not in seen:
                        seen.add((nr, nc))
                        queue.append((nr, nc))
            groups.append((sorted(members), liberties))
    return groups


def group_captures(board: Board, mover: int) -> list[Coord]:
    """Every opponent group left with zero liberties is captured whole."""

    captured: list[Coord] = []
    for members, liberties in groups_for(board, other_seat(mover)):
        if not liberties:
            captured.extend(members)
    return sorted(captured)


def apply_captures(board: Board, cells: list[Coord], mover: int) -> None:
    for row, col in cells:
        board.set(row, col, mover)
