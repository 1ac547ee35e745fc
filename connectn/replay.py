"""Presentation-side playback of decided moves.

The server has already decided every transition before anything here runs;
playback only turns a `move-applied` message into frames a renderer can draw.
Nothing in the game core imports this module.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Literal

from connectn.api.messages import MoveApplied
from connectn.core.board import Coord

INITIAL_SPEED = 0.5
ACCELERATION = 0.3

FrameKind = Literal["falling", "landed", "captured"]


@dataclass(frozen=True, slots=True)
class Frame:
    kind: FrameKind
    column: int
    row: float
    seat: int
    flipped: list[Coord] = field(default_factory=list)


def drop_trajectory(target_row: int) -> list[float]:
    """Row positions of a falling piece, starting just above the board."""

    positions: list[float] = []
    current = -1.0
    speed = INITIAL_SPEED
    while True:
        current += speed
        speed += ACCELERATION
        if current >= target_row:
            break
        positions.append(current)
    positions.append(float(target_row))
    return positions


def frames_for(move: MoveApplied) -> list[Frame]:
    positions = drop_trajectory(move.row)
    frames = [Frame(kind="falling", column=move.column, row=p, seat=move.mover_seat) for p in positions[:-1]]
    frames.append(Frame(kind="landed", column=move.column, row=float(move.row), seat=move.mover_seat))
    if move.captured_cells:
        frames.append(
            Frame(
                kind="captured",
                column=move.column,
                row=float(move.row),
                seat=move.mover_seat,
                flipped=list(move.captured_cells),
            )
        )
    return frames


async def replay(
    move: MoveApplied,
    render: Callable[[Frame], None],
    *,
    frame_delay: float = 0.0,
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> int:
    """Render every frame of `move`, pausing `frame_delay` seconds between them.

    With no delay (headless) frames render back to back. Returns the number
    of frames rendered.
    """

    pause = sleep or asyncio.sleep
    frames = frames_for(move)
    for i, frame in enumerate(frames):
        render(frame)
        if frame_delay > 0 and i < len(frames) - 1:
            await pause(frame_delay)
    return len(frames)
