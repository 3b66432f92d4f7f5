"""
chronicle.engine.state — Per-Channel Replay Cursor
===================================================

Each replayed channel owns exactly one :class:`ChannelContext`.  It holds
the game currently being followed, the number of the next round to record
and the lifecycle :class:`Phase`.  It is never persisted: once a channel's
archives have been replayed the context is discarded.

Phase transitions only move forward::

    IDLE ──countdown──▶ COUNTING_DOWN ──start──▶ RUNNING ──winner/cancel──▶ IDLE

A new countdown may begin from any phase (an abandoned countdown is simply
superseded).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from chronicle.database.models import Game


class Phase(enum.StrEnum):
    IDLE = "idle"
    COUNTING_DOWN = "counting_down"
    RUNNING = "running"


@dataclass
class ChannelContext:
    """Mutable replay state for a single channel."""

    channel_id: str
    phase: Phase = Phase.IDLE
    game: Game | None = None
    round_number: int = 1
    games_seen: int = 0

    @property
    def has_seen_game(self) -> bool:
        """False until the first countdown; earlier lifecycle data is leftover."""
        return self.games_seen > 0

    @property
    def is_running(self) -> bool:
        return self.phase is Phase.RUNNING

    def begin_countdown(self, game: Game) -> None:
        self.game = game
        self.round_number = 1
        self.phase = Phase.COUNTING_DOWN
        self.games_seen += 1

    def start(self) -> None:
        self.phase = Phase.RUNNING

    def advance_round(self) -> None:
        self.round_number += 1

    def finish(self) -> None:
        self.phase = Phase.IDLE
