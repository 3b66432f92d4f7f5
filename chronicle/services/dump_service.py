"""
chronicle.services.dump_service — SQLite Statistics Dump
=========================================================

Writes the whole database as plain SQL so it can be published and loaded
into any SQLite client.  The header records the latest game time the dump
covers, which is how consumers tell two dumps apart.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TextIO

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from chronicle.database.engine import get_session
from chronicle.database.models import Game, Round

logger = logging.getLogger(__name__)

DUMP_HEADER = """\
--
-- Rumble Royale statistics dump
--
-- This dump is entirely compatible with SQLite.
--
-- Latest game time considered in this dump: {latest}
--
-- DO NOT EDIT. This was autogenerated by a tool.
--

"""


def latest_timestamp(session: Session) -> datetime | None:
    """Latest moment covered by the store: last game's times and last round's post."""
    candidates: list[datetime | None] = []
    game = session.scalar(select(Game).order_by(Game.id.desc()).limit(1))
    if game is not None:
        candidates += [game.countdown_start_time, game.start_time, game.end_time]
    round_ = session.scalar(select(Round).order_by(Round.id.desc()).limit(1))
    if round_ is not None:
        candidates.append(round_.post_time)
    present = [ts for ts in candidates if ts is not None]
    return max(present) if present else None


def write_dump(engine: Engine, out: TextIO) -> int:
    """Write the header and every SQL statement of the database to *out*.

    Returns the number of statements written.

    Raises
    ------
    ValueError
        If *engine* is not backed by SQLite.
    """
    if engine.dialect.name != "sqlite":
        raise ValueError(f"SQL dumps require SQLite, not {engine.dialect.name}")

    with get_session(engine) as session:
        latest = latest_timestamp(session)
    out.write(DUMP_HEADER.format(latest=latest.isoformat(sep=" ") if latest else "none"))

    count = 0
    with engine.connect() as conn:
        for statement in conn.connection.dbapi_connection.iterdump():
            out.write(f"{statement}\n")
            count += 1
    logger.info("Dumped %d SQL statement(s), latest game time %s", count, latest)
    return count
