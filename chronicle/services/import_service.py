"""
chronicle.services.import_service — Archive Replay Orchestration
=================================================================

Replays every configured channel, one after the other, through a single
:class:`~chronicle.services.game_service.GameTracker`.

Each message is its own transaction: a fatal error rolls back only the
message being processed and aborts the run with a
:class:`~chronicle.errors.MessageProcessingError` pointing at it.  Because
every table carries a natural key, running the import again after fixing
the cause picks up where the failure happened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from chronicle.config import ChronicleConfig
from chronicle.database.engine import init_db
from chronicle.database.models import Game, Interaction, Round
from chronicle.engine.state import ChannelContext
from chronicle.errors import MessageProcessingError
from chronicle.exports.loader import iter_exports
from chronicle.services.game_service import GameIdAllocator, GameTracker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ImportSummary:
    """Counters for one import run.  Store totals are taken after the run."""
    files: int = 0
    messages: int = 0
    games: int = 0
    rounds: int = 0
    interactions: int = 0


def run_import(engine: Engine, cfg: ChronicleConfig) -> ImportSummary:
    """Replay every archive of ``cfg.channel_ids`` into the database."""
    init_db(engine)
    summary = ImportSummary()

    session = Session(engine)
    try:
        tracker = GameTracker(session, cfg.bot_author_id, GameIdAllocator.from_session(session))
        for channel_id in cfg.channel_ids:
            ctx = ChannelContext(channel_id=channel_id)
            logger.info("Replaying channel %s", channel_id)
            for export_file, export in iter_exports(cfg.export_root, [channel_id]):
                summary.files += 1
                for message in export.messages:
                    try:
                        tracker.process_message(ctx, message)
                        session.commit()
                    except Exception as exc:
                        session.rollback()
                        raise MessageProcessingError(message.id, str(export_file.path)) from exc
                    summary.messages += 1
            if ctx.is_running:
                logger.warning(
                    "Channel %s ends with game %d still running", channel_id, ctx.game.id
                )

        summary.games = session.scalar(select(func.count(Game.id))) or 0
        summary.rounds = session.scalar(select(func.count(Round.id))) or 0
        summary.interactions = session.scalar(select(func.count(Interaction.id))) or 0
    finally:
        session.close()

    logger.info(
        "Import complete: %d file(s), %d message(s); store holds %d game(s), "
        "%d round(s), %d interaction(s)",
        summary.files, summary.messages, summary.games, summary.rounds, summary.interactions,
    )
    return summary
