"""
tests/test_import_service.py — End-to-End Archive Replay
=========================================================

Writes small DiscordChatExporter archives to ``tmp_path`` and runs the
whole import against the in-memory database, twice where re-import
behaviour matters.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from chronicle.config import ChronicleConfig
from chronicle.database.models import (
    Game,
    Interaction,
    InteractionUserMention,
    Round,
    UserNameObservation,
)
from chronicle.errors import InconsistentState, MessageProcessingError
from chronicle.services.import_service import run_import

from conftest import (
    BOT_ID,
    CHANNEL_ID,
    cancelled_embed,
    countdown_embed,
    message_json,
    round_embed,
    start_embed,
    user_json,
    winner_embed,
)

SHOP_CHANNEL_ID = "1224017701744410695"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _write_export(root: Path, channel_id: str, name: str, messages: list[dict]) -> None:
    path = root / channel_id / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({
        "guild": {"id": "1", "name": "Hololive"},
        "channel": {"id": channel_id, "name": "rumble"},
        "messages": messages,
    }))


def _config(root: Path, *channel_ids: str) -> ChronicleConfig:
    return ChronicleConfig(
        channel_ids=channel_ids or (CHANNEL_ID,),
        bot_author_id=BOT_ID,
        export_root=str(root),
    )


def _counts(engine) -> dict[str, int]:
    with Session(engine) as session:
        return {
            model.__tablename__: session.scalar(select(func.count()).select_from(model))
            for model in (Game, Round, Interaction, InteractionUserMention, UserNameObservation)
        }


def _full_game(offset: int = 0) -> list[dict]:
    return [
        message_json(f"{offset}1", offset + 0, embeds=[countdown_embed("zed")]),
        message_json(f"{offset}2", offset + 1, author=user_json("77", "zed"), content="join!"),
        message_json(f"{offset}3", offset + 2, embeds=[start_embed()]),
        message_json(f"{offset}4", offset + 3, embeds=[round_embed(1, "**zed** shot ~~**amy**~~.")]),
        message_json(f"{offset}5", offset + 4, embeds=[round_embed(2, "**zed** picked the __Bow__.")]),
        message_json(f"{offset}6", offset + 5, embeds=[winner_embed("zed")]),
    ]


class TestRunImport:
    def test_single_game(self, db_engine, tmp_path):
        _write_export(tmp_path, CHANNEL_ID, "part1.json", _full_game())

        summary = run_import(db_engine, _config(tmp_path))

        assert summary.files == 1
        assert summary.messages == 6
        assert summary.games == 1
        assert summary.rounds == 2
        assert summary.interactions == 2
        with Session(db_engine) as session:
            game = session.scalars(select(Game)).one()
            assert game.host_user_id == "77"
            assert game.end_time is not None

    def test_files_replayed_in_timestamp_order(self, db_engine, tmp_path):
        messages = _full_game()
        # File names sort opposite to their contents
        _write_export(tmp_path, CHANNEL_ID, "a.json", messages[3:])
        _write_export(tmp_path, CHANNEL_ID, "b.json", messages[:3])

        summary = run_import(db_engine, _config(tmp_path))
        assert summary.rounds == 2

    def test_reimport_is_idempotent(self, db_engine, tmp_path):
        _write_export(tmp_path, CHANNEL_ID, "part1.json", _full_game())
        run_import(db_engine, _config(tmp_path))
        before = _counts(db_engine)

        run_import(db_engine, _config(tmp_path))
        assert _counts(db_engine) == before

    def test_new_archive_appends_game(self, db_engine, tmp_path):
        _write_export(tmp_path, CHANNEL_ID, "part1.json", _full_game())
        run_import(db_engine, _config(tmp_path))

        _write_export(tmp_path, CHANNEL_ID, "part2.json", _full_game(offset=100))
        summary = run_import(db_engine, _config(tmp_path))
        assert summary.games == 2
        with Session(db_engine) as session:
            assert session.scalars(select(Game.id).order_by(Game.id)).all() == [1, 2]

    def test_channels_have_independent_state(self, db_engine, tmp_path):
        # A game still counting down in one channel must not swallow the other's start
        _write_export(tmp_path, SHOP_CHANNEL_ID, "s.json", [
            message_json("s1", 0, embeds=[countdown_embed("amy")]),
        ])
        _write_export(tmp_path, CHANNEL_ID, "m.json", _full_game(offset=1))

        summary = run_import(db_engine, _config(tmp_path, SHOP_CHANNEL_ID, CHANNEL_ID))
        assert summary.games == 1
        with Session(db_engine) as session:
            game = session.scalars(select(Game)).one()
            assert game.discord_channel_id == CHANNEL_ID

    def test_leftover_data_skipped(self, db_engine, tmp_path):
        _write_export(tmp_path, CHANNEL_ID, "part1.json", [
            message_json("1", 0, embeds=[round_embed(7, "**a** slept.")]),
            message_json("2", 1, embeds=[winner_embed()]),
            *_full_game(offset=10),
        ])
        summary = run_import(db_engine, _config(tmp_path))
        assert summary.games == 1
        assert summary.rounds == 2

    def test_fatal_error_names_message_and_file(self, db_engine, tmp_path):
        messages = _full_game() + [message_json("bad", 20, embeds=[cancelled_embed()])]
        _write_export(tmp_path, CHANNEL_ID, "part1.json", messages)

        with pytest.raises(MessageProcessingError) as exc_info:
            run_import(db_engine, _config(tmp_path))

        err = exc_info.value
        assert err.message_id == "bad"
        assert err.source.endswith("part1.json")
        assert isinstance(err.__cause__, InconsistentState)
        # Everything before the failing message was committed
        assert _counts(db_engine)["games"] == 1
