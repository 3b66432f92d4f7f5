"""
tests/test_dump_service.py — SQLite Statistics Dump
====================================================
"""

from __future__ import annotations

import io
from unittest.mock import MagicMock

import pytest
from sqlalchemy.orm import Session

from chronicle.database.models import Game, Round
from chronicle.services.dump_service import latest_timestamp, write_dump

from conftest import CHANNEL_ID, at


def _seed(engine, *, end_minutes: float | None = 30, round_minutes: float | None = 45) -> None:
    with Session(engine) as session:
        session.add(Game(
            id=1,
            discord_channel_id=CHANNEL_ID,
            era="Classic",
            countdown_start_time=at(0),
            start_time=at(2),
            end_time=at(end_minutes) if end_minutes is not None else None,
        ))
        session.flush()
        if round_minutes is not None:
            session.add(Round(game_id=1, round_number=1, post_time=at(round_minutes)))
        session.commit()


class TestLatestTimestamp:
    def test_empty_store(self, db_session):
        assert latest_timestamp(db_session) is None

    def test_round_later_than_game(self, db_engine):
        _seed(db_engine)
        with Session(db_engine) as session:
            assert latest_timestamp(session) == at(45)

    def test_game_without_end(self, db_engine):
        _seed(db_engine, end_minutes=None, round_minutes=None)
        with Session(db_engine) as session:
            assert latest_timestamp(session) == at(2)


class TestWriteDump:
    def test_header_and_statements(self, db_engine):
        _seed(db_engine)
        out = io.StringIO()

        count = write_dump(db_engine, out)

        text = out.getvalue()
        assert text.startswith("--\n-- Rumble Royale statistics dump\n")
        assert "-- Latest game time considered in this dump: 2024-03-30 12:45:00" in text
        assert 'CREATE TABLE "games"' in text or "CREATE TABLE games" in text
        assert "INSERT INTO" in text
        assert count > 0

    def test_empty_store_header(self, db_engine):
        out = io.StringIO()
        write_dump(db_engine, out)
        assert "considered in this dump: none" in out.getvalue()

    def test_non_sqlite_rejected(self):
        engine = MagicMock()
        engine.dialect.name = "postgresql"
        with pytest.raises(ValueError, match="SQLite"):
            write_dump(engine, io.StringIO())
