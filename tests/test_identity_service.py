"""
tests/test_identity_service.py — Name Observation & Resolution
===============================================================

Covers observation idempotence (including replays of older archives),
next-best-guess resolution and retroactive backfill of games and mentions.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from chronicle.database.models import (
    Game,
    InteractionUserMention,
    User,
    UserNameObservation,
)
from chronicle.errors import InvalidID
from chronicle.services.identity_service import IdentityResolver

from conftest import CHANNEL_ID, at


@pytest.fixture
def resolver(db_session):
    return IdentityResolver(db_session)


def _observation_count(session) -> int:
    return session.scalar(select(func.count(UserNameObservation.id)))


class TestResolveOrCreate:
    def test_creates_once(self, resolver, db_session):
        first = resolver.resolve_or_create("1")
        second = resolver.resolve_or_create("1")
        assert first is second
        assert db_session.scalar(select(func.count(User.id))) == 1

    def test_empty_id_rejected(self, resolver):
        with pytest.raises(InvalidID):
            resolver.resolve_or_create("")


class TestObserve:
    def test_first_observation_written(self, resolver, db_session):
        assert resolver.observe("1", "alice", at(0))
        assert resolver.current_name("1") == "alice"
        assert _observation_count(db_session) == 1

    def test_same_name_is_noop(self, resolver, db_session):
        resolver.observe("1", "alice", at(0))
        assert not resolver.observe("1", "alice", at(5))
        assert _observation_count(db_session) == 1

    def test_name_change_appends(self, resolver, db_session):
        resolver.observe("1", "alice", at(0))
        resolver.observe("1", "alicia", at(5))
        assert resolver.current_name("1") == "alicia"
        assert _observation_count(db_session) == 2

    def test_change_and_back_appends_again(self, resolver, db_session):
        resolver.observe("1", "alice", at(0))
        resolver.observe("1", "alicia", at(5))
        resolver.observe("1", "alice", at(10))
        assert resolver.current_name("1") == "alice"
        assert _observation_count(db_session) == 3

    def test_replay_of_history_is_noop(self, resolver, db_session):
        for minutes, name in ((0, "alice"), (5, "alicia"), (10, "alice")):
            resolver.observe("1", name, at(minutes))
        for minutes, name in ((0, "alice"), (5, "alicia"), (10, "alice")):
            assert not resolver.observe("1", name, at(minutes))
        assert _observation_count(db_session) == 3

    def test_observations_ordered_by_time(self, resolver, db_session):
        resolver.observe("1", "later", at(10))
        resolver.observe("1", "earlier", at(0))
        user = db_session.get(User, "1")
        db_session.refresh(user)
        assert [o.name for o in user.name_observations] == ["earlier", "later"]
        assert resolver.current_name("1") == "later"

    def test_empty_display_name_skipped(self, resolver, db_session):
        assert not resolver.observe("1", "", at(0))
        assert _observation_count(db_session) == 0


class TestResolveByName:
    def test_unknown_name_returns_none(self, resolver, caplog):
        assert resolver.resolve_by_name("ghost", message_id="99") is None
        assert "ghost" in caplog.text

    def test_latest_claim_wins(self, resolver):
        resolver.observe("1", "zed", at(0))
        resolver.observe("2", "zed", at(10))
        assert resolver.resolve_by_name("zed").id == "2"

    def test_empty_name_rejected(self, resolver):
        with pytest.raises(InvalidID):
            resolver.resolve_by_name("")


class TestBackfill:
    def test_game_host_fixed_up(self, resolver, db_session):
        game = Game(
            id=1, discord_channel_id=CHANNEL_ID, host_user_name="zed",
            countdown_start_time=at(0),
        )
        db_session.add(game)
        db_session.flush()

        resolver.observe("7", "zed", at(30))
        assert game.host_user_id == "7"

    def test_mentions_fixed_up(self, resolver, db_session):
        pending = InteractionUserMention(user_name="zed")
        other = InteractionUserMention(user_name="someone")
        db_session.add_all([pending, other])
        db_session.flush()

        resolver.observe("7", "zed", at(30))
        assert pending.user_id == "7"
        assert other.user_id is None

    def test_resolved_records_untouched(self, resolver, db_session):
        resolver.resolve_or_create("1")
        mention = InteractionUserMention(user_name="zed", user_id="1")
        db_session.add(mention)
        db_session.flush()

        resolver.observe("7", "zed", at(30))
        assert mention.user_id == "1"
