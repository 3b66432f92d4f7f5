"""
chronicle.services.identity_service — Display Name → User Resolution
=====================================================================

Bot narrative only ever names players by their *current display name*,
which users can change at will.  Stable identities (Discord snowflakes)
are learned progressively from every other place a message exposes them:
authors, mentions, reactions, slash-command invokers.

Three rules govern the mapping:

1. **Observation log** — each time a user is seen under a name that
   differs from the one they last carried (as of that message), a
   :class:`UserNameObservation` row is appended.  The chronologically
   last row is the user's current name.
2. **Next-best guess** — a name is resolved through the *most recent*
   observation carrying it.  Names get reused across accounts over time,
   so only the latest claim is trusted.
3. **Backfill** — records written before a name could be resolved keep the
   bare name.  When an observation later binds that name to a user, those
   games and mentions are fixed up in place.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from chronicle.database.models import (
    Game,
    InteractionUserMention,
    User,
    UserNameObservation,
)
from chronicle.errors import InvalidID

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Name ↔ identity bookkeeping bound to one SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # -----------------------------------------------------------------------
    # Users
    # -----------------------------------------------------------------------
    def resolve_or_create(self, actor_id: str) -> User:
        """Fetch or insert the :class:`User` with snowflake *actor_id*."""
        if not actor_id:
            raise InvalidID("empty user ID")
        user = self.session.get(User, actor_id)
        if user is None:
            user = User(id=actor_id)
            self.session.add(user)
            self.session.flush()
        return user

    def current_name(self, actor_id: str) -> str | None:
        """Return the chronologically last observed name for *actor_id*."""
        return self.session.scalar(
            select(UserNameObservation.name)
            .where(UserNameObservation.user_id == actor_id)
            .order_by(UserNameObservation.observed_at.desc(), UserNameObservation.id.desc())
            .limit(1)
        )

    # -----------------------------------------------------------------------
    # Observations
    # -----------------------------------------------------------------------
    def observe(self, actor_id: str, display_name: str, at: datetime) -> bool:
        """Record that *actor_id* carried *display_name* at time *at*.

        No-op when the user's latest observation as of *at* already has this
        name, which also makes replaying old archives harmless.

        Returns True when a new observation was written.
        """
        user = self.resolve_or_create(actor_id)
        if not display_name:
            logger.debug("Skipping empty display name for user %s", actor_id)
            return False

        latest = self.session.scalar(
            select(UserNameObservation)
            .where(
                UserNameObservation.user_id == user.id,
                UserNameObservation.observed_at <= at,
            )
            .order_by(UserNameObservation.observed_at.desc(), UserNameObservation.id.desc())
            .limit(1)
        )
        if latest is not None and latest.name == display_name:
            return False

        duplicate = self.session.scalar(
            select(UserNameObservation.id).where(
                UserNameObservation.user_id == user.id,
                UserNameObservation.name == display_name,
                UserNameObservation.observed_at == at,
            )
        )
        if duplicate is not None:
            return False

        self.session.add(UserNameObservation(user_id=user.id, name=display_name, observed_at=at))
        self.session.flush()
        logger.debug("Observed %s/%s at %s", user.id, display_name, at.isoformat())

        self._backfill(user, display_name)
        return True

    def _backfill(self, user: User, name: str) -> None:
        """Attach *user* to games and mentions that only know them by *name*."""
        games = self.session.scalars(
            select(Game).where(Game.host_user_id.is_(None), Game.host_user_name == name)
        ).all()
        for game in games:
            game.host_user_id = user.id
        if games:
            logger.warning("Fixed up %d game(s) for %s/%s", len(games), user.id, name)

        mentions = self.session.scalars(
            select(InteractionUserMention).where(
                InteractionUserMention.user_id.is_(None),
                InteractionUserMention.user_name == name,
            )
        ).all()
        for mention in mentions:
            mention.user_id = user.id
        if mentions:
            logger.warning("Fixed up %d mention(s) for %s/%s", len(mentions), user.id, name)

        if games or mentions:
            self.session.flush()

    # -----------------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------------
    def resolve_by_name(self, name: str, *, message_id: str | None = None) -> User | None:
        """Best-effort lookup of the user most recently seen as *name*.

        Returns None (with a warning) when nobody has carried that name yet;
        callers keep the bare name and rely on a later backfill.
        """
        if not name:
            raise InvalidID("empty user name")
        observation = self.session.scalar(
            select(UserNameObservation)
            .where(UserNameObservation.name == name)
            .order_by(UserNameObservation.observed_at.desc(), UserNameObservation.id.desc())
            .limit(1)
        )
        if observation is None:
            logger.warning(
                "Could not find ID of user name %s for message ID %s, leaving null for now",
                name, message_id,
            )
            return None
        return observation.user
