"""
chronicle.services.interaction_service — Round Narrative Persistence
=====================================================================

Turns narrative text into :class:`Interaction` rows: mentions and items are
extracted into a template (see :mod:`chronicle.engine.extractors`), names
are resolved to users where possible, and the template is deduplicated
through :mod:`chronicle.services.catalog_service`.

Interactions are keyed by ``(round, position)``; recording a position that
already exists is a no-op so re-imports leave rounds untouched.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from chronicle.database.models import Interaction, InteractionUserMention, Round
from chronicle.engine.extractors import (
    ParsedMention,
    extract_item_mentions,
    extract_user_mentions,
)
from chronicle.engine.parsing import EventRound
from chronicle.services.catalog_service import (
    get_or_create_interaction_message,
    get_or_create_item,
)
from chronicle.services.identity_service import IdentityResolver

logger = logging.getLogger(__name__)


class InteractionRecorder:
    def __init__(self, session: Session, resolver: IdentityResolver) -> None:
        self.session = session
        self.resolver = resolver

    def record_line(
        self, round_: Round, position: int, line: str, *, message_id: str | None = None
    ) -> Interaction | None:
        """Persist one ``<emoji> | narrative`` line of a regular round."""
        if self._exists(round_, position):
            return None
        template, mentions = extract_user_mentions(line)
        template, items = extract_item_mentions(template)
        return self._store(round_, position, template, "", mentions, items, message_id)

    def record_event(
        self, round_: Round, event_round: EventRound, *, message_id: str | None = None
    ) -> Interaction | None:
        """Persist an event round as a single aggregate interaction.

        The opening paragraph is stored verbatim as the template; mentions and
        items are collected from the whole description.
        """
        if self._exists(round_, 0):
            return None
        body, mentions = extract_user_mentions(event_round.body)
        _, items = extract_item_mentions(body)
        return self._store(
            round_, 0, event_round.summary, event_round.event, mentions, items, message_id
        )

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------
    def _exists(self, round_: Round, position: int) -> bool:
        existing = self.session.scalar(
            select(Interaction.id).where(
                Interaction.round_id == round_.id, Interaction.position == position
            )
        )
        if existing is not None:
            logger.debug("Interaction %d of round %d already stored", position, round_.id)
        return existing is not None

    def _store(
        self,
        round_: Round,
        position: int,
        template: str,
        event: str,
        parsed_mentions: list[ParsedMention],
        item_names: list[str],
        message_id: str | None,
    ) -> Interaction:
        mentions = []
        for parsed in parsed_mentions:
            user = self.resolver.resolve_by_name(parsed.name, message_id=message_id)
            mentions.append(InteractionUserMention(
                user_id=user.id if user is not None else None,
                user_name=parsed.name,
                killed=parsed.killed,
                suffix=parsed.suffix,
            ))

        interaction = Interaction(
            round_id=round_.id,
            position=position,
            message=get_or_create_interaction_message(self.session, template, event),
            user_mentions=mentions,
            items=[get_or_create_item(self.session, name) for name in item_names],
        )
        self.session.add(interaction)
        self.session.flush()
        return interaction
