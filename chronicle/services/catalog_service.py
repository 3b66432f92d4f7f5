"""
chronicle.services.catalog_service — Deduplicated Lookup Tables
================================================================

Get-or-create helpers for the two catalogues every interaction points into:
items (keyed by name) and narrative templates (keyed by text + event).
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from chronicle.database.models import InteractionMessage, Item


def get_or_create_item(session: Session, name: str) -> Item:
    """Fetch or insert the :class:`Item` called *name*."""
    item = session.get(Item, name)
    if item is None:
        item = Item(name=name)
        session.add(item)
        session.flush()
    return item


def get_or_create_interaction_message(
    session: Session, text: str, event: str = ""
) -> InteractionMessage:
    """Fetch or insert the narrative template *text* for *event*."""
    message = session.scalar(
        select(InteractionMessage)
        .where(InteractionMessage.text == text, InteractionMessage.event == event)
        .limit(1)
    )
    if message is None:
        message = InteractionMessage(text=text, event=event)
        session.add(message)
        session.flush()
    return message
