"""
chronicle.engine.extractors — Narrative Mention Extraction
===========================================================

Pulls user and item mentions out of round narrative and replaces each one
with a positional placeholder, so the remaining template text is identical
across every occurrence of the same phrasing::

    "**tokki\\_egg** butchered ~~**leerdix**~~ with a __Egg Launcher__."
        → "{{users[0]}} butchered {{users[1]}} with a {{item}}."

Markup conventions used by the bot:

* ``~~**name suffix**~~`` — a player who was killed in this line.
* ``**name suffix**``      — any other player mentioned.
* ``__Item Name__``        — an item.

The suffix is optional trailing text inside the bold span, e.g. the
" the Mummy" in ``**edsky the Mummy**``.

This module is pure text processing — resolving names to users and
persisting items is done by :mod:`chronicle.services.interaction_service`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from chronicle.constants import ITEM_PLACEHOLDER, user_placeholder
from chronicle.engine.text import unescape_markdown
from chronicle.errors import UnsupportedMultiItem

_USERNAME = r"([a-z0-9_\.\\]*[a-z0-9_\.])(\s+[^\*]+)?"

_USER_FORMATTED = re.compile(
    r"(?:~~\*\*" + _USERNAME + r"\*\*~~|\*\*" + _USERNAME + r"\*\*)"
)

_ITEM_FORMATTED = re.compile(r"__([^_]+)__")


@dataclass(frozen=True, slots=True)
class ParsedMention:
    """A user mention as written in the narrative (name not yet resolved)."""
    name: str
    killed: bool = False
    suffix: str = ""


def extract_user_mentions(text: str) -> tuple[str, list[ParsedMention]]:
    """Replace user mentions in *text* with ``{{users[i]}}`` tokens.

    Identical mentions (same name, suffix and killed flag) share one index.

    Returns
    -------
    (template, mentions)
        The rewritten text and the unique mentions in order of first use.
    """
    mentions: list[ParsedMention] = []

    def _replace(match: re.Match[str]) -> str:
        if match.group(1):
            mention = ParsedMention(
                name=unescape_markdown(match.group(1)),
                killed=True,
                suffix=match.group(2) or "",
            )
        else:
            mention = ParsedMention(
                name=unescape_markdown(match.group(3)),
                suffix=match.group(4) or "",
            )
        try:
            index = mentions.index(mention)
        except ValueError:
            index = len(mentions)
            mentions.append(mention)
        return user_placeholder(index)

    template = _USER_FORMATTED.sub(_replace, text)
    return template, mentions


def extract_item_mentions(text: str) -> tuple[str, list[str]]:
    """Replace the item mention in *text* with ``{{item}}``.

    Raises
    ------
    UnsupportedMultiItem
        If more than one ``__Item__`` span appears.
    """
    matches = _ITEM_FORMATTED.findall(text)
    if len(matches) > 1:
        raise UnsupportedMultiItem(text)
    if not matches:
        return text, []
    template = _ITEM_FORMATTED.sub(lambda _m: ITEM_PLACEHOLDER, text, count=1)
    return template, [unescape_markdown(matches[0])]
