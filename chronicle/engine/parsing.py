"""
chronicle.engine.parsing — Embed Field Parsers
===============================================

Pure functions that pull structured values out of Rumble Royale embeds.
Sample payloads are kept next to each parser for reference.

Numeric fields are only read once a message has already been classified
as carrying them, so a label that is present but unparseable raises
:class:`~chronicle.errors.FieldParseError` instead of being skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from chronicle.constants import EVENT_ROUND_SEPARATOR, HOSTED_BY
from chronicle.engine.text import strip_non_graphic, unescape_markdown
from chronicle.errors import FieldParseError

_ERA = re.compile(r"(?m)Era:\s+(?:<a?:[^:>\s]+:\d+>)?\s*([^\r\n]+?)\s*(?:$|\n)")
_PRIZE_LABEL = re.compile(r"\*\*Prize:\*\*")
_PRIZE = re.compile(r"\*\*Prize:\*\*\s*(\d[\d,]*)")
_XP_MULTIPLIER = re.compile(r"([\d\.]+)x\s+XP\s+multiplier")
_ROUND_NUMBER = re.compile(r"Round\s+(\d+)")
_INTERACTION_LINE = re.compile(r"(?m)^(<:.+:\d+>)\s+\|\s+([^\n]+?)\s*$")


# ---------------------------------------------------------------------------
# Countdown: "Rumble Royale hosted by astelzoom"
#   "Era: <:wol:696302964985298964>Classic \n\nClick the emoji below to join.
#    Starting in 2 minutes!"
# ---------------------------------------------------------------------------
def parse_era(description: str) -> str:
    """Return the era label, or ``""`` when the description has none."""
    match = _ERA.search(strip_non_graphic(description))
    return match.group(1) if match else ""


def parse_host(title: str) -> str | None:
    """Return the host's display name, or ``None`` for automatic sessions."""
    parts = strip_non_graphic(title).split(HOSTED_BY, 1)
    if len(parts) != 2:
        return None
    name = unescape_markdown(parts[1]).strip()
    return name or None


# ---------------------------------------------------------------------------
# Game start: "Started a new Rumble Royale session"
#   "**Number of participants:** 30\n**Era:** <:easter:1>Easter\n
#    **Prize:** 6000 <:gold:695955554199142421>\n ... **1.5x XP multiplier!**"
# ---------------------------------------------------------------------------
def parse_prize(description: str) -> int | None:
    """Return the ``**Prize:**`` amount, ``None`` when the label is absent."""
    clean = strip_non_graphic(description)
    label = _PRIZE_LABEL.search(clean)
    if label is None:
        return None
    match = _PRIZE.match(clean, label.start())
    if match is None:
        raise FieldParseError("prize", clean[label.end():].strip().split("\n", 1)[0])
    return int(match.group(1).replace(",", ""))


def parse_xp_multiplier(description: str) -> float | None:
    """Return the ``N.Nx XP multiplier`` factor, ``None`` when absent."""
    match = _XP_MULTIPLIER.search(strip_non_graphic(description))
    if match is None:
        return None
    raw = match.group(1)
    try:
        return float(raw)
    except ValueError as exc:
        raise FieldParseError("XP multiplier", raw) from exc


# ---------------------------------------------------------------------------
# Rounds: "__Round 1__"  /  event rounds: "__Round 1__ - STORM"
# ---------------------------------------------------------------------------
def parse_round_number(title: str) -> int | None:
    """Return the number announced in a round title, if any."""
    match = _ROUND_NUMBER.search(title)
    return int(match.group(1)) if match else None


def is_event_round(title: str) -> bool:
    return EVENT_ROUND_SEPARATOR in title


def parse_round_lines(description: str) -> list[str]:
    """Split a round narrative into its emoji-tagged action lines.

    ``"<:K:861698472154759199> | **toniiz\\.** passed over ~~**junki**~~."``
    yields ``"**toniiz\\.** passed over ~~**junki**~~."``.  Trailers such as
    ``"Players Left: 27"`` carry no emoji tag and are dropped.
    """
    return [m.group(2) for m in _INTERACTION_LINE.finditer(description)]


@dataclass(frozen=True, slots=True)
class EventRound:
    """An event round collapsed into one aggregate narrative."""
    event: str        # e.g. "STORM"
    summary: str      # first paragraph, e.g. "A storm is gathering in the arena!..."
    body: str         # full cleaned description (the affected players live here)


def parse_event_round(title: str, description: str) -> EventRound:
    """Split an event round into its event label, summary and body.

    ``"__Round 1__ - STORM"`` /
    ``"A storm is gathering...\\n\\nThe following players died:\\n<:S:1> | ~~**junki**~~"``
    """
    clean_title = strip_non_graphic(title)
    clean_desc = strip_non_graphic(description)
    event = clean_title.split(EVENT_ROUND_SEPARATOR, 1)[1].strip()
    summary = clean_desc.split("\n\n", 1)[0]
    return EventRound(event=event, summary=summary, body=clean_desc)
