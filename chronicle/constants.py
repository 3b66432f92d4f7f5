"""
chronicle.constants — Shared Constants
=======================================

Single source of truth for the literal bot phrases the interpreter keys on
and for the placeholder tokens written into interaction templates.
Import from here instead of repeating string literals in the engine and
services.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Rumble Royale bot phrasing
# ---------------------------------------------------------------------------
HOSTED_BY = " hosted by "
AUTOMATIC_SESSION_FOOTER = "Automatic Session"
COUNTDOWN_TICK_PREFIX = "Starting in "
GAME_START_PREFIX = "Started a new "
CANCELLED_TITLE = "Rumble Royale session cancelled"
WINNER_MARKER = "WINNER!"
ROUND_TITLE_PREFIX = "__Round "
EVENT_ROUND_SEPARATOR = " - "

# Author-name suffixes on replies to user-specific commands.  The text before
# the apostrophe is the invoking user's display name at that time.
NAME_HINT_MARKERS: tuple[str, ...] = (
    "'s balance",
    "'s backpacks",
    "'s Classic Era Items and Skins",
)

# Field names on the multi-embed winner announcement.  Recognized, not persisted.
SUMMARY_FIELD_NAMES: tuple[str, ...] = (
    "Runners-up",
    "Most Kills",
    "Most Revives",
)

# ---------------------------------------------------------------------------
# Interaction template placeholders
# ---------------------------------------------------------------------------
USER_PLACEHOLDER = "{{{{users[{index}]}}}}"
ITEM_PLACEHOLDER = "{{item}}"


def user_placeholder(index: int) -> str:
    """Return the template token for the *index*-th unique mention."""
    return USER_PLACEHOLDER.format(index=index)
