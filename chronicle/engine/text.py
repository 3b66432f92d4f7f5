"""
chronicle.engine.text — Bot Text Helpers
=========================================

Small, pure helpers for the Discord-flavoured markdown the bot writes.
"""

from __future__ import annotations

import unicodedata

# Order matters: the escaped backslash must be collapsed last.
_MARKDOWN_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\_", "_"),
    ("\\*", "*"),
    ("\\.", "."),
    ("\\\\", "\\"),
)

# Unicode general categories that Discord renders invisibly (controls,
# format characters such as zero-width joiners, unassigned code points,
# surrogates and private-use glyphs).
_NON_GRAPHIC_CATEGORIES = frozenset({"Cc", "Cf", "Cn", "Co", "Cs"})


def unescape_markdown(text: str) -> str:
    r"""Undo Discord's markdown escaping (``tokki\_egg`` → ``tokki_egg``)."""
    for escaped, plain in _MARKDOWN_ESCAPES:
        text = text.replace(escaped, plain)
    return text


def strip_non_graphic(text: str) -> str:
    """Drop invisible characters while keeping all whitespace."""
    return "".join(
        ch for ch in text
        if ch.isspace() or unicodedata.category(ch) not in _NON_GRAPHIC_CATEGORIES
    )
