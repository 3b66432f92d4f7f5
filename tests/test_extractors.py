"""
tests/test_extractors.py — Narrative Mention Extraction
========================================================
"""

from __future__ import annotations

import pytest

from chronicle.engine.extractors import (
    ParsedMention,
    extract_item_mentions,
    extract_user_mentions,
)
from chronicle.engine.text import strip_non_graphic, unescape_markdown
from chronicle.errors import UnsupportedMultiItem


class TestUnescape:
    def test_markdown_escapes_removed(self):
        assert unescape_markdown(r"tokki\_egg") == "tokki_egg"
        assert unescape_markdown(r"toniiz\.") == "toniiz."
        assert unescape_markdown(r"a\*b") == "a*b"

    def test_double_backslash_collapses(self):
        assert unescape_markdown("a\\\\b") == "a\\b"

    def test_strip_non_graphic_keeps_whitespace(self):
        assert strip_non_graphic("Era:\u200b Classic\n") == "Era: Classic\n"


class TestUserMentions:
    def test_plain_and_killed_mentions(self):
        template, mentions = extract_user_mentions(
            r"**toniiz\.** passed over ~~**junki**~~. Then came back and shot them."
        )
        assert template == "{{users[0]}} passed over {{users[1]}}. Then came back and shot them."
        assert mentions == [
            ParsedMention(name="toniiz."),
            ParsedMention(name="junki", killed=True),
        ]

    def test_same_killed_name_twice_shares_index(self):
        template, mentions = extract_user_mentions(
            "**a** hit ~~**bob**~~ and then ~~**bob**~~ again"
        )
        assert template == "{{users[0]}} hit {{users[1]}} and then {{users[1]}} again"
        assert len(mentions) == 2
        assert mentions[1] == ParsedMention(name="bob", killed=True)

    def test_killed_and_alive_same_name_are_distinct(self):
        _, mentions = extract_user_mentions("**bob** revived ~~**bob**~~")
        assert mentions == [ParsedMention("bob"), ParsedMention("bob", killed=True)]

    def test_suffix_captured(self):
        template, mentions = extract_user_mentions("**edsky the Mummy** wandered off")
        assert template == "{{users[0]}} wandered off"
        assert mentions == [ParsedMention(name="edsky", suffix=" the Mummy")]

    def test_no_mentions(self):
        template, mentions = extract_user_mentions("Nothing happened.")
        assert template == "Nothing happened."
        assert mentions == []


class TestItemMentions:
    def test_single_item(self):
        template, items = extract_item_mentions("{{users[0]}} picked the __Egg Launcher__.")
        assert template == "{{users[0]}} picked the {{item}}."
        assert items == ["Egg Launcher"]

    def test_no_item(self):
        assert extract_item_mentions("plain") == ("plain", [])

    def test_two_items_rejected(self):
        with pytest.raises(UnsupportedMultiItem):
            extract_item_mentions("traded __Sword__ for __Shield__")

    def test_users_extracted_before_items(self):
        template, _ = extract_user_mentions(r"**tokki\_egg** found a __Easter Cauldron__")
        template, items = extract_item_mentions(template)
        assert template == "{{users[0]}} found a {{item}}"
        assert items == ["Easter Cauldron"]
