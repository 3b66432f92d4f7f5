"""
chronicle.exports.schema — DiscordChatExporter JSON Records
============================================================

Typed, explicitly optional records for the parts of a DiscordChatExporter
archive the interpreter reads.  Each message is decoded exactly once into
these models; everything the exporter writes that we don't use is ignored.

Embed text fields are always strings (``""`` when absent) so the
classifier can test them without ``None`` guards.  Timestamps are
normalized to naive UTC to match :mod:`chronicle.database.models`.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ExportModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class ExportUser(_ExportModel):
    """A Discord account reference (author, mention, reactor, invoker)."""

    id: str = ""
    name: str = ""
    nickname: str | None = None
    is_bot: bool = Field(default=False, alias="isBot")


class ExportInteraction(_ExportModel):
    """The slash-command invocation a bot message responds to."""

    id: str = ""
    name: str = ""
    user: ExportUser


class ExportReaction(_ExportModel):
    count: int = 0
    users: list[ExportUser] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Embeds
# ---------------------------------------------------------------------------
class EmbedAuthor(_ExportModel):
    name: str = ""


class EmbedFooter(_ExportModel):
    text: str = ""


class EmbedField(_ExportModel):
    name: str = ""
    value: str = ""


class Embed(_ExportModel):
    """Rich bot content.  Every part may be missing in the export."""

    title: str = ""
    description: str = ""
    author: EmbedAuthor | None = None
    footer: EmbedFooter | None = None
    fields: list[EmbedField] = Field(default_factory=list)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    @property
    def author_name(self) -> str:
        return self.author.name if self.author else ""

    @property
    def footer_text(self) -> str:
        return self.footer.text if self.footer else ""


# ---------------------------------------------------------------------------
# Messages & archives
# ---------------------------------------------------------------------------
class ExportMessage(_ExportModel):
    id: str
    timestamp: datetime
    content: str = ""
    author: ExportUser
    interaction: ExportInteraction | None = None
    mentions: list[ExportUser] = Field(default_factory=list)
    reactions: list[ExportReaction] = Field(default_factory=list)
    embeds: list[Embed] = Field(default_factory=list)

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)

    @field_validator("content", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value


class ExportChannel(_ExportModel):
    id: str
    name: str = ""


class Export(_ExportModel):
    """One archive file: a channel plus a chronologically ordered message list."""

    channel: ExportChannel
    messages: list[ExportMessage] = Field(default_factory=list)
