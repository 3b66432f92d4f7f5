"""
chronicle.errors — Fatal Error Taxonomy
========================================

Every exception here aborts an import run.  Recoverable conditions (unknown
embed shapes, leftover rounds from before the observed history, names that
can't be resolved yet) are logged instead and never raised.
"""

from __future__ import annotations

from pathlib import Path


class ChronicleError(Exception):
    """Base class for all Chronicle failures."""


class ReadError(ChronicleError):
    """An export archive could not be opened or decoded."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read export {self.path}: {reason}")


class InvalidID(ChronicleError):
    """An identity key (user ID or display name) was empty."""


class UnsupportedMultiItem(ChronicleError):
    """A single narrative line mentioned more than one item."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(
            f"More than one item mention in a single line is not supported: {text!r}"
        )


class InconsistentState(ChronicleError):
    """A lifecycle announcement arrived while no game was in a compatible phase."""

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        super().__init__(f"Found {kind} data {detail}")


class FieldParseError(ChronicleError):
    """A labelled numeric field was present but unparseable."""

    def __init__(self, field: str, raw: str) -> None:
        self.field = field
        self.raw = raw
        super().__init__(f"Cannot parse {field} from {raw!r}")


class MessageProcessingError(ChronicleError):
    """Wraps a fatal error with the message (and export) it originated from."""

    def __init__(self, message_id: str, source: str | None = None) -> None:
        self.message_id = message_id
        self.source = source
        where = f" in export {source}" if source else ""
        super().__init__(f"Failure at message ID {message_id}{where}")
