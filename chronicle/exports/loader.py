"""
chronicle.exports.loader — Archive Discovery & Ordering
========================================================

Exports are produced in overlapping batches, one directory per channel.
To replay messages in true causal order across file boundaries, every file
is ordered by the timestamp of its first message (ties broken by path so
runs are deterministic).

Only that first timestamp is read while ordering — the file is scanned in
small chunks until the value turns up, without decoding message bodies.
Full decoding happens lazily, one file at a time, in :func:`iter_exports`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from chronicle.errors import ReadError
from chronicle.exports.schema import Export

logger = logging.getLogger(__name__)

_PEEK_CHUNK_SIZE = 64 * 1024

_MESSAGES_KEY = re.compile(r'"messages"\s*:\s*\[')
_EMPTY_MESSAGES = re.compile(r'"messages"\s*:\s*\[\s*\]')
_FIRST_TIMESTAMP = re.compile(r'"timestamp"\s*:\s*"([^"]+)"')


@dataclass(frozen=True, slots=True)
class ExportFile:
    """An archive on disk together with its first message timestamp."""
    path: Path
    first_message_time: datetime


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------
def discover_exports(root: str | Path, channel_id: str) -> list[Path]:
    """Return every ``*.json`` file (any case) under ``root/channel_id``."""
    channel_dir = Path(root) / channel_id
    if not channel_dir.is_dir():
        raise ReadError(channel_dir, "channel export directory does not exist")
    return [
        p for p in channel_dir.rglob("*")
        if p.is_file() and p.suffix.lower() == ".json"
    ]


# ---------------------------------------------------------------------------
# Header peek
# ---------------------------------------------------------------------------
def _parse_timestamp(path: Path, raw: str) -> datetime:
    try:
        value = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ReadError(path, f"invalid first message timestamp {raw!r}") from exc
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


def peek_first_timestamp(path: str | Path) -> datetime:
    """Read just enough of *path* to find the first message's timestamp.

    Raises
    ------
    ReadError
        If the file can't be opened, contains no messages, or the
        timestamp can't be decoded.
    """
    path = Path(path)
    buffer = ""
    try:
        with open(path, encoding="utf-8") as fh:
            while True:
                chunk = fh.read(_PEEK_CHUNK_SIZE)
                buffer += chunk
                messages = _MESSAGES_KEY.search(buffer)
                if messages is not None:
                    if _EMPTY_MESSAGES.match(buffer, messages.start()):
                        raise ReadError(path, "export contains no messages")
                    match = _FIRST_TIMESTAMP.search(buffer, messages.end())
                    if match is not None:
                        return _parse_timestamp(path, match.group(1))
                if not chunk:
                    break
    except OSError as exc:
        raise ReadError(path, str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise ReadError(path, f"not UTF-8: {exc}") from exc

    raise ReadError(path, "no message timestamp found")


def order_exports(paths: Iterable[Path]) -> list[ExportFile]:
    """Peek each file and sort ascending by first timestamp, then path."""
    files = [ExportFile(path=p, first_message_time=peek_first_timestamp(p)) for p in paths]
    files.sort(key=lambda f: (f.first_message_time, str(f.path)))
    return files


# ---------------------------------------------------------------------------
# Full decode
# ---------------------------------------------------------------------------
def load_export(path: str | Path) -> Export:
    """Decode a whole archive into :class:`Export` records."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadError(path, str(exc)) from exc
    try:
        return Export.model_validate_json(raw)
    except ValidationError as exc:
        raise ReadError(path, f"failed to parse message export: {exc}") from exc


def iter_exports(root: str | Path, channel_ids: Iterable[str]) -> Iterator[tuple[ExportFile, Export]]:
    """Yield ``(file, export)`` for *channel_ids*, ordered across all of them.

    Files from every listed channel share one timeline, so pass a single
    channel to replay channels one after another.
    """
    paths: list[Path] = []
    for channel_id in channel_ids:
        found = discover_exports(root, channel_id)
        logger.info("Found %d export file(s) for channel %s", len(found), channel_id)
        paths.extend(found)

    for export_file in order_exports(paths):
        logger.info(
            "Loading %s (first message %s)",
            export_file.path, export_file.first_message_time.isoformat(),
        )
        yield export_file, load_export(export_file.path)
