"""
chronicle.config — YAML Configuration Loader
=============================================

Reads ``config.yaml`` for the import job's non-secret settings: where the
exports live, which channels to replay (in priority order) and which
Discord user is the Rumble Royale bot.  The database URL is a secret-ish
infrastructure setting and comes from ``.env`` instead
(see :mod:`chronicle.database.engine`).

Usage::

    from chronicle.config import load_config

    cfg = load_config()           # reads ./config.yaml by default
    print(cfg.channel_ids)        # ("1224017701744410695", "1224009923457847428")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ChronicleConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Discord
    channel_ids: tuple[str, ...]  # Replayed in this order
    bot_author_id: str            # Rumble Royale bot snowflake

    # Archives
    export_root: str = "discord-exports"

    # Logging
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> ChronicleConfig:
    """Read *path* and return a :class:`ChronicleConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return ChronicleConfig(
        channel_ids=tuple(str(c) for c in raw["channel_ids"]),
        bot_author_id=str(raw["bot_author_id"]),
        export_root=str(raw.get("export_root") or "discord-exports"),
        log_level=str(raw.get("log_level") or "INFO").upper(),
    )
