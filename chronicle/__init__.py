"""
Chronicle — Rumble Royale History Rebuilder
============================================
Replays Discord chat export archives of the Rumble Royale bot and rebuilds
structured game history (games, rounds, narrated interactions, players and
items) in a relational store.  Re-running an import over the same archives
converges to the same database.

Package layout::

    chronicle/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Bot phrases, placeholder formats
    ├── errors.py          # Fatal error taxonomy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helper
    │   └── models.py      # All ORM models
    ├── exports/
    │   ├── schema.py      # pydantic models of the export JSON
    │   └── loader.py      # Archive discovery, ordering, decoding
    ├── engine/
    │   ├── text.py        # Markdown/emoji text helpers
    │   ├── extractors.py  # User + item mention extraction
    │   ├── parsing.py     # Era, host, prize, round line parsers
    │   ├── classifier.py  # Ordered embed classification rules
    │   └── state.py       # Per-channel replay cursor
    └── services/
        ├── identity_service.py     # Name → identity resolution + backfill
        ├── catalog_service.py      # Items + interaction message templates
        ├── interaction_service.py  # Round narrative persistence
        ├── game_service.py         # Per-channel game state machine
        ├── import_service.py       # Archive replay orchestration
        └── dump_service.py         # SQL text dump
"""

__version__ = "0.1.0"
