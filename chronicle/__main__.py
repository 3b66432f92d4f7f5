"""
chronicle.__main__ — Entry point for ``python -m chronicle``
=============================================================

Subcommands:

* ``import`` — replay every configured channel archive into the database.
* ``dump``   — print the database as SQLite SQL (with a provenance header).
* ``reset``  — drop and recreate every table.

Wiring:
1. Load .env (DATABASE_URL).
2. Load config.yaml (channels, bot ID, log level).
3. Create the SQLAlchemy engine.
4. Run the subcommand.

Run with::

    uv run python -m chronicle import --config config.yaml
    uv run python -m chronicle dump > stats.sql
"""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from chronicle.config import load_config
from chronicle.database.engine import create_db_engine, reset_db
from chronicle.errors import ChronicleError
from chronicle.services.dump_service import write_dump
from chronicle.services.import_service import run_import

logger = logging.getLogger("chronicle")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chronicle",
        description="Rebuild Rumble Royale game history from Discord chat exports.",
    )
    parser.add_argument(
        "--config", default="config.yaml", help="path to the YAML configuration file"
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("import", help="replay channel exports into the database")
    sub.add_parser("dump", help="write the database as SQL to stdout")
    sub.add_parser("reset", help="drop and recreate all tables")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and run the requested subcommand."""
    args = _build_parser().parse_args(argv)

    # 1. Environment variables.
    load_dotenv()

    # 2. Soft configuration.
    cfg = load_config(args.config)
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    )

    # 3. Database.
    engine = create_db_engine()

    # 4. Command.
    try:
        if args.command == "import":
            run_import(engine, cfg)
        elif args.command == "dump":
            write_dump(engine, sys.stdout)
        elif args.command == "reset":
            reset_db(engine)
    except (ChronicleError, ValueError) as exc:
        logger.critical("%s", exc)
        if exc.__cause__ is not None:
            logger.critical("Caused by: %s", exc.__cause__)
        sys.exit(1)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
