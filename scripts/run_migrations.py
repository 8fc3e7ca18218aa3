#!/usr/bin/env python3
"""
Database migration helper script.
Wraps the Alembic commands used to manage the outreach sequencer schema.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root))

from alembic.config import Config
from alembic import command


USAGE = """Outreach Sequencer migration helper

Usage:
  python scripts/run_migrations.py upgrade [rev]     - Upgrade (default: head)
  python scripts/run_migrations.py downgrade [rev]   - Downgrade (default: one step)
  python scripts/run_migrations.py current           - Show current revision
  python scripts/run_migrations.py history           - Show migration history
  python scripts/run_migrations.py stamp [rev]       - Mark the database as at a revision
  python scripts/run_migrations.py create <msg>      - Autogenerate a new migration
  python scripts/run_migrations.py init-db           - Create tables directly from the models"""


def get_alembic_config() -> Config:
    """Alembic config rooted at the project directory."""
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    return alembic_cfg


def upgrade(revision: str = "head"):
    print(f"Upgrading database to revision: {revision}")
    command.upgrade(get_alembic_config(), revision)
    print("Database upgraded")


def downgrade(revision: str = "-1"):
    print(f"Downgrading database to revision: {revision}")
    command.downgrade(get_alembic_config(), revision)
    print("Database downgraded")


def stamp(revision: str = "head"):
    """
    Record a revision without running migrations.

    Used after init-db so later migrations apply on top of the
    model-created schema.
    """
    print(f"Stamping database at revision: {revision}")
    command.stamp(get_alembic_config(), revision)


def init_db():
    """Create all tables from the SQLAlchemy models, then stamp head."""
    from database.utils import init_db as create_all

    create_all()
    stamp("head")
    print("Tables created")


def create(message: str):
    print(f"Creating new migration: {message}")
    command.revision(get_alembic_config(), message=message, autogenerate=True)


def main():
    """Main CLI entrypoint."""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    cmd = sys.argv[1].lower()
    arg = sys.argv[2] if len(sys.argv) > 2 else None

    try:
        if cmd == "upgrade":
            upgrade(arg or "head")
        elif cmd == "downgrade":
            downgrade(arg or "-1")
        elif cmd == "current":
            command.current(get_alembic_config())
        elif cmd == "history":
            command.history(get_alembic_config())
        elif cmd == "stamp":
            stamp(arg or "head")
        elif cmd == "init-db":
            init_db()
        elif cmd == "create":
            if arg is None:
                print("Error: Migration message required")
                sys.exit(1)
            create(" ".join(sys.argv[2:]))
        else:
            print(f"Unknown command: {cmd}\n")
            print(USAGE)
            sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
