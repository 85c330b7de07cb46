#!/usr/bin/env python3
"""Upgrade the database schema to the latest Alembic revision.

Run before the API starts; a failure exits non-zero so the deploy stops
instead of serving against a stale schema.
"""

import sys

import logfire
from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory

from desk.config import Settings
from desk.util.observability import configure_logfire

ALEMBIC_INI = "alembic.ini"


def main() -> int:
    settings = Settings()
    configure_logfire(settings)

    config = Config(ALEMBIC_INI)
    head = ScriptDirectory.from_config(config).get_current_head()

    with logfire.span("run_migrations", target=head):
        try:
            command.upgrade(config, "head")
        except Exception as e:
            logfire.error(
                "Database migration failed",
                target=head,
                error_type=type(e).__name__,
                _exc_info=sys.exc_info(),
            )
            raise

    logfire.info("Database schema at head", revision=head)
    return 0


if __name__ == "__main__":
    sys.exit(main())
