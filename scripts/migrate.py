"""Apply Alembic migrations to the configured database."""

from __future__ import annotations

import argparse

from agintel.config import get_settings
from agintel.core.logging import setup_logging
from agintel.db.init import upgrade_database


def main() -> None:
    parser = argparse.ArgumentParser(description="Upgrade the warehouse schema")
    parser.add_argument("--revision", default="head")
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.log_level)
    upgrade_database(settings, args.revision)


if __name__ == "__main__":
    main()
