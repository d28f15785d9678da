"""Database schema initialization helpers."""

from __future__ import annotations

import logging

from alembic import command
from alembic.config import Config
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from agintel.config import AppSettings, get_settings
from agintel.db.base import Base
from agintel.db.session import get_engine

# Import models so that SQLAlchemy is aware of all tables before create_all runs.
import agintel.models  # noqa: F401  # pylint: disable=unused-import

logger = logging.getLogger(__name__)


async def init_database(engine: AsyncEngine | None = None) -> None:
    """Create any missing pipeline tables directly from the models.

    Used for throwaway databases; managed deployments go through
    ``upgrade_database``.
    """

    target = engine or get_engine()
    try:
        async with target.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError:
        logger.exception("Failed to initialise database schema")
        raise


def upgrade_database(settings: AppSettings | None = None, revision: str = "head") -> None:
    """Apply Alembic migrations. Must not be called from a running event loop."""

    settings = settings or get_settings()
    config = Config(settings.alembic_ini_path)
    config.attributes["database_url"] = settings.database_url
    logger.info("Upgrading database schema to %s", revision)
    command.upgrade(config, revision)


__all__ = ["init_database", "upgrade_database"]
