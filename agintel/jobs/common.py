"""Shared wiring for job entry points."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agintel.config import AppSettings, get_settings
from agintel.db.session import get_session_factory
from agintel.ingest.store import ReconciliationStore
from agintel.services.ledger import IngestionLedger


def describe_error(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


@dataclass
class JobDeps:
    settings: AppSettings
    store: ReconciliationStore
    ledger: IngestionLedger


def build_deps(
    session_factory: async_sessionmaker[AsyncSession] | None,
    settings: AppSettings | None,
) -> JobDeps:
    settings = settings or get_settings()
    factory = session_factory or get_session_factory()
    return JobDeps(
        settings=settings,
        store=ReconciliationStore(factory),
        ledger=IngestionLedger(factory, data_source=settings.data_source),
    )


__all__ = ["JobDeps", "build_deps", "describe_error"]
