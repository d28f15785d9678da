"""Ingestion run ledger.

Every job invocation opens one run in ``running`` state and closes it exactly
once with a terminal status. A run that stays ``running`` means the process
died mid-job; it is reported to operators, never repaired here.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agintel.config.settings import DEFAULT_DATA_SOURCE
from agintel.core.timeutils import utcnow
from agintel.ingest.store import StorageUnavailable, storage_session
from agintel.models import IngestionRun, RunStatus

logger = logging.getLogger(__name__)

ERROR_SEPARATOR = "; "


class LedgerStateError(RuntimeError):
    """Raised when a run is closed twice or does not exist."""


def resolve_status(errors: Sequence[str], succeeded_any: bool) -> RunStatus:
    """Map a job outcome onto a terminal status."""

    if not errors:
        return RunStatus.SUCCEEDED
    if succeeded_any:
        return RunStatus.PARTIAL
    return RunStatus.FAILED


def summarise_errors(errors: Sequence[str]) -> str | None:
    return ERROR_SEPARATOR.join(errors) if errors else None


class IngestionLedger:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        data_source: str = DEFAULT_DATA_SOURCE,
    ) -> None:
        self._session_factory = session_factory
        self._data_source = data_source

    async def open_run(self, dataset_id: str, *, now: datetime | None = None) -> int:
        """Record the start of a job and return the run id.

        Raises ``StorageUnavailable`` when the database cannot be reached;
        without a ledger row the job must not run.
        """

        run = IngestionRun(
            data_source=self._data_source,
            dataset_id=dataset_id,
            start_time=now or utcnow(),
            status=RunStatus.RUNNING.value,
            records_processed=0,
        )
        async with storage_session(self._session_factory) as session:
            session.add(run)
            await session.commit()
        logger.info("Opened ingestion run %s for %s", run.id, dataset_id)
        return run.id

    async def close_run(
        self,
        run_id: int,
        status: RunStatus,
        records_processed: int,
        errors: Sequence[str] = (),
        *,
        now: datetime | None = None,
    ) -> None:
        """Close an open run exactly once.

        Raises ``LedgerStateError`` for unknown or already closed runs and
        ``StorageUnavailable`` when the database cannot be reached.
        """

        if status is RunStatus.RUNNING:
            raise LedgerStateError("A run can only be closed with a terminal status")

        stmt = (
            update(IngestionRun)
            .where(IngestionRun.id == run_id, IngestionRun.status == RunStatus.RUNNING.value)
            .values(
                end_time=now or utcnow(),
                status=status.value,
                records_processed=records_processed,
                error_message=summarise_errors(errors),
            )
        )
        async with storage_session(self._session_factory) as session:
            result = await session.execute(stmt)
            await session.commit()
        if result.rowcount != 1:
            raise LedgerStateError(f"Ingestion run {run_id} is not open")
        logger.info(
            "Closed ingestion run %s as %s (%d records, %d errors)",
            run_id,
            status.value,
            records_processed,
            len(errors),
        )

    async def close_run_quietly(
        self,
        run_id: int,
        status: RunStatus,
        records_processed: int,
        errors: Sequence[str] = (),
        *,
        now: datetime | None = None,
    ) -> None:
        """Close a run on a failure path without masking the original error."""

        try:
            await self.close_run(run_id, status, records_processed, errors, now=now)
        except (SQLAlchemyError, StorageUnavailable, LedgerStateError, OSError):
            logger.exception("Could not record %s status for ingestion run %s", status.value, run_id)


__all__ = [
    "ERROR_SEPARATOR",
    "IngestionLedger",
    "LedgerStateError",
    "resolve_status",
    "summarise_errors",
]
