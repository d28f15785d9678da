"""Run every job back to back, for manual triggers and smoke tests."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agintel.config import AppSettings
from agintel.connectors.base import Connector

from .benchmarks import monthly_farm_benchmarks
from .daily import daily_ingestion
from .results import AllJobsResult
from .supply_forecasts import weekly_supply_forecasts
from .yield_predictions import weekly_yield_predictions

logger = logging.getLogger(__name__)


async def run_all_jobs(
    connector: Connector,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> AllJobsResult:
    logger.info("Running all intelligence jobs")
    kwargs = {"now": now, "settings": settings}
    result = AllJobsResult(
        daily_ingestion=await daily_ingestion(connector, session_factory, **kwargs),
        yield_predictions=await weekly_yield_predictions(connector, session_factory, **kwargs),
        supply_forecasts=await weekly_supply_forecasts(connector, session_factory, **kwargs),
        farm_benchmarks=await monthly_farm_benchmarks(connector, session_factory, **kwargs),
    )
    logger.info("All intelligence jobs complete: %s", result)
    return result


__all__ = ["run_all_jobs"]
