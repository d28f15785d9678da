"""Run one or all intelligence jobs against a captured snapshot file."""

from __future__ import annotations

import argparse
import asyncio
import logging

from agintel.config import AppSettings, get_settings
from agintel.connectors import SnapshotConnector
from agintel.core.logging import setup_logging
from agintel.core.telemetry import setup_telemetry, shutdown_telemetry
from agintel.db.init import init_database
from agintel.db.session import get_engine, get_session_factory
from agintel.jobs import (
    daily_ingestion,
    monthly_farm_benchmarks,
    run_all_jobs,
    weekly_supply_forecasts,
    weekly_yield_predictions,
)

logger = logging.getLogger("agintel.scripts.run_jobs")

JOBS = {
    "daily": daily_ingestion,
    "yield": weekly_yield_predictions,
    "supply": weekly_supply_forecasts,
    "benchmarks": monthly_farm_benchmarks,
    "all": run_all_jobs,
}


async def _run(job: str, snapshot_path: str, settings: AppSettings) -> None:
    engine = get_engine()
    await init_database(engine)

    connector = SnapshotConnector.from_json(snapshot_path)
    try:
        result = await JOBS[job](connector, get_session_factory(), settings=settings)
    finally:
        await engine.dispose()
    print(result)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run agricultural intelligence jobs")
    parser.add_argument("--job", choices=sorted(JOBS), default="all")
    parser.add_argument("--snapshot", help="Path to a JSON intelligence snapshot")
    args = parser.parse_args()

    settings = get_settings()
    snapshot_path = args.snapshot or settings.connector_snapshot_path
    if not snapshot_path:
        parser.error("--snapshot is required when CONNECTOR_SNAPSHOT_PATH is not set")

    # Instrument first so trace ids exist before the formatter asks for them.
    setup_telemetry(settings, get_engine())
    setup_logging(settings.log_level, with_trace_ids=settings.telemetry_enabled)
    logger.info("Settings: %s", settings.dict_for_logging())

    try:
        asyncio.run(_run(args.job, snapshot_path, settings))
    finally:
        shutdown_telemetry()


if __name__ == "__main__":
    main()
