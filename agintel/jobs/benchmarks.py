"""Monthly refresh of farm financial benchmarks."""

from __future__ import annotations

import logging
import time
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agintel.config import AppSettings
from agintel.connectors.base import Connector
from agintel.core.telemetry import record_job_metrics, tracer
from agintel.core.timeutils import utcnow
from agintel.models import RunStatus
from agintel.services.ledger import resolve_status

from .common import build_deps, describe_error
from .results import FarmBenchmarkResult

logger = logging.getLogger(__name__)

DATASET_ID = "monthly_farm_benchmarks"


async def monthly_farm_benchmarks(
    connector: Connector,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> FarmBenchmarkResult:
    deps = build_deps(session_factory, settings)
    now = now or utcnow()
    logger.info("Starting monthly farm benchmark update")
    started = time.perf_counter()

    with tracer.start_as_current_span("agintel.jobs.monthly_farm_benchmarks") as span:
        run_id = await deps.ledger.open_run(DATASET_ID, now=now)
        result = FarmBenchmarkResult(run_id=run_id)
        span.set_attribute("agintel.run_id", run_id)
        states: set[str] = set()

        try:
            snapshot = await connector.get_intelligence()
        except Exception as exc:
            logger.exception("Intelligence fetch failed; benchmarks not refreshed")
            result.errors.append(f"Intelligence fetch failed: {describe_error(exc)}")
            result.status = RunStatus.FAILED
            await deps.ledger.close_run_quietly(run_id, RunStatus.FAILED, 0, result.errors)
            raise

        for benchmark in snapshot.farm_benchmarks:
            try:
                await deps.store.upsert_farm_benchmark(benchmark, now=now)
            except Exception as exc:
                result.errors.append(
                    f"Failed benchmark for {benchmark.farm_type}/{benchmark.state}: {describe_error(exc)}"
                )
                continue
            result.benchmarks_updated += 1
            states.add(benchmark.state)

        result.states_processed = len(states)
        result.status = resolve_status(result.errors, result.benchmarks_updated > 0)
        await deps.ledger.close_run(run_id, result.status, result.benchmarks_updated, result.errors)
        span.set_attribute("agintel.status", result.status.value)
        elapsed_ms = (time.perf_counter() - started) * 1000
        record_job_metrics(DATASET_ID, result.status, result.benchmarks_updated, elapsed_ms)

    logger.info(
        "Monthly benchmark update complete in %.0fms: %d benchmarks for %d states",
        elapsed_ms,
        result.benchmarks_updated,
        result.states_processed,
    )
    return result


__all__ = ["DATASET_ID", "monthly_farm_benchmarks"]
