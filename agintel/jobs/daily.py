"""Daily ingestion of connector signals and the full intelligence snapshot.

Signals and the snapshot overlap; both paths reconcile through the same
natural-key upserts, so the overlap never creates duplicates.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agintel.config import AppSettings
from agintel.connectors.base import Connector
from agintel.connectors.schemas import IntelligenceSnapshot
from agintel.connectors.signals import CommodityPriceSignal, CropForecastSignal, parse_signal
from agintel.core.telemetry import record_job_metrics, tracer
from agintel.core.timeutils import utcnow
from agintel.ingest.store import ReconciliationStore
from agintel.models import RunStatus
from agintel.services.ledger import resolve_status
from agintel.services.seasons import current_season

from .common import build_deps, describe_error
from .results import DailyIngestionResult

logger = logging.getLogger(__name__)

DATASET_ID = "daily_comprehensive"


async def _ingest_signals(
    connector: Connector,
    store: ReconciliationStore,
    result: DailyIngestionResult,
    *,
    since: datetime,
    now: datetime,
) -> Exception | None:
    try:
        batch = await connector.fetch_signals(since)
    except Exception as exc:
        logger.warning("Signal fetch failed: %s", exc)
        result.errors.append(f"Connector fetch failed: {describe_error(exc)}")
        return exc

    result.signals_discovered = (
        batch.signals_discovered if batch.signals_discovered is not None else len(batch.signals)
    )
    if not batch.success:
        result.errors.extend(batch.errors)

    default_season = current_season(now.date())
    for raw in batch.signals:
        try:
            signal = parse_signal(raw)
            if isinstance(signal, CropForecastSignal):
                await store.upsert_crop_forecast(signal.to_record(default_season), now=now)
                result.crop_forecasts += 1
            elif isinstance(signal, CommodityPriceSignal):
                await store.upsert_commodity_price(signal.to_record(), now=now)
                result.commodity_prices += 1
        except Exception as exc:
            logger.warning("Failed to process signal %s: %s", raw.id, exc)
            result.errors.append(f"Failed to process signal {raw.id}: {describe_error(exc)}")
    return None


async def _reconcile_snapshot(
    snapshot: IntelligenceSnapshot,
    store: ReconciliationStore,
    result: DailyIngestionResult,
    *,
    now: datetime,
) -> None:
    for forecast in snapshot.crop_forecasts:
        try:
            await store.upsert_crop_forecast(forecast, now=now)
            result.crop_forecasts += 1
        except Exception as exc:
            result.errors.append(
                f"Failed to store forecast for {forecast.crop}/{forecast.state}: {describe_error(exc)}"
            )

    for price in snapshot.commodity_prices:
        try:
            await store.upsert_commodity_price(price, now=now)
            result.commodity_prices += 1
        except Exception as exc:
            result.errors.append(f"Failed to store price for {price.commodity}: {describe_error(exc)}")

    for benchmark in snapshot.farm_benchmarks:
        try:
            await store.upsert_farm_benchmark(benchmark, now=now)
            result.farm_benchmarks += 1
        except Exception as exc:
            result.errors.append(
                f"Failed to store benchmark for {benchmark.farm_type}/{benchmark.state}: "
                f"{describe_error(exc)}"
            )


async def _ingest_intelligence(
    connector: Connector,
    store: ReconciliationStore,
    result: DailyIngestionResult,
    *,
    now: datetime,
) -> Exception | None:
    try:
        snapshot = await connector.get_intelligence()
    except Exception as exc:
        logger.warning("Intelligence fetch failed: %s", exc)
        result.errors.append(f"Intelligence fetch failed: {describe_error(exc)}")
        return exc
    await _reconcile_snapshot(snapshot, store, result, now=now)
    return None


async def daily_ingestion(
    connector: Connector,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> DailyIngestionResult:
    """Pull the last week of signals plus the current snapshot and reconcile both.

    Returns normally for partial failures. When neither the signal feed nor
    the snapshot could be fetched the run is recorded as ``failed`` and the
    snapshot fetch error is re-raised.
    """

    deps = build_deps(session_factory, settings)
    now = now or utcnow()
    since = now - timedelta(days=deps.settings.signal_lookback_days)
    logger.info("Starting daily intelligence ingestion (signals since %s)", since.isoformat())
    started = time.perf_counter()

    with tracer.start_as_current_span("agintel.jobs.daily_ingestion") as span:
        run_id = await deps.ledger.open_run(DATASET_ID, now=now)
        result = DailyIngestionResult(run_id=run_id)
        span.set_attribute("agintel.run_id", run_id)

        try:
            signals_error = await _ingest_signals(connector, deps.store, result, since=since, now=now)
            intelligence_error = await _ingest_intelligence(connector, deps.store, result, now=now)
        except Exception:
            logger.exception("Critical error in daily ingestion")
            await deps.ledger.close_run_quietly(
                run_id, RunStatus.FAILED, result.records_processed, result.errors
            )
            raise

        fetched_any = signals_error is None or intelligence_error is None
        result.status = resolve_status(result.errors, fetched_any)
        if fetched_any:
            await deps.ledger.close_run(run_id, result.status, result.records_processed, result.errors)
        else:
            await deps.ledger.close_run_quietly(
                run_id, result.status, result.records_processed, result.errors
            )

        span.set_attribute("agintel.status", result.status.value)
        elapsed_ms = (time.perf_counter() - started) * 1000
        record_job_metrics(DATASET_ID, result.status, result.records_processed, elapsed_ms)

    if not fetched_any:
        logger.error("Daily ingestion failed after %.0fms: no source could be fetched", elapsed_ms)
        raise intelligence_error

    logger.info(
        "Daily ingestion complete in %.0fms: %d forecasts, %d prices, %d benchmarks, %d errors",
        elapsed_ms,
        result.crop_forecasts,
        result.commodity_prices,
        result.farm_benchmarks,
        len(result.errors),
    )
    return result


__all__ = ["DATASET_ID", "daily_ingestion"]
