"""Weekly 180-day supply forecasts for the tracked bioenergy regions."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agintel.config import AppSettings
from agintel.connectors.base import Connector
from agintel.core.telemetry import record_job_metrics, tracer
from agintel.core.timeutils import utcnow
from agintel.models import RunStatus
from agintel.services.ledger import resolve_status
from agintel.services.supply import (
    BIOENERGY_REGIONS,
    HORIZON_DAYS,
    average_confidence,
    build_supply_curve,
    calculate_risk_score,
    forecasts_for_state,
)

from .common import build_deps, describe_error
from .results import SupplyForecastResult

logger = logging.getLogger(__name__)

DATASET_ID = "weekly_supply_forecasts"


async def weekly_supply_forecasts(
    connector: Connector,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> SupplyForecastResult:
    deps = build_deps(session_factory, settings)
    now = now or utcnow()
    today = now.date()
    valid_until = now + timedelta(days=deps.settings.prediction_validity_days)
    logger.info("Starting weekly supply forecasts from %s", today.isoformat())
    started = time.perf_counter()

    with tracer.start_as_current_span("agintel.jobs.weekly_supply_forecasts") as span:
        run_id = await deps.ledger.open_run(DATASET_ID, now=now)
        result = SupplyForecastResult(run_id=run_id)
        span.set_attribute("agintel.run_id", run_id)
        regions: set[str] = set()

        try:
            for region in BIOENERGY_REGIONS:
                try:
                    snapshot = await connector.get_intelligence()
                    points = build_supply_curve(
                        forecasts_for_state(snapshot.crop_forecasts, region.state), today
                    )
                    await deps.store.insert_supply_forecast(
                        region=region.name,
                        state=region.state,
                        forecast_date=today,
                        horizon_days=HORIZON_DAYS,
                        points=[point.as_dict() for point in points],
                        risk_score=calculate_risk_score(points),
                        confidence_level=average_confidence(points),
                        generated_at=now,
                        valid_until=valid_until,
                    )
                except Exception as exc:
                    logger.warning("Supply forecast for %s failed: %s", region.name, exc)
                    result.errors.append(f"Failed forecast for {region.name}: {describe_error(exc)}")
                    continue
                result.forecasts_generated += 1
                regions.add(region.name)
        except Exception:
            logger.exception("Critical error in supply forecasts")
            await deps.ledger.close_run_quietly(
                run_id, RunStatus.FAILED, result.forecasts_generated, result.errors
            )
            raise

        result.regions_processed = len(regions)
        result.status = resolve_status(result.errors, result.forecasts_generated > 0)
        await deps.ledger.close_run(run_id, result.status, result.forecasts_generated, result.errors)
        span.set_attribute("agintel.status", result.status.value)
        elapsed_ms = (time.perf_counter() - started) * 1000
        record_job_metrics(DATASET_ID, result.status, result.forecasts_generated, elapsed_ms)

    logger.info(
        "Weekly supply forecasts complete in %.0fms: %d forecasts for %d regions",
        elapsed_ms,
        result.forecasts_generated,
        result.regions_processed,
    )
    return result


__all__ = ["DATASET_ID", "weekly_supply_forecasts"]
