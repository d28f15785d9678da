"""Weekly yield prediction sweep over every tracked state and crop."""

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
from agintel.services.seasons import current_season

from .common import build_deps, describe_error
from .results import YieldPredictionResult

logger = logging.getLogger(__name__)

DATASET_ID = "weekly_yield_predictions"

AUSTRALIAN_STATES = ("NSW", "VIC", "QLD", "SA", "WA", "TAS", "NT")
BIOENERGY_CROPS = (
    "wheat",
    "barley",
    "canola",
    "sorghum",
    "sugarcane",
    "cotton",
    "oats",
    "triticale",
)


async def weekly_yield_predictions(
    connector: Connector,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    now: datetime | None = None,
    settings: AppSettings | None = None,
) -> YieldPredictionResult:
    """Insert one fresh prediction per state and crop for the current season.

    Each combination gets a single attempt; failures are recorded and the
    sweep continues.
    """

    deps = build_deps(session_factory, settings)
    now = now or utcnow()
    season = current_season(now.date())
    valid_until = now + timedelta(days=deps.settings.prediction_validity_days)
    logger.info("Starting weekly yield predictions for season %s", season)
    started = time.perf_counter()

    with tracer.start_as_current_span("agintel.jobs.weekly_yield_predictions") as span:
        run_id = await deps.ledger.open_run(DATASET_ID, now=now)
        result = YieldPredictionResult(run_id=run_id)
        span.set_attribute("agintel.run_id", run_id)
        states: set[str] = set()
        crops: set[str] = set()

        try:
            for state in AUSTRALIAN_STATES:
                for crop in BIOENERGY_CROPS:
                    try:
                        estimate = await connector.predict_yield(state, crop, season)
                        await deps.store.insert_yield_prediction(
                            crop=crop,
                            state=state,
                            season=season,
                            estimate=estimate,
                            generated_at=now,
                            valid_until=valid_until,
                        )
                    except Exception as exc:
                        logger.warning("Prediction for %s/%s failed: %s", state, crop, exc)
                        result.errors.append(f"Failed prediction for {state}/{crop}: {describe_error(exc)}")
                        continue
                    result.predictions_generated += 1
                    states.add(state)
                    crops.add(crop)
        except Exception:
            logger.exception("Critical error in yield predictions")
            await deps.ledger.close_run_quietly(
                run_id, RunStatus.FAILED, result.predictions_generated, result.errors
            )
            raise

        result.states_processed = len(states)
        result.crops_processed = len(crops)
        result.status = resolve_status(result.errors, result.predictions_generated > 0)
        await deps.ledger.close_run(run_id, result.status, result.predictions_generated, result.errors)
        span.set_attribute("agintel.status", result.status.value)
        elapsed_ms = (time.perf_counter() - started) * 1000
        record_job_metrics(DATASET_ID, result.status, result.predictions_generated, elapsed_ms)

    logger.info(
        "Weekly predictions complete in %.0fms: %d predictions for %d states, %d crops",
        elapsed_ms,
        result.predictions_generated,
        result.states_processed,
        result.crops_processed,
    )
    return result


__all__ = ["AUSTRALIAN_STATES", "BIOENERGY_CROPS", "DATASET_ID", "weekly_yield_predictions"]
