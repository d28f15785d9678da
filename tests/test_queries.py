from datetime import date, datetime, timedelta, timezone

import pytest

from agintel.connectors import CommodityPriceRecord, YieldEstimate
from agintel.ingest import ReconciliationStore
from agintel.models import RunStatus
from agintel.services.ledger import IngestionLedger
from agintel.services.queries import (
    current_yield_predictions,
    latest_supply_forecast,
    price_history,
    recent_runs,
    stuck_runs,
)

from conftest import NOW


async def _predict(store, *, generated_at, predicted_yield, crop="wheat"):
    await store.insert_yield_prediction(
        crop=crop,
        state="NSW",
        season="2024-2025",
        estimate=YieldEstimate(
            predicted_yield=predicted_yield,
            confidence_interval=(predicted_yield - 0.1, predicted_yield + 0.1),
            methodology="test",
        ),
        generated_at=generated_at,
        valid_until=generated_at + timedelta(days=7),
    )


@pytest.mark.asyncio
async def test_current_predictions_pick_latest_unexpired(session_factory):
    store = ReconciliationStore(session_factory)
    await _predict(store, generated_at=NOW - timedelta(days=14), predicted_yield=1.0)
    await _predict(store, generated_at=NOW - timedelta(days=2), predicted_yield=2.0)
    await _predict(store, generated_at=NOW - timedelta(days=1), predicted_yield=2.5)
    await _predict(store, generated_at=NOW - timedelta(days=1), predicted_yield=1.5, crop="barley")

    async with session_factory() as session:
        rows = await current_yield_predictions(session, now=NOW)
        wheat_only = await current_yield_predictions(session, now=NOW, crop="wheat")

    assert sorted((r.crop, float(r.predicted_yield)) for r in rows) == [("barley", 1.5), ("wheat", 2.5)]
    assert len(wheat_only) == 1


@pytest.mark.asyncio
async def test_latest_supply_forecast(session_factory):
    store = ReconciliationStore(session_factory)
    for offset, risk in ((7, 30), (1, 12)):
        generated = NOW - timedelta(days=offset)
        await store.insert_supply_forecast(
            region="Riverina",
            state="NSW",
            forecast_date=generated.date(),
            horizon_days=180,
            points=[],
            risk_score=risk,
            confidence_level=0.75,
            generated_at=generated,
            valid_until=generated + timedelta(days=7),
        )

    async with session_factory() as session:
        latest = await latest_supply_forecast(session, "Riverina", now=NOW)
        missing = await latest_supply_forecast(session, "Mallee", now=NOW)

    assert latest.risk_score == 12
    assert missing is None


@pytest.mark.asyncio
async def test_price_history_window_and_bounds(session_factory):
    store = ReconciliationStore(session_factory)
    for days_ago in (1, 20, 45):
        observed = datetime(2025, 1, 6, tzinfo=timezone.utc) - timedelta(days=days_ago)
        await store.upsert_commodity_price(
            CommodityPriceRecord(commodity="wheat", price=300 + days_ago, price_date=observed), now=NOW
        )

    async with session_factory() as session:
        rows = await price_history(session, "wheat", today=date(2025, 1, 6), months=1)
        with pytest.raises(ValueError):
            await price_history(session, "wheat", today=date(2025, 1, 6), months=121)

    assert [r.price_date for r in rows] == [date(2025, 1, 5), date(2024, 12, 17)]


@pytest.mark.asyncio
async def test_recent_and_stuck_runs(session_factory):
    ledger = IngestionLedger(session_factory)
    crashed = await ledger.open_run("daily_comprehensive", now=NOW - timedelta(hours=12))
    finished = await ledger.open_run("daily_comprehensive", now=NOW - timedelta(hours=2))
    await ledger.close_run(finished, RunStatus.SUCCEEDED, 3)
    in_flight = await ledger.open_run("weekly_supply_forecasts", now=NOW - timedelta(minutes=5))

    async with session_factory() as session:
        recent = await recent_runs(session, limit=2)
        daily = await recent_runs(session, dataset_id="daily_comprehensive")
        stuck = await stuck_runs(session, now=NOW, older_than=timedelta(hours=6))

    assert [r.id for r in recent] == [in_flight, finished]
    assert [r.id for r in daily] == [finished, crashed]
    assert [r.id for r in stuck] == [crashed]
