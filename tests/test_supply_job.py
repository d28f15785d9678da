import pytest
from sqlalchemy import select

from agintel.jobs import weekly_supply_forecasts
from agintel.models import IngestionRun, RunStatus, SupplyForecast

from conftest import NOW, make_snapshot
from fakes import ScriptedConnector


@pytest.mark.asyncio
async def test_one_forecast_per_region(session_factory, settings):
    connector = ScriptedConnector(make_snapshot())

    result = await weekly_supply_forecasts(connector, session_factory, now=NOW, settings=settings)

    assert result.status is RunStatus.SUCCEEDED
    assert result.forecasts_generated == 8
    assert result.regions_processed == 8
    async with session_factory() as session:
        riverina = await session.scalar(select(SupplyForecast).where(SupplyForecast.region == "Riverina"))
    assert riverina.state == "NSW"
    assert riverina.horizon_days == 180
    assert len(riverina.forecast_data) == 26
    assert riverina.forecast_data[0] == {
        "date": "2025-01-06",
        "available_tonnes": 150,
        "confidence_level": 0.85,
        "risk_factors": ["reduced_yield_forecast"],
    }
    assert riverina.risk_score == 17
    assert float(riverina.confidence_level) == pytest.approx(0.75)


@pytest.mark.asyncio
async def test_region_failures_are_partial(session_factory, settings):
    connector = ScriptedConnector(make_snapshot(), intelligence_failures_after=6)

    result = await weekly_supply_forecasts(connector, session_factory, now=NOW, settings=settings)

    assert result.status is RunStatus.PARTIAL
    assert result.forecasts_generated == 6
    assert result.errors == [
        "Failed forecast for Riverina: rate limited",
        "Failed forecast for Mallee: rate limited",
    ]
    async with session_factory() as session:
        run = await session.scalar(select(IngestionRun))
    assert run.dataset_id == "weekly_supply_forecasts"
    assert run.records_processed == 6
