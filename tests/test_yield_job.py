from datetime import timedelta

import pytest
from sqlalchemy import func, select

from agintel.connectors import IntelligenceSnapshot
from agintel.ingest import StorageUnavailable
from agintel.jobs import weekly_yield_predictions
from agintel.jobs.yield_predictions import AUSTRALIAN_STATES, BIOENERGY_CROPS
from agintel.models import IngestionRun, RunStatus, YieldPrediction

from conftest import NOW, naive
from fakes import FlakySessionFactory, ScriptedConnector


@pytest.mark.asyncio
async def test_every_state_and_crop_is_predicted(session_factory, settings):
    connector = ScriptedConnector(IntelligenceSnapshot())

    result = await weekly_yield_predictions(connector, session_factory, now=NOW, settings=settings)

    assert result.status is RunStatus.SUCCEEDED
    assert result.predictions_generated == len(AUSTRALIAN_STATES) * len(BIOENERGY_CROPS) == 56
    async with session_factory() as session:
        rows = (await session.execute(select(YieldPrediction))).scalars().all()
    assert {r.season for r in rows} == {"2024-2025"}
    assert {r.valid_until for r in rows} == {naive(NOW + timedelta(days=7))}
    assert float(rows[0].confidence_low) == pytest.approx(1.7)


@pytest.mark.asyncio
async def test_failed_combination_is_skipped(session_factory, settings):
    connector = ScriptedConnector(IntelligenceSnapshot(), fail_predictions={("QLD", "cotton")})

    result = await weekly_yield_predictions(connector, session_factory, now=NOW, settings=settings)

    assert result.status is RunStatus.PARTIAL
    assert result.predictions_generated == 55
    assert result.states_processed == 7
    assert result.crops_processed == 8
    assert result.errors == ["Failed prediction for QLD/cotton: model timeout"]
    async with session_factory() as session:
        run = await session.scalar(select(IngestionRun))
    assert run.status == "partial"
    assert run.records_processed == 55


@pytest.mark.asyncio
async def test_all_failures_close_run_failed_without_raising(session_factory, settings):
    every = {(s, c) for s in AUSTRALIAN_STATES for c in BIOENERGY_CROPS}
    connector = ScriptedConnector(IntelligenceSnapshot(), fail_predictions=every)

    result = await weekly_yield_predictions(connector, session_factory, now=NOW, settings=settings)

    assert result.status is RunStatus.FAILED
    assert len(result.errors) == 56
    async with session_factory() as session:
        assert await session.scalar(select(func.count()).select_from(YieldPrediction)) == 0


@pytest.mark.asyncio
async def test_storage_lost_mid_job_raises_storage_unavailable(
    session_factory, unreachable_session_factory, settings
):
    factory = FlakySessionFactory(session_factory, unreachable_session_factory)

    class DroppingConnector(ScriptedConnector):
        async def predict_yield(self, state, crop, season):
            factory.fail = True
            return await super().predict_yield(state, crop, season)

    with pytest.raises(StorageUnavailable):
        await weekly_yield_predictions(DroppingConnector(IntelligenceSnapshot()), factory, now=NOW, settings=settings)

    # The run could not be closed, so it is left for the stuck-run report.
    async with session_factory() as session:
        run = await session.scalar(select(IngestionRun))
    assert run.status == "running"
