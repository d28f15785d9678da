from datetime import timedelta

import pytest
from sqlalchemy import select

from agintel.ingest import StorageUnavailable
from agintel.models import IngestionRun, RunStatus
from agintel.services.ledger import IngestionLedger, LedgerStateError, resolve_status, summarise_errors

from conftest import NOW, naive
from fakes import FlakySessionFactory


async def _run(session_factory, run_id):
    async with session_factory() as session:
        return await session.scalar(select(IngestionRun).where(IngestionRun.id == run_id))


@pytest.mark.parametrize(
    ("errors", "succeeded_any", "expected"),
    [
        ([], False, RunStatus.SUCCEEDED),
        (["boom"], True, RunStatus.PARTIAL),
        (["boom"], False, RunStatus.FAILED),
    ],
)
def test_resolve_status(errors, succeeded_any, expected):
    assert resolve_status(errors, succeeded_any) is expected


def test_summarise_errors_joins_in_order():
    assert summarise_errors(["a", "b"]) == "a; b"
    assert summarise_errors([]) is None


@pytest.mark.asyncio
async def test_open_then_close_records_outcome(session_factory):
    ledger = IngestionLedger(session_factory, data_source="data.gov.au")

    run_id = await ledger.open_run("daily_comprehensive", now=NOW)
    opened = await _run(session_factory, run_id)
    assert opened.status == "running"
    assert opened.end_time is None

    await ledger.close_run(run_id, RunStatus.PARTIAL, 5, ["first", "second"], now=NOW + timedelta(minutes=3))

    closed = await _run(session_factory, run_id)
    assert closed.status == "partial"
    assert closed.records_processed == 5
    assert closed.error_message == "first; second"
    assert closed.end_time == naive(NOW + timedelta(minutes=3))
    assert closed.data_source == "data.gov.au"


@pytest.mark.asyncio
async def test_run_closes_exactly_once(session_factory):
    ledger = IngestionLedger(session_factory)
    run_id = await ledger.open_run("weekly_yield_predictions", now=NOW)
    await ledger.close_run(run_id, RunStatus.SUCCEEDED, 1)

    with pytest.raises(LedgerStateError):
        await ledger.close_run(run_id, RunStatus.FAILED, 0, ["late"])

    assert (await _run(session_factory, run_id)).status == "succeeded"


@pytest.mark.asyncio
async def test_close_with_running_status_is_rejected(session_factory):
    ledger = IngestionLedger(session_factory)
    run_id = await ledger.open_run("weekly_yield_predictions", now=NOW)

    with pytest.raises(LedgerStateError):
        await ledger.close_run(run_id, RunStatus.RUNNING, 0)


@pytest.mark.asyncio
async def test_close_quietly_swallows_ledger_errors(session_factory):
    ledger = IngestionLedger(session_factory)

    await ledger.close_run_quietly(9999, RunStatus.FAILED, 0, ["missing run"])


@pytest.mark.asyncio
async def test_close_run_reports_lost_storage(session_factory, unreachable_session_factory):
    factory = FlakySessionFactory(session_factory, unreachable_session_factory)
    ledger = IngestionLedger(factory)
    run_id = await ledger.open_run("weekly_supply_forecasts", now=NOW)

    factory.fail = True
    with pytest.raises(StorageUnavailable):
        await ledger.close_run(run_id, RunStatus.SUCCEEDED, 8)
    await ledger.close_run_quietly(run_id, RunStatus.FAILED, 0, ["lost"])

    assert (await _run(session_factory, run_id)).status == "running"


@pytest.mark.asyncio
async def test_open_run_reports_lost_storage(unreachable_session_factory):
    with pytest.raises(StorageUnavailable):
        await IngestionLedger(unreachable_session_factory).open_run("daily_comprehensive", now=NOW)
