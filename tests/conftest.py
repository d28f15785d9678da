import asyncio
import inspect
import pathlib
import sys
from datetime import datetime, timezone

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from agintel.config import AppSettings  # noqa: E402
from agintel.connectors import (  # noqa: E402
    CommodityPriceRecord,
    CropForecastRecord,
    FarmBenchmarkRecord,
    IntelligenceSnapshot,
    RawSignal,
)
from agintel.db.init import init_database  # noqa: E402
from agintel.db.session import make_session_factory  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            testargs = {name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames}
            loop.run_until_complete(test_function(**testargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


NOW = datetime(2025, 1, 6, 2, 0, tzinfo=timezone.utc)


def naive(dt: datetime) -> datetime:
    """SQLite hands timestamps back without tzinfo."""

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


@pytest.fixture
def engine(tmp_path):
    # NullPool keeps connections from leaking across the per-test event loops.
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'agintel.db'}", poolclass=NullPool)
    asyncio.run(init_database(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def unreachable_session_factory(tmp_path):
    # The parent directory never exists, so every connect fails.
    missing = tmp_path / "missing" / "agintel.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{missing}", poolclass=NullPool)
    yield make_session_factory(engine)
    asyncio.run(engine.dispose())


@pytest.fixture
def settings():
    return AppSettings(database_url="sqlite+aiosqlite://", telemetry_enabled=False)


async def reject_inserts(engine, table: str, condition: str) -> None:
    """Make SQLite refuse inserts into ``table`` matching ``condition``."""

    async with engine.begin() as conn:
        await conn.execute(
            text(
                f"CREATE TRIGGER reject_{table} BEFORE INSERT ON {table} "
                f"WHEN {condition} BEGIN SELECT RAISE(ABORT, '{table} row rejected'); END"
            )
        )


def make_snapshot() -> IntelligenceSnapshot:
    return IntelligenceSnapshot(
        generated_at=NOW,
        crop_forecasts=[
            CropForecastRecord(
                crop="wheat",
                state="NSW",
                season="2024-2025",
                area=3000,
                production=4000,
                yield_per_ha=2.1,
                yield_change=-12,
                production_change=-8,
            ),
            CropForecastRecord(
                crop="canola",
                state="NSW",
                season="2024-2025",
                area=800,
                production=1200,
                yield_per_ha=1.4,
                yield_change=3,
            ),
        ],
        commodity_prices=[
            CommodityPriceRecord(commodity="wheat", price=355.5, unit="tonne", price_date=NOW, week_change=1.2),
        ],
    )


def make_signals() -> list[RawSignal]:
    return [
        RawSignal(
            id="sig-1",
            category="crop_forecast",
            discovered_at=NOW,
            metadata={"crop": "barley", "state": "VIC", "production": 900, "yield": 2.8},
        ),
        RawSignal(
            id="sig-2",
            category="commodity_price",
            discovered_at=NOW,
            metadata={"commodity": "canola", "price": 720},
        ),
        RawSignal(id="sig-3", category="weather_alert", discovered_at=NOW, metadata={"severity": "high"}),
    ]


def make_benchmarks() -> list[FarmBenchmarkRecord]:
    return [
        FarmBenchmarkRecord(
            farm_type="broadacre",
            state="NSW",
            financial_year="2023-24",
            gross_farm_income=910000,
            farm_cash_income=210000,
            sample_size=140,
        ),
        FarmBenchmarkRecord(
            farm_type="broadacre",
            state="WA",
            financial_year="2023-24",
            gross_farm_income=1450000,
            rate_of_return=4.1,
        ),
    ]
