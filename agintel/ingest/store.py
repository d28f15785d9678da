"""Idempotent persistence of connector records.

Sourced entities (crop forecasts, commodity prices, farm benchmarks) are
reconciled onto one row per natural key with a single
``INSERT ... ON CONFLICT DO UPDATE`` statement, so concurrent runs of the same
job cannot race each other into duplicate rows. Inserts get every measurement
defaulted to zero; updates only touch the measurements the record carries.

Derived forecasts are append-only and always inserted.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any, Callable

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agintel.connectors.schemas import (
    CommodityPriceRecord,
    CropForecastRecord,
    FarmBenchmarkRecord,
    YieldEstimate,
)
from agintel.core.timeutils import utcnow
from agintel.db.base import Base
from agintel.models import CommodityPrice, CropForecast, FarmBenchmark, SupplyForecast, YieldPrediction

logger = logging.getLogger(__name__)

FORECAST_SOURCE = "abares"
PRICE_SOURCE = "abares"
BENCHMARK_SOURCE = "abares_farm_survey"
DEFAULT_PRICE_UNIT = "tonne"

_CONNECTION_ERRORS = (OperationalError, InterfaceError, OSError)


class StorageUnavailable(RuntimeError):
    """Raised when the backing database cannot be reached."""


@asynccontextmanager
async def storage_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Open a session, reporting connection-level failures as ``StorageUnavailable``."""

    try:
        async with session_factory() as session:
            yield session
    except _CONNECTION_ERRORS as exc:
        raise StorageUnavailable(f"Storage unavailable: {exc}") from exc


def _insert_for(session: AsyncSession) -> Callable[..., Any]:
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Upserts are not supported on the {dialect} dialect")


def _present(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _as_day(value: datetime | date) -> date:
    return value.date() if isinstance(value, datetime) else value


class ReconciliationStore:
    """Natural-key upserts and append-only inserts over one session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _upsert(
        self,
        model: type[Base],
        key_columns: list[str],
        values: dict[str, Any],
        updates: dict[str, Any],
        now: datetime,
    ) -> None:
        async with storage_session(self._session_factory) as session:
            insert = _insert_for(session)
            stmt = (
                insert(model)
                .values(**values, created_at=now)
                .on_conflict_do_update(
                    index_elements=key_columns,
                    set_={**updates, "updated_at": now},
                )
            )
            await session.execute(stmt)
            await session.commit()
        logger.debug("Reconciled %s row for %s", model.__tablename__, {k: values[k] for k in key_columns})

    async def upsert_crop_forecast(self, record: CropForecastRecord, *, now: datetime | None = None) -> None:
        now = now or utcnow()
        values = {
            "crop": record.crop,
            "state": record.state,
            "season": record.season,
            "report_date": record.forecast_date or now,
            "area": record.area or 0,
            "production": record.production or 0,
            "yield_per_ha": record.yield_per_ha or 0,
            "yield_change": record.yield_change or 0,
            "production_change": record.production_change or 0,
            "source": FORECAST_SOURCE,
        }
        updates = _present(
            {
                "report_date": record.forecast_date,
                "area": record.area,
                "production": record.production,
                "yield_per_ha": record.yield_per_ha,
                "yield_change": record.yield_change,
                "production_change": record.production_change,
            }
        )
        await self._upsert(CropForecast, ["crop", "state", "season"], values, updates, now)

    async def upsert_commodity_price(
        self, record: CommodityPriceRecord, *, now: datetime | None = None
    ) -> None:
        now = now or utcnow()
        values = {
            "commodity": record.commodity,
            "price_date": _as_day(record.price_date or now),
            "price": record.price or 0,
            "currency": record.currency,
            "price_unit": record.unit or DEFAULT_PRICE_UNIT,
            "week_change": record.week_change or 0,
            "month_change": record.month_change or 0,
            "year_change": record.year_change or 0,
            "five_year_avg": record.five_year_avg or 0,
            "source": PRICE_SOURCE,
        }
        updates = _present(
            {
                "price": record.price,
                "currency": record.currency,
                "price_unit": record.unit,
                "week_change": record.week_change,
                "month_change": record.month_change,
                "year_change": record.year_change,
                "five_year_avg": record.five_year_avg,
            }
        )
        await self._upsert(CommodityPrice, ["commodity", "price_date"], values, updates, now)

    async def upsert_farm_benchmark(
        self, record: FarmBenchmarkRecord, *, now: datetime | None = None
    ) -> None:
        now = now or utcnow()
        measurements = {
            "gross_farm_income": record.gross_farm_income,
            "total_cash_costs": record.total_cash_costs,
            "farm_cash_income": record.farm_cash_income,
            "farm_business_profit": record.farm_business_profit,
            "rate_of_return": record.rate_of_return,
            "debt_to_equity": record.debt_to_equity,
            "sample_size": record.sample_size,
        }
        values = {
            "farm_type": record.farm_type,
            "state": record.state,
            "financial_year": record.financial_year,
            **{key: value or 0 for key, value in measurements.items()},
            "source": BENCHMARK_SOURCE,
        }
        await self._upsert(
            FarmBenchmark,
            ["farm_type", "state", "financial_year"],
            values,
            _present(measurements),
            now,
        )

    async def insert_yield_prediction(
        self,
        *,
        crop: str,
        state: str,
        season: str,
        estimate: YieldEstimate,
        generated_at: datetime,
        valid_until: datetime,
    ) -> int:
        low, high = estimate.confidence_interval
        row = YieldPrediction(
            crop=crop,
            state=state,
            season=season,
            predicted_yield=estimate.predicted_yield,
            confidence_low=low,
            confidence_high=high,
            methodology=estimate.methodology,
            basis_data_points=len(estimate.basis_data),
            generated_at=generated_at,
            valid_until=valid_until,
        )
        async with storage_session(self._session_factory) as session:
            session.add(row)
            await session.commit()
        return row.id

    async def insert_supply_forecast(
        self,
        *,
        region: str,
        state: str,
        forecast_date: date,
        horizon_days: int,
        points: list[dict[str, Any]],
        risk_score: int,
        confidence_level: float,
        generated_at: datetime,
        valid_until: datetime,
    ) -> int:
        row = SupplyForecast(
            region=region,
            state=state,
            forecast_date=forecast_date,
            horizon_days=horizon_days,
            forecast_data=points,
            risk_score=risk_score,
            confidence_level=confidence_level,
            generated_at=generated_at,
            valid_until=valid_until,
        )
        async with storage_session(self._session_factory) as session:
            session.add(row)
            await session.commit()
        return row.id


__all__ = [
    "BENCHMARK_SOURCE",
    "FORECAST_SOURCE",
    "PRICE_SOURCE",
    "ReconciliationStore",
    "StorageUnavailable",
    "storage_session",
]
