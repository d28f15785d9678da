"""Read helpers for consumers of the warehouse.

Derived forecasts are append-only, so "current" is resolved here: the most
recent row per key whose validity has not expired.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agintel.models import CommodityPrice, IngestionRun, RunStatus, SupplyForecast, YieldPrediction

MAX_HISTORY_MONTHS = 120
DAYS_PER_MONTH = 30


async def current_yield_predictions(
    session: AsyncSession,
    *,
    now: datetime,
    state: str | None = None,
    crop: str | None = None,
) -> list[YieldPrediction]:
    """Latest non-expired prediction per (crop, state, season)."""

    stmt = select(YieldPrediction).where(YieldPrediction.valid_until >= now)
    if state is not None:
        stmt = stmt.where(YieldPrediction.state == state)
    if crop is not None:
        stmt = stmt.where(YieldPrediction.crop == crop)
    stmt = stmt.order_by(YieldPrediction.generated_at.desc(), YieldPrediction.id.desc())
    rows = (await session.execute(stmt)).scalars().all()

    latest: dict[tuple[str, str, str], YieldPrediction] = {}
    for row in rows:
        latest.setdefault((row.crop, row.state, row.season), row)
    return list(latest.values())


async def latest_supply_forecast(
    session: AsyncSession, region: str, *, now: datetime
) -> SupplyForecast | None:
    stmt = (
        select(SupplyForecast)
        .where(SupplyForecast.region == region, SupplyForecast.valid_until >= now)
        .order_by(SupplyForecast.generated_at.desc(), SupplyForecast.id.desc())
        .limit(1)
    )
    return await session.scalar(stmt)


async def price_history(
    session: AsyncSession,
    commodity: str,
    *,
    today: date,
    months: int = 24,
) -> Sequence[CommodityPrice]:
    """Daily observations for ``commodity`` over the last ``months``, newest first."""

    if not 1 <= months <= MAX_HISTORY_MONTHS:
        raise ValueError(f"months must be between 1 and {MAX_HISTORY_MONTHS}")
    start = today - timedelta(days=months * DAYS_PER_MONTH)
    stmt = (
        select(CommodityPrice)
        .where(CommodityPrice.commodity == commodity, CommodityPrice.price_date >= start)
        .order_by(CommodityPrice.price_date.desc())
    )
    return (await session.execute(stmt)).scalars().all()


async def recent_runs(
    session: AsyncSession,
    *,
    limit: int = 20,
    dataset_id: str | None = None,
) -> Sequence[IngestionRun]:
    stmt = select(IngestionRun)
    if dataset_id is not None:
        stmt = stmt.where(IngestionRun.dataset_id == dataset_id)
    stmt = stmt.order_by(IngestionRun.start_time.desc(), IngestionRun.id.desc()).limit(limit)
    return (await session.execute(stmt)).scalars().all()


async def stuck_runs(
    session: AsyncSession,
    *,
    now: datetime,
    older_than: timedelta,
) -> Sequence[IngestionRun]:
    """Runs still marked running after ``older_than``; these indicate a crashed job."""

    stmt = (
        select(IngestionRun)
        .where(
            IngestionRun.status == RunStatus.RUNNING.value,
            IngestionRun.start_time < now - older_than,
        )
        .order_by(IngestionRun.start_time)
    )
    return (await session.execute(stmt)).scalars().all()


__all__ = [
    "current_yield_predictions",
    "latest_supply_forecast",
    "price_history",
    "recent_runs",
    "stuck_runs",
]
