"""Sourced agricultural data reconciled by natural key."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from agintel.db.base import Base


class CropForecast(Base):
    __tablename__ = "crop_forecast"
    __table_args__ = (
        UniqueConstraint("crop", "state", "season", name="uq_crop_forecast_crop_state_season"),
        Index("ix_crop_forecast_state_season", "state", "season"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    crop: Mapped[str] = mapped_column(String(32))
    state: Mapped[str] = mapped_column(String(8))
    season: Mapped[str] = mapped_column(String(9))
    report_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    area: Mapped[float] = mapped_column(Numeric(18, 2), default=0)
    production: Mapped[float] = mapped_column(Numeric(18, 2), default=0)
    yield_per_ha: Mapped[float] = mapped_column(Numeric(10, 4), default=0)
    yield_change: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    production_change: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    source: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CommodityPrice(Base):
    __tablename__ = "commodity_price"
    __table_args__ = (
        UniqueConstraint("commodity", "price_date", name="uq_commodity_price_commodity_date"),
        Index("ix_commodity_price_commodity_date", "commodity", "price_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    commodity: Mapped[str] = mapped_column(String(32))
    price_date: Mapped[date] = mapped_column(Date)
    price: Mapped[float] = mapped_column(Numeric(14, 4), default=0)
    currency: Mapped[str] = mapped_column(String(3), default="AUD")
    price_unit: Mapped[str] = mapped_column(String(16), default="tonne")
    week_change: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    month_change: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    year_change: Mapped[float] = mapped_column(Numeric(10, 2), default=0)
    five_year_avg: Mapped[float] = mapped_column(Numeric(14, 4), default=0)
    source: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class FarmBenchmark(Base):
    __tablename__ = "farm_benchmark"
    __table_args__ = (
        UniqueConstraint(
            "farm_type", "state", "financial_year", name="uq_farm_benchmark_type_state_year"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    farm_type: Mapped[str] = mapped_column(String(64))
    state: Mapped[str] = mapped_column(String(8))
    financial_year: Mapped[str] = mapped_column(String(9))
    gross_farm_income: Mapped[float] = mapped_column(Numeric(18, 2), default=0)
    total_cash_costs: Mapped[float] = mapped_column(Numeric(18, 2), default=0)
    farm_cash_income: Mapped[float] = mapped_column(Numeric(18, 2), default=0)
    farm_business_profit: Mapped[float] = mapped_column(Numeric(18, 2), default=0)
    rate_of_return: Mapped[float] = mapped_column(Numeric(8, 4), default=0)
    debt_to_equity: Mapped[float] = mapped_column(Numeric(8, 4), default=0)
    sample_size: Mapped[int] = mapped_column(Integer, default=0)
    source: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


__all__ = ["CropForecast", "CommodityPrice", "FarmBenchmark"]
