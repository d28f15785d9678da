"""Append-only forecasts computed by the weekly jobs."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Date, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from agintel.db.base import Base


class YieldPrediction(Base):
    __tablename__ = "yield_prediction"
    __table_args__ = (
        Index("ix_yield_prediction_key_generated", "crop", "state", "season", "generated_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    crop: Mapped[str] = mapped_column(String(32))
    state: Mapped[str] = mapped_column(String(8))
    season: Mapped[str] = mapped_column(String(9))
    predicted_yield: Mapped[float] = mapped_column(Numeric(10, 4))
    confidence_low: Mapped[float] = mapped_column(Numeric(10, 4))
    confidence_high: Mapped[float] = mapped_column(Numeric(10, 4))
    methodology: Mapped[str] = mapped_column(String(255))
    basis_data_points: Mapped[int] = mapped_column(Integer, default=0)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    valid_until: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class SupplyForecast(Base):
    __tablename__ = "supply_forecast"
    __table_args__ = (Index("ix_supply_forecast_region_generated", "region", "generated_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    region: Mapped[str] = mapped_column(String(64))
    state: Mapped[str] = mapped_column(String(8))
    forecast_date: Mapped[date] = mapped_column(Date)
    horizon_days: Mapped[int] = mapped_column(Integer, default=180)
    forecast_data: Mapped[list[dict[str, Any]]] = mapped_column(JSON)
    risk_score: Mapped[int] = mapped_column(Integer)
    confidence_level: Mapped[float] = mapped_column(Numeric(4, 2))
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    valid_until: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


__all__ = ["YieldPrediction", "SupplyForecast"]
