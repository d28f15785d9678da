"""Typed records emitted by intelligence source connectors."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class CropForecastRecord(BaseModel):
    """Production outlook for one crop, state and season."""

    crop: str
    state: str
    season: str
    area: Optional[float] = None
    production: Optional[float] = None
    yield_per_ha: Optional[float] = None
    yield_change: Optional[float] = None
    production_change: Optional[float] = None
    confidence_lower: Optional[float] = None
    confidence_upper: Optional[float] = None
    forecast_date: Optional[datetime] = None


class CommodityPriceRecord(BaseModel):
    """A single price observation; reconciled per commodity and calendar day."""

    commodity: str
    price: Optional[float] = None
    currency: str = "AUD"
    unit: Optional[str] = None
    price_date: Optional[datetime] = None
    week_change: Optional[float] = None
    month_change: Optional[float] = None
    year_change: Optional[float] = None
    five_year_avg: Optional[float] = None


class FarmBenchmarkRecord(BaseModel):
    farm_type: str
    state: str
    financial_year: str
    gross_farm_income: Optional[float] = None
    total_cash_costs: Optional[float] = None
    farm_cash_income: Optional[float] = None
    farm_business_profit: Optional[float] = None
    rate_of_return: Optional[float] = None
    debt_to_equity: Optional[float] = None
    sample_size: Optional[int] = None


class LandUseRecord(BaseModel):
    region_code: str
    region_name: str
    state: str
    cropping_area: Optional[float] = None
    grazing_area: Optional[float] = None
    forestry_area: Optional[float] = None
    conservation_area: Optional[float] = None
    crop_breakdown: dict[str, float] = Field(default_factory=dict)
    year_on_year_change: Optional[float] = None


class IntelligenceSnapshot(BaseModel):
    """Consolidated current view across every tracked data type."""

    generated_at: Optional[datetime] = None
    crop_forecasts: list[CropForecastRecord] = Field(default_factory=list)
    commodity_prices: list[CommodityPriceRecord] = Field(default_factory=list)
    farm_benchmarks: list[FarmBenchmarkRecord] = Field(default_factory=list)
    land_use: list[LandUseRecord] = Field(default_factory=list)


class RawSignal(BaseModel):
    id: str
    category: str
    discovered_at: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)


class SignalBatch(BaseModel):
    success: bool = True
    signals: list[RawSignal] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    signals_discovered: Optional[int] = None


class YieldEstimate(BaseModel):
    predicted_yield: float
    confidence_interval: tuple[float, float]
    methodology: str
    basis_data: list[CropForecastRecord] = Field(default_factory=list)


__all__ = [
    "CropForecastRecord",
    "CommodityPriceRecord",
    "FarmBenchmarkRecord",
    "LandUseRecord",
    "IntelligenceSnapshot",
    "RawSignal",
    "SignalBatch",
    "YieldEstimate",
]
