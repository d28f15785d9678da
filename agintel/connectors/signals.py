"""Category-tagged views over raw connector signals.

Raw signals carry an open, stringly-keyed metadata map. The daily job only
understands two categories, so each gets an explicit model with defaulting
rules, and everything else is ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field

from .schemas import CommodityPriceRecord, CropForecastRecord, RawSignal

CROP_FORECAST = "crop_forecast"
COMMODITY_PRICE = "commodity_price"


class CropForecastSignal(BaseModel):
    category: Literal["crop_forecast"] = CROP_FORECAST
    id: str
    discovered_at: datetime
    crop: str = "unknown"
    state: str = "NSW"
    season: Optional[str] = None
    area: Optional[float] = None
    production: Optional[float] = None
    yield_per_ha: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("yield_per_ha", "yield")
    )
    yield_change: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("yield_change", "yieldChange")
    )
    production_change: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("production_change", "productionChange")
    )

    def to_record(self, default_season: str) -> CropForecastRecord:
        return CropForecastRecord(
            crop=self.crop,
            state=self.state,
            season=self.season or default_season,
            area=self.area,
            production=self.production,
            yield_per_ha=self.yield_per_ha,
            yield_change=self.yield_change,
            production_change=self.production_change,
            forecast_date=self.discovered_at,
        )


class CommodityPriceSignal(BaseModel):
    category: Literal["commodity_price"] = COMMODITY_PRICE
    id: str
    discovered_at: datetime
    commodity: str = "unknown"
    price: float = 0
    unit: str = "tonne"
    week_change: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("week_change", "weekChange")
    )
    month_change: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("month_change", "monthChange")
    )
    year_change: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("year_change", "yearChange")
    )

    def to_record(self) -> CommodityPriceRecord:
        return CommodityPriceRecord(
            commodity=self.commodity,
            price=self.price,
            unit=self.unit,
            price_date=self.discovered_at,
            week_change=self.week_change,
            month_change=self.month_change,
            year_change=self.year_change,
        )


TypedSignal = Union[CropForecastSignal, CommodityPriceSignal]


def _present(metadata: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in metadata.items() if value not in (None, "")}


def parse_signal(raw: RawSignal) -> TypedSignal | None:
    """Return the typed variant for ``raw`` or ``None`` for untracked categories.

    Raises ``pydantic.ValidationError`` when tracked metadata is malformed.
    """

    payload = {**_present(raw.metadata), "id": raw.id, "discovered_at": raw.discovered_at}
    if raw.category == CROP_FORECAST:
        return CropForecastSignal.model_validate(payload)
    if raw.category == COMMODITY_PRICE:
        return CommodityPriceSignal.model_validate(payload)
    return None


__all__ = [
    "COMMODITY_PRICE",
    "CROP_FORECAST",
    "CommodityPriceSignal",
    "CropForecastSignal",
    "TypedSignal",
    "parse_signal",
]
