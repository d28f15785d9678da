"""Rolling supply-availability model for bioenergy regions.

A curve is a sequence of weekly points starting today. Each point scales the
state's forecast production (spread evenly over a year) by the seasonal phase
of its calendar month, and carries a confidence level plus the risk factors
that apply to it. The aggregate risk score is a bounded heuristic, not a
statistical model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Iterable, Sequence

from agintel.connectors.schemas import CropForecastRecord

HORIZON_DAYS = 180
STEP_DAYS = 7
WEEKS_PER_YEAR = 52

OFF_SEASON_STORAGE_DEPENDENCY = "off_season_storage_dependency"
REDUCED_YIELD_FORECAST = "reduced_yield_forecast"
REDUCED_YIELD_THRESHOLD_PCT = -10

RISK_PER_FACTOR = Decimal("10")
RISK_PER_MISSING_CONFIDENCE = Decimal("20")
MAX_RISK_SCORE = 100


class SeasonalPhase(str, Enum):
    HARVEST = "harvest"
    PLANTING = "planting"
    SHOULDER = "shoulder"


HARVEST_MONTHS = frozenset({11, 12, 1, 2})
PLANTING_MONTHS = frozenset({4, 5, 6})

SEASONAL_MULTIPLIER = {
    SeasonalPhase.HARVEST: Decimal("1.5"),
    SeasonalPhase.PLANTING: Decimal("0.7"),
    SeasonalPhase.SHOULDER: Decimal("1.0"),
}
HARVEST_CONFIDENCE = 0.85
BASE_CONFIDENCE = 0.70


@dataclass(frozen=True)
class BioenergyRegion:
    name: str
    state: str


BIOENERGY_REGIONS: tuple[BioenergyRegion, ...] = (
    BioenergyRegion("Darling Downs", "QLD"),
    BioenergyRegion("Liverpool Plains", "NSW"),
    BioenergyRegion("Wimmera", "VIC"),
    BioenergyRegion("Mid North", "SA"),
    BioenergyRegion("Geraldton Zone", "WA"),
    BioenergyRegion("Central Queensland", "QLD"),
    BioenergyRegion("Riverina", "NSW"),
    BioenergyRegion("Mallee", "VIC"),
)


@dataclass
class SupplyPoint:
    date: date
    available_tonnes: int
    confidence_level: float
    risk_factors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "available_tonnes": self.available_tonnes,
            "confidence_level": self.confidence_level,
            "risk_factors": list(self.risk_factors),
        }


def _round_half_up(value: Decimal, places: int = 0) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def seasonal_phase(month: int) -> SeasonalPhase:
    if month in HARVEST_MONTHS:
        return SeasonalPhase.HARVEST
    if month in PLANTING_MONTHS:
        return SeasonalPhase.PLANTING
    return SeasonalPhase.SHOULDER


def forecasts_for_state(forecasts: Iterable[CropForecastRecord], state: str) -> list[CropForecastRecord]:
    return [f for f in forecasts if f.state == state]


def build_supply_curve(
    forecasts: Sequence[CropForecastRecord],
    start: date,
    *,
    horizon_days: int = HORIZON_DAYS,
    step_days: int = STEP_DAYS,
) -> list[SupplyPoint]:
    """Build weekly availability points from ``start`` across the horizon.

    ``forecasts`` should already be limited to the region's state.
    """

    total_production = sum((Decimal(str(f.production or 0)) for f in forecasts), Decimal("0"))
    weekly_availability = total_production / WEEKS_PER_YEAR
    reduced_yield = any(
        f.yield_change is not None and f.yield_change < REDUCED_YIELD_THRESHOLD_PCT for f in forecasts
    )

    points: list[SupplyPoint] = []
    for offset in range(0, horizon_days, step_days):
        day = start + timedelta(days=offset)
        phase = seasonal_phase(day.month)
        risk_factors: list[str] = []
        if phase is SeasonalPhase.SHOULDER:
            risk_factors.append(OFF_SEASON_STORAGE_DEPENDENCY)
        if reduced_yield:
            risk_factors.append(REDUCED_YIELD_FORECAST)
        points.append(
            SupplyPoint(
                date=day,
                available_tonnes=int(_round_half_up(weekly_availability * SEASONAL_MULTIPLIER[phase])),
                confidence_level=HARVEST_CONFIDENCE if phase is SeasonalPhase.HARVEST else BASE_CONFIDENCE,
                risk_factors=risk_factors,
            )
        )
    return points


def calculate_risk_score(points: Sequence[SupplyPoint]) -> int:
    """Average per-point risk, rounded and clamped to 0-100."""

    if not points:
        return 0
    total = Decimal("0")
    for point in points:
        total += len(point.risk_factors) * RISK_PER_FACTOR
        total += (1 - Decimal(str(point.confidence_level))) * RISK_PER_MISSING_CONFIDENCE
    score = int(_round_half_up(total / len(points)))
    return max(0, min(MAX_RISK_SCORE, score))


def average_confidence(points: Sequence[SupplyPoint]) -> float:
    if not points:
        return 0.0
    total = sum((Decimal(str(p.confidence_level)) for p in points), Decimal("0"))
    return float(_round_half_up(total / len(points), 2))


__all__ = [
    "BIOENERGY_REGIONS",
    "HORIZON_DAYS",
    "OFF_SEASON_STORAGE_DEPENDENCY",
    "REDUCED_YIELD_FORECAST",
    "STEP_DAYS",
    "BioenergyRegion",
    "SeasonalPhase",
    "SupplyPoint",
    "average_confidence",
    "build_supply_curve",
    "calculate_risk_score",
    "forecasts_for_state",
    "seasonal_phase",
]
