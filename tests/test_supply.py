from datetime import date, timedelta

import pytest

from agintel.connectors import CropForecastRecord
from agintel.services.supply import (
    BIOENERGY_REGIONS,
    OFF_SEASON_STORAGE_DEPENDENCY,
    REDUCED_YIELD_FORECAST,
    SeasonalPhase,
    SupplyPoint,
    average_confidence,
    build_supply_curve,
    calculate_risk_score,
    forecasts_for_state,
    seasonal_phase,
)

START = date(2025, 1, 6)


def _forecasts(yield_change=2.0):
    return [
        CropForecastRecord(crop="wheat", state="NSW", season="2024-2025", production=4000, yield_change=yield_change),
        CropForecastRecord(crop="canola", state="NSW", season="2024-2025", production=1200),
        CropForecastRecord(crop="wheat", state="VIC", season="2024-2025", production=9999),
    ]


def test_regions_cover_eight_named_areas():
    assert len(BIOENERGY_REGIONS) == 8
    assert {r.state for r in BIOENERGY_REGIONS} == {"QLD", "NSW", "VIC", "SA", "WA"}


@pytest.mark.parametrize(
    ("month", "phase"),
    [
        (11, SeasonalPhase.HARVEST),
        (2, SeasonalPhase.HARVEST),
        (3, SeasonalPhase.SHOULDER),
        (4, SeasonalPhase.PLANTING),
        (6, SeasonalPhase.PLANTING),
        (7, SeasonalPhase.SHOULDER),
        (10, SeasonalPhase.SHOULDER),
    ],
)
def test_seasonal_phase(month, phase):
    assert seasonal_phase(month) is phase


def test_curve_has_weekly_points_over_horizon():
    points = build_supply_curve(forecasts_for_state(_forecasts(), "NSW"), START)

    assert len(points) == 26
    assert points[0].date == START
    assert points[-1].date == date(2025, 6, 30)
    assert all(b.date - a.date == timedelta(days=7) for a, b in zip(points, points[1:]))


def test_curve_scales_weekly_production_by_phase():
    points = build_supply_curve(forecasts_for_state(_forecasts(), "NSW"), START)
    by_date = {p.date: p for p in points}

    # 5200 t per year over 52 weeks -> 100 t base
    harvest = by_date[date(2025, 1, 6)]
    shoulder = by_date[date(2025, 3, 3)]
    planting = by_date[date(2025, 4, 7)]
    assert (harvest.available_tonnes, harvest.confidence_level) == (150, 0.85)
    assert (shoulder.available_tonnes, shoulder.confidence_level) == (100, 0.70)
    assert (planting.available_tonnes, planting.confidence_level) == (70, 0.70)
    assert shoulder.risk_factors == [OFF_SEASON_STORAGE_DEPENDENCY]
    assert harvest.risk_factors == []


def test_reduced_yield_flags_every_point():
    points = build_supply_curve(forecasts_for_state(_forecasts(yield_change=-12), "NSW"), START)

    assert all(REDUCED_YIELD_FORECAST in p.risk_factors for p in points)


def test_curve_without_forecasts_is_zero_supply():
    points = build_supply_curve([], START)

    assert len(points) == 26
    assert {p.available_tonnes for p in points} == {0}


def test_risk_score_and_confidence_for_curve():
    points = build_supply_curve(forecasts_for_state(_forecasts(), "NSW"), START)
    assert calculate_risk_score(points) == 7
    assert average_confidence(points) == 0.75

    reduced = build_supply_curve(forecasts_for_state(_forecasts(yield_change=-12), "NSW"), START)
    assert calculate_risk_score(reduced) == 17


def test_risk_score_is_clamped_and_empty_is_zero():
    many_factors = [SupplyPoint(date=START, available_tonnes=0, confidence_level=0.0, risk_factors=["x"] * 12)]

    assert calculate_risk_score(many_factors) == 100
    assert calculate_risk_score([]) == 0
    assert average_confidence([]) == 0.0


def test_point_serialises_date_as_iso_string():
    point = SupplyPoint(date=START, available_tonnes=10, confidence_level=0.85)

    assert point.as_dict() == {
        "date": "2025-01-06",
        "available_tonnes": 10,
        "confidence_level": 0.85,
        "risk_factors": [],
    }
