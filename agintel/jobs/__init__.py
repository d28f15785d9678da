"""Job entry points invoked by the external scheduler."""

from .benchmarks import monthly_farm_benchmarks
from .daily import daily_ingestion
from .results import (
    AllJobsResult,
    DailyIngestionResult,
    FarmBenchmarkResult,
    SupplyForecastResult,
    YieldPredictionResult,
)
from .runner import run_all_jobs
from .supply_forecasts import weekly_supply_forecasts
from .yield_predictions import weekly_yield_predictions

__all__ = [
    "daily_ingestion",
    "weekly_yield_predictions",
    "weekly_supply_forecasts",
    "monthly_farm_benchmarks",
    "run_all_jobs",
    "AllJobsResult",
    "DailyIngestionResult",
    "YieldPredictionResult",
    "SupplyForecastResult",
    "FarmBenchmarkResult",
]
