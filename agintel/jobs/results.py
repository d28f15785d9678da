"""Plain result records returned by the job entry points."""

from __future__ import annotations

from dataclasses import dataclass, field

from agintel.models import RunStatus


@dataclass
class DailyIngestionResult:
    run_id: int | None = None
    crop_forecasts: int = 0
    commodity_prices: int = 0
    farm_benchmarks: int = 0
    signals_discovered: int = 0
    errors: list[str] = field(default_factory=list)
    status: RunStatus | None = None

    @property
    def records_processed(self) -> int:
        """Ledger count: forecasts and prices. Benchmarks are reported separately."""

        return self.crop_forecasts + self.commodity_prices


@dataclass
class YieldPredictionResult:
    run_id: int | None = None
    predictions_generated: int = 0
    states_processed: int = 0
    crops_processed: int = 0
    errors: list[str] = field(default_factory=list)
    status: RunStatus | None = None


@dataclass
class SupplyForecastResult:
    run_id: int | None = None
    forecasts_generated: int = 0
    regions_processed: int = 0
    errors: list[str] = field(default_factory=list)
    status: RunStatus | None = None


@dataclass
class FarmBenchmarkResult:
    run_id: int | None = None
    benchmarks_updated: int = 0
    states_processed: int = 0
    errors: list[str] = field(default_factory=list)
    status: RunStatus | None = None


@dataclass
class AllJobsResult:
    daily_ingestion: DailyIngestionResult
    yield_predictions: YieldPredictionResult
    supply_forecasts: SupplyForecastResult
    farm_benchmarks: FarmBenchmarkResult


__all__ = [
    "AllJobsResult",
    "DailyIngestionResult",
    "FarmBenchmarkResult",
    "SupplyForecastResult",
    "YieldPredictionResult",
]
