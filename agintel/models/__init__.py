"""Database model exports."""

from .derived import SupplyForecast, YieldPrediction
from .ingestion import RUN_STATUSES, IngestionRun, RunStatus
from .sourced import CommodityPrice, CropForecast, FarmBenchmark

__all__ = [
    "CropForecast",
    "CommodityPrice",
    "FarmBenchmark",
    "YieldPrediction",
    "SupplyForecast",
    "IngestionRun",
    "RunStatus",
    "RUN_STATUSES",
]
