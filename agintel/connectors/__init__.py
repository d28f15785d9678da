"""Connector contract, record types and the snapshot connector."""

from .base import Connector, ConnectorError
from .schemas import (
    CommodityPriceRecord,
    CropForecastRecord,
    FarmBenchmarkRecord,
    IntelligenceSnapshot,
    LandUseRecord,
    RawSignal,
    SignalBatch,
    YieldEstimate,
)
from .signals import CommodityPriceSignal, CropForecastSignal, parse_signal
from .snapshot import SnapshotConnector

__all__ = [
    "Connector",
    "ConnectorError",
    "CropForecastRecord",
    "CommodityPriceRecord",
    "FarmBenchmarkRecord",
    "LandUseRecord",
    "IntelligenceSnapshot",
    "RawSignal",
    "SignalBatch",
    "YieldEstimate",
    "CropForecastSignal",
    "CommodityPriceSignal",
    "parse_signal",
    "SnapshotConnector",
]
