"""Contract between the pipeline and intelligence source connectors."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from .schemas import IntelligenceSnapshot, SignalBatch, YieldEstimate


class ConnectorError(RuntimeError):
    """Raised when a connector cannot produce the requested data."""


@runtime_checkable
class Connector(Protocol):
    """Source of raw signals, intelligence snapshots and yield estimates."""

    async def fetch_signals(self, since: datetime) -> SignalBatch:
        ...

    async def get_intelligence(self) -> IntelligenceSnapshot:
        ...

    async def predict_yield(self, state: str, crop: str, season: str) -> YieldEstimate:
        ...


__all__ = ["Connector", "ConnectorError"]
