"""In-memory connector serving a fixed intelligence snapshot.

Used by the operator scripts to replay a captured snapshot file, and by the
test-suite as a well-behaved connector. Yield estimates follow the crop report
rules: an exact (state, crop, season) forecast wins, using its own confidence
bounds where reported and +/-15% otherwise. Without one the historical
mean for the state and crop is used with a 95% band.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from pathlib import Path
from typing import Iterable

from agintel.core.timeutils import as_utc

from .base import ConnectorError
from .schemas import IntelligenceSnapshot, RawSignal, SignalBatch, YieldEstimate

FORECAST_BAND = 0.15
Z_95 = 1.96


class SnapshotConnector:
    """Connector backed by an already-materialised snapshot."""

    def __init__(self, snapshot: IntelligenceSnapshot, signals: Iterable[RawSignal] = ()) -> None:
        self._snapshot = snapshot
        self._signals = list(signals)

    @classmethod
    def from_json(cls, path: Path | str) -> "SnapshotConnector":
        """Load ``{"snapshot": {...}, "signals": [...]}`` or a bare snapshot document."""

        with Path(path).open("r", encoding="utf-8") as f:
            payload = json.load(f)
        if "snapshot" in payload:
            snapshot = IntelligenceSnapshot.model_validate(payload["snapshot"])
            signals = [RawSignal.model_validate(item) for item in payload.get("signals", [])]
        else:
            snapshot = IntelligenceSnapshot.model_validate(payload)
            signals = []
        return cls(snapshot, signals)

    async def fetch_signals(self, since: datetime) -> SignalBatch:
        cutoff = as_utc(since)
        signals = [s for s in self._signals if as_utc(s.discovered_at) >= cutoff]
        return SignalBatch(success=True, signals=signals, signals_discovered=len(signals))

    async def get_intelligence(self) -> IntelligenceSnapshot:
        return self._snapshot.model_copy(deep=True)

    async def predict_yield(self, state: str, crop: str, season: str) -> YieldEstimate:
        history = [f for f in self._snapshot.crop_forecasts if f.state == state and f.crop == crop]

        match = next((f for f in history if f.season == season), None)
        if match is not None:
            expected = match.yield_per_ha or 0.0
            low = match.confidence_lower
            high = match.confidence_upper
            return YieldEstimate(
                predicted_yield=expected,
                confidence_interval=(
                    low if low is not None else expected * (1 - FORECAST_BAND),
                    high if high is not None else expected * (1 + FORECAST_BAND),
                ),
                basis_data=[match],
                methodology=(
                    "Crop report forecast with +/-15% confidence band"
                    if low is None and high is None
                    else "Crop report forecast with reported confidence band"
                ),
            )

        if history:
            yields = [f.yield_per_ha or 0.0 for f in history]
            mean = sum(yields) / len(yields)
            std_dev = math.sqrt(sum((y - mean) ** 2 for y in yields) / len(yields))
            return YieldEstimate(
                predicted_yield=mean,
                confidence_interval=(mean - Z_95 * std_dev, mean + Z_95 * std_dev),
                basis_data=history,
                methodology="Historical average with 95% confidence interval",
            )

        raise ConnectorError(f"No yield data available for {crop} in {state}")


__all__ = ["SnapshotConnector"]
