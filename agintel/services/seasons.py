"""Australian growing-season labels.

Season labels are join keys across forecasts and predictions, so the
boundary is fixed: from April onward the label is ``"<year>-<year+1>"``,
before April it is ``"<year-1>-<year>"``. March therefore still belongs to
the season that began the previous April: 2025-03-15 is ``"2024-2025"``,
not ``"2025-2026"``.
"""

from __future__ import annotations

from datetime import date

SEASON_START_MONTH = 4


def season_label(start_year: int) -> str:
    return f"{start_year}-{start_year + 1}"


def current_season(today: date) -> str:
    """Return the season label in force on ``today``."""

    if today.month >= SEASON_START_MONTH:
        return season_label(today.year)
    return season_label(today.year - 1)


__all__ = ["SEASON_START_MONTH", "current_season", "season_label"]
