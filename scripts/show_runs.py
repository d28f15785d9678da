"""Print recent ingestion runs and any runs that look stuck."""

from __future__ import annotations

import argparse
import asyncio
from datetime import timedelta

from agintel.config import get_settings
from agintel.core.timeutils import utcnow
from agintel.db.session import get_engine, get_session_factory
from agintel.services.queries import recent_runs, stuck_runs


async def _run(limit: int, dataset_id: str | None) -> None:
    settings = get_settings()
    async with get_session_factory()() as session:
        runs = await recent_runs(session, limit=limit, dataset_id=dataset_id)
        stuck = await stuck_runs(
            session,
            now=utcnow(),
            older_than=timedelta(hours=settings.stuck_run_after_hours),
        )

    if not runs:
        print("No ingestion runs recorded")
    for run in runs:
        print(
            f"{run.id:>6}  {run.dataset_id:<26} {run.status:<10} "
            f"{run.records_processed:>6}  {run.start_time:%Y-%m-%d %H:%M}  {run.error_message or ''}"
        )
    for run in stuck:
        print(f"STUCK run {run.id} ({run.dataset_id}) started {run.start_time:%Y-%m-%d %H:%M}")
    await get_engine().dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Show recent ingestion runs")
    parser.add_argument("--limit", type=int, default=20)
    parser.add_argument("--dataset")
    args = parser.parse_args()

    asyncio.run(_run(args.limit, args.dataset))


if __name__ == "__main__":
    main()
