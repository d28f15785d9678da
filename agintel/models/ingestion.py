"""Ingestion run ledger model."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agintel.db.base import Base


class RunStatus(str, enum.Enum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"


RUN_STATUSES = tuple(status.value for status in RunStatus)


class IngestionRun(Base):
    __tablename__ = "ingestion_run"
    __table_args__ = (Index("ix_ingestion_run_status_start", "status", "start_time"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    data_source: Mapped[str] = mapped_column(String(64))
    dataset_id: Mapped[str] = mapped_column(String(64), index=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        Enum(*RUN_STATUSES, name="ingestion_run_status"), default=RunStatus.RUNNING.value
    )
    records_processed: Mapped[int] = mapped_column(Integer, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)


__all__ = ["IngestionRun", "RunStatus", "RUN_STATUSES"]
