"""OpenTelemetry wiring for the batch jobs.

Job code only touches the module-level ``tracer`` and ``record_job_metrics``;
both go through the API proxies, so they are no-ops until ``setup_telemetry``
installs real providers.
"""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from sqlalchemy.ext.asyncio import AsyncEngine

from agintel.config import AppSettings
from agintel.models import RunStatus

logger = logging.getLogger(__name__)

_METRIC_EXPORT_INTERVAL_MS = 10000

tracer = trace.get_tracer("agintel.jobs")
_meter = metrics.get_meter("agintel.jobs")
records_processed_counter = _meter.create_counter(
    "agintel.records_processed",
    unit="1",
    description="Records written by ingestion and forecasting jobs",
)
job_duration_histogram = _meter.create_histogram(
    "agintel.job.duration",
    unit="ms",
    description="Wall-clock duration of a job run",
)

_tracer_provider: TracerProvider | None = None
_meter_provider: MeterProvider | None = None


def record_job_metrics(dataset_id: str, status: RunStatus, records: int, elapsed_ms: float) -> None:
    attributes = {"dataset": dataset_id, "status": status.value}
    records_processed_counter.add(records, attributes)
    job_duration_histogram.record(elapsed_ms, attributes)


def setup_telemetry(settings: AppSettings, engine: AsyncEngine | None = None) -> bool:
    """Install OTLP trace and metric providers and instrument SQLAlchemy.

    Returns whether telemetry is active. Repeated calls are no-ops.
    """

    global _tracer_provider, _meter_provider  # noqa: PLW0603 - process-wide providers

    if _tracer_provider is not None:
        return True
    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
            ResourceAttributes.SERVICE_NAMESPACE: "agintel",
        }
    )
    exporter_options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        exporter_options["endpoint"] = settings.telemetry_otlp_endpoint

    _tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    _tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**exporter_options)))
    trace.set_tracer_provider(_tracer_provider)

    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(**exporter_options),
        export_interval_millis=_METRIC_EXPORT_INTERVAL_MS,
    )
    _meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(_meter_provider)

    LoggingInstrumentor().instrument(set_logging_format=False)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=_tracer_provider)

    logger.info("Telemetry exporting to %s", settings.telemetry_otlp_endpoint or "the default OTLP endpoint")
    return True


def shutdown_telemetry() -> None:
    """Flush pending spans and metrics; jobs exit right after running."""

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
    if _meter_provider is not None:
        _meter_provider.shutdown()


__all__ = [
    "record_job_metrics",
    "records_processed_counter",
    "setup_telemetry",
    "shutdown_telemetry",
    "tracer",
]
