from typing import Optional

import sentry_sdk
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .config import Settings, settings

RESOURCE = Resource.create({"service.name": "timebill-api", "deployment.env": settings.env})

meter = metrics.get_meter("timebill")
entries_written = meter.create_counter(
    "timebill.time_entries.written", unit="1", description="Time entries created or updated"
)
reports_exported = meter.create_counter(
    "timebill.reports.exported", unit="1", description="CSV and PDF documents rendered"
)


def configure_tracing(otlp_endpoint: Optional[str] = None) -> None:
    if not otlp_endpoint:
        return
    tracer_provider = TracerProvider(resource=RESOURCE)
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    trace.set_tracer_provider(tracer_provider)


def configure_metrics(otlp_endpoint: Optional[str] = None) -> None:
    if not otlp_endpoint:
        return
    reader = PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=otlp_endpoint))
    metrics.set_meter_provider(MeterProvider(resource=RESOURCE, metric_readers=[reader]))


def configure_error_monitoring(sentry_dsn: Optional[str], env: str) -> None:
    if sentry_dsn:
        sentry_sdk.init(dsn=sentry_dsn, environment=env, traces_sample_rate=0.2)


def configure_observability(config: Settings = settings) -> None:
    configure_tracing(config.otlp_endpoint)
    configure_metrics(config.otlp_endpoint)
    configure_error_monitoring(config.sentry_dsn, config.env)
