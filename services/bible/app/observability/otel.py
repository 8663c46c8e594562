"""OpenTelemetry helpers for the bible service."""
from __future__ import annotations

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from ..config import BibleSettings, get_settings

_configured = False


def configure_telemetry(settings: BibleSettings | None = None) -> None:
    """Install tracer and meter providers; exporters attach only when an OTLP endpoint is set.

    The global providers can be set once per process, so repeated calls (one
    per ``create_app``) are no-ops.
    """
    global _configured
    if _configured:
        return
    settings = settings or get_settings()
    observability = settings.observability
    resource = Resource(attributes={SERVICE_NAME: observability.otel_service_name})

    tracer_provider = TracerProvider(resource=resource)
    if observability.otel_exporter_otlp_endpoint:
        span_exporter = OTLPSpanExporter(endpoint=observability.otel_exporter_otlp_endpoint)
        tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))

        metric_exporter = OTLPMetricExporter(endpoint=observability.otel_exporter_otlp_endpoint)
        reader = PeriodicExportingMetricReader(metric_exporter)
        metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))
    trace.set_tracer_provider(tracer_provider)
    _configured = True


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def get_meter(name: str) -> metrics.Meter:
    return metrics.get_meter(name)


__all__ = ["configure_telemetry", "get_meter", "get_tracer"]
