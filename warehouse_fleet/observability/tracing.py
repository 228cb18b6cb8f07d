"""OpenTelemetry tracing configuration."""

from __future__ import annotations

from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from warehouse_fleet.enterprise.config.settings import TelemetrySettings

_provider: Optional[TracerProvider] = None


def configure_tracer(service_name: str, telemetry: TelemetrySettings, environment: str = "dev") -> TracerProvider:
    """Install the process-wide tracer provider.

    OpenTelemetry only accepts one global provider, so later calls return the
    provider installed by the first one. Spans are exported over OTLP only
    when an endpoint is configured.
    """

    global _provider
    if _provider is not None:
        return _provider

    resource = Resource.create({"service.name": service_name, "deployment.environment": environment})
    provider = TracerProvider(resource=resource)

    if telemetry.otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=telemetry.otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    _provider = provider
    return provider


def flush_traces(timeout_ms: int = 5000) -> bool:
    """Push buffered spans to the exporter; ``True`` when nothing is left pending."""

    if _provider is None:
        return True
    return _provider.force_flush(timeout_ms)


def get_tracer(name: str) -> trace.Tracer:
    """Return a tracer from the global provider (proxied until one is configured)."""

    return trace.get_tracer(name)
