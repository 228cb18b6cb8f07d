"""Observability utilities for structured logging, metrics, and tracing."""

from .logging import bind_global_context, configure_logging
from .metrics import metrics_registry, record_package_transition, record_store_error, record_system_state
from .tracing import configure_tracer, flush_traces, get_tracer

__all__ = [
    "bind_global_context",
    "configure_logging",
    "configure_tracer",
    "flush_traces",
    "get_tracer",
    "metrics_registry",
    "record_package_transition",
    "record_store_error",
    "record_system_state",
]
