"""Prometheus metrics utilities."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Enum, Histogram

from warehouse_fleet.enterprise.core import SystemState

metrics_registry = CollectorRegistry()

REQUEST_COUNTER = Counter(
    "warehouse_fleet_api_requests_total",
    "Total number of API requests handled",
    registry=metrics_registry,
)

TICK_COUNTER = Counter(
    "warehouse_fleet_ticks_total",
    "Fleet ticks executed",
    registry=metrics_registry,
)

TICK_FAILURES = Counter(
    "warehouse_fleet_tick_failures_total",
    "Fleet ticks aborted by a store error",
    registry=metrics_registry,
)

TICK_DURATION = Histogram(
    "warehouse_fleet_tick_seconds",
    "Duration of a fleet tick",
    buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
    registry=metrics_registry,
)

PACKAGES_GENERATED = Counter(
    "warehouse_fleet_packages_generated_total",
    "Packages created by the package generator",
    registry=metrics_registry,
)

PACKAGE_TRANSITIONS = Counter(
    "warehouse_fleet_package_transitions_total",
    "Package state changes made by the tick",
    ["transition"],
    registry=metrics_registry,
)

STORE_ERRORS = Counter(
    "warehouse_fleet_store_errors_total",
    "Store failures caught by the control loop",
    ["operation"],
    registry=metrics_registry,
)

SYSTEM_STATE = Enum(
    "warehouse_fleet_system_state",
    "Run state of the fleet controller",
    states=[state.value for state in SystemState],
    registry=metrics_registry,
)
SYSTEM_STATE.state(SystemState.STOPPED.value)


def record_package_transition(transition: str, count: int = 1) -> None:
    """Count assignments, completions, or forced unassignments."""

    PACKAGE_TRANSITIONS.labels(transition=transition).inc(count)


def record_store_error(operation: str) -> None:
    STORE_ERRORS.labels(operation=operation).inc()


def record_system_state(state: SystemState) -> None:
    SYSTEM_STATE.state(state.value)
