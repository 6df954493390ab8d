"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from portfolio.shared.telemetry.logging import get_logger, setup_logging
from portfolio.shared.telemetry.telemetry import (
    TelemetryConfig,
    configure_telemetry,
    get_telemetry,
    set_telemetry,
)
from portfolio.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "TelemetryConfig",
    "configure_telemetry",
    "get_telemetry",
    "set_telemetry",
    "traced",
    "add_span_attributes",
    "add_span_event",
]
