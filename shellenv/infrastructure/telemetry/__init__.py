"""
shellenv Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry integration for activation metrics and traces
- Fed by the event bus; nothing calls it directly
"""

from shellenv.infrastructure.telemetry.otel_exporter import (
    OTELExporter,
    OTELConfig,
    create_exporter,
)

__all__ = [
    "OTELExporter",
    "OTELConfig",
    "create_exporter",
]
