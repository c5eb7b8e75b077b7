"""
OpenTelemetry Exporter for shellenv

Architectural Intent:
- Exports activation telemetry to OTLP-compatible backends
- Subscribes to activation domain events instead of being called inline,
  so use cases stay unaware of observability

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Any
from urllib.parse import urlparse
import logging
import time
from datetime import datetime, UTC

from shellenv.domain.events.activation_events import (
    ActivationCompletedEvent,
    ActivationFailedEvent,
    ActivationStartedEvent,
    PackagesResolvedEvent,
)
from shellenv.domain.events.event_base import DomainEvent

logger = logging.getLogger(__name__)


@dataclass
class OTELConfig:
    endpoint: str = ""
    service_name: str = "shellenv"
    insecure: bool = False

    def __post_init__(self) -> None:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")
            if parsed.scheme == "http" and not is_localhost and not self.insecure:
                raise ValueError(
                    f"Non-localhost HTTP endpoint '{self.endpoint}' requires "
                    "insecure=True or use https://. "
                    "Set insecure=True to explicitly allow plaintext export."
                )


class OTELExporter:
    """
    OpenTelemetry exporter for activations.

    Metrics are always buffered locally; when an endpoint is configured they
    are also recorded on OTLP histograms and counters.
    """

    def __init__(self, config: OTELConfig):
        self.config = config
        self._initialized = False
        self._metrics_buffer: list[dict[str, Any]] = []
        self._meter: Any = None
        self._instruments: dict[str, Any] = {}
        self._started: dict[str, float] = {}
        self._spans: dict[str, Any] = {}

    def initialize(self) -> None:
        """Initialize OpenTelemetry SDK and exporters."""
        if not self.config.endpoint:
            logger.debug("OTEL endpoint not configured, telemetry stays local")
            return

        try:
            from opentelemetry import metrics, trace
            from opentelemetry.sdk.trace import TracerProvider
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
            from opentelemetry.sdk.resources import Resource, SERVICE_NAME
            from opentelemetry.sdk.metrics import MeterProvider
            from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
                OTLPMetricExporter,
            )

            resource = Resource(attributes={SERVICE_NAME: self.config.service_name})

            provider = TracerProvider(resource=resource)
            provider.add_span_processor(
                BatchSpanProcessor(
                    OTLPSpanExporter(endpoint=self.config.endpoint, insecure=self.config.insecure)
                )
            )
            trace.set_tracer_provider(provider)

            reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=self.config.endpoint, insecure=self.config.insecure)
            )
            metrics.set_meter_provider(
                MeterProvider(resource=resource, metric_readers=[reader])
            )
            self._meter = metrics.get_meter(__name__)
            self._initialized = True
        except Exception as e:
            logger.error("Failed to initialize OTEL: %s", e)
            self._initialized = False

    def _instrument(self, name: str, kind: str, unit: str = "") -> Any:
        if name not in self._instruments and self._meter:
            if kind == "histogram":
                self._instruments[name] = self._meter.create_histogram(name, unit=unit)
            else:
                self._instruments[name] = self._meter.create_counter(name, unit=unit)
        return self._instruments.get(name)

    def record_metric(
        self,
        name: str,
        value: float,
        unit: str = "",
        attributes: Optional[dict[str, str]] = None,
        kind: str = "counter",
    ) -> None:
        """Record a metric value."""
        self._metrics_buffer.append(
            {
                "name": name,
                "value": value,
                "unit": unit,
                "attributes": attributes or {},
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )

        if self._initialized:
            instrument = self._instrument(name, kind, unit)
            if instrument is None:
                return
            if kind == "histogram":
                instrument.record(value, attributes=attributes or {})
            else:
                instrument.add(value, attributes=attributes or {})

    def start_span(self, name: str, attributes: Optional[dict[str, str]] = None) -> Optional[Any]:
        """Start a tracing span."""
        if not self._initialized:
            return None
        from opentelemetry import trace

        return trace.get_tracer(__name__).start_span(name, attributes=attributes or {})

    def end_span(self, span: Any) -> None:
        if span:
            span.end()

    async def on_event(self, event: DomainEvent) -> None:
        """Event bus handler translating activation events into metrics."""
        name = event.aggregate_id
        attributes = {"environment": name}

        if isinstance(event, ActivationStartedEvent):
            self._started[name] = time.monotonic()
            self._spans[name] = self.start_span("shellenv.activation", attributes)
            self.record_metric("shellenv.activation.started", 1, attributes=attributes)
        elif isinstance(event, PackagesResolvedEvent):
            started = self._started.get(name)
            if started is not None:
                self.record_metric(
                    "shellenv.resolution.duration_ms",
                    (time.monotonic() - started) * 1000,
                    unit="ms",
                    attributes=attributes,
                    kind="histogram",
                )
            self.record_metric(
                "shellenv.resolution.packages",
                len(event.store_paths),
                attributes=attributes,
            )
        elif isinstance(event, (ActivationCompletedEvent, ActivationFailedEvent)):
            success = isinstance(event, ActivationCompletedEvent)
            finished = {**attributes, "success": str(success)}
            if event.exit_code is not None:
                finished["exit_code"] = str(event.exit_code)
            self.record_metric("shellenv.activation.finished", 1, attributes=finished)
            span = self._spans.get(name)
            if span is not None and event.exit_code is not None:
                span.set_attribute("shellenv.exit_code", event.exit_code)
            self._started.pop(name, None)
            self.end_span(self._spans.pop(name, None))


def create_exporter(endpoint: Optional[str] = None, insecure: bool = False) -> OTELExporter:
    """Factory function to create an initialized OTEL exporter."""
    exporter = OTELExporter(OTELConfig(endpoint=endpoint or "", insecure=insecure))
    exporter.initialize()
    return exporter
