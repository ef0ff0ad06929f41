"""OpenTelemetry export for AIClient spans.

Export is driven by the [tracing] table of rubberduck.toml. The CLI installs
the provider for the duration of one command and flushes it on exit.
"""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

from . import __version__
from .config import TracingSettings

_provider: Optional[TracerProvider] = None


def build_tracer_provider(
    settings: TracingSettings, exporter: Optional[SpanExporter] = None
) -> TracerProvider:
    """Create a provider tagged with the rubberduck service name and version.

    Spans go to ``exporter`` when given, otherwise to the configured OTLP endpoint.
    """
    resource = Resource.create(
        {"service.name": settings.service_name, "service.version": __version__}
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(
            exporter or OTLPSpanExporter(endpoint=settings.otlp_endpoint, insecure=True),
            schedule_delay_millis=1000,
        )
    )
    return provider


def init_telemetry(settings: TracingSettings) -> Optional[TracerProvider]:
    """Install the global tracer provider when tracing is enabled.

    Returns the installed provider, or None when disabled or already installed.
    """
    global _provider
    if _provider is not None or not settings.enabled:
        return None

    _provider = build_tracer_provider(settings)
    trace.set_tracer_provider(_provider)
    logging.info(
        "[rubberduck] Exporting spans as %s to %s", settings.service_name, settings.otlp_endpoint
    )
    return _provider


def shutdown_telemetry() -> None:
    """Flush and stop the provider installed by init_telemetry."""
    global _provider
    if _provider is None:
        return

    _provider.shutdown()
    _provider = None


__all__ = ["build_tracer_provider", "init_telemetry", "shutdown_telemetry"]
