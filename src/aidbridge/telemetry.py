"""Tracing for AidBridge.

``OBSERVABILITY`` picks the backend once at startup: ``logfire``, ``otel``
(OTLP/HTTP, optional console echo) or ``off``.  Independently of the
backend, every simulated reply runs inside a ``reply_span`` tagged with the
conversation it belongs to; with no provider installed those spans are
no-ops from the OpenTelemetry API.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from loguru import logger
from opentelemetry import trace

from aidbridge import __version__
from aidbridge.config import Settings
from aidbridge.domain.models import UserType
from aidbridge.domain.thread_key import ThreadKey

if TYPE_CHECKING:
    from fastapi import FastAPI
    from pydantic_ai.models.instrumented import InstrumentationSettings

TRACER_NAME = "aidbridge"
_MODES = ("logfire", "otel")


def is_observability_active(settings: Settings) -> bool:
    return settings.observability.lower() in _MODES


def setup_telemetry(app: FastAPI, settings: Settings) -> None:
    """Install the configured tracing backend and instrument *app*."""
    mode = settings.observability.lower()
    if mode == "off":
        logger.info("Tracing off")
        return
    if mode not in _MODES:
        logger.warning("OBSERVABILITY={!r} is not one of {}; tracing off", mode, _MODES)
        return

    if mode == "logfire":
        import logfire

        logfire.configure(service_name=settings.otel_service_name)
        logfire.instrument_fastapi(app)
    else:
        trace.set_tracer_provider(_otel_provider(settings))
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(app)

    logger.info("Tracing via {} | service={}", mode, settings.otel_service_name)


def _otel_provider(settings: Settings):
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import (
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    provider = TracerProvider(
        resource=Resource.create(
            {"service.name": settings.otel_service_name, "service.version": __version__}
        )
    )
    endpoint = f"{settings.otel_exporter_otlp_endpoint.rstrip('/')}/v1/traces"
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    if settings.otel_console_exporter:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    logger.debug("OTLP exporter -> {}", endpoint)
    return provider


def get_instrumentation_settings(settings: Settings) -> InstrumentationSettings | None:
    """Agent instrumentation matching the tracing backend, or None when tracing is off."""
    if not is_observability_active(settings):
        return None

    from pydantic_ai.models.instrumented import InstrumentationSettings

    return InstrumentationSettings()


@contextmanager
def reply_span(
    key: ThreadKey, role: UserType, tracer: trace.Tracer | None = None
) -> Iterator[trace.Span]:
    """Span around one simulated reply, tagged with its conversation."""
    tracer = tracer or trace.get_tracer(TRACER_NAME, __version__)
    with tracer.start_as_current_span("aidbridge.simulated_reply") as span:
        span.set_attribute("aidbridge.thread_id", str(key))
        span.set_attribute("aidbridge.donor_id", key.donor_id)
        span.set_attribute("aidbridge.ngo_id", key.ngo_id)
        span.set_attribute("aidbridge.item_id", key.item_id)
        span.set_attribute("aidbridge.simulated_role", str(role))
        yield span
