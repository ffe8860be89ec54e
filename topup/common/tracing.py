"""OpenTelemetry setup for the API process. Both helpers are no-ops when tracing is off."""

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from topup.common.config import settings

# Probe and scrape endpoints are polled constantly and carry no payment context.
EXCLUDED_URLS = "metrics,health,api/health"


def setup_tracing(service_name: str) -> None:
    if not settings.tracing_enabled:
        return
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint))
    )
    trace.set_tracer_provider(provider)


def instrument_app(app: FastAPI) -> None:
    """Attach request spans to every route except probes."""

    if settings.tracing_enabled:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=EXCLUDED_URLS)
