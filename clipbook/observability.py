"""
Prometheus metrics + OpenTelemetry tracing (exporter is optional).
Docs: Prometheus client (0.22.x), OTEL Python SDK (1.27.0).
"""

from fastapi import FastAPI
from starlette.responses import Response
from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider

from clipbook.config import Settings

# Tiny FastAPI app ONLY for /metrics, mounted under the main app at /metrics.
metrics_app = FastAPI()

@metrics_app.get("/")  # must be "/" so mounting at "/metrics" works
def metrics_root():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)

# Inbound (dialer -> us)
REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", labelnames=("endpoint", "method", "status")
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Request latency", labelnames=("endpoint", "method")
)

# Outbound (us -> HubSpot)
HUBSPOT_REQUESTS = Counter(
    "hubspot_requests_total", "HubSpot API calls", labelnames=("operation", "status")
)
HUBSPOT_LATENCY = Histogram(
    "hubspot_request_duration_seconds", "HubSpot API latency", labelnames=("operation",)
)

tracer = trace.get_tracer("clipbook")

_tracer_configured = False


def configure_tracer(settings: Settings) -> None:
    """
    If an OTLP exporter endpoint is set, wire up OpenTelemetry.
    Ships spans for every HubSpot call to Tempo/Jaeger/CloudTrace.
    """
    global _tracer_configured
    if _tracer_configured or not settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        return
    resource = Resource.create({"service.name": settings.SERVICE_NAME})
    provider = TracerProvider(resource=resource)
    processor = BatchSpanProcessor(
        OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT)
    )
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)
    _tracer_configured = True
