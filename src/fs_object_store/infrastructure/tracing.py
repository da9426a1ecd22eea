"""OpenTelemetry tracing configuration for Object Store."""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from fs_object_store import __version__
from fs_object_store.infrastructure.config import ObservabilityConfig


def setup_tracing(config: ObservabilityConfig) -> trace.Tracer:
    """Configure OpenTelemetry tracing for the object store."""
    resource = Resource.create(
        {
            "service.name": "fs_object_store",
            "service.version": __version__,
            "deployment.environment": config.environment,
        }
    )

    provider = TracerProvider(resource=resource)

    if config.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(
            endpoint=config.otlp_endpoint,
            insecure=True,
        )
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
    elif config.console_tracing:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    return trace.get_tracer("fs_object_store")


def get_tracer(name: str = "fs_object_store") -> trace.Tracer:
    """Get a tracer instance."""
    return trace.get_tracer(name)
