"""OpenTelemetry traces and metrics for the API.

Besides the framework instrumentation, status changes are counted on the
``taiwanstay.status_changes`` counter so dashboards can follow the review
queue (PENDING -> ACTIVE / REJECTED) and pause rates. Without a configured
exporter the OpenTelemetry API hands out no-op instruments, so the counter is
safe to use in tests and local runs.
"""

import os
from fastapi import FastAPI
from opentelemetry import trace, metrics
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.instrumentation.psycopg2 import Psycopg2Instrumentor
from loguru import logger

SERVICE_NAME = "taiwanstay-api"
EXCLUDED_URLS = "/health,/docs,/openapi.json"

_status_counter = None


def _get_status_counter():
    # Created lazily so it binds to the provider installed by setup_telemetry
    global _status_counter
    if _status_counter is None:
        _status_counter = metrics.get_meter("taiwanstay.status").create_counter(
            "taiwanstay.status_changes",
            unit="1",
            description="Accepted status changes by entity and transition",
        )
    return _status_counter


def record_status_change(entity: str, current: str, target: str, role: str) -> None:
    """
    Count one committed status change.

    Parameters:
        entity: "opportunity", "application" or "host".
        current: Status before the change.
        target: Status after the change.
        role: Role of the user who made the change.
    """
    _get_status_counter().add(
        1,
        {"entity": entity, "from": current, "to": target, "role": role},
    )


def setup_telemetry(app: FastAPI):
    """
    Initialize OpenTelemetry tracing and metrics when an OTLP endpoint is configured.

    Reads OTEL_EXPORTER_OTLP_ENDPOINT, OTEL_SERVICE_NAME, ENVIRONMENT and
    OTEL_EXPORTER_OTLP_INSECURE. Instruments the FastAPI app, SQLAlchemy and
    Psycopg2 once per process. Without an endpoint telemetry stays disabled;
    setup failures are logged, never raised.

    Parameters:
        app (FastAPI): Application to instrument (health and docs URLs excluded).
    """
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        logger.warning("No OTLP endpoint configured, telemetry disabled.")
        return
    try:
        resource = Resource.create(
            {
                "service.name": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME),
                "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            }
        )
        insecure = os.getenv("OTEL_EXPORTER_OTLP_INSECURE", "false").lower() == "true"

        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=insecure))
        )
        trace.set_tracer_provider(tracer_provider)

        metric_reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=endpoint, insecure=insecure)
        )
        metrics.set_meter_provider(
            MeterProvider(resource=resource, metric_readers=[metric_reader])
        )

        if not getattr(setup_telemetry, "_instrumented", False):
            FastAPIInstrumentor.instrument_app(app, excluded_urls=EXCLUDED_URLS)
            SQLAlchemyInstrumentor().instrument(enable_commenter=True)  # type: ignore
            Psycopg2Instrumentor().instrument(  # type: ignore
                enable_commenter=True, skip_dep_check=True
            )
            setup_telemetry._instrumented = True  # type: ignore

        logger.info(f"Traces and metrics exported to {endpoint}")

    except Exception as e:
        logger.error(f"Telemetry setup failed: {e}")
