# sitegen/utils/telemetry.py
# OpenTelemetry tracing, printed to the console; opt-in via OTEL_ENABLED

from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from sqlalchemy.ext.asyncio import AsyncEngine


def build_tracer_provider(service_name: str) -> TracerProvider:
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    return provider


def init_otel(
    app: Optional[FastAPI] = None,
    engine: Optional[AsyncEngine] = None,
    service_name: str = "sitegen",
) -> trace.Tracer:
    """Install the tracer provider and instrument the app and the DB engine.

    Spans cover every HTTP request and every SQL statement; the JSON log
    formatter picks up their trace ids.
    """
    trace.set_tracer_provider(build_tracer_provider(service_name))

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)
    if engine is not None:
        # The instrumentor hooks the sync engine underneath the async facade
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)

    return trace.get_tracer(service_name)
