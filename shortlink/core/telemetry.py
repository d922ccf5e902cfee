"""OpenTelemetry instrumentation for the shortlink service."""

import logging
from contextlib import suppress
from typing import Dict, Optional, Tuple, Union

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter as OTLPGrpcMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter as OTLPGrpcSpanExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter as OTLPHttpMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter as OTLPHttpSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio, TraceIdRatioBased

from shortlink.core.config import Settings

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "shortlink"

# Providers are process-wide in the OpenTelemetry API; configure them once.
_providers: Optional[Tuple[TracerProvider, MeterProvider]] = None


def setup_telemetry(app_settings: Settings) -> Tuple[Optional[TracerProvider], Optional[MeterProvider]]:
    """Initialize OpenTelemetry tracer and meter providers."""
    global _providers

    if not app_settings.OTEL_ENABLED:
        logger.info("OpenTelemetry instrumentation is disabled")
        return None, None
    if _providers is not None:
        return _providers

    try:
        resource = Resource.create({
            "service.name": app_settings.OTEL_SERVICE_NAME,
            "service.version": app_settings.APP_VERSION,
            "deployment.environment": app_settings.ENVIRONMENT.value,
            **_parse_resource_attributes(app_settings.OTEL_RESOURCE_ATTRIBUTES),
        })
        _providers = (_setup_tracing(app_settings, resource), _setup_metrics(app_settings, resource))
        return _providers
    except Exception as e:
        logger.error(f"Failed to initialize OpenTelemetry: {e}")
        return None, None


def instrument_app(app, app_settings: Settings, db_engine=None) -> None:
    """Instrument the FastAPI app and its database engine."""
    if not app_settings.OTEL_ENABLED:
        return

    try:
        LoggingInstrumentor().instrument(tracer_provider=trace.get_tracer_provider())
        FastAPIInstrumentor.instrument_app(app, tracer_provider=trace.get_tracer_provider())

        if db_engine is not None:
            with suppress(Exception):
                SQLAlchemyInstrumentor().instrument(
                    engine=db_engine.sync_engine,
                    tracer_provider=trace.get_tracer_provider(),
                )
                logger.info("SQLAlchemy instrumentation enabled")
    except Exception as e:
        logger.error(f"Failed to instrument application: {e}")


def _setup_tracing(app_settings: Settings, resource: Resource) -> TracerProvider:
    tracer_provider = TracerProvider(
        resource=resource,
        sampler=_create_sampler(
            app_settings.OTEL_TRACES_SAMPLER,
            float(app_settings.OTEL_TRACES_SAMPLER_ARG),
        ),
    )
    trace.set_tracer_provider(tracer_provider)

    if app_settings.OTEL_EXPORTER_OTLP_PROTOCOL.lower() == "grpc":
        exporter = OTLPGrpcSpanExporter(endpoint=app_settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
    else:
        exporter = OTLPHttpSpanExporter(endpoint=app_settings.OTEL_EXPORTER_OTLP_ENDPOINT)

    tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.info(f"OpenTelemetry tracer configured with {app_settings.OTEL_EXPORTER_OTLP_PROTOCOL} exporter")
    return tracer_provider


def _setup_metrics(app_settings: Settings, resource: Resource) -> MeterProvider:
    if app_settings.OTEL_EXPORTER_OTLP_PROTOCOL.lower() == "grpc":
        exporter = OTLPGrpcMetricExporter(
            endpoint=app_settings.OTEL_EXPORTER_OTLP_METRICS_ENDPOINT, insecure=True
        )
    else:
        exporter = OTLPHttpMetricExporter(endpoint=app_settings.OTEL_EXPORTER_OTLP_METRICS_ENDPOINT)

    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=app_settings.OTEL_METRICS_EXPORT_INTERVAL_MILLIS,
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)
    return meter_provider


def _create_sampler(sampler_type: str, sampler_arg: float) -> Union[ParentBasedTraceIdRatio, TraceIdRatioBased]:
    if sampler_type.lower() == "parentbased_traceidratio":
        return ParentBasedTraceIdRatio(sampler_arg)
    return TraceIdRatioBased(sampler_arg)


def _parse_resource_attributes(attributes_str: str) -> Dict[str, str]:
    """Parse resource attributes from ``key=value,key=value`` format."""
    if not attributes_str:
        return {}

    attributes = {}
    for pair in attributes_str.split(","):
        with suppress(ValueError):
            key, value = pair.strip().split("=", 1)
            attributes[key] = value
    return attributes


def get_tracer(name: Optional[str] = None) -> trace.Tracer:
    """Get a tracer for creating spans."""
    return trace.get_tracer(name or INSTRUMENTATION_NAME)


def get_meter(name: Optional[str] = None) -> metrics.Meter:
    """Get a meter for creating metrics."""
    return metrics.get_meter(name or INSTRUMENTATION_NAME)
