"""Logging and tracing setup for the intake service."""

from __future__ import annotations

import logging
from logging.config import dictConfig

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from intake.core.config import Settings

# Loggers that get their own entry so overrides apply per component.
COMPONENT_LOGGERS: tuple[str, ...] = (
    "intake.companies",
    "intake.conversation",
    "intake.extraction",
    "intake.tickets",
)

_active_provider: TracerProvider | None = None


def parse_pairs(raw: str | None) -> dict[str, str]:
    """Split ``key=value,key=value`` text; malformed items are skipped."""

    pairs: dict[str, str] = {}
    for item in (raw or "").split(","):
        key, sep, value = item.partition("=")
        if sep and key.strip():
            pairs[key.strip()] = value.strip()
    return pairs


def _level(name: str, default: int) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else default


def component_levels(settings: Settings) -> dict[str, int]:
    """Effective level per component logger, overrides from ``log_levels``."""

    base = _level(settings.log_level, logging.INFO)
    levels = dict.fromkeys(COMPONENT_LOGGERS, base)
    for name, level in parse_pairs(settings.log_levels).items():
        levels[name] = _level(level, base)
    return levels


def configure_logging(settings: Settings) -> logging.Logger:
    """Install one stream handler on the root and set component levels."""

    base = _level(settings.log_level, logging.INFO)
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": settings.log_format}},
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "default"},
            },
            "loggers": {name: {"level": level} for name, level in component_levels(settings).items()},
            "root": {"handlers": ["console"], "level": base},
        }
    )

    logger = logging.getLogger(settings.app_name)
    logger.setLevel(base)
    return logger


def build_resource(settings: Settings) -> Resource:
    return Resource(
        attributes={
            "service.name": settings.otel_service_name,
            "deployment.environment": settings.environment,
        }
    )


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Export conversation spans over OTLP when tracing is enabled."""

    global _active_provider

    if _active_provider is not None or not settings.otel_enabled:
        return None

    exporter = OTLPSpanExporter(
        endpoint=settings.otel_exporter_otlp_endpoint,
        headers=parse_pairs(settings.otel_exporter_otlp_headers) or None,
    )
    provider = TracerProvider(resource=build_resource(settings))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    _active_provider = provider
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    global _active_provider

    if provider is None:
        return
    provider.shutdown()
    if provider is _active_provider:
        _active_provider = None


def get_tracer(name: str) -> trace.Tracer:
    """Return a tracer; spans are no-ops until :func:`init_tracer` runs."""

    return trace.get_tracer(name)
