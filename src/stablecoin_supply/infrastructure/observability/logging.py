"""
Structured logging for the supply pipeline.

Every line is a JSON object (or a coloured console line in development)
carrying the layer and component that emitted it:

    {"app": "stablecoin-supply", "layer": "ingestion", "component": "fetcher",
     "provider": "coingecko", "coin": "usdc", "event": "fetch_attempt", ...}

Layers:
    - infrastructure: config loading, health probes
    - ingestion: fetcher, provider adapters, provider chain
    - processing: normalizers, completeness checks
    - storage: CSV history, JSON document, snapshot cache
    - pipeline: update workflow, live loader, fallback orchestrator
"""

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "stablecoin-supply"

Layer = Literal["infrastructure", "ingestion", "processing", "storage", "pipeline"]


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every entry with the application name."""
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def add_severity_level(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mirror the structlog level as an upper-case "severity" field."""
    level = event_dict.get("level")
    if level:
        event_dict["severity"] = "WARNING" if level == "warn" else level.upper()
    return event_dict


def _build_processors(json_logs: bool, include_timestamp: bool) -> list[Processor]:
    processors: list[Processor] = []
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors += [
        structlog.contextvars.merge_contextvars,
        add_app_context,
        structlog.stdlib.add_log_level,
        add_severity_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer(sort_keys=False))
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def setup_logging(
    level: str = "INFO",
    json_logs: bool = True,
    include_timestamp: bool = True,
) -> None:
    """
    Configure stdlib logging and structlog for the process.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL; unknown values mean INFO
        json_logs: JSON lines for the scheduled job, console output otherwise
        include_timestamp: Add an ISO-8601 UTC "timestamp" field
    """
    log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(log_level)

    structlog.configure(
        processors=_build_processors(json_logs, include_timestamp),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    name: str | None = None,
    layer: Layer | None = None,
    component: str | None = None,
    **initial_context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Logger bound to a layer, a component and any extra context.

    None values are not bound, so optional context (provider, coin) can be
    passed through unconditionally.
    """
    context = {"layer": layer, "component": component, "module": name}
    context.update(initial_context)
    return structlog.get_logger(name).bind(
        **{key: value for key, value in context.items() if value is not None}
    )


def get_infrastructure_logger(component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    return get_logger("infrastructure", "infrastructure", component, **context)


def get_ingestion_logger(
    component: str,
    provider: str | None = None,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """Logger for fetch and adapter code; binds the provider when given."""
    return get_logger("ingestion", "ingestion", component, provider=provider, **context)


def get_processing_logger(component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    return get_logger("processing", "processing", component, **context)


def get_storage_logger(component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    return get_logger("storage", "storage", component, **context)


def get_pipeline_logger(
    component: str = "update-workflow",
    coin: str | None = None,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """Logger for the update workflow and the dashboard feed, keyed by coin."""
    return get_logger("pipeline", "pipeline", component, coin=coin, **context)
