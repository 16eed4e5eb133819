"""
Structured logs for the supply pipeline, bound to the layer and component
that produced them.
"""

from .logging import (
    APP_NAME,
    get_infrastructure_logger,
    get_ingestion_logger,
    get_logger,
    get_pipeline_logger,
    get_processing_logger,
    get_storage_logger,
    setup_logging,
)

__all__ = [
    "APP_NAME",
    "get_infrastructure_logger",
    "get_ingestion_logger",
    "get_logger",
    "get_pipeline_logger",
    "get_processing_logger",
    "get_storage_logger",
    "setup_logging",
]
