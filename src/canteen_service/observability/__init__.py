"""Logging, tracing and metrics for the canteen service."""

from canteen_service.observability.config import configure_logging, setup_observability
from canteen_service.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]
