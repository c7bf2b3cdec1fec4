# Local application imports
from civiclink.core.monitoring.logging import get_contextual_logger, get_logger
from civiclink.core.monitoring.sentry import _setup_sentry_logging

__all__ = ["get_contextual_logger", "_setup_sentry_logging", "get_logger"]
