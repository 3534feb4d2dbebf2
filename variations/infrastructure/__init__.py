"""Infrastructure layer: configuration and logging."""

from variations.infrastructure.config import Settings, settings
from variations.infrastructure.logging import configure_logging

__all__ = [
    "Settings",
    "configure_logging",
    "settings",
]
