"""Journal relay package exports commonly used helpers for convenience."""

from .config import Settings, get_settings
from .logging_config import configure_logging
from .quota import QuotaGuard

__all__ = ["Settings", "get_settings", "configure_logging", "QuotaGuard"]
