"""Core app configuration, database, security and errors."""

from civictrack.core.config import get_settings, settings
from civictrack.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
