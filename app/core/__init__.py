"""Core app configuration, database, logging and request context."""

from app.core.config import get_settings, settings
from app.core.context import CallContext, RequestContext

__all__ = ["CallContext", "RequestContext", "get_settings", "settings"]
