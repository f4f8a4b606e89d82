"""Root logger setup keyed on APP_ENV."""

import logging
import time

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"

# local and dev are verbose; prod keeps INFO and above
_LEVEL_BY_ENV = {
    "local": logging.DEBUG,
    "dev": logging.DEBUG,
    "prod": logging.INFO,
}


def resolve_level(env: str, override: str | None = None) -> int:
    """Return the effective level for ``env``; an explicit override wins."""
    if override:
        candidate = getattr(logging, override.strip().upper(), None)
        if isinstance(candidate, int):
            return candidate
    return _LEVEL_BY_ENV.get(env, logging.INFO)


def build_formatter() -> logging.Formatter:
    """Formatter with UTC timestamps, matching the trailing Z in the date format."""
    formatter = logging.Formatter(_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)
    formatter.converter = time.gmtime
    return formatter


def setup_logging(env: str, override: str | None = None) -> int:
    """
    Configure the root logger once and return the effective level.

    Safe to call more than once: handlers are only installed when the root
    logger has none (uvicorn and pytest install their own).
    """
    level = resolve_level(env, override)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(build_formatter())
        logging.basicConfig(level=level, handlers=[handler])
    root.setLevel(level)
    # grpc's own logger is chatty at DEBUG
    logging.getLogger("grpc").setLevel(max(level, logging.INFO))
    return level
