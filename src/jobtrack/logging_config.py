from __future__ import annotations

import logging

from jobtrack.config import get_settings

_LOG_CONFIGURED = False

# Chatty at INFO/DEBUG during the OAuth code exchange.
_QUIET_LOGGERS = ("urllib3", "multipart")


def configure_logging(level: str | None = None) -> None:
    """Set up root logging once per process; ``level`` overrides LOG_LEVEL."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    settings = get_settings()
    resolved = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format=f"%(asctime)s %(levelname)s {settings.app_name} [%(name)s] %(message)s",
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    _LOG_CONFIGURED = True
