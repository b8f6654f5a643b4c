"""Process-level setup: logging and metric registration from :class:`Settings`."""

from __future__ import annotations

import os
from logging import getLogger

from prometheus_client import CollectorRegistry

from ..config.settings import Settings, load_settings
from ..observability.metrics import ensure_metrics_registered
from .logging import LOG_LEVEL_ENV, configure_logging

LOG = getLogger(__name__)

__all__ = ["LOG_LEVEL_ENV", "bootstrap", "configure_logging"]


def bootstrap(
    settings: Settings | None = None,
    *,
    registry: CollectorRegistry | None = None,
) -> Settings:
    """Apply the observability section of ``settings`` and return them.

    When ``settings`` is omitted they are read with :func:`load_settings`.
    The configured log level only applies when ``ALMANACENGINE_LOG_LEVEL``
    is unset.
    """

    if settings is None:
        settings = load_settings()
    cfg = settings.observability
    level = None if os.environ.get(LOG_LEVEL_ENV) else cfg.log_level
    effective = configure_logging(level=level)
    if cfg.metrics_enabled:
        ensure_metrics_registered(registry)
    LOG.debug(
        "almanacengine bootstrapped",
        extra={"log_level": effective, "metrics_enabled": cfg.metrics_enabled},
    )
    return settings
