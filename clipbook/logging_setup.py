"""
Structured JSON logging with structlog.
One JSON object per line: easy to grep in `docker compose logs` and easy to ship.
"""

import logging

import structlog

from clipbook.config import Settings, settings as default_settings

LOGGER_NAME = "clipbook"

_stdlib_configured = False


def configure_logging(settings: Settings | None = None):
    """
    (Re)configure structlog for the given Settings.
    Every event carries `service`, taken from SERVICE_NAME of the injected settings.
    """
    global _stdlib_configured
    settings = settings or default_settings
    lvl = logging.getLevelName(settings.LOG_LEVEL)  # validated by Settings
    if not _stdlib_configured:
        logging.basicConfig(level=lvl, format="%(message)s")
        _stdlib_configured = True

    service = settings.SERVICE_NAME

    def add_service(logger, method_name, event_dict):
        event_dict.setdefault("service", service)
        return event_dict

    structlog.configure(
        processors=[
            add_service,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(lvl),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(component: str | None = None):
    # lazy proxy: picks up whatever configure_logging() set last
    if component:
        return structlog.get_logger(LOGGER_NAME, component=component)
    return structlog.get_logger(LOGGER_NAME)
