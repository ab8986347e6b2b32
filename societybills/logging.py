import logging
import sys

from societybills.settings import settings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(threadName)s %(message)s"

# Third-party loggers that are too chatty at INFO.
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "alembic.runtime.migration")


def _build_formatter() -> logging.Formatter:
    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=JSON_FORMAT,
            rename_fields={"asctime": "timestamp", "levelname": "level", "threadName": "thread"},
            static_fields={"service": "societybills"},
        )
    return logging.Formatter(TEXT_FORMAT)


def configure_logging() -> None:
    """Install one stderr handler on the root logger using the configured format.

    Alembic's ``fileConfig`` replaces root handlers, so call ``reconfigure()``
    again after running migrations.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


reconfigure = configure_logging
