import logging

from sqlalchemy.engine import Engine

from societybills.notifications.base import Notifier
from societybills.settings import settings

logger = logging.getLogger(__name__)


def get_notifier(engine: Engine | None = None) -> Notifier:
    backend = settings.notification_backend

    if backend == "log":
        from societybills.notifications.log import LogNotifier

        logger.debug("Using notification backend: log")
        return LogNotifier()

    if backend == "database":
        from societybills.notifications.database import DatabaseNotifier

        if engine is None:
            from societybills.db import get_engine

            engine = get_engine()
        logger.debug("Using notification backend: database")
        return DatabaseNotifier(engine)

    raise ValueError(f"Unsupported notification backend: {backend}")
