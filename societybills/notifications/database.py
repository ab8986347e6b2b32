import logging

from sqlalchemy.engine import Engine

from societybills.models.notification import Notification, NotificationAudience
from societybills.notifications.base import Notifier
from societybills.repositories.sqlalchemy import SQLAlchemyNotificationRepository

logger = logging.getLogger(__name__)


class DatabaseNotifier(Notifier):
    """Stores notifications for residents and admins to read in-app.

    Each delivery uses its own connection, so calls may run on worker threads.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def _store(self, notification: Notification) -> Notification:
        with self.engine.connect() as conn:
            return SQLAlchemyNotificationRepository(conn).create(notification)

    def notify(self, user_id: str, type: str, title: str, message: str, link: str = "") -> None:
        created = self._store(
            Notification(
                audience=NotificationAudience.USER,
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                link=link,
            )
        )
        logger.debug("Notification %s stored for user=%s", created.uuid, user_id)

    def notify_admins(self, society_id: str, type: str, title: str, message: str, link: str = "") -> None:
        created = self._store(
            Notification(
                audience=NotificationAudience.ADMINS,
                society_id=society_id,
                type=type,
                title=title,
                message=message,
                link=link,
            )
        )
        logger.debug("Admin notification %s stored for society=%s", created.uuid, society_id)
