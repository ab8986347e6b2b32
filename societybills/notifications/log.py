import logging

from societybills.notifications.base import Notifier

logger = logging.getLogger(__name__)


class LogNotifier(Notifier):
    """Writes notifications to the application log instead of delivering them."""

    def notify(self, user_id: str, type: str, title: str, message: str, link: str = "") -> None:
        logger.info("Notify user=%s type=%s title=%r message=%r link=%s", user_id, type, title, message, link)

    def notify_admins(self, society_id: str, type: str, title: str, message: str, link: str = "") -> None:
        logger.info(
            "Notify admins society=%s type=%s title=%r message=%r link=%s", society_id, type, title, message, link
        )
