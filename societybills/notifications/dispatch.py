import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import NamedTuple

from societybills.notifications.base import Notifier
from societybills.settings import settings

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=settings.notification_workers, thread_name_prefix="notify")


class UserNotice(NamedTuple):
    user_id: str
    type: str
    title: str
    message: str
    link: str = ""


class NotificationDispatcher:
    """Calls a ``Notifier`` with a bounded wait. Delivery failures are logged, never raised."""

    def __init__(self, notifier: Notifier, timeout: float | None = None) -> None:
        self.notifier = notifier
        self.timeout = settings.notification_timeout_seconds if timeout is None else timeout

    def _deliver(self, description: str, func, *args) -> bool:
        future = _executor.submit(func, *args)
        try:
            future.result(timeout=self.timeout)
        except FutureTimeoutError:
            future.cancel()
            logger.warning("Notification timed out after %.1fs: %s", self.timeout, description)
            return False
        except Exception:
            logger.exception("Notification failed: %s", description)
            return False
        return True

    def notify(self, user_id: str, type: str, title: str, message: str, link: str = "") -> bool:
        return self._deliver(f"user={user_id} title={title!r}", self.notifier.notify, user_id, type, title, message, link)

    def notify_admins(self, society_id: str, type: str, title: str, message: str, link: str = "") -> bool:
        return self._deliver(
            f"admins society={society_id} title={title!r}",
            self.notifier.notify_admins,
            society_id,
            type,
            title,
            message,
            link,
        )

    def notify_many(self, notices: list[UserNotice]) -> int:
        """Deliver all ``notices`` concurrently under one shared deadline. Returns how many succeeded."""
        if not notices:
            return 0
        futures: dict[Future, UserNotice] = {_executor.submit(self.notifier.notify, *notice): notice for notice in notices}
        done, pending = wait(futures, timeout=self.timeout)

        delivered = 0
        for future in done:
            notice = futures[future]
            error = future.exception()
            if error is not None:
                logger.error("Notification failed: user=%s title=%r: %s", notice.user_id, notice.title, error)
            else:
                delivered += 1
        for future in pending:
            # Queued deliveries are dropped; running ones finish in the background.
            future.cancel()
        if pending:
            logger.warning(
                "%d of %d notification(s) timed out after %.1fs", len(pending), len(notices), self.timeout
            )
        return delivered
