import threading
import time
from unittest.mock import MagicMock

from societybills.notifications.dispatch import NotificationDispatcher, UserNotice


class TestNotificationDispatcher:
    def test_delivers(self):
        notifier = MagicMock()
        dispatcher = NotificationDispatcher(notifier, timeout=1)

        assert dispatcher.notify("u1", "billing", "Title", "Message", "/link") is True
        notifier.notify.assert_called_once_with("u1", "billing", "Title", "Message", "/link")

    def test_admins(self):
        notifier = MagicMock()
        dispatcher = NotificationDispatcher(notifier, timeout=1)

        assert dispatcher.notify_admins("soc-1", "billing", "Title", "Message") is True
        notifier.notify_admins.assert_called_once_with("soc-1", "billing", "Title", "Message", "")

    def test_failure_is_logged_not_raised(self, caplog):
        notifier = MagicMock()
        notifier.notify.side_effect = RuntimeError("smtp down")
        dispatcher = NotificationDispatcher(notifier, timeout=1)

        assert dispatcher.notify("u1", "billing", "Title", "Message") is False
        assert "Notification failed" in caplog.text

    def test_timeout_is_bounded(self):
        release = threading.Event()
        notifier = MagicMock()
        notifier.notify.side_effect = lambda *args: release.wait(5)
        dispatcher = NotificationDispatcher(notifier, timeout=0.05)

        try:
            assert dispatcher.notify("u1", "billing", "Title", "Message") is False
        finally:
            release.set()

    def test_default_timeout_from_settings(self):
        from societybills.settings import settings

        assert NotificationDispatcher(MagicMock()).timeout == settings.notification_timeout_seconds


class TestNotifyMany:
    def test_delivers_all(self):
        notifier = MagicMock()
        dispatcher = NotificationDispatcher(notifier, timeout=1)
        notices = [UserNotice("u1", "billing", "Title", "One"), UserNotice("u2", "billing", "Title", "Two", "/link")]

        assert dispatcher.notify_many(notices) == 2
        notifier.notify.assert_any_call("u1", "billing", "Title", "One", "")
        notifier.notify.assert_any_call("u2", "billing", "Title", "Two", "/link")

    def test_empty(self):
        notifier = MagicMock()
        assert NotificationDispatcher(notifier, timeout=1).notify_many([]) == 0
        notifier.notify.assert_not_called()

    def test_failures_counted_not_raised(self, caplog):
        def _notify(user_id, *args):
            if user_id == "u2":
                raise RuntimeError("down")

        notifier = MagicMock()
        notifier.notify.side_effect = _notify
        dispatcher = NotificationDispatcher(notifier, timeout=1)

        notices = [UserNotice("u1", "billing", "T", "m"), UserNotice("u2", "billing", "T", "m")]
        assert dispatcher.notify_many(notices) == 1
        assert "user=u2" in caplog.text

    def test_single_deadline_for_whole_batch(self):
        release = threading.Event()
        notifier = MagicMock()
        notifier.notify.side_effect = lambda *args: release.wait(5)
        dispatcher = NotificationDispatcher(notifier, timeout=0.1)
        notices = [UserNotice(f"u{i}", "billing", "T", "m") for i in range(20)]

        started = time.monotonic()
        try:
            assert dispatcher.notify_many(notices) == 0
            elapsed = time.monotonic() - started
        finally:
            release.set()

        # Twenty slow deliveries share one deadline instead of waiting on each in turn.
        assert elapsed < 1
