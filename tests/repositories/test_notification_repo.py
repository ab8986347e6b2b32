import pytest

from societybills.exceptions import NotFoundError
from societybills.models.notification import Notification, NotificationAudience


class TestNotificationRepo:
    def test_user_and_admin_feeds(self, notification_repo):
        notification_repo.create(
            Notification(audience=NotificationAudience.USER, user_id="u1", title="New Maintenance Bill", message="m")
        )
        notification_repo.create(
            Notification(audience=NotificationAudience.ADMINS, society_id="soc-1", title="Bills Generated", message="m")
        )

        user_feed = notification_repo.list_for_user("u1")
        admin_feed = notification_repo.list_for_society_admins("soc-1")

        assert [n.title for n in user_feed] == ["New Maintenance Bill"]
        assert user_feed[0].read is False
        assert [n.title for n in admin_feed] == ["Bills Generated"]
        assert notification_repo.list_for_society_admins("soc-2") == []

    def test_get_and_mark_read(self, notification_repo):
        created = notification_repo.create(
            Notification(audience=NotificationAudience.USER, user_id="u1", title="New Maintenance Bill", message="m")
        )

        notification_repo.mark_read(created.uuid)

        fetched = notification_repo.get(created.uuid)
        assert fetched is not None
        assert fetched.read is True
        assert notification_repo.get("missing") is None

    def test_mark_read_missing(self, notification_repo):
        with pytest.raises(NotFoundError):
            notification_repo.mark_read("missing")
