from __future__ import annotations

import logging

from societybills.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from societybills.models.actor import Actor
from societybills.models.notification import Notification, NotificationAudience
from societybills.repositories.base import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Read side of the in-app notifications written by the database notifier."""

    def __init__(self, repo: NotificationRepository) -> None:
        self.repo = repo

    def list_for_user(self, user_id: str, actor: Actor, limit: int = 20) -> list[Notification]:
        if not user_id:
            raise ValidationError("userId is required")
        if user_id != actor.id and not actor.can_edit:
            raise PermissionDeniedError(f"Actor {actor.id} may not read notifications of {user_id}")
        result = self.repo.list_for_user(user_id, limit)
        logger.debug("Listed %d notifications for user=%s", len(result), user_id)
        return result

    def list_for_admins(self, society_id: str, actor: Actor, limit: int = 20) -> list[Notification]:
        if not society_id:
            raise ValidationError("societyId is required")
        if not actor.can_edit:
            raise PermissionDeniedError(f"Actor {actor.id} may not read admin notifications")
        result = self.repo.list_for_society_admins(society_id, limit)
        logger.debug("Listed %d admin notifications for society=%s", len(result), society_id)
        return result

    def mark_read(self, notification_uuid: str, actor: Actor) -> None:
        notification = self.repo.get(notification_uuid)
        if notification is None:
            raise NotFoundError(f"Notification {notification_uuid} not found")
        own = notification.audience == NotificationAudience.USER and notification.user_id == actor.id
        if not own and not actor.can_edit:
            raise PermissionDeniedError(f"Actor {actor.id} may not mark notification {notification_uuid}")
        self.repo.mark_read(notification_uuid)
        logger.info("Notification marked read: uuid=%s actor=%s", notification_uuid, actor.id)
