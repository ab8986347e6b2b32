from __future__ import annotations

from datetime import datetime

from societybills.models.base import DocumentModel


class NotificationAudience:
    USER = "user"
    ADMINS = "admins"


class Notification(DocumentModel):
    id: int | None = None
    uuid: str = ""
    audience: str = NotificationAudience.USER
    user_id: str | None = None
    society_id: str | None = None
    type: str = "billing"
    title: str
    message: str
    link: str = ""
    read: bool = False
    created_at: datetime | None = None
