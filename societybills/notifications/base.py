from abc import ABC, abstractmethod


class Notifier(ABC):
    @abstractmethod
    def notify(self, user_id: str, type: str, title: str, message: str, link: str = "") -> None:
        """Deliver a notification to a single resident."""
        ...

    @abstractmethod
    def notify_admins(self, society_id: str, type: str, title: str, message: str, link: str = "") -> None:
        """Deliver a notification to every admin of a society."""
        ...
