"""Delivery of event notifications to users."""

from __future__ import annotations

from collections.abc import Callable
from email.message import EmailMessage

DEFAULT_SENDER = "noreply@example.com"


class Notifier:
    """Builds notification e-mails and hands them to a delivery callable."""

    def __init__(
        self,
        deliver: Callable[[EmailMessage], None] | None = None,
        sender: str = DEFAULT_SENDER,
    ) -> None:
        self.deliver = deliver
        self.sender = sender

    def send(self, to: str, subject: str, message: str) -> EmailMessage:
        """Compose a notification about an event and deliver it."""
        mail = EmailMessage()
        mail["From"] = self.sender
        mail["To"] = to
        mail["Subject"] = subject
        mail.set_content(message)
        if self.deliver is not None:
            self.deliver(mail)
        return mail


class RecordingNotifier(Notifier):
    """A notifier that also keeps every notification it sent."""

    def __init__(
        self,
        deliver: Callable[[EmailMessage], None] | None = None,
        sender: str = DEFAULT_SENDER,
    ) -> None:
        super().__init__(deliver, sender)
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to: str, subject: str, message: str) -> EmailMessage:
        """Send the notification and remember its recipient, subject and text."""
        mail = super().send(to, subject, message)
        self.sent.append((to, subject, message))
        return mail