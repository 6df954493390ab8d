"""Notification request emitted by notify actions.

The engine only decides that a notification should go out; delivery is done
afterwards by an INotificationService implementation.
"""

from dataclasses import dataclass

from portfolio.domain.enums import NotificationKind


@dataclass(frozen=True)
class NotificationRequest:
    """One notification to deliver (owner direct message or chat channel post)."""

    kind: NotificationKind
    target: str
    initiative_id: str
    initiative_title: str
    message: str

    def describe(self) -> str:
        """Human-readable line for the execution log."""
        if self.kind == NotificationKind.CHANNEL:
            return f'Notified channel {self.target} about "{self.initiative_title}"'
        return f'Notified owner {self.target} about "{self.initiative_title}"'
