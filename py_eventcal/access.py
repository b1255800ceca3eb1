"""Who may see and change an event."""

from __future__ import annotations

from .events import Event
from .participants import UserRecord


def can_modify(user: UserRecord | None, event: Event) -> bool:
    """Owners and administrators may edit or delete an event."""
    if user is None:
        return False
    return user.is_admin or user.uid == event.owner


def can_view(user: UserRecord | None, event: Event) -> bool:
    """Public events are visible to everyone; private ones to participants and admins."""
    if not event.private:
        return True
    if user is None:
        return False
    return user.is_admin or user.uid in event.participants
