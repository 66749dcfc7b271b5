"""
Outbox of notifications produced by a workflow or wallet operation.

Operations collect what they want to tell people into an ``Outbox`` and hand
it back with their result; the caller decides when to deliver it, normally
after the surrounding transaction has committed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional


@dataclass
class PendingNotification:
    recipient: Any
    notification_type: str
    message: str
    title: str = ''
    priority: str = 'medium'
    related_object_type: Optional[str] = None
    related_object_id: Optional[int] = None
    payload: Dict[str, Any] = field(default_factory=dict)


class Outbox:
    def __init__(self):
        self._items: List[PendingNotification] = []

    def add(self, recipient, notification_type, message, title='', priority='medium',
            related_object_type=None, related_object_id=None, **payload) -> PendingNotification:
        item = PendingNotification(
            recipient=recipient,
            notification_type=notification_type,
            message=message,
            title=title,
            priority=priority,
            related_object_type=related_object_type,
            related_object_id=related_object_id,
            payload=payload,
        )
        self._items.append(item)
        return item

    def extend(self, other: 'Outbox'):
        self._items.extend(other)

    def for_recipient(self, user) -> List[PendingNotification]:
        return [item for item in self._items if item.recipient.pk == user.pk]

    def __iter__(self) -> Iterator[PendingNotification]:
        return iter(list(self._items))

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)
