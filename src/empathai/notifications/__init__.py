"""Notification sub-package: observer registry and snapshot fan-out."""

from empathai.notifications.observers import (
    DispatchResult,
    Observer,
    ObserverRegistry,
    Subscription,
)

__all__ = ["DispatchResult", "Observer", "ObserverRegistry", "Subscription"]
