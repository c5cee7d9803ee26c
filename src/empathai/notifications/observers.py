"""Observer registry: fan-out of emitted snapshots with error isolation.

Architecture
~~~~~~~~~~~~
* **Observer**: any callable taking an :class:`EmotionSnapshot`.
* **Subscription**: handle returned by :meth:`ObserverRegistry.subscribe`;
  calling it (or :meth:`Subscription.unsubscribe`) removes exactly that
  registration.  Removal is idempotent.
* **ObserverRegistry**: ordered registry keyed by subscription id, so the
  same callable can be registered more than once and removed
  independently.
* **DispatchResult**: per-dispatch delivery summary.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import Callable

import structlog

from empathai.models import EmotionSnapshot

logger = structlog.get_logger(__name__)

Observer = Callable[[EmotionSnapshot], None]


# ── Dispatch result ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """Outcome summary for a single ``dispatch()`` call."""

    delivered: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)

    @property
    def all_ok(self) -> bool:
        return len(self.failed) == 0


# ── Subscription handle ───────────────────────────────────────


class Subscription:
    """Capability to deregister one observer."""

    __slots__ = ("_id", "_registry")

    def __init__(self, subscription_id: int, registry: ObserverRegistry) -> None:
        self._id = subscription_id
        self._registry: ObserverRegistry | None = registry

    @property
    def id(self) -> int:
        return self._id

    @property
    def active(self) -> bool:
        return self._registry is not None and self._registry.is_registered(self._id)

    def unsubscribe(self) -> bool:
        """Remove the observer.  Return ``True`` only on the first effective call."""
        registry, self._registry = self._registry, None
        if registry is None:
            return False
        return registry.remove(self._id)

    def __call__(self) -> bool:
        return self.unsubscribe()

    def __repr__(self) -> str:
        return f"Subscription(id={self._id}, active={self.active})"


# ── Registry ──────────────────────────────────────────────────


class ObserverRegistry:
    """Ordered observer registry.

    Each observer is invoked independently; one that raises is logged
    and never blocks delivery to the others.
    """

    def __init__(self) -> None:
        self._observers: dict[int, Observer] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, observer: Observer) -> Subscription:
        if not callable(observer):
            raise TypeError(f"observer must be callable, got {type(observer).__name__}")
        with self._lock:
            sub_id = next(self._ids)
            self._observers[sub_id] = observer
        logger.debug("observers.subscribed", subscription_id=sub_id)
        return Subscription(sub_id, self)

    def remove(self, subscription_id: int) -> bool:
        with self._lock:
            removed = self._observers.pop(subscription_id, None) is not None
        if removed:
            logger.debug("observers.unsubscribed", subscription_id=subscription_id)
        return removed

    def is_registered(self, subscription_id: int) -> bool:
        return subscription_id in self._observers

    def __len__(self) -> int:
        return len(self._observers)

    # ── Dispatch ──────────────────────────────────────────────

    def dispatch(self, snapshot: EmotionSnapshot) -> DispatchResult:
        """Deliver *snapshot* to every observer in registration order.

        Observers registered or removed during delivery take effect on the
        next dispatch.
        """
        with self._lock:
            targets = list(self._observers.items())

        delivered: list[int] = []
        failed: list[int] = []
        for sub_id, observer in targets:
            try:
                observer(snapshot)
                delivered.append(sub_id)
            except Exception:
                logger.exception(
                    "observers.observer_error",
                    subscription_id=sub_id,
                    observer=getattr(observer, "__qualname__", repr(observer)),
                    label=snapshot.label.value,
                )
                failed.append(sub_id)

        result = DispatchResult(delivered=delivered, failed=failed)
        if result.failed:
            logger.warning("observers.partial_failure", failed=result.failed)
        return result
