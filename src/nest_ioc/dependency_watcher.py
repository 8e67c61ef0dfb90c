"""Registration observers.

:class:`DependencyWatcher` keeps, per entity path, the ordered list of
:class:`Observer` handles to call when that path is registered.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .key_guard import KeyGuard

_logger = logging.getLogger(__name__)

ObserverCallback = Callable[[str, Any], Any]


@dataclass(frozen=True)
class Observer:
    """Handle of one subscription.

    Attributes:
        path: The exact entity path being observed.
        callback: Called as ``callback(path, entity)`` on every registration of *path*.
        identity: Random ``uuid4`` hex token; handles from a previous (reloaded)
            watcher never match a current subscription.
    """

    path: str
    callback: ObserverCallback = field(compare=False)
    identity: str


class DependencyWatcher:
    """Subscription table mapping entity path to observers in subscription order.

    Args:
        container: The container whose registrations are observed. Used to
            look up the freshly registered entity when notifying.
    """

    def __init__(self, container: Any) -> None:
        self._container = container
        self._observers: Dict[str, List[Observer]] = {}

    def watch(self, path: str, callback: ObserverCallback) -> Observer:
        """Subscribe *callback* to registrations of *path*.

        Raises:
            InvalidKeyError: If *path* is malformed.
        """
        KeyGuard.split_path(path)
        observer = Observer(path=path, callback=callback, identity=uuid.uuid4().hex)
        self._observers.setdefault(path, []).append(observer)
        _logger.debug("Observer %s subscribed to '%s'", observer.identity, path)
        return observer

    def unwatch(self, observer: Observer) -> bool:
        listeners = self._observers.get(observer.path)
        if not listeners:
            return False
        for idx, candidate in enumerate(listeners):
            if candidate.identity == observer.identity:
                del listeners[idx]
                if not listeners:
                    del self._observers[observer.path]
                return True
        return False

    def clear_listeners(self, path: Optional[str] = None) -> None:
        if path is None:
            self._observers.clear()
            return
        KeyGuard.split_path(path)
        self._observers.pop(path, None)

    def notify(self, path: str) -> None:
        """Call every observer of *path* in subscription order.

        The entity passed to the callbacks is the resolved value for a
        dependency and the namespace node for a namespace. Exceptions raised
        by a callback propagate and stop the remaining notifications.
        """
        listeners = list(self._observers.get(path, ()))
        if not listeners:
            return
        entity = self._container._reveal_entity(path)
        for observer in listeners:
            _logger.debug("Notifying observer %s of '%s'", observer.identity, path)
            observer.callback(path, entity)

    def observers_for(self, path: str) -> List[Observer]:
        return list(self._observers.get(path, ()))

    def count(self) -> int:
        return sum(len(listeners) for listeners in self._observers.values())
