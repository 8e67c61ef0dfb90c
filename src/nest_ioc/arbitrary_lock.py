import threading
from typing import Any, Callable


class ArbitraryLock:
    """Reentrant execution guard shared by every operation of one container.

    A provider resolving another dependency of the same container re-enters
    the lock from the same thread without blocking; other threads wait until
    the outermost call returns.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    def execute_exclusively(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return fn(*args, **kwargs)
