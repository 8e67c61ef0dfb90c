from dataclasses import dataclass
from typing import Any

from .constants import DEFAULT_ALLOW_OVERRIDES
from .dependency_watcher import DependencyWatcher
from .registry import Registry


@dataclass(frozen=True)
class RegistryState:
    """The registry and watcher a container installs together."""

    registry: Registry
    watcher: DependencyWatcher


class RegistryBuilder:
    """Creates the fresh, empty state of a container (on construction and reload)."""

    @staticmethod
    def build(container: Any, allow_overrides: bool = DEFAULT_ALLOW_OVERRIDES) -> RegistryState:
        return RegistryState(
            registry=Registry(allow_overrides=allow_overrides),
            watcher=DependencyWatcher(container),
        )
