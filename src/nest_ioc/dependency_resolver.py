"""Path walking over a container's registry.

:class:`DependencyResolver` holds no state: every operation takes the
container and a dotted path, walks the registry from its root and either
returns a value / boolean or raises a :class:`ResolvingError` subclass.
Callers are expected to hold the container lock.
"""

from typing import Any, Optional, Union

from .entities import DependencySlot, NamespaceNode
from .exceptions import (
    ContainerError,
    DependencyCreationError,
    DependencyExpectedError,
    DependencyNotFoundError,
    NamespaceExpectedError,
    NamespaceNotFoundError,
    ResolvingError,
)
from .key_guard import KeyGuard


class DependencyResolver:
    @classmethod
    def resolve(cls, container: Any, path: str) -> Any:
        """Return the value of the dependency stored at *path*.

        Raises:
            InvalidKeyError: If *path* is malformed.
            NamespaceNotFoundError: If an intermediate segment is missing.
            NamespaceExpectedError: If an intermediate segment is a dependency.
            DependencyNotFoundError: If the final segment is missing.
            DependencyExpectedError: If the final segment is a namespace.
            DependencyCreationError: If the provider raises a non-container error.
        """
        entity = cls.find_entity(container, path)
        if isinstance(entity, NamespaceNode):
            raise DependencyExpectedError(path, path)
        return cls.reveal(container, entity)

    @classmethod
    def fetch(cls, container: Any, path: str) -> Any:
        return cls.resolve(container, path)

    @classmethod
    def reveal(cls, container: Any, slot: DependencySlot) -> Any:
        was_cached = slot.memoize and slot.resolved
        try:
            with container.registry.root_scope():
                value = slot.reveal()
        except ContainerError:
            raise
        except Exception as creation_error:
            raise DependencyCreationError(slot.path, creation_error) from creation_error
        container._record_resolution(was_cached)
        return value

    @classmethod
    def is_key(cls, container: Any, path: str) -> bool:
        return cls._find_or_none(container, path) is not None

    @classmethod
    def is_namespace(cls, container: Any, path: str) -> bool:
        return isinstance(cls._find_or_none(container, path), NamespaceNode)

    @classmethod
    def is_dependency(cls, container: Any, path: str, memoized: Optional[bool] = None) -> bool:
        entity = cls._find_or_none(container, path)
        if not isinstance(entity, DependencySlot):
            return False
        return memoized is None or entity.memoize == bool(memoized)

    @classmethod
    def find_entity(cls, container: Any, path: str) -> Union[DependencySlot, NamespaceNode]:
        """Walk *path* from the registry root and return the final entity.

        The final entity may be of either kind; intermediate segments must be
        namespaces.
        """
        segments = KeyGuard.split_path(path)
        node: NamespaceNode = container.registry.root
        for depth, segment in enumerate(segments[:-1]):
            child = node.get(segment)
            path_part = KeyGuard.join(*segments[: depth + 1])
            if child is None:
                raise NamespaceNotFoundError(path, path_part)
            if isinstance(child, DependencySlot):
                raise NamespaceExpectedError(path, path_part)
            node = child
        entity = node.get(segments[-1])
        if entity is None:
            raise DependencyNotFoundError(path, path)
        return entity

    @classmethod
    def _find_or_none(cls, container: Any, path: str) -> Optional[Union[DependencySlot, NamespaceNode]]:
        try:
            return cls.find_entity(container, path)
        except ResolvingError:
            return None
