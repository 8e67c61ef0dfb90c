"""Node types of the registry tree.

:class:`DependencySlot` holds a provider and its memoization state;
:class:`NamespaceNode` groups slots and nested namespaces under a name.
Both are owned by their parent namespace and are never shared between
registries.
"""

from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Union

from .key_guard import KeyGuard

Provider = Callable[[], Any]


class DependencySlot:
    """A named provider plus its memoization state.

    Attributes:
        name: The slot name inside its namespace.
        producer: Zero-argument callable producing the dependency value.
        memoize: Whether the first produced value is cached.
        parent: The owning namespace (used for path display only).
    """

    __slots__ = ("name", "producer", "memoize", "parent", "_cached_value", "_resolved")

    def __init__(self, name: str, producer: Provider, memoize: bool, parent: Optional["NamespaceNode"] = None) -> None:
        self.name = name
        self.producer = producer
        self.memoize = bool(memoize)
        self.parent = parent
        self._cached_value: Any = None
        self._resolved = False

    @property
    def resolved(self) -> bool:
        return self._resolved

    @property
    def cached_value(self) -> Any:
        return self._cached_value

    @property
    def path(self) -> str:
        return KeyGuard.join(self.parent.path if self.parent is not None else "", self.name)

    def reveal(self) -> Any:
        """Return the dependency value, running the producer if needed.

        A memoized slot runs its producer until it succeeds once and then
        keeps returning the cached value. Callers must hold the container
        lock so the check-and-set below is atomic.
        """
        if self.memoize and self._resolved:
            return self._cached_value
        value = self.producer()
        if self.memoize:
            self._cached_value = value
            self._resolved = True
        return value

    def __repr__(self) -> str:
        return f"DependencySlot(path={self.path!r}, memoize={self.memoize}, resolved={self._resolved})"


class NamespaceNode:
    """A named grouping node holding slots and nested namespaces in insertion order."""

    __slots__ = ("name", "parent", "children")

    def __init__(self, name: str, parent: Optional["NamespaceNode"] = None) -> None:
        self.name = name
        self.parent = parent
        self.children: Dict[str, Union[DependencySlot, "NamespaceNode"]] = {}

    @property
    def path(self) -> str:
        if self.parent is None:
            return ""
        return KeyGuard.join(self.parent.path, self.name)

    def get(self, name: str) -> Optional[Union[DependencySlot, "NamespaceNode"]]:
        return self.children.get(name)

    def put(self, entity: Union[DependencySlot, "NamespaceNode"]) -> None:
        self.children[entity.name] = entity

    def items(self) -> Iterator[Tuple[str, Union[DependencySlot, "NamespaceNode"]]]:
        return iter(list(self.children.items()))

    def __contains__(self, name: object) -> bool:
        return name in self.children

    def __len__(self) -> int:
        return len(self.children)

    def __repr__(self) -> str:
        return f"NamespaceNode(path={self.path!r}, children={list(self.children)!r})"
