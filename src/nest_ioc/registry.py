"""The registry tree owned by one container.

The :class:`Registry` stores a :class:`NamespaceNode` tree rooted at the
container, enforces the freeze flag and the duplicate-name policy, and
exposes lazy enumeration of the tree.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from .constants import DEFAULT_ALLOW_OVERRIDES
from .entities import DependencySlot, NamespaceNode, Provider
from .exceptions import (
    DependencyOverNamespaceOverlapError,
    DuplicateRegistrationError,
    FrozenRegistryError,
    NamespaceOverDependencyOverlapError,
)
from .key_guard import KeyGuard

_logger = logging.getLogger(__name__)

Entity = Union[DependencySlot, NamespaceNode]
Reveal = Callable[[DependencySlot], Any]
NamespaceHook = Callable[[str], Any]


def _constant(value: Any) -> Provider:
    return lambda: value


def as_provider(provider: Any) -> Provider:
    """Return *provider* if it is callable, otherwise a provider returning it."""
    if callable(provider):
        return provider
    return _constant(provider)


class Registry:
    """Tree of namespaces and dependency slots plus the freeze flag.

    Registration paths are relative to the current scope: the root, or the
    innermost namespace whose definitions are being evaluated.

    Args:
        allow_overrides: Whether a dependency may replace an existing
            dependency of the same name.
    """

    def __init__(self, allow_overrides: bool = DEFAULT_ALLOW_OVERRIDES) -> None:
        self.root = NamespaceNode("")
        self.allow_overrides = allow_overrides
        self._frozen = False
        self._scopes: List[NamespaceNode] = []

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    @property
    def current_scope(self) -> NamespaceNode:
        return self._scopes[-1] if self._scopes else self.root

    @contextmanager
    def root_scope(self) -> Iterator[NamespaceNode]:
        """Make the root the current scope for the duration of the block.

        Used around code that runs on behalf of the container rather than of
        the namespace being defined (providers, observer callbacks).
        """
        scopes, self._scopes = self._scopes, []
        try:
            yield self.root
        finally:
            self._scopes = scopes

    def register_dependency(
        self,
        path: str,
        provider: Any,
        memoize: bool,
        on_namespace_created: Optional[NamespaceHook] = None,
    ) -> str:
        """Insert a dependency slot and return its fully-qualified path.

        Intermediate namespaces of a dotted *path* are created on demand;
        *on_namespace_created* is called with the path of each of them, outermost
        first, once the slot is in place.

        Raises:
            InvalidKeyError: If a segment of *path* is malformed.
            FrozenRegistryError: If the registry is frozen.
            DependencyOverNamespaceOverlapError: If the name is taken by a namespace.
            NamespaceOverDependencyOverlapError: If an intermediate segment is a dependency.
            DuplicateRegistrationError: If the name is taken by a dependency and
                overrides are disabled.
        """
        segments = KeyGuard.split_path(path)
        scope = self.current_scope
        full_path = KeyGuard.join(scope.path, *segments)
        if self._frozen:
            raise FrozenRegistryError(full_path)

        existing = self._lookup_for_insert(scope, segments)
        if isinstance(existing, NamespaceNode):
            raise DependencyOverNamespaceOverlapError(full_path)
        if existing is not None and not self.allow_overrides:
            raise DuplicateRegistrationError(full_path)

        created: List[str] = []
        parent = self._ensure_namespaces(scope, segments[:-1], created)
        parent.put(DependencySlot(segments[-1], as_provider(provider), memoize, parent))
        if existing is not None:
            _logger.debug("Dependency '%s' overridden", full_path)
        if on_namespace_created is not None:
            for namespace_path in created:
                on_namespace_created(namespace_path)
        return full_path

    def register_namespace(
        self,
        path: str,
        definitions: Optional[Callable[[Any], Any]],
        owner: Any,
        on_namespace_created: Optional[NamespaceHook] = None,
    ) -> str:
        """Create (or reopen) a namespace and evaluate *definitions* inside it.

        *definitions* is called with *owner* (the container) while the new
        namespace is the current scope, so relative registrations land in it.
        *on_namespace_created* is called for every intermediate namespace
        created on the way, before *definitions* runs; the namespace *path*
        itself is left to the caller.

        Raises:
            InvalidKeyError: If a segment of *path* is malformed.
            FrozenRegistryError: If the registry is frozen.
            NamespaceOverDependencyOverlapError: If a segment is taken by a dependency.
        """
        segments = KeyGuard.split_path(path)
        scope = self.current_scope
        full_path = KeyGuard.join(scope.path, *segments)
        if self._frozen:
            raise FrozenRegistryError(full_path)

        existing = self._lookup_for_insert(scope, segments)
        if isinstance(existing, DependencySlot):
            raise NamespaceOverDependencyOverlapError(full_path)

        created: List[str] = []
        node = self._ensure_namespaces(scope, segments, created)
        if on_namespace_created is not None:
            for namespace_path in created:
                if namespace_path != full_path:
                    on_namespace_created(namespace_path)
        if definitions is not None:
            self._scopes.append(node)
            try:
                definitions(owner)
            finally:
                self._scopes.pop()
        return full_path

    def _lookup_for_insert(self, scope: NamespaceNode, segments: Tuple[str, ...]) -> Optional[Entity]:
        """Walk *segments* without mutating the tree.

        Returns the entity currently stored at the final segment, or ``None``
        when it (or one of its parents) does not exist yet.
        """
        node = scope
        for depth, segment in enumerate(segments[:-1]):
            child = node.get(segment)
            if child is None:
                return None
            if isinstance(child, DependencySlot):
                raise NamespaceOverDependencyOverlapError(KeyGuard.join(scope.path, *segments[: depth + 1]))
            node = child
        return node.get(segments[-1])

    def _ensure_namespaces(
        self, scope: NamespaceNode, segments: Tuple[str, ...], created: Optional[List[str]] = None
    ) -> NamespaceNode:
        node = scope
        for segment in segments:
            child = node.get(segment)
            if child is None:
                child = NamespaceNode(segment, node)
                node.put(child)
                _logger.debug("Namespace '%s' created", child.path)
                if created is not None:
                    created.append(child.path)
            node = child
        return node

    def keys(self, all_variants: bool) -> Iterator[str]:
        """Yield registered names.

        With ``all_variants=False`` only the names of the root's children are
        yielded; otherwise every fully-qualified dependency path, depth-first
        in insertion order.
        """
        if not all_variants:
            yield from list(self.root.children)
            return
        for path, _ in self._walk_leaves(self.root):
            yield path

    def each_dependency(self, yield_all: bool, reveal: Optional[Reveal] = None) -> Iterator[Tuple[str, Any]]:
        """Yield ``(name, value)`` pairs.

        Without *yield_all* the root's immediate children are yielded and
        namespaces are surfaced as their :class:`NamespaceNode`; with it every
        dependency of the tree is yielded under its fully-qualified path.
        """
        reveal = reveal or DependencySlot.reveal
        if not yield_all:
            for name, entity in self.root.items():
                yield name, (reveal(entity) if isinstance(entity, DependencySlot) else entity)
            return
        for path, slot in self._walk_leaves(self.root):
            yield path, reveal(slot)

    def hash_tree(self, resolve_dependencies: bool, reveal: Optional[Reveal] = None) -> Dict[str, Any]:
        reveal = reveal or DependencySlot.reveal

        def build(node: NamespaceNode) -> Dict[str, Any]:
            tree: Dict[str, Any] = {}
            for name, entity in node.items():
                if isinstance(entity, NamespaceNode):
                    tree[name] = build(entity)
                elif resolve_dependencies:
                    tree[name] = reveal(entity)
                else:
                    tree[name] = entity
            return tree

        return build(self.root)

    def _walk_leaves(self, node: NamespaceNode) -> Iterator[Tuple[str, DependencySlot]]:
        for name, entity in node.items():
            if isinstance(entity, NamespaceNode):
                yield from self._walk_leaves(entity)
            else:
                yield entity.path, entity

    def dependency_count(self) -> int:
        return sum(1 for _ in self._walk_leaves(self.root))
