# src/nest_ioc/container.py
import random
import time
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .arbitrary_lock import ArbitraryLock
from .config_sources import TreeSource
from .constants import DEFAULT_ITERATION_YIELD_ALL, DEFAULT_KEY_EXTRACTION, LOGGER
from .dependency_resolver import DependencyResolver
from .dependency_watcher import DependencyWatcher, Observer, ObserverCallback
from .entities import DependencySlot, NamespaceNode
from .registry import Registry
from .registry_builder import RegistryBuilder
from .settings import ContainerSettings

Definitions = Callable[["Container"], Any]


def _load_tree(container: "Container", tree: Mapping[str, Any], memoize: Optional[bool]) -> None:
    for name, value in tree.items():
        if isinstance(value, Mapping):
            container.namespace(name, lambda c, subtree=value: _load_tree(c, subtree, memoize))
        else:
            container.register(name, value, memoize=memoize)


class Container:
    """Thread-safe hierarchical dependency container.

    Providers are registered under dotted paths and resolved on demand.
    Every public operation runs under one reentrant lock, so a provider may
    resolve other dependencies of the same container.

    Args:
        definitions: Optional callable receiving the container; it is run at
            construction and again on every :meth:`reload`.
        settings: Behaviour switches, see :class:`ContainerSettings`.
        container_id: Identifier used in log records; generated when omitted.

    Example:
        >>> c = Container()
        >>> c.register("db", lambda: object(), memoize=True)
        >>> c.resolve("db") is c.resolve("db")
        True
    """

    class _Ctx:
        def __init__(self, created_at: float) -> None:
            self.created_at = created_at
            self.resolve_count = 0
            self.cache_hit_count = 0

    def __init__(
        self,
        definitions: Optional[Definitions] = None,
        *,
        settings: Optional[ContainerSettings] = None,
        container_id: Optional[str] = None,
    ) -> None:
        self.settings = settings or ContainerSettings()
        self.container_id = container_id or self._generate_container_id()
        self.context = Container._Ctx(created_at=time.time())
        self._definitions = definitions
        self._access_lock = ArbitraryLock()
        self.registry: Registry
        self._watcher: DependencyWatcher
        self._thread_safe(self._build_registry)

    @staticmethod
    def _generate_container_id() -> str:
        return f"c{time.time_ns():x}{random.randrange(1 << 16):04x}"

    def _build_registry(self) -> None:
        previous_registry = self.__dict__.get("registry")
        previous_watcher = self.__dict__.get("_watcher")
        state = RegistryBuilder.build(self, allow_overrides=self.settings.allow_overrides)
        self.registry = state.registry
        self._watcher = state.watcher
        try:
            if self._definitions is not None:
                self._definitions(self)
            if self.settings.freeze_on_build:
                self.registry.freeze()
        except Exception:
            if previous_registry is not None:
                self.registry = previous_registry
                self._watcher = previous_watcher
                self._debug("Rebuild failed, previous registry restored")
            raise

    def _thread_safe(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return self._access_lock.execute_exclusively(fn, *args, **kwargs)

    def _debug(self, msg: str, *args: Any) -> None:
        LOGGER.debug("[%s] " + msg, self.container_id[:8], *args)

    def _notify(self, path: str) -> None:
        with self.registry.root_scope():
            self._watcher.notify(path)

    # registration

    def register(self, path: str, provider: Any, *, memoize: Optional[bool] = None) -> None:
        """Register a dependency under *path*.

        *provider* is a zero-argument callable; any other value is registered
        as a constant. The path is relative to the namespace whose
        definitions are currently being evaluated (the root otherwise).
        Observers of every namespace created on the way are notified first,
        then observers of the fully-qualified path.

        Providers and observer callbacks always run with the root as current
        scope: a registration they make is relative to the root, not to the
        namespace being defined when they fire.

        Raises:
            InvalidKeyError: If *path* is malformed.
            FrozenRegistryError: If the container is frozen.
            DuplicateRegistrationError: On a name collision (see ``ContainerSettings.allow_overrides``).
        """
        if memoize is None:
            memoize = self.settings.default_memoize

        def op() -> None:
            full_path = self.registry.register_dependency(
                path, provider, memoize, on_namespace_created=self._notify
            )
            self._debug("Registered dependency '%s' (memoize=%s)", full_path, memoize)
            self._notify(full_path)

        self._thread_safe(op)

    def namespace(self, path: str, definitions: Optional[Definitions] = None) -> None:
        """Create or reopen the namespace *path* and run *definitions* inside it.

        Observers of intermediate namespaces created for a dotted *path* are
        notified before *definitions* runs; observers of *path* itself after.

        Example:
            >>> c = Container()
            >>> c.namespace("services", lambda c: c.register("mailer", dict))
            >>> c.has_dependency("services.mailer")
            True
        """

        def op() -> None:
            full_path = self.registry.register_namespace(
                path, definitions, self, on_namespace_created=self._notify
            )
            self._debug("Registered namespace '%s'", full_path)
            self._notify(full_path)

        self._thread_safe(op)

    def load_tree(
        self,
        source: Union[TreeSource, Mapping[str, Any]],
        *,
        under: Optional[str] = None,
        memoize: Optional[bool] = None,
    ) -> None:
        """Register a configuration tree in one exclusive section.

        Nested mappings become namespaces and every other value becomes a
        literal dependency. With *under* the tree is loaded into that namespace.
        """
        tree = source.get_tree() if isinstance(source, TreeSource) else source

        def op() -> None:
            if under is None:
                _load_tree(self, tree, memoize)
            else:
                self.namespace(under, lambda c: _load_tree(c, tree, memoize))

        self._thread_safe(op)

    # resolution

    def resolve(self, path: str) -> Any:
        return self._thread_safe(DependencyResolver.resolve, self, path)

    def __getitem__(self, path: str) -> Any:
        return self.resolve(path)

    def fetch(self, path: str) -> Any:
        return self._thread_safe(DependencyResolver.fetch, self, path)

    def has_key(self, path: str) -> bool:
        return self._thread_safe(DependencyResolver.is_key, self, path)

    def __contains__(self, path: str) -> bool:
        return self.has_key(path)

    def has_namespace(self, path: str) -> bool:
        return self._thread_safe(DependencyResolver.is_namespace, self, path)

    def has_dependency(self, path: str, memoized: Optional[bool] = None) -> bool:
        return self._thread_safe(DependencyResolver.is_dependency, self, path, memoized)

    # state

    def freeze(self) -> None:
        def op() -> None:
            self.registry.freeze()
            self._debug("Container frozen")

        self._thread_safe(op)

    def is_frozen(self) -> bool:
        return self._thread_safe(lambda: self.registry.frozen)

    def reload(self) -> None:
        """Discard every dependency, cached value and observer and rebuild.

        The construction definitions (if any) are applied again, and the
        registry is frozen again when ``freeze_on_build`` is set. If the
        definitions raise, the previous registry and observers are kept and
        the error propagates.
        """

        def op() -> None:
            self._build_registry()
            self._debug("Container reloaded")

        self._thread_safe(op)

    # introspection

    def keys(self, all_variants: bool = DEFAULT_KEY_EXTRACTION) -> List[str]:
        return self._thread_safe(lambda: list(self.registry.keys(all_variants)))

    def each_dependency(
        self,
        yield_all: bool = DEFAULT_ITERATION_YIELD_ALL,
        visitor: Optional[Callable[[str, Any], Any]] = None,
    ) -> Optional[Iterator[Tuple[str, Any]]]:
        """Enumerate ``(name, value)`` pairs, resolving dependencies on the way.

        With a *visitor* every pair is passed to it while the lock is held and
        ``None`` is returned. Without one, an iterator over a snapshot taken
        under the lock is returned; every call starts a new enumeration.
        Namespaces are surfaced as :class:`NamespaceNode` unless *yield_all*
        is set, in which case only dependencies are yielded, by full path.
        """

        def op() -> Optional[List[Tuple[str, Any]]]:
            pairs = self.registry.each_dependency(yield_all, reveal=self._reveal_slot)
            if visitor is None:
                return list(pairs)
            for name, value in pairs:
                visitor(name, value)
            return None

        snapshot = self._thread_safe(op)
        return None if snapshot is None else iter(snapshot)

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return self.each_dependency()

    def hash_tree(self, resolve_dependencies: bool = False) -> Dict[str, Any]:
        return self._thread_safe(lambda: self.registry.hash_tree(resolve_dependencies, self._reveal_slot))

    def to_dict(self, resolve_dependencies: bool = False) -> Dict[str, Any]:
        return self.hash_tree(resolve_dependencies=resolve_dependencies)

    def stats(self) -> Dict[str, Any]:
        def op() -> Dict[str, Any]:
            resolves = self.context.resolve_count
            hits = self.context.cache_hit_count
            return {
                "container_id": self.container_id,
                "uptime_seconds": time.time() - self.context.created_at,
                "total_resolves": resolves,
                "cache_hits": hits,
                "cache_hit_rate": (hits / resolves) if resolves > 0 else 0.0,
                "registered_dependencies": self.registry.dependency_count(),
                "observers": self._watcher.count(),
                "frozen": self.registry.frozen,
            }

        return self._thread_safe(op)

    # observers

    def observe(self, path: str, callback: ObserverCallback) -> Observer:
        """Call ``callback(path, entity)`` every time *path* gets registered."""
        return self._thread_safe(lambda: self._watcher.watch(path, callback))

    subscribe = observe

    def unobserve(self, observer: Observer) -> bool:
        return self._thread_safe(lambda: self._watcher.unwatch(observer))

    unsubscribe = unobserve

    def clear_observers(self, path: Optional[str] = None) -> None:
        self._thread_safe(lambda: self._watcher.clear_listeners(path))

    clear_listeners = clear_observers

    # internals used by the resolver and the watcher (lock already held)

    def _reveal_slot(self, slot: DependencySlot) -> Any:
        return DependencyResolver.reveal(self, slot)

    def _reveal_entity(self, path: str) -> Union[Any, NamespaceNode]:
        entity = DependencyResolver.find_entity(self, path)
        if isinstance(entity, NamespaceNode):
            return entity
        return self._reveal_slot(entity)

    def _record_resolution(self, was_cached: bool) -> None:
        self.context.resolve_count += 1
        if was_cached:
            self.context.cache_hit_count += 1
