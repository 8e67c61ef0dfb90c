# nest_ioc/__init__.py
try:
    from ._version import __version__
except Exception:
    __version__ = "0.0.0"

from .api import define
from .arbitrary_lock import ArbitraryLock
from .config_sources import DictSource, FileTreeSource, JsonTreeSource, TreeSource, YamlTreeSource
from .container import Container
from .dependency_resolver import DependencyResolver
from .dependency_watcher import DependencyWatcher, Observer
from .entities import DependencySlot, NamespaceNode
from .exceptions import (
    ArgumentError,
    ConfigurationError,
    ContainerError,
    DependencyCreationError,
    DependencyExpectedError,
    DependencyNotFoundError,
    DependencyOverNamespaceOverlapError,
    DuplicateRegistrationError,
    FrozenRegistryError,
    InvalidKeyError,
    NamespaceExpectedError,
    NamespaceNotFoundError,
    NamespaceOverDependencyOverlapError,
    ResolvingError,
)
from .key_guard import KeyGuard
from .registry import Registry
from .registry_builder import RegistryBuilder, RegistryState
from .settings import ContainerSettings

__all__ = [
    "__version__",
    "Container",
    "ContainerSettings",
    "define",
    "ArbitraryLock",
    "KeyGuard",
    "DependencySlot",
    "NamespaceNode",
    "Registry",
    "RegistryBuilder",
    "RegistryState",
    "DependencyResolver",
    "DependencyWatcher",
    "Observer",
    "TreeSource",
    "DictSource",
    "FileTreeSource",
    "JsonTreeSource",
    "YamlTreeSource",
    "ContainerError",
    "ArgumentError",
    "InvalidKeyError",
    "FrozenRegistryError",
    "DuplicateRegistrationError",
    "DependencyOverNamespaceOverlapError",
    "NamespaceOverDependencyOverlapError",
    "ResolvingError",
    "DependencyNotFoundError",
    "NamespaceNotFoundError",
    "DependencyExpectedError",
    "NamespaceExpectedError",
    "DependencyCreationError",
    "ConfigurationError",
]
