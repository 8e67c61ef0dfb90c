"""Container settings.

:class:`ContainerSettings` is the immutable set of behaviour switches a
container is built with. It can be given directly or read from a mapping or
a :class:`~nest_ioc.config_sources.TreeSource` section.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

from .config_sources import TreeSource
from .constants import DEFAULT_ALLOW_OVERRIDES, DEFAULT_MEMOIZATION
from .exceptions import ConfigurationError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    raise ConfigurationError(f"Setting '{name}' expects a boolean, got {value!r}")


@dataclass(frozen=True)
class ContainerSettings:
    """Behaviour switches of a container.

    Attributes:
        default_memoize: ``memoize`` flag used by ``register`` when none is given.
        allow_overrides: Whether registering an existing dependency name
            replaces it (``True``) or raises ``DuplicateRegistrationError``.
        freeze_on_build: Freeze the registry right after the construction
            definitions ran (on construction and on every reload).
    """

    default_memoize: bool = DEFAULT_MEMOIZATION
    allow_overrides: bool = DEFAULT_ALLOW_OVERRIDES
    freeze_on_build: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ContainerSettings":
        """Build settings from a flat mapping, rejecting unknown keys.

        String booleans (``"true"``, ``"off"``...) are accepted.

        Raises:
            ConfigurationError: On unknown keys or non-boolean values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown container settings: {sorted(unknown)}; allowed: {sorted(known)}")
        return cls(**{name: _coerce_bool(name, value) for name, value in data.items()})

    @classmethod
    def from_source(cls, source: TreeSource, section: Optional[str] = "container") -> "ContainerSettings":
        """Build settings from *section* of a tree source (the whole tree when ``None``)."""
        tree = source.get_tree()
        if section is not None:
            tree = tree.get(section, {})
        if not isinstance(tree, Mapping):
            raise ConfigurationError(f"Settings section '{section}' must be a mapping")
        return cls.from_mapping(tree)
