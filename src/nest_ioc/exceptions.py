"""Exception hierarchy for nest-ioc.

All container exceptions inherit from :class:`ContainerError`, making it
easy to catch any nest-ioc error with a single ``except ContainerError`` clause.
"""

from typing import Any


class ContainerError(Exception):
    """Base exception for all nest-ioc errors."""

    pass


class ArgumentError(ContainerError, ValueError):
    """Raised when an operation receives a malformed argument."""

    def __init__(self, msg: str):
        super().__init__(msg)


class InvalidKeyError(ArgumentError):
    """Raised when a path segment is rejected by the key guard.

    Attributes:
        key: The offending segment (or whole path when it is not a string).
    """

    def __init__(self, key: Any, reason: str):
        super().__init__(f"Invalid container key {key!r}: {reason}")
        self.key = key


class FrozenRegistryError(ContainerError):
    """Raised when a registration is attempted on a frozen container.

    Attributes:
        path: The path that was being registered.
    """

    def __init__(self, path: str):
        super().__init__(f"Can not register '{path}': the container is frozen")
        self.path = path


class DuplicateRegistrationError(ContainerError):
    """Raised when a name collides with an existing entity of the same namespace.

    Attributes:
        path: The fully-qualified path of the colliding entity.
    """

    def __init__(self, path: str, msg: str | None = None):
        super().__init__(msg or f"'{path}' is already registered (overrides are disabled)")
        self.path = path


class DependencyOverNamespaceOverlapError(DuplicateRegistrationError):
    """Raised when a dependency is registered under an existing namespace name."""

    def __init__(self, path: str):
        super().__init__(path, f"Trying to overlap already registered namespace '{path}' with a dependency")


class NamespaceOverDependencyOverlapError(DuplicateRegistrationError):
    """Raised when a namespace is registered under an existing dependency name."""

    def __init__(self, path: str):
        super().__init__(path, f"Trying to overlap already registered dependency '{path}' with a namespace")


class ResolvingError(ContainerError, KeyError):
    """Base exception for failed path walks.

    Attributes:
        path: The full path that was requested.
        path_part: The part of the path (up to the failing segment) that
            could not be walked.
    """

    def __init__(self, path: str, path_part: str, msg: str):
        super().__init__(msg)
        self.path = path
        self.path_part = path_part

    def __str__(self) -> str:
        return Exception.__str__(self)


class DependencyNotFoundError(ResolvingError):
    """Raised when the final segment of a path does not exist."""

    def __init__(self, path: str, path_part: str):
        super().__init__(path, path_part, f"Dependency '{path_part}' not found (requested: '{path}')")


class NamespaceNotFoundError(ResolvingError):
    """Raised when an intermediate segment of a path does not exist."""

    def __init__(self, path: str, path_part: str):
        super().__init__(path, path_part, f"Namespace '{path_part}' not found (requested: '{path}')")


class DependencyExpectedError(ResolvingError):
    """Raised when the final segment of a path is a namespace, not a dependency."""

    def __init__(self, path: str, path_part: str):
        super().__init__(path, path_part, f"'{path_part}' is a namespace, a dependency was expected (requested: '{path}')")


class NamespaceExpectedError(ResolvingError):
    """Raised when an intermediate segment of a path is a dependency, not a namespace."""

    def __init__(self, path: str, path_part: str):
        super().__init__(path, path_part, f"'{path_part}' is a dependency, a namespace was expected (requested: '{path}')")


class DependencyCreationError(ContainerError):
    """Raised when a provider callable fails while producing a dependency.

    Attributes:
        path: The dependency path whose creation failed.
        cause: The original exception that caused the failure.
    """

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Failed to create dependency '{path}'; cause: {cause.__class__.__name__}: {cause}")
        self.path = path
        self.cause = cause


class ConfigurationError(ContainerError):
    """Raised for configuration problems (invalid sources, unreadable files, bad settings)."""

    def __init__(self, msg: str):
        super().__init__(msg)
