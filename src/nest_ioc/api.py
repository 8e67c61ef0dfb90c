from typing import Any, Optional, Type

from .container import Container, Definitions
from .exceptions import ArgumentError
from .settings import ContainerSettings


def define(
    definitions: Optional[Definitions] = None,
    *,
    container_class: Type[Container] = Container,
    settings: Optional[ContainerSettings] = None,
    **kwargs: Any,
) -> Container:
    """Build a container whose *definitions* are replayed on every reload.

    Example:
        >>> def wiring(c):
        ...     c.register("answer", 42)
        ...     c.namespace("services", lambda c: c.register("clock", object, memoize=True))
        >>> container = define(wiring)
        >>> container.resolve("answer")
        42

    Raises:
        ArgumentError: If *container_class* is not a :class:`Container` subclass.
    """
    if not (isinstance(container_class, type) and issubclass(container_class, Container)):
        raise ArgumentError(f"Base class should be a type of Container, got {container_class!r}")
    return container_class(definitions, settings=settings, **kwargs)
