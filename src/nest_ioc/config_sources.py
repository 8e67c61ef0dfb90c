"""Nested-mapping inputs for ``Container.load_tree``.

``load_tree`` walks whatever :meth:`TreeSource.get_tree` hands back: every
nested mapping opens a namespace of the same name and every other value is
registered as a literal dependency. File-backed sources parse their file
again on each call, so a reload picks up edits.
"""

import json
from typing import IO, Any, Mapping

from .exceptions import ConfigurationError


def _ensure_mapping(data: Any, origin: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{origin} must contain a mapping at the top level, got {type(data).__name__}")
    return data


class TreeSource:
    """Something that can produce a namespace tree on demand."""

    def get_tree(self) -> Mapping[str, Any]:
        raise NotImplementedError


class DictSource(TreeSource):
    """Wraps a mapping that is already in memory.

    ``None`` stands for an empty tree; anything else that is not a mapping is
    refused up front rather than when the tree gets loaded.

    Example:
        >>> DictSource({"db": {"port": 5432}}).get_tree()["db"]["port"]
        5432
    """

    def __init__(self, data: Mapping[str, Any]):
        self._data = _ensure_mapping(data, "DictSource")

    def get_tree(self) -> Mapping[str, Any]:
        return self._data


class FileTreeSource(TreeSource):
    """A tree stored in a UTF-8 text file.

    Subclasses name their format in ``format_name`` and turn the open file
    into Python data in :meth:`parse`. An empty document yields an empty tree.

    Raises:
        ConfigurationError: From :meth:`get_tree`, when the file is missing,
            unreadable, malformed, or its top level is not a mapping.
    """

    format_name = "file"

    def __init__(self, path: str):
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def parse(self, stream: IO[str]) -> Any:
        raise NotImplementedError

    def get_tree(self) -> Mapping[str, Any]:
        try:
            with open(self._path, encoding="utf-8") as stream:
                data = self.parse(stream)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load {self.format_name} config '{self._path}': {e}") from e
        return _ensure_mapping(data, f"{self.format_name} config '{self._path}'")


class JsonTreeSource(FileTreeSource):
    """JSON document whose top level is an object."""

    format_name = "JSON"

    def parse(self, stream: IO[str]) -> Any:
        return json.load(stream)


class YamlTreeSource(FileTreeSource):
    """YAML document, read with ``yaml.safe_load``.

    PyYAML is imported on first use; install the ``yaml`` extra
    (``pip install nest-ioc[yaml]``) to enable it.
    """

    format_name = "YAML"

    def parse(self, stream: IO[str]) -> Any:
        try:
            import yaml
        except ImportError as e:
            raise ConfigurationError("PyYAML not installed") from e
        return yaml.safe_load(stream)
