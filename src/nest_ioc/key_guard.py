"""Validation of dependency path segments."""

from typing import Any, Tuple

from .constants import KEY_PATTERN, PATH_SEPARATOR, RESERVED_KEY_PATTERN
from .exceptions import InvalidKeyError


class KeyGuard:
    """Validates single path segments and splits dotted paths.

    A segment is accepted when it is a non-empty ``str`` made of ASCII
    letters, digits, ``_`` and ``-``, and is not a reserved dunder token.
    """

    @staticmethod
    def validate(segment: Any) -> str:
        """Return *segment* unchanged if it is a valid path segment.

        Raises:
            InvalidKeyError: If *segment* is not a string, is empty, contains
                the path delimiter, uses characters outside the accepted
                charset or is a reserved token.
        """
        if not isinstance(segment, str):
            raise InvalidKeyError(segment, f"expected str, got {type(segment).__name__}")
        if not segment:
            raise InvalidKeyError(segment, "empty segment")
        if PATH_SEPARATOR in segment:
            raise InvalidKeyError(segment, f"segment contains the path delimiter '{PATH_SEPARATOR}'")
        if RESERVED_KEY_PATTERN.match(segment):
            raise InvalidKeyError(segment, "dunder names are reserved")
        if not KEY_PATTERN.match(segment):
            raise InvalidKeyError(segment, "only ASCII letters, digits, '_' and '-' are allowed")
        return segment

    @classmethod
    def split_path(cls, path: Any) -> Tuple[str, ...]:
        if not isinstance(path, str):
            raise InvalidKeyError(path, f"expected str, got {type(path).__name__}")
        return tuple(cls.validate(part) for part in path.split(PATH_SEPARATOR))

    @staticmethod
    def join(*segments: str) -> str:
        return PATH_SEPARATOR.join(s for s in segments if s)
