"""Constants used throughout the nest-ioc container.

This module defines the framework logger, the path syntax (delimiter,
accepted segment charset, reserved tokens) and the default behaviours of
registration, key extraction and iteration.
"""

import logging
import re

LOGGER_NAME: str = "nest_ioc"
"""Default logger name for the nest-ioc container."""

LOGGER: logging.Logger = logging.getLogger(LOGGER_NAME)
"""Pre-configured logger instance for container diagnostics."""

PATH_SEPARATOR: str = "."
"""Delimiter between the segments of a dependency path (``"services.mailer"``)."""

KEY_PATTERN: re.Pattern = re.compile(r"^[A-Za-z0-9_\-]+$")
"""Accepted charset for a single path segment."""

RESERVED_KEY_PATTERN: re.Pattern = re.compile(r"^__.*__$")
"""Dunder segments are reserved for container internals and always rejected."""

DEFAULT_MEMOIZATION: bool = False
"""Default ``memoize`` flag of ``Container.register``."""

DEFAULT_KEY_EXTRACTION: bool = False
"""Default ``all_variants`` flag of ``Container.keys``."""

DEFAULT_ITERATION_YIELD_ALL: bool = False
"""Default ``yield_all`` flag of ``Container.each_dependency``."""

DEFAULT_ALLOW_OVERRIDES: bool = True
"""Whether a dependency may be registered again under an existing name."""
