"""
Exception hierarchy for typegorm.

Input problems (``None`` or a non-record target) raise ``InvalidInputError``
before the registry is touched. Problems found while reading field annotations
are ``TagParseError`` subclasses; they are collected for the whole type and
the first one is surfaced through ``EntityParseError``.
"""

from __future__ import annotations

from typing import List, Optional


class MetadataError(Exception):
    """Base class for every error raised by typegorm."""


class InvalidInputError(MetadataError, TypeError):
    """The parse target is missing or is not a record type."""


class ConfigError(MetadataError):
    """Configuration file could not be read or decoded."""


class TagParseError(MetadataError):
    """A field annotation could not be interpreted."""

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        field_name: Optional[str] = None,
        key: Optional[str] = None,
    ):
        super().__init__(message)
        self.entity = entity
        self.field_name = field_name
        self.key = key

    @property
    def location(self) -> str:
        """Return ``Entity.field`` for messages."""
        return f"{self.entity}.{self.field_name}"


class DuplicateTagError(TagParseError):
    """The same option key appears twice in one annotation."""


class MalformedTagValueError(TagParseError):
    """An option value has the wrong format (e.g. ``size:abc``)."""


class ColumnConfigError(TagParseError):
    """Column options contradict each other."""


class RelationTypeError(TagParseError):
    """The ``relation`` option names an unknown relation kind."""


class RelationConfigError(TagParseError):
    """Relation options are missing, empty or conflicting."""


class RelationTargetError(TagParseError):
    """A relation field does not point at a record type."""


class EntityParseError(MetadataError):
    """
    Parsing a record type failed.

    The message names the type and the first problem found; ``errors`` holds
    every problem recorded during the scan, in the order they were found.
    """

    def __init__(self, type_name: str, errors: List[TagParseError]):
        self.type_name = type_name
        self.errors = list(errors)
        self.cause = self.errors[0] if self.errors else None
        super().__init__(
            f"failed to parse metadata for {type_name} "
            f"({len(self.errors)} error(s)): {self.cause}"
        )
