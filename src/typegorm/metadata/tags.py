"""
Annotation tokenizer.

A field annotation is a single string of ``;``-separated options, each option
being ``key`` or ``key:value``. Keys are case-insensitive; values run until the
next ``;`` and may themselves contain ``:`` (``joinColumn:autor_id:uuid``).
The whole annotation ``-`` excludes the field from mapping.

Annotations are attached either with ``typing.Annotated``::

    id: Annotated[int, orm("primaryKey;autoIncrement")]

or through dataclass field metadata::

    id: int = field(default=0, metadata={"orm": "primaryKey;autoIncrement"})
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from typegorm.errors import DuplicateTagError, TagParseError

logger = logging.getLogger(__name__)

TAG_NAME = "orm"
EXCLUDE_MARKER = "-"
OPTION_SEPARATOR = ";"
VALUE_SEPARATOR = ":"

COLUMN_KEYS = frozenset({
    "column",
    "type",
    "size",
    "precision",
    "scale",
    "primarykey", "pk",
    "autoincrement", "auto_increment", "serial",
    "notnull", "not_null",
    "nullable",
    "unique",
    "default",
    "index",
    "uniqueindex",
    "createdat", "created_at",
    "updatedat", "updated_at",
    "deletedat", "deleted_at",
})

RELATION_KEYS = frozenset({
    "relation",
    "joincolumn", "join_column",
    "mappedby", "mapped_by",
    "jointable", "join_table",
})


@dataclass(frozen=True)
class OrmTag:
    """Marker carrying a field annotation inside ``typing.Annotated``."""
    value: str

    def __str__(self) -> str:
        return self.value


def orm(value: str) -> OrmTag:
    """Build an annotation marker: ``Annotated[int, orm("pk")]``."""
    return OrmTag(value)


@dataclass(frozen=True)
class TagOption:
    """One ``key[:value]`` option of an annotation."""
    key: str
    value: str
    raw: str


@dataclass
class TagScan:
    """Options read from one field annotation plus the problems found."""
    options: List[TagOption] = field(default_factory=list)
    errors: List[TagParseError] = field(default_factory=list)

    @property
    def defined(self) -> Dict[str, str]:
        """Map of key -> value for the accepted options."""
        return {o.key: o.value for o in self.options if o.key}

    def has(self, key: str) -> bool:
        return any(o.key == key for o in self.options)

    def has_any(self, keys) -> bool:
        return any(o.key in keys for o in self.options)


def is_excluded(annotation: str) -> bool:
    """True when the annotation removes the field from mapping."""
    return annotation == EXCLUDE_MARKER


def tokenize(annotation: str, entity_name: str, field_name: str) -> TagScan:
    """
    Split a field annotation into options.

    A key repeated within the same annotation records a ``DuplicateTagError``
    and the repeated occurrence is dropped; scanning continues with the next
    option.

    Args:
        annotation: Raw annotation string
        entity_name: Record type name (for messages)
        field_name: Field name (for messages)

    Returns:
        TagScan with options in declaration order
    """
    scan = TagScan()
    seen = set()

    for raw in annotation.split(OPTION_SEPARATOR):
        raw = raw.strip()
        if not raw:
            continue

        key, _, value = raw.partition(VALUE_SEPARATOR)
        key = key.strip().lower()
        value = value.strip()

        if key and key in seen:
            scan.errors.append(DuplicateTagError(
                f"duplicate tag '{key}' on field {entity_name}.{field_name}",
                entity=entity_name,
                field_name=field_name,
                key=key,
            ))
            continue
        if key:
            seen.add(key)

        scan.options.append(TagOption(key=key, value=value, raw=raw))

    logger.debug(f"Tokenized {entity_name}.{field_name}: {[o.key for o in scan.options]}")
    return scan
