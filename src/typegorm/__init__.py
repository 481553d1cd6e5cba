"""
typegorm - Relational metadata for annotated Python record types

Reads per-field annotations on record classes and builds the table, column,
key, index and relationship metadata that query builders, migration tools
and CRUD layers consume.

Features:
- Annotation mini-language (``primaryKey;autoIncrement``, ``relation:many-to-one;joinColumn:autor_id``)
- Owning/inverse side resolution for one-to-one, one-to-many, many-to-one and many-to-many relations
- Thread-safe, parse-once metadata registry

Usage:
    from typing import Annotated, Optional
    from typegorm import orm, parse

    class User:
        id: Annotated[int, orm("primaryKey;autoIncrement")]
        email: Annotated[str, orm("uniqueIndex")]
        bio: Optional[str]

    meta = parse(User)
    meta.table_name  # "users"
"""

__version__ = "0.1.0"

from typegorm.errors import (
    ColumnConfigError,
    ConfigError,
    DuplicateTagError,
    EntityParseError,
    InvalidInputError,
    MalformedTagValueError,
    MetadataError,
    RelationConfigError,
    RelationTargetError,
    RelationTypeError,
    TagParseError,
)
from typegorm.models import (
    ColumnMetadata,
    EntityMetadata,
    JoinColumnMetadata,
    RelationMetadata,
    RelationType,
)
from typegorm.nulltypes import NullBool, NullFloat64, NullInt64, NullString, NullTime
from typegorm.metadata import (
    MetadataRegistry,
    clear_cache,
    get_default_registry,
    orm,
    parse,
)

__all__ = [
    # Core models
    "EntityMetadata",
    "ColumnMetadata",
    "RelationMetadata",
    "JoinColumnMetadata",
    "RelationType",
    # Nullable wrappers
    "NullString",
    "NullInt64",
    "NullFloat64",
    "NullBool",
    "NullTime",
    # Parsing
    "MetadataRegistry",
    "get_default_registry",
    "parse",
    "clear_cache",
    "orm",
    # Errors
    "MetadataError",
    "InvalidInputError",
    "ConfigError",
    "TagParseError",
    "DuplicateTagError",
    "MalformedTagValueError",
    "ColumnConfigError",
    "RelationTypeError",
    "RelationConfigError",
    "RelationTargetError",
    "EntityParseError",
]
