"""
Metadata extraction for annotated record types.

Reads per-field annotations, builds column and relation descriptors, checks
relation sides against each other and caches the result per record class.
"""

from typegorm.metadata.parser import EntityParser, build_entity_metadata
from typegorm.metadata.registry import (
    MetadataRegistry,
    clear_cache,
    get_default_registry,
    parse,
)
from typegorm.metadata.tags import OrmTag, orm, tokenize
from typegorm.metadata.typeinfo import (
    FieldDescriptor,
    TypeClassification,
    TypeKind,
    classify,
    inspect_fields,
    resolve_target,
)

__all__ = [
    "EntityParser",
    "build_entity_metadata",
    "MetadataRegistry",
    "get_default_registry",
    "parse",
    "clear_cache",
    "OrmTag",
    "orm",
    "tokenize",
    "FieldDescriptor",
    "TypeClassification",
    "TypeKind",
    "classify",
    "inspect_fields",
    "resolve_target",
]
