"""
Core data models for the typegorm package.

Defines the relational metadata built from annotated record types: entities
(tables), columns, relations and join columns. Column, relation and join
column descriptors are frozen; an ``EntityMetadata`` is only filled in by the
parser and is treated as read-only once it has been returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from typegorm.metadata.typeinfo import TypeClassification


class RelationType(str, Enum):
    """Kinds of association between two entities."""
    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_ONE = "many-to-one"
    MANY_TO_MANY = "many-to-many"


DEFAULT_REFERENCED_COLUMN = "id"


@dataclass(frozen=True)
class JoinColumnMetadata:
    """A foreign key column and the target column it references."""
    column_name: str
    referenced_column_name: str = DEFAULT_REFERENCED_COLUMN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column_name": self.column_name,
            "referenced_column_name": self.referenced_column_name,
        }


@dataclass(frozen=True, eq=False)
class ColumnMetadata:
    """Mapping of one record field to a storage column."""
    entity: EntityMetadata = field(repr=False)
    field_name: str
    field_type: TypeClassification
    field_index: int
    python_type: str
    column_name: str

    db_type: str = ""
    is_primary_key: bool = False
    is_auto_increment: bool = False
    is_nullable: bool = False
    is_unique: bool = False
    default_value: Optional[str] = None
    size: int = 0
    precision: int = 0
    scale: int = 0

    index_name: str = ""
    unique_index_name: str = ""

    # Special timestamp columns
    is_created_at: bool = False
    is_updated_at: bool = False
    is_deleted_at: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "field_name": self.field_name,
            "field_type": str(self.field_type),
            "field_index": self.field_index,
            "column_name": self.column_name,
            "db_type": self.db_type,
            "is_primary_key": self.is_primary_key,
            "is_auto_increment": self.is_auto_increment,
            "is_nullable": self.is_nullable,
            "is_unique": self.is_unique,
            "default_value": self.default_value,
            "size": self.size,
            "precision": self.precision,
            "scale": self.scale,
            "index_name": self.index_name,
            "unique_index_name": self.unique_index_name,
            "is_created_at": self.is_created_at,
            "is_updated_at": self.is_updated_at,
            "is_deleted_at": self.is_deleted_at,
        }


@dataclass(frozen=True, eq=False)
class RelationMetadata:
    """
    Association field between this entity and a target entity.

    The owning side declares the foreign key (``join_columns``) or the join
    table; the inverse side only names the field on the target that owns the
    relation (``mapped_by_field_name``).
    """
    entity: EntityMetadata = field(repr=False)
    field_name: str
    field_type: TypeClassification
    relation_type: RelationType
    target_entity_type: type
    target_entity_name: str
    is_owning_side: bool = False
    join_columns: Tuple[JoinColumnMetadata, ...] = ()
    mapped_by_field_name: str = ""
    join_table_name: str = ""
    inverse_join_columns: Tuple[JoinColumnMetadata, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "field_name": self.field_name,
            "field_type": str(self.field_type),
            "relation_type": self.relation_type.value,
            "target_entity_name": self.target_entity_name,
            "is_owning_side": self.is_owning_side,
            "join_columns": [jc.to_dict() for jc in self.join_columns],
            "mapped_by_field_name": self.mapped_by_field_name,
            "join_table_name": self.join_table_name,
            "inverse_join_columns": [jc.to_dict() for jc in self.inverse_join_columns],
        }


@dataclass(eq=False)
class EntityMetadata:
    """Metadata for one record type and the table it maps to."""
    name: str
    table_name: str
    record_type: Optional[type] = None
    columns: List[ColumnMetadata] = field(default_factory=list)
    columns_by_name: Dict[str, ColumnMetadata] = field(default_factory=dict, repr=False)
    columns_by_db_name: Dict[str, ColumnMetadata] = field(default_factory=dict, repr=False)
    primary_key_columns: List[ColumnMetadata] = field(default_factory=list, repr=False)

    created_at_column: Optional[ColumnMetadata] = field(default=None, repr=False)
    updated_at_column: Optional[ColumnMetadata] = field(default=None, repr=False)
    deleted_at_column: Optional[ColumnMetadata] = field(default=None, repr=False)

    relations: List[RelationMetadata] = field(default_factory=list)
    relations_by_name: Dict[str, RelationMetadata] = field(default_factory=dict, repr=False)

    @property
    def column_names(self) -> List[str]:
        """Return storage column names in field order."""
        return [c.column_name for c in self.columns]

    @property
    def primary_key(self) -> List[str]:
        """Return storage names of the primary key columns."""
        return [c.column_name for c in self.primary_key_columns]

    @property
    def is_soft_delete(self) -> bool:
        return self.deleted_at_column is not None

    def get_column(self, field_name: str) -> Optional[ColumnMetadata]:
        """Get column by record field name."""
        return self.columns_by_name.get(field_name)

    def get_column_by_db_name(self, column_name: str) -> Optional[ColumnMetadata]:
        """Get column by storage column name."""
        return self.columns_by_db_name.get(column_name)

    def get_relation(self, field_name: str) -> Optional[RelationMetadata]:
        """Get relation by record field name."""
        return self.relations_by_name.get(field_name)

    def add_column(self, column: ColumnMetadata) -> None:
        """Register a column and the special column slots it fills."""
        self.columns.append(column)
        self.columns_by_name[column.field_name] = column
        self.columns_by_db_name[column.column_name] = column

        if column.is_primary_key:
            self.primary_key_columns.append(column)
        if column.is_created_at:
            self.created_at_column = column
        if column.is_updated_at:
            self.updated_at_column = column
        if column.is_deleted_at:
            self.deleted_at_column = column

    def add_relation(self, relation: RelationMetadata) -> None:
        """Register a relation."""
        self.relations.append(relation)
        self.relations_by_name[relation.field_name] = relation

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "table_name": self.table_name,
            "columns": [c.to_dict() for c in self.columns],
            "primary_key": self.primary_key,
            "created_at_column": self.created_at_column.column_name if self.created_at_column else None,
            "updated_at_column": self.updated_at_column.column_name if self.updated_at_column else None,
            "deleted_at_column": self.deleted_at_column.column_name if self.deleted_at_column else None,
            "relations": [r.to_dict() for r in self.relations],
        }
