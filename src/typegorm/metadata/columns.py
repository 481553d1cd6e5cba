"""
Column descriptor builder.

Derives a column from a field's type and applies the column options of its
annotation on top of the defaults.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from typegorm.errors import ColumnConfigError, MalformedTagValueError
from typegorm.metadata.tags import TagOption
from typegorm.metadata.typeinfo import FieldDescriptor, TypeClassification, TypeKind
from typegorm.metadata.validation import ParseReport
from typegorm.models import ColumnMetadata, EntityMetadata
from typegorm.nulltypes import NULLABLE_WRAPPERS
from typegorm.utils.naming import index_name_for, snake_case, unique_index_name_for

logger = logging.getLogger(__name__)

NULLABLE_KINDS = frozenset({
    TypeKind.POINTER,
    TypeKind.INTERFACE,
    TypeKind.MAP,
    TypeKind.SEQUENCE,
    TypeKind.FUNCTION,
})

NUMERIC_KEYS = ("size", "precision", "scale")


def is_type_nullable(field_type: TypeClassification) -> bool:
    """
    Default nullability of a field type.

    Optional, interface, map, sequence and callable fields are nullable, as
    are the ``Null*`` wrapper records. Scalars (including datetimes) and
    other records are not.
    """
    if field_type.kind in NULLABLE_KINDS:
        return True
    return field_type.python_type in NULLABLE_WRAPPERS


def _is_plain_value(field_type: TypeClassification) -> bool:
    if field_type.kind is TypeKind.SCALAR:
        return True
    return field_type.kind is TypeKind.RECORD and field_type.python_type in NULLABLE_WRAPPERS


def maps_by_default(field_type: TypeClassification) -> bool:
    """
    Whether a field without column options is mapped to a column.

    Scalars, ``Null*`` wrappers and ``Optional`` of either are mapped; records,
    sequences, maps and the like are left out (they are usually relations or
    embedded values).
    """
    if field_type.kind is TypeKind.POINTER:
        return _is_plain_value(field_type.inner)
    return _is_plain_value(field_type)


class ColumnBuilder:
    """Accumulates column options for one field."""

    def __init__(self, entity: EntityMetadata, field: FieldDescriptor, report: ParseReport):
        self.entity = entity
        self.field = field
        self.report = report
        self._values: Dict[str, Any] = {
            "column_name": snake_case(field.name),
            "is_nullable": is_type_nullable(field.type),
        }
        self.has_options = False

    @property
    def column_name(self) -> str:
        return self._values["column_name"]

    def _location(self) -> str:
        return f"{self.entity.name}.{self.field.name}"

    def _parse_int(self, option: TagOption) -> int:
        try:
            return int(option.value)
        except ValueError:
            self.report.record(MalformedTagValueError(
                f"invalid value '{option.value}' for '{option.key}' on field {self._location()}",
                entity=self.entity.name,
                field_name=self.field.name,
                key=option.key,
            ))
            return 0

    def apply(self, option: TagOption) -> None:
        """Apply one column option."""
        key, value = option.key, option.value
        self.has_options = True

        if key == "column":
            self._values["column_name"] = value
        elif key == "type":
            self._values["db_type"] = value
        elif key in NUMERIC_KEYS:
            self._values[key] = self._parse_int(option)
        elif key in ("primarykey", "pk"):
            self._values["is_primary_key"] = True
            self._values["is_nullable"] = False
        elif key in ("autoincrement", "auto_increment", "serial"):
            self._values["is_auto_increment"] = True
        elif key in ("notnull", "not_null"):
            self._values["is_nullable"] = False
        elif key == "nullable":
            self._values["is_nullable"] = True
        elif key == "unique":
            self._values["is_unique"] = True
        elif key == "default":
            self._values["default_value"] = value
        elif key == "index":
            self._values["index_name"] = value or index_name_for(
                self.entity.table_name, self.column_name
            )
        elif key == "uniqueindex":
            self._values["is_unique"] = True
            self._values["unique_index_name"] = value or unique_index_name_for(
                self.entity.table_name, self.column_name
            )
        elif key in ("createdat", "created_at"):
            self._values["is_created_at"] = True
        elif key in ("updatedat", "updated_at"):
            self._values["is_updated_at"] = True
        elif key in ("deletedat", "deleted_at"):
            self._values["is_deleted_at"] = True
            self._values["is_nullable"] = True
        else:
            raise KeyError(f"not a column option: {key}")

    def build(self) -> ColumnMetadata:
        """
        Freeze the accumulated options into a column descriptor.

        Later options win over earlier ones, except that a primary key is
        never nullable and a deleted-at column always is.
        """
        values = dict(self._values)

        if values.get("is_primary_key") and values.get("is_deleted_at"):
            self.report.record(ColumnConfigError(
                f"primary key column cannot be the deleted-at column on field {self._location()}",
                entity=self.entity.name,
                field_name=self.field.name,
                key="deletedat",
            ))
        if values.get("is_primary_key"):
            values["is_nullable"] = False
        elif values.get("is_deleted_at"):
            values["is_nullable"] = True

        return ColumnMetadata(
            entity=self.entity,
            field_name=self.field.name,
            field_type=self.field.type,
            field_index=self.field.index,
            python_type=self.field.python_type,
            **values,
        )
