"""
Relation descriptor builder.

Reads the relation options of a field (``relation``, ``joinColumn``,
``mappedBy``, ``joinTable``), works out which side of the association owns
it, finds the target record type behind ``Optional``/sequence wrappers and
checks that the combination of options is valid for the relation kind.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from typegorm.errors import (
    RelationConfigError,
    RelationTargetError,
    RelationTypeError,
    TagParseError,
)
from typegorm.metadata.tags import TagOption
from typegorm.metadata.typeinfo import FieldDescriptor, TypeClassification, TypeKind
from typegorm.metadata.validation import ParseReport
from typegorm.models import (
    DEFAULT_REFERENCED_COLUMN,
    EntityMetadata,
    JoinColumnMetadata,
    RelationMetadata,
    RelationType,
)

logger = logging.getLogger(__name__)


def resolve_relation_target(field_type: TypeClassification) -> TypeClassification:
    """
    Find the record type a relation field points at.

    ``Optional[T]``, ``list[T]`` and ``list[Optional[T]]`` all resolve to ``T``.
    """
    target = field_type
    if target.kind in (TypeKind.POINTER, TypeKind.SEQUENCE):
        target = target.inner
        if target.kind is TypeKind.POINTER:
            target = target.inner
    return target


def parse_join_column(value: str) -> JoinColumnMetadata:
    """Parse ``col`` or ``col:refcol`` (default refcol is ``id``)."""
    column, sep, referenced = value.partition(":")
    referenced = referenced.strip() if sep else DEFAULT_REFERENCED_COLUMN
    return JoinColumnMetadata(column_name=column.strip(), referenced_column_name=referenced)


class RelationBuilder:
    """Accumulates relation options for one field."""

    def __init__(self, entity: EntityMetadata, field: FieldDescriptor, report: ParseReport):
        self.entity = entity
        self.field = field
        self.report = report

        self.is_relation = False
        self.relation_type: Optional[RelationType] = None
        self.is_owning_side = False
        self.join_columns: List[JoinColumnMetadata] = []
        self.mapped_by_field_name = ""
        self.join_table_name = ""

    def _location(self) -> str:
        return f"{self.entity.name}.{self.field.name}"

    def _error(self, cls, message: str, key: Optional[str] = None) -> TagParseError:
        return cls(
            f"{message} on field {self._location()}",
            entity=self.entity.name,
            field_name=self.field.name,
            key=key,
        )

    def apply(self, option: TagOption) -> None:
        """Apply one relation option."""
        key, value = option.key, option.value

        if key == "relation":
            try:
                self.relation_type = RelationType(value)
                self.is_relation = True
            except ValueError:
                self.report.record(self._error(
                    RelationTypeError, f"invalid relation type '{value}'", key=key
                ))
                self.is_relation = False
        elif key in ("joincolumn", "join_column"):
            join_column = parse_join_column(value)
            if join_column.column_name:
                self.join_columns.append(join_column)
            else:
                self.report.record(self._error(
                    RelationConfigError, "empty joinColumn name", key=key
                ))
            self.is_owning_side = True
        elif key in ("mappedby", "mapped_by"):
            self.mapped_by_field_name = value
            self.is_owning_side = False
        elif key in ("jointable", "join_table"):
            self.join_table_name = value
            self.is_owning_side = True
        else:
            raise KeyError(f"not a relation option: {key}")

    def _check_options(self) -> Optional[TagParseError]:
        """Option combinations valid for any relation kind."""
        many_to_many = self.relation_type is RelationType.MANY_TO_MANY

        if self.join_columns and self.mapped_by_field_name:
            return self._error(RelationConfigError, "conflicting tags 'joinColumn' and 'mappedBy'")
        if many_to_many and not self.mapped_by_field_name and not self.join_table_name:
            return self._error(
                RelationConfigError, "owning side of many-to-many relation requires 'joinTable'"
            )
        if many_to_many and self.mapped_by_field_name and self.join_table_name:
            return self._error(
                RelationConfigError,
                "inverse side (mappedBy) of many-to-many relation must not have 'joinTable'",
            )
        if not many_to_many and self.join_table_name:
            return self._error(
                RelationConfigError, "tag 'joinTable' is only valid for many-to-many relations"
            )
        return None

    def _check_kind(self) -> Optional[TagParseError]:
        """Requirements specific to each relation kind."""
        kind = self.relation_type

        if kind is RelationType.ONE_TO_ONE:
            if self.is_owning_side and not self.join_columns:
                return self._error(
                    RelationConfigError, "owning side of one-to-one relation requires 'joinColumn'"
                )
            if not self.is_owning_side and not self.mapped_by_field_name:
                return self._error(
                    RelationConfigError, "inverse side of one-to-one relation requires 'mappedBy'"
                )
        elif kind is RelationType.MANY_TO_ONE:
            if not self.join_columns:
                return self._error(RelationConfigError, "many-to-one relation requires 'joinColumn'")
            if self.mapped_by_field_name:
                return self._error(
                    RelationConfigError, "many-to-one relation must not have 'mappedBy'"
                )
        elif kind is RelationType.ONE_TO_MANY:
            if not self.mapped_by_field_name:
                return self._error(RelationConfigError, "one-to-many relation requires 'mappedBy'")
            if self.join_columns:
                return self._error(
                    RelationConfigError, "one-to-many relation must not have 'joinColumn'"
                )
        elif kind is RelationType.MANY_TO_MANY:
            if not self.is_owning_side and not self.mapped_by_field_name:
                return self._error(
                    RelationConfigError, "inverse side of many-to-many relation requires 'mappedBy'"
                )
        return None

    def build(self) -> Optional[RelationMetadata]:
        """
        Validate the options and build the relation descriptor.

        The first failed check is recorded and the field is dropped (None is
        returned); later checks are not run for that field.
        """
        error = self._check_options()
        if error is None:
            target = resolve_relation_target(self.field.type)
            if target.kind is not TypeKind.RECORD:
                error = self._error(
                    RelationTargetError,
                    f"relation field must be a record, Optional record or sequence of records, "
                    f"final type found was {target} ({target.kind.value})",
                )
        if error is None:
            error = self._check_kind()

        if error is not None:
            self.report.record(error)
            logger.info(f"Invalid relation {self._location()} dropped")
            return None

        return RelationMetadata(
            entity=self.entity,
            field_name=self.field.name,
            field_type=self.field.type,
            relation_type=self.relation_type,
            target_entity_type=target.python_type,
            target_entity_name=target.name,
            is_owning_side=self.is_owning_side,
            join_columns=tuple(self.join_columns),
            mapped_by_field_name=self.mapped_by_field_name,
            join_table_name=self.join_table_name,
        )
