"""
Entity parser.

Builds the ``EntityMetadata`` of one record type by walking its fields once,
in declaration order. Each field becomes a relation, a column or nothing.
Problems are collected in a ``ParseReport``; scanning continues after a
problem and the first one is raised when the scan is over, so the logs show
every problem while callers get a single, stable error.
"""

from __future__ import annotations

import logging

from typegorm.metadata.columns import ColumnBuilder, maps_by_default
from typegorm.metadata.relations import RelationBuilder
from typegorm.metadata.tags import COLUMN_KEYS, RELATION_KEYS, is_excluded, tokenize
from typegorm.metadata.typeinfo import FieldDescriptor, inspect_fields
from typegorm.metadata.validation import FieldOutcome, ParseReport
from typegorm.models import EntityMetadata
from typegorm.utils.naming import table_name_for

logger = logging.getLogger(__name__)

TABLE_NAME_ATTRIBUTE = "__tablename__"


class EntityParser:
    """
    Parses one record class into an ``EntityMetadata``.

    The table name defaults to the snake_cased type name plus ``s`` and can
    be overridden with a ``__tablename__`` class attribute.
    """

    def __init__(self, cls: type):
        self.cls = cls
        self.report = ParseReport(type_name=cls.__name__)

    def _table_name(self) -> str:
        explicit = getattr(self.cls, TABLE_NAME_ATTRIBUTE, None)
        if isinstance(explicit, str) and explicit:
            return explicit
        return table_name_for(self.cls.__name__)

    def parse(self) -> EntityMetadata:
        """
        Parse the record class.

        Returns:
            EntityMetadata with columns and relations in field order

        Raises:
            EntityParseError: at least one field annotation was invalid
            InvalidInputError: the class type hints cannot be resolved
        """
        entity = EntityMetadata(
            name=self.cls.__name__,
            table_name=self._table_name(),
            record_type=self.cls,
        )
        logger.debug(f"Table name for {entity.name}: {entity.table_name}")

        for field in inspect_fields(self.cls):
            if not field.exported:
                logger.debug(f"Skipping unexported field: {field.name}")
                self.report.mark(field.name, FieldOutcome.SKIPPED)
                continue
            if is_excluded(field.annotation):
                logger.debug(f"Skipping excluded field (tag '-'): {field.name}")
                self.report.mark(field.name, FieldOutcome.SKIPPED)
                continue

            self._parse_field(entity, field)

        self.report.raise_for_errors()

        logger.info(
            f"Parsed {entity.name}: {len(entity.columns)} columns, "
            f"{len(entity.relations)} relations"
        )
        return entity

    def _parse_field(self, entity: EntityMetadata, field: FieldDescriptor) -> None:
        logger.debug(
            f"Processing field {field.name} (type {field.type}, tag '{field.annotation}')"
        )

        scan = tokenize(field.annotation, entity.name, field.name)
        self.report.record_all(scan.errors)

        column = ColumnBuilder(entity, field, self.report)
        relation = RelationBuilder(entity, field, self.report)

        for option in scan.options:
            if option.key in COLUMN_KEYS:
                column.apply(option)
            elif option.key in RELATION_KEYS:
                relation.apply(option)
            else:
                logger.warning(
                    f"Unknown or unsupported tag '{option.raw}' on field {entity.name}.{field.name}"
                )

        if relation.is_relation:
            built = relation.build()
            if built is None:
                self.report.mark(field.name, FieldOutcome.DROPPED)
                return
            entity.add_relation(built)
            self.report.mark(field.name, FieldOutcome.RELATION)
            logger.debug(
                f"Relation '{field.name}' ({built.relation_type.value} -> "
                f"{built.target_entity_name}) added"
            )
            return

        # An invalid relation kind falls through and is treated as a column candidate
        if scan.has_any(RELATION_KEYS) and not scan.has("relation"):
            logger.warning(
                f"Relation tags without 'relation' on field {entity.name}.{field.name} ignored"
            )

        if not column.has_options and not maps_by_default(field.type):
            logger.debug(
                f"Field '{field.name}' (type {field.type}) skipped (no explicit column tags)"
            )
            self.report.mark(field.name, FieldOutcome.SKIPPED)
            return

        built_column = column.build()
        existing = entity.get_column_by_db_name(built_column.column_name)
        if existing is not None:
            logger.warning(
                f"Duplicate column name '{built_column.column_name}' "
                f"(fields: {existing.field_name}, {field.name})"
            )
        entity.add_column(built_column)
        self.report.mark(field.name, FieldOutcome.COLUMN)
        logger.debug(f"Column '{field.name}' -> '{built_column.column_name}' added")


def build_entity_metadata(cls: type) -> EntityMetadata:
    """Parse a record class without consulting any registry."""
    return EntityParser(cls).parse()
