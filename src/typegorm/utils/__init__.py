"""Small helpers shared across typegorm."""

from typegorm.utils.naming import (
    index_name_for,
    snake_case,
    table_name_for,
    unique_index_name_for,
)

__all__ = [
    "snake_case",
    "table_name_for",
    "index_name_for",
    "unique_index_name_for",
]
