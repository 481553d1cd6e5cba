"""
Naming conventions for tables, columns and generated index names.
"""

from __future__ import annotations

import re

_WORD_BOUNDARY = re.compile(r"(.)([A-Z][a-z]+)")
_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_REPEATED_UNDERSCORES = re.compile(r"_+")


def snake_case(name: str) -> str:
    """
    Convert an identifier to snake_case.

    ``ModeloBasico`` -> ``modelo_basico``, ``AutorID`` -> ``autor_id``,
    ``HTTPServer`` -> ``http_server``. Names already in snake_case are
    returned unchanged.
    """
    result = _WORD_BOUNDARY.sub(r"\1_\2", name)
    result = _LOWER_UPPER.sub(r"\1_\2", result)
    result = _REPEATED_UNDERSCORES.sub("_", result)
    return result.lower()


def table_name_for(type_name: str) -> str:
    """Default table name: snake_case of the type name plus ``s``."""
    return f"{snake_case(type_name)}s"


def index_name_for(table_name: str, column_name: str) -> str:
    return f"idx_{table_name}_{column_name}"


def unique_index_name_for(table_name: str, column_name: str) -> str:
    return f"uidx_{table_name}_{column_name}"
