"""
Nullable value wrappers.

Fields typed with one of these classes map to nullable columns by default,
the same way ``Optional[...]`` fields do. ``valid`` is False when the value
is SQL NULL.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class NullString:
    value: str = ""
    valid: bool = False


@dataclass
class NullInt64:
    value: int = 0
    valid: bool = False


@dataclass
class NullFloat64:
    value: float = 0.0
    valid: bool = False


@dataclass
class NullBool:
    value: bool = False
    valid: bool = False


@dataclass
class NullTime:
    value: Optional[datetime] = None
    valid: bool = False


NULLABLE_WRAPPERS = (NullString, NullInt64, NullFloat64, NullBool, NullTime)
