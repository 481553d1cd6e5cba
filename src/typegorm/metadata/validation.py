"""
Problem collection for one parse pass.

Every problem found while scanning a record type is logged as a warning and
kept, and scanning carries on with the remaining fields. When the scan ends,
the first problem becomes the failure of the whole parse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from typegorm.errors import EntityParseError, TagParseError

logger = logging.getLogger(__name__)


class FieldOutcome(str, Enum):
    """What a field turned into."""
    COLUMN = "column"
    RELATION = "relation"
    SKIPPED = "skipped"
    DROPPED = "dropped"  # rejected by validation


@dataclass
class ParseReport:
    """Errors and per-field outcomes for one record type."""
    type_name: str
    errors: List[TagParseError] = field(default_factory=list)
    outcomes: Dict[str, FieldOutcome] = field(default_factory=dict)

    @property
    def first_error(self) -> Optional[TagParseError]:
        return self.errors[0] if self.errors else None

    @property
    def ok(self) -> bool:
        return not self.errors

    def record(self, error: TagParseError) -> None:
        """Log and keep a problem."""
        logger.warning(str(error))
        self.errors.append(error)

    def record_all(self, errors: Iterable[TagParseError]) -> None:
        for error in errors:
            self.record(error)

    def mark(self, field_name: str, outcome: FieldOutcome) -> None:
        self.outcomes[field_name] = outcome

    def fields_with(self, outcome: FieldOutcome) -> List[str]:
        return [name for name, o in self.outcomes.items() if o is outcome]

    def raise_for_errors(self) -> None:
        """
        Raise ``EntityParseError`` carrying the first problem, if any.

        The error is chained to the first problem so tracebacks show its
        origin; all problems stay available on ``EntityParseError.errors``.
        """
        if self.ok:
            return
        raise EntityParseError(self.type_name, self.errors) from self.first_error
