# deal_analyzer/core/finance/errors.py
"""
Typed errors for the deal model.

Exports
-------
- DealModelError, InvalidInputError
- input_error_guard()
- validate_deal_inputs(data)

Only caller mistakes raise. A metric that is mathematically undefined for valid
inputs (IRR with a non-positive base, DSCR with no debt) is returned as a
flagged Metric instead, see deal_analyzer.schemas.models.Metric.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from pydantic import ValidationError

from deal_analyzer.schemas.models import DealInputs

# =========================
# Exception types
# =========================


class DealModelError(ValueError):
    """Base class for deal model failures."""


class InvalidInputError(DealModelError):
    """
    A precondition was violated by the caller (negative money, out-of-range ratio,
    non-positive denominator feeding a ratio).

    Attributes:
        issues: (field, reason) pairs, one per offending field.
    """

    def __init__(self, issues: list[tuple[str, str]] | tuple[tuple[str, str], ...]) -> None:
        self.issues: tuple[tuple[str, str], ...] = tuple(issues)
        lines = [f"{field}: {reason}" for field, reason in self.issues]
        super().__init__("Invalid deal input:\n  " + "\n  ".join(lines) if lines else "Invalid deal input")

    @classmethod
    def for_field(cls, field: str, reason: str) -> InvalidInputError:
        return cls([(field, reason)])

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> InvalidInputError:
        """Flatten pydantic's error list into dotted field paths."""
        issues: list[tuple[str, str]] = []
        for err in exc.errors():
            loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
            issues.append((loc, str(err.get("msg", "invalid value"))))
        return cls(issues)

    @property
    def fields(self) -> list[str]:
        return [field for field, _ in self.issues]


# =========================
# Boundary helpers
# =========================


@contextmanager
def input_error_guard() -> Iterator[None]:
    """Context manager normalizing pydantic validation failures to InvalidInputError."""
    try:
        yield
    except InvalidInputError:
        raise
    except ValidationError as exc:
        raise InvalidInputError.from_validation_error(exc) from exc


def validate_deal_inputs(data: Mapping[str, Any] | DealInputs) -> DealInputs:
    """
    Validate a raw mapping (camelCase or snake_case keys) into an immutable DealInputs.

    Raises:
        InvalidInputError: with one (field, reason) pair per violation.
    """
    if isinstance(data, DealInputs):
        return data
    with input_error_guard():
        return DealInputs.model_validate(dict(data))


__all__ = [
    "DealModelError",
    "InvalidInputError",
    "input_error_guard",
    "validate_deal_inputs",
]
