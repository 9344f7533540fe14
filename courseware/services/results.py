"""
courseware.services.results — Typed service outcomes
=====================================================

Expected failures (bad input, missing rows, wrong roles, missing
privileges) are *returned* to the caller as a :class:`Result`, never
raised.  Anything the store raises is unexpected and propagates.

Usage::

    result = announcement_service.create_announcement(engine, poster, params)
    if result.ok:
        show(result.value)
    elif result.errors:
        render_form_errors(result.errors)   # {"title": ["can't be blank"]}
    else:
        handle(result.failure)              # Failure.NOT_FOUND, …
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

FieldErrors = dict[str, list[str]]


class Failure(enum.StrEnum):
    """Non-validation failure signals."""
    NOT_FOUND = "not_found"
    INVALID = "invalid"
    INSUFFICIENT_PRIVILEGES = "insufficient_privileges"


@dataclass(slots=True)
class Result(Generic[T]):
    """Either a value, a :class:`Failure`, or a field-keyed error map."""

    value: T | None = None
    failure: Failure | None = None
    errors: FieldErrors = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.failure is None and not self.errors

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, failure: Failure) -> Result[T]:
        return cls(failure=failure)

    @classmethod
    def invalid(cls, errors: FieldErrors) -> Result[T]:
        return cls(errors=errors)
