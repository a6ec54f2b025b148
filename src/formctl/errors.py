"""Exceptions raised by the form store.

Structural violations are surfaced to the caller rather than corrected.
The service layer converts these into ``ServiceResult`` errors, using
each exception's ``code`` and ``detail``.
"""

from __future__ import annotations

from typing import Any


class FormctlError(Exception):
    """Base class for formctl errors."""

    code = "INVALID_INPUT"

    @property
    def detail(self) -> dict[str, Any]:
        return {}


class DuplicateFieldNameError(FormctlError):
    """A field name is already taken within the form."""

    code = "DUPLICATE_NAME"

    def __init__(self, name: str) -> None:
        super().__init__(f"Field name '{name}' is already used in this form")
        self.name = name

    @property
    def detail(self) -> dict[str, Any]:
        return {"name": self.name}


class NotFoundError(FormctlError):
    """A referenced field, group, validator, or saved form does not exist."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"{kind.capitalize()} '{entity_id}' not found")
        self.kind = kind
        self.entity_id = entity_id

    @property
    def detail(self) -> dict[str, Any]:
        return {"kind": self.kind, "ref": self.entity_id}
