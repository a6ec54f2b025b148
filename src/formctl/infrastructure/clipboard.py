"""Single-slot clipboard for field definitions.

The clipboard stores a deep clone, so editing or deleting the original
field afterwards never changes what gets pasted. Pasting does not consume
the entry.
"""

from __future__ import annotations

from formctl.domain.models import FieldDefinition, FieldDraft

PASTE_SUFFIX = "_paste"


class ClipboardManager:
    """Holds at most one copied field."""

    def __init__(self) -> None:
        self._entry: FieldDefinition | None = None

    @property
    def has_entry(self) -> bool:
        return self._entry is not None

    def copy(self, field: FieldDefinition) -> None:
        self._entry = field.model_copy(deep=True)

    def peek(self) -> FieldDefinition | None:
        """A copy of the clipboard entry (the entry itself is never handed out)."""
        if self._entry is None:
            return None
        return self._entry.model_copy(deep=True)

    def paste(self, group_id: str | None = None) -> FieldDraft | None:
        """Build a draft for a new field from the clipboard entry.

        The draft's config is cloned again so the new field and the
        clipboard never share nested structures.
        """
        if self._entry is None:
            return None
        draft = self._entry.to_draft()
        return draft.model_copy(
            update={"name": f"{draft.name}{PASTE_SUFFIX}", "group_id": group_id}
        )

    def restore(self, entry: FieldDefinition | None) -> None:
        """Put a previously peeked entry back, or empty the clipboard with None."""
        self._entry = None if entry is None else entry.model_copy(deep=True)

    def clear(self) -> None:
        self._entry = None
