"""Bounded undo/redo stacks of full-state snapshots.

Each stack holds at most ``max_entries`` snapshots; pushing past the bound
silently evicts the oldest entry. Snapshots are deep copies, so nothing
the live form does afterwards can reach into history.

INVARIANT: :meth:`HistoryManager.snapshot` clears the redo stack. Any new
mutation after an undo makes redo unavailable until the next undo.
"""

from __future__ import annotations

import time
from collections import deque
from typing import TYPE_CHECKING

from formctl.domain.models import StateSnapshot

if TYPE_CHECKING:
    from collections.abc import Iterable

    from formctl.domain.models import FormDefinition

DEFAULT_MAX_ENTRIES = 50


def take_snapshot(form: FormDefinition) -> StateSnapshot:
    """Deep-clone the editable parts of *form*."""
    clone = form.model_copy(deep=True)
    return StateSnapshot(
        fields=clone.fields,
        groups=clone.groups,
        settings=clone.settings,
        cross_validators=clone.cross_validators,
        timestamp=time.time(),
    )


def restore_snapshot(form: FormDefinition, snapshot: StateSnapshot) -> FormDefinition:
    """Return *form* with its editable parts replaced by a copy of *snapshot*."""
    clone = snapshot.model_copy(deep=True)
    return form.model_copy(
        update={
            "fields": clone.fields,
            "groups": clone.groups,
            "settings": clone.settings,
            "cross_validators": clone.cross_validators,
        }
    )


class HistoryManager:
    """Undo/redo bookkeeping for a single form."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            msg = "max_entries must be at least 1"
            raise ValueError(msg)
        self.max_entries = max_entries
        self._undo: deque[StateSnapshot] = deque(maxlen=max_entries)
        self._redo: deque[StateSnapshot] = deque(maxlen=max_entries)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def snapshot(self, current: FormDefinition) -> None:
        """Record *current* as an undo checkpoint and drop all redo entries."""
        self._undo.append(take_snapshot(current))
        self._redo.clear()

    def undo(self, current: FormDefinition) -> StateSnapshot | None:
        """Step back. Returns the state to restore, or None when there is none."""
        if not self._undo:
            return None
        self._redo.append(take_snapshot(current))
        return self._undo.pop()

    def redo(self, current: FormDefinition) -> StateSnapshot | None:
        """Step forward. Returns the state to restore, or None when there is none."""
        if not self._redo:
            return None
        self._undo.append(take_snapshot(current))
        return self._redo.pop()

    def stacks(self) -> tuple[list[StateSnapshot], list[StateSnapshot]]:
        """Copies of the undo and redo stacks, oldest entry first."""
        return list(self._undo), list(self._redo)

    def restore(self, undo: Iterable[StateSnapshot], redo: Iterable[StateSnapshot]) -> None:
        """Replace both stacks. Entries beyond ``max_entries`` drop from the old end."""
        self._undo = deque(undo, maxlen=self.max_entries)
        self._redo = deque(redo, maxlen=self.max_entries)

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
