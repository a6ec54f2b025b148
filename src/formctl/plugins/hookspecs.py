"""Pluggy hook specifications for formctl events.

Hooks are dispatched synchronously after the corresponding operation has
been applied. Implementations must not mutate the form they are told about.
"""

from __future__ import annotations

import pluggy

PROJECT_NAME = "formctl"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class FormctlHookSpec:
    """Hook specifications for the formctl plugin system."""

    @hookspec
    def post_mutation(self, op: str, form_id: str, entity_id: str | None) -> None:
        """Called after the form store applies a mutation (undo/redo included)."""

    @hookspec
    def post_save(self, form_id: str, name: str) -> None:
        """Called after a form is saved into the persisted state."""

    @hookspec
    def post_export(self, form_id: str, fmt: str) -> None:
        """Called after a form is exported."""
