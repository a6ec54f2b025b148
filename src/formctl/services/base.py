"""BaseService: foundation for all formctl services.

Every service receives a :class:`Workspace` at construction time and
works on the workspace's form store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from formctl.services.store import FormStore
    from formctl.services.workspace import Workspace

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class FormService(BaseService):
            def add_field(self, ...) -> ServiceResult:
                field = self._store.add_field(...)
                self._persist()
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @property
    def _store(self) -> FormStore:
        return self._workspace.store

    def _persist(self) -> None:
        """Write the workspace state. The form is saved only by ``save``."""
        self._workspace.persist()

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any], warnings: list[str]) -> None:
        """Dispatch a plugin hook. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        plugins = self._workspace.plugins
        if plugins is None:
            return
        if not plugins.dispatch(hook_name, **payload):
            logger.debug("Event dispatch failed for %s", hook_name)
            warnings.append(f"Event dispatch failed for {hook_name}")
