"""Workspace: the single dependency injected into every service.

A workspace ties together the resolved settings, the two state files
(saved forms and preferences; the editor session), the plugin manager,
and the form store rebuilt from them. The store is created lazily so
``--help`` never touches the state files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from formctl.infrastructure.storage import JsonFileStorage, SessionFileStorage
from formctl.services.store import FormStore

if TYPE_CHECKING:
    from formctl.config.settings import FormctlSettings
    from formctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Workspace:
    """Settings, storage, plugins, and the live form store."""

    def __init__(
        self,
        settings: FormctlSettings,
        *,
        plugins: PluginManager | None = None,
        storage: JsonFileStorage | None = None,
        session_storage: SessionFileStorage | None = None,
    ) -> None:
        self.settings = settings
        self.plugins = plugins
        self.storage = storage or JsonFileStorage(settings.state_path)
        self.session_storage = session_storage or SessionFileStorage(settings.session_path)
        self._store: FormStore | None = None

    @property
    def root(self) -> Path:
        return self.settings.workspace_root

    @property
    def store(self) -> FormStore:
        """The form store, rebuilt from storage on first access.

        The editor session, when present and valid, supplies the current
        form; otherwise the saved form named by ``currentFormId`` does.
        """
        if self._store is None:
            store = FormStore.from_persisted_state(
                self.storage.load(),
                theme=self.settings.editor.theme,
                language=self.settings.editor.language,
                max_history=self.settings.history.max_entries,
                plugins=self.plugins,
            )
            session = self.session_storage.load()
            if session is not None:
                store.restore_session(session)
            self._store = store
        return self._store

    def init_plugins(self) -> list[str]:
        """Create the plugin manager (if configured) and load plugins."""
        if not self.settings.plugins.enabled:
            return []
        from formctl.plugins.manager import PluginManager

        self.plugins = PluginManager()
        local_dir = self.root / self.settings.plugins.local_dir
        loaded = self.plugins.discover_and_load(local_dir=local_dir)
        logger.debug("Loaded plugins: %s", loaded)
        return loaded

    def persist(self) -> None:
        """Write saved forms, preferences, and the editor session back to storage."""
        store = self.store
        self.storage.save(store.to_persisted_state())
        self.session_storage.save(store.to_session())
