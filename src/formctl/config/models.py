"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``formctl.toml`` only contains
overrides. An empty file (or no file at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from formctl.domain.types import Language, Theme

DEFAULT_STATE_FILE = ".formctl/state.json"
DEFAULT_SESSION_FILE = ".formctl/session.json"

# --- formctl.toml sections ---


class HistoryConfig(BaseModel):
    """[history] section."""

    model_config = {"frozen": True}

    max_entries: int = Field(default=50, ge=1)


class GeneratorConfig(BaseModel):
    """[generator] section."""

    model_config = {"frozen": True}

    library: str = "@biyonik/zignal"
    message_language: Language = Language.TR


class StorageConfig(BaseModel):
    """[storage] section. Paths are relative to the workspace root.

    ``filename`` holds saved forms and preferences; ``session_filename``
    holds the working copy with its unsaved edits and undo history.
    """

    model_config = {"frozen": True}

    filename: str = DEFAULT_STATE_FILE
    session_filename: str = DEFAULT_SESSION_FILE


class EditorConfig(BaseModel):
    """[editor] section: defaults applied when no persisted state exists yet."""

    model_config = {"frozen": True}

    theme: Theme = Theme.DARK
    language: Language = Language.TR


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".formctl/plugins"


class FormctlConfig(BaseModel):
    """Every ``formctl.toml`` section together."""

    model_config = {"frozen": True}

    history: HistoryConfig = Field(default_factory=HistoryConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
