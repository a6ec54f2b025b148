"""Persisted-state blob and editor session: validation and JSON file backends.

The blob ``{savedForms, theme, language, currentFormId}`` is the only
thing the core exchanges with storage. The editor session (the working
copy with its unsaved edits, history, and clipboard) lives in a second
file beside it, so saving a form stays an explicit step.

Anything read back is validated as a whole: a file that fails
validation is treated as absent, never partially trusted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, ClassVar

from pydantic import BaseModel, ValidationError

from formctl.domain.models import EditorSession, PersistedState

logger = logging.getLogger(__name__)


def _validate[M: BaseModel](model: type[M], raw: Any, what: str) -> M | None:
    if raw is None:
        return None
    try:
        if isinstance(raw, str | bytes):
            return model.model_validate_json(raw)
        return model.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Discarding invalid %s: %d error(s)", what, exc.error_count())
        return None


def parse_persisted_state(raw: Any) -> PersistedState | None:
    """Validate a decoded blob (or its JSON text). Returns None when invalid."""
    return _validate(PersistedState, raw, "persisted state")


def parse_editor_session(raw: Any) -> EditorSession | None:
    return _validate(EditorSession, raw, "editor session")


def dump_model(value: BaseModel) -> str:
    """camelCase JSON, two-space indent: the on-disk format of every state file."""
    return value.model_dump_json(by_alias=True, indent=2)


class JsonModelFile[M: BaseModel]:
    """One pydantic model stored as a JSON file."""

    model: ClassVar[type[BaseModel]]
    label: ClassVar[str] = "state file"

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> M | None:
        if not self.path.is_file():
            return None
        try:
            raw = self.path.read_bytes()
        except OSError:
            logger.warning("Could not read %s %s", self.label, self.path, exc_info=True)
            return None
        return _validate(self.model, raw, self.label)  # type: ignore[return-value]

    def save(self, value: M) -> None:
        """Write *value* atomically (temp file, then rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(dump_model(value) + "\n", encoding="utf-8")
        tmp.replace(self.path)

    def load_raw(self) -> dict[str, Any] | None:
        """The undecoded file content, for diagnostics."""
        if not self.path.is_file():
            return None
        try:
            data = json.loads(self.path.read_bytes())
        except (OSError, ValueError, RecursionError):
            return None
        return data if isinstance(data, dict) else None


class JsonFileStorage(JsonModelFile[PersistedState]):
    """Reads and writes the persisted-state blob."""

    model = PersistedState
    label = "persisted state"


class SessionFileStorage(JsonModelFile[EditorSession]):
    """Reads and writes the editor session."""

    model = EditorSession
    label = "editor session"
