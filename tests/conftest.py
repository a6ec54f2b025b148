"""Shared pytest fixtures and test helpers for formctl tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from formctl.config.settings import FormctlSettings
from formctl.domain.models import FieldDefinition
from formctl.services.store import FormStore
from formctl.services.workspace import Workspace


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def workspace_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary workspace directory with no config file and a clean env."""
    monkeypatch.delenv("FORMCTL_CONFIG", raising=False)
    monkeypatch.delenv("FORMCTL_WORKSPACE_ROOT", raising=False)
    return tmp_path


@pytest.fixture
def workspace(workspace_root: Path) -> Iterator[Workspace]:
    """Workspace on a temp directory, without plugins."""
    settings = FormctlSettings.from_cli(workspace_root=workspace_root)
    yield Workspace(settings)


@pytest.fixture
def store() -> FormStore:
    """An empty in-memory form store."""
    return FormStore()


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp workspace so the CLI writes its state there.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(workspace_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def make_field(name: str, field_type: str = "string", **config: Any) -> FieldDefinition:
    """Build a standalone field (id generated, order 0)."""
    return FieldDefinition(type=field_type, name=name, label=name.title(), config=config)


def rule(field: str, operator: str, value: Any = None) -> dict[str, Any]:
    """A conditional rule in wire form."""
    data: dict[str, Any] = {"field": field, "operator": operator}
    if value is not None:
        data["value"] = value
    return data


def add_fields(store: FormStore, *names: str, field_type: str = "string") -> list[FieldDefinition]:
    """Add one field per name, asserting each succeeds."""
    return [store.add_field({"type": field_type, "name": n, "label": n.title()}) for n in names]
