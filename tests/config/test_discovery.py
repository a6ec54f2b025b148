"""Tests for formctl.toml discovery and loading."""

from pathlib import Path

import pytest

from formctl.config.discovery import (
    CONFIG_ENV_VAR,
    find_config,
    find_workspace,
    is_workspace,
    load_config,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFindConfig:
    def test_walks_up(self, tmp_path: Path) -> None:
        config = tmp_path / "formctl.toml"
        config.write_text("")
        nested = tmp_path / "x" / "y"
        nested.mkdir(parents=True)
        assert find_config(nested) == config.resolve()

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "formctl.toml").write_text("")
        other = tmp_path / "other.toml"
        other.write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(other))
        assert find_config(tmp_path) == other

    def test_env_var_missing_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "formctl.toml").write_text("")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.toml"))
        assert find_config(tmp_path) is None

    def test_state_dir_stops_the_walk(self, tmp_path: Path) -> None:
        (tmp_path / "formctl.toml").write_text("")
        inner = tmp_path / "inner"
        (inner / ".formctl").mkdir(parents=True)
        assert find_config(inner) is None
        assert find_config(tmp_path) == (tmp_path / "formctl.toml").resolve()


class TestFindWorkspace:
    def test_state_dir_marks_workspace(self, tmp_path: Path) -> None:
        (tmp_path / ".formctl").mkdir()
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_workspace(nested) == tmp_path.resolve()

    def test_config_file_marks_workspace(self, tmp_path: Path) -> None:
        (tmp_path / "formctl.toml").write_text("")
        assert is_workspace(tmp_path)
        assert find_workspace(tmp_path) == tmp_path.resolve()

    def test_state_file_is_not_a_marker(self, tmp_path: Path) -> None:
        (tmp_path / ".formctl").write_text("")
        assert not is_workspace(tmp_path)


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(cwd=tmp_path)
        assert config.history.max_entries == 50
        assert config.plugins.local_dir == ".formctl/plugins"

    def test_loads_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "formctl.toml"
        path.write_text('[storage]\nfilename = "state/forms.json"\n')
        config = load_config(path)
        assert config.storage.filename == "state/forms.json"
        assert config.history.max_entries == 50
