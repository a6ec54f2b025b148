"""Workspace and config discovery.

A workspace is the nearest directory, walking up from the cwd, that
holds ``formctl.toml`` or a ``.formctl/`` state directory. Its config is
the ``formctl.toml`` beside that marker; a workspace created by
``formctl`` alone (state directory, no toml) therefore does not pick up
the config of an enclosing workspace. ``FORMCTL_CONFIG`` and the
``--config`` flag name a config file directly.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from formctl.config.models import FormctlConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "formctl.toml"
CONFIG_ENV_VAR = "FORMCTL_CONFIG"
STATE_DIRNAME = ".formctl"


def is_workspace(directory: Path) -> bool:
    return (directory / CONFIG_FILENAME).is_file() or (directory / STATE_DIRNAME).is_dir()


def find_workspace(start: Path | None = None) -> Path | None:
    """The nearest directory at or above *start* (default: cwd) that is a workspace."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if is_workspace(directory):
            return directory
    return None


def find_config(start: Path | None = None) -> Path | None:
    """The ``formctl.toml`` of the workspace around *start*, if it has one.

    ``FORMCTL_CONFIG`` is checked first; if it names a missing file, no
    config is used.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        logger.warning("%s names a missing file: %s", CONFIG_ENV_VAR, p)
        return None

    root = find_workspace(start)
    if root is None:
        return None
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config(path: Path | None = None, cwd: Path | None = None) -> FormctlConfig:
    """Load and validate config from a TOML file (defaults when none is found)."""
    if path is None:
        path = find_config(cwd)
    if path is None:
        return FormctlConfig()

    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    return FormctlConfig.model_validate(data)
