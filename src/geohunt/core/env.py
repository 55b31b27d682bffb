"""
Deployment environment helpers.

An event deployment usually keeps its operator ids and store location in a `.env`
file next to the checkout, and `geohunt` may be started from any directory (uvicorn,
the CLI, a systemd unit, pytest). Relative store and seed paths are therefore
resolved against the project root rather than the current directory.

Lookup order for the root:
1. `GEOHUNT_PROJECT_ROOT`
2. the directory of `GEOHUNT_ENV_FILE`
3. the nearest parent of the working directory holding `.env`, `.git` or `pyproject.toml`
4. the working directory
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

_ROOT_MARKERS = (".env", ".git", "pyproject.toml")


def _explicit_env_file() -> Path | None:
    value = os.getenv("GEOHUNT_ENV_FILE")
    return Path(value).expanduser().resolve() if value else None


@lru_cache
def get_project_root() -> Path:
    """Return the directory relative paths in settings are resolved against (cached)."""
    override = os.getenv("GEOHUNT_PROJECT_ROOT")
    if override:
        return Path(override).expanduser().resolve()

    env_file = _explicit_env_file()
    if env_file is not None:
        return env_file.parent

    cwd = Path.cwd().resolve()
    for candidate in (cwd, *cwd.parents):
        if any((candidate / marker).exists() for marker in _ROOT_MARKERS):
            return candidate
    return cwd


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the deployment `.env` once; variables already set in the process win."""
    env_path = _explicit_env_file() or get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    p = Path(path).expanduser()
    return p if p.is_absolute() else (get_project_root() / p).resolve()
