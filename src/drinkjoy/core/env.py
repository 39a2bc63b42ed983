"""
Project root and `.env` handling.

Settings point at repo-relative files (`data/catalogs/drinks.json`, the cache
directory) and the weather API key usually lives in a repo-local `.env`. Both
must resolve the same way whether the CLI runs from the repo root, from
`tests/`, or from an installed package.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ROOT_ENV_VAR = "DRINKJOY_PROJECT_ROOT"
ENV_FILE_VAR = "DRINKJOY_ENV_FILE"


def _is_project_root(path: Path) -> bool:
    if (path / ".env").is_file() or (path / ".git").exists():
        return True
    return (path / "pyproject.toml").is_file() and (path / "data" / "catalogs").is_dir()


def find_project_root(start: Path) -> Path | None:
    """Walk up from `start` to the first directory that looks like the repo root."""
    start = start.resolve()
    for candidate in (start, *start.parents):
        if _is_project_root(candidate):
            return candidate
    return None


@lru_cache
def get_project_root() -> Path:
    """Repo root: `$DRINKJOY_PROJECT_ROOT`, the `.env` file's directory, or a marker search."""
    explicit = os.getenv(ROOT_ENV_VAR)
    if explicit:
        return Path(explicit).expanduser().resolve()
    env_file = os.getenv(ENV_FILE_VAR)
    if env_file:
        return Path(env_file).expanduser().resolve().parent
    return find_project_root(Path.cwd()) or find_project_root(Path(__file__).parent) or Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project's `.env` once; variables already in the environment win."""
    env_file = os.getenv(ENV_FILE_VAR)
    path = Path(env_file).expanduser().resolve() if env_file else get_project_root() / ".env"
    if not path.is_file():
        return None
    load_dotenv(dotenv_path=path, override=False)
    return path


def resolve_project_path(path: str | Path) -> Path:
    """Absolute paths pass through; relative ones are anchored at the project root."""
    p = Path(path).expanduser()
    return p if p.is_absolute() else (get_project_root() / p).resolve()
