"""Environment loading helpers.

Hook ``env`` templates are expanded against the ambient environment, so
variables a hook refers to (webhook URLs, tokens) can live in .env files
instead of the user's shell profile.

Precedence implemented here:
  os.environ (pre-existing) > project .env / .env.local > user .env

A .env file never overrides a variable that was already exported in the
shell.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from dotenv import dotenv_values


def get_user_config_dir() -> Path:
    """
    Get the bv user configuration directory.

    Returns:
        $XDG_CONFIG_HOME/bv (defaults to ~/.config/bv)
    """
    xdg_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(xdg_home) / "bv"


def _read_env(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    out: dict[str, str] = {}
    for k, v in dotenv_values(path).items():
        if k is None or v is None:
            continue
        out[str(k)] = str(v)
    return out


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> list[str]:
    """Load environment variables from user + project .env files.

    Args:
        project_dir: base directory for project env paths (defaults to cwd)
        user_env_paths: explicit user env file paths
        project_env_paths: explicit project env file paths

    Returns:
        Names of the variables that were set, in load order
    """
    if project_dir is None:
        project_dir = Path.cwd()

    if user_env_paths is None:
        user_env_paths = [get_user_config_dir() / ".env"]

    if project_env_paths is None:
        project_env_paths = [project_dir / ".env", project_dir / ".env.local"]

    loaded: list[str] = []

    # Keys set from files may be replaced by later files; shell exports never are
    file_set_keys: set[str] = set()
    for p in [*user_env_paths, *project_env_paths]:
        for k, v in _read_env(Path(p)).items():
            if k not in os.environ or k in file_set_keys:
                os.environ[k] = v
                file_set_keys.add(k)
                if k not in loaded:
                    loaded.append(k)

    return loaded
