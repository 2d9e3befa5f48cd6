"""
Pytest configuration and shared fixtures.

Provides fixtures for temp project directories, hook configuration files,
export contexts and hand-built hook registries.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest

from bv.core.hooks.models import ExportContext, Hook, HooksConfig, OnError

# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Provide a temporary project directory without hook configuration."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def write_hooks_config(project_dir: Path) -> Callable[[str], Path]:
    """
    Provide a helper that writes .bv/hooks.yaml into the project.

    Returns:
        Function taking YAML text and returning the written path
    """

    def _write(content: str) -> Path:
        bv_dir = project_dir / ".bv"
        bv_dir.mkdir(exist_ok=True)
        path = bv_dir / "hooks.yaml"
        path.write_text(content)
        return path

    return _write


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def export_context() -> ExportContext:
    """Provide a sample export context."""
    return ExportContext(
        export_path="/tmp/test.md",
        export_format="markdown",
        issue_count=10,
        timestamp=datetime(2025, 11, 30, 10, 30, tzinfo=timezone.utc),
    )


def make_hook(
    command: str,
    name: str = "",
    on_error: OnError = OnError.FAIL,
    timeout_seconds: float = 5.0,
    env: dict[str, str] | None = None,
) -> Hook:
    """Build a normalized hook for executor tests."""
    return Hook(
        name=name,
        command=command,
        timeout_seconds=timeout_seconds,
        on_error=on_error,
        env=env or {},
    )


@pytest.fixture
def hook_factory() -> Callable[..., Hook]:
    """Provide make_hook as a fixture."""
    return make_hook


@pytest.fixture
def hooks_config() -> Callable[..., HooksConfig]:
    """
    Provide a helper that builds a HooksConfig from hook lists.

    Returns:
        Function taking pre and post hook lists
    """

    def _build(pre: list[Hook] | None = None, post: list[Hook] | None = None) -> HooksConfig:
        return HooksConfig(pre_export=tuple(pre or ()), post_export=tuple(post or ()))

    return _build
