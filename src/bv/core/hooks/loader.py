"""
Hook configuration loading.

Reads ``.bv/hooks.yaml`` from the project directory:

```yaml
hooks:
  pre-export:
    - name: validate
      command: ./scripts/validate.sh
      timeout: 5s
  post-export:
    - name: notify
      command: curl -X POST "$WEBHOOK" -d "@$BV_EXPORT_PATH"
      timeout: 10s
      on_error: continue
      env:
        WEBHOOK: ${SLACK_WEBHOOK}
```

The document is parsed in two steps. YAML is first validated against a
loose schema (every field optional, scalars accepted as-is), then each entry
is normalized into a strict Hook:
1. Commands are trimmed; empty commands are dropped with a warning
2. Missing timeouts get the default (30s); timeouts above 7 days are rejected
3. Missing on_error policies get the phase default (fail / continue)
4. Declaration order is kept as execution order

A missing file is not an error and yields no hooks. A file that exists but
cannot be parsed or normalized raises HookConfigError and leaves the loader
without a config.
"""

import logging
import math
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bv.core.hooks.exceptions import HookConfigError
from bv.core.hooks.models import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_TIMEOUT_SECONDS,
    Hook,
    HooksConfig,
    OnError,
    Phase,
)

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".bv"
CONFIG_FILE_NAME = "hooks.yaml"

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def get_hooks_config_path(project_dir: Path | None = None) -> Path:
    """
    Get path to the hook configuration file.

    Args:
        project_dir: Project root (defaults to current directory)

    Returns:
        Path to .bv/hooks.yaml in the project root
    """
    if project_dir is None:
        project_dir = Path.cwd()
    return project_dir / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def parse_duration(value: str | int | float) -> float:
    """
    Parse a timeout value into seconds.

    Accepts duration strings made of number+unit parts ("100ms", "5s",
    "1m30s", "1.5h") or bare numbers, which are taken as seconds.

    Args:
        value: Duration string or number

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the value is not a valid duration

    Example:
        >>> parse_duration("1m30s")
        90.0
        >>> parse_duration(5)
        5.0
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        seconds = _parse_duration_string(value)
    if not math.isfinite(seconds):
        raise ValueError(f"invalid duration {value!r}")
    return seconds


def _parse_duration_string(value: str) -> float:
    text = value.strip()
    if not text:
        raise ValueError("empty duration")
    try:
        return float(text)
    except ValueError:
        pass

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return total


class _RawHookEntry(BaseModel):
    """One hook entry as written in YAML, before normalization."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    command: str | None = None
    timeout: str | int | float | None = None
    on_error: str | None = None
    env: dict[str, str] | None = None

    @field_validator("name", "command", "on_error", mode="before")
    @classmethod
    def _scalar_to_str(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return str(v).lower()
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("env", mode="before")
    @classmethod
    def _stringify_env(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            return v
        out: dict[Any, Any] = {}
        for key, val in v.items():
            if isinstance(val, bool):
                val = str(val).lower()
            elif val is None:
                val = ""
            elif isinstance(val, (int, float)):
                val = str(val)
            out[str(key)] = val
        return out


class _RawHooksSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    pre_export: list[_RawHookEntry] | None = Field(default=None, alias="pre-export")
    post_export: list[_RawHookEntry] | None = Field(default=None, alias="post-export")


class _RawHooksDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    hooks: _RawHooksSection | None = None


class HookLoader:
    """
    Loads and validates the hook configuration for a project.

    Attributes:
        project_dir: Project root directory
        config_path: Configuration file location

    Example:
        >>> loader = HookLoader(project_dir=Path("/path/to/project"))
        >>> loader.load()
        >>> for hook in loader.get_hooks(Phase.PRE_EXPORT):
        ...     print(hook.display_name)
        >>> for warning in loader.warnings:
        ...     print(f"Warning: {warning}")
    """

    def __init__(
        self,
        project_dir: Path | None = None,
        config_path: Path | None = None,
    ):
        """
        Initialize hook loader.

        Args:
            project_dir: Project root (defaults to current directory)
            config_path: Explicit config file, overriding .bv/hooks.yaml
        """
        self.project_dir = project_dir or Path.cwd()
        self.config_path = config_path or get_hooks_config_path(self.project_dir)
        self._config = HooksConfig()
        self._warnings: list[str] = []

    @property
    def config(self) -> HooksConfig:
        """The loaded configuration (empty before load() or if no file exists)."""
        return self._config

    @property
    def warnings(self) -> list[str]:
        """Non-fatal problems found while loading, in the order found."""
        return list(self._warnings)

    def has_hooks(self) -> bool:
        return self._config.has_hooks()

    def get_hooks(self, phase: Phase) -> list[Hook]:
        return self._config.get_hooks(phase)

    def load(self) -> HooksConfig:
        """
        Load the configuration file.

        Returns:
            The validated HooksConfig (empty if no file exists)

        Raises:
            HookConfigError: If the file exists but cannot be parsed or
                normalized. No partial configuration is kept.
        """
        self._config = HooksConfig()
        self._warnings = []

        if not self.config_path.exists():
            logger.debug(f"No hook configuration at {self.config_path}")
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise HookConfigError(
                self.config_path, f"Failed to parse YAML in {self.config_path}: {e}"
            ) from e
        except OSError as e:
            raise HookConfigError(
                self.config_path, f"Failed to read {self.config_path}: {e}"
            ) from e

        if data is None:
            return self._config

        if not isinstance(data, dict):
            raise HookConfigError(
                self.config_path,
                f"Invalid hook configuration in {self.config_path}: "
                f"expected a mapping, got {type(data).__name__}",
            )

        try:
            document = _RawHooksDocument.model_validate(data)
        except ValidationError as e:
            raise HookConfigError(
                self.config_path, f"Invalid hook configuration in {self.config_path}: {e}"
            ) from e

        warnings: list[str] = []
        section = document.hooks
        if section is None:
            return self._config

        for key in (section.model_extra or {}):
            warnings.append(f"unknown hook phase '{key}' ignored")

        pre_export = self._normalize(Phase.PRE_EXPORT, section.pre_export or [], warnings)
        post_export = self._normalize(Phase.POST_EXPORT, section.post_export or [], warnings)

        for warning in warnings:
            logger.warning(f"{self.config_path}: {warning}")

        self._config = HooksConfig(pre_export=tuple(pre_export), post_export=tuple(post_export))
        self._warnings = warnings
        logger.debug(
            f"Loaded {len(pre_export)} pre-export and {len(post_export)} "
            f"post-export hook(s) from {self.config_path}"
        )
        return self._config

    def _normalize(
        self,
        phase: Phase,
        entries: list[_RawHookEntry],
        warnings: list[str],
    ) -> list[Hook]:
        hooks: list[Hook] = []
        for position, entry in enumerate(entries, start=1):
            label = entry.name or f"#{position}"
            command = (entry.command or "").strip()
            if not command:
                warnings.append(f"{phase.value} hook '{label}' has an empty command; skipped")
                continue

            if entry.timeout is None:
                timeout = DEFAULT_TIMEOUT_SECONDS
            else:
                try:
                    timeout = parse_duration(entry.timeout)
                except ValueError as e:
                    raise HookConfigError(
                        self.config_path,
                        f"{phase.value} hook '{label}': {e}",
                        phase=phase.value,
                    ) from e
                if timeout <= 0:
                    raise HookConfigError(
                        self.config_path,
                        f"{phase.value} hook '{label}': timeout must be positive, "
                        f"got {entry.timeout!r}",
                        phase=phase.value,
                    )
                if timeout > MAX_TIMEOUT_SECONDS:
                    raise HookConfigError(
                        self.config_path,
                        f"{phase.value} hook '{label}': timeout must be at most "
                        f"{MAX_TIMEOUT_SECONDS:g}s, got {entry.timeout!r}",
                        phase=phase.value,
                    )

            if entry.on_error is None or not entry.on_error.strip():
                on_error = phase.default_on_error
            else:
                try:
                    on_error = OnError(entry.on_error.strip().lower())
                except ValueError as e:
                    raise HookConfigError(
                        self.config_path,
                        f"{phase.value} hook '{label}': on_error must be 'fail' or "
                        f"'continue', got {entry.on_error!r}",
                        phase=phase.value,
                    ) from e

            hooks.append(
                Hook(
                    name=entry.name or "",
                    command=command,
                    timeout_seconds=timeout,
                    on_error=on_error,
                    env=dict(entry.env or {}),
                )
            )
        return hooks


def load_hooks_config(
    project_dir: Path | None = None,
    config_path: Path | None = None,
) -> HookLoader:
    """
    Create a loader and load the configuration in one step.

    Args:
        project_dir: Project root (defaults to current directory)
        config_path: Explicit config file

    Returns:
        Loaded HookLoader (inspect .config and .warnings)

    Raises:
        HookConfigError: If the configuration is malformed
    """
    loader = HookLoader(project_dir=project_dir, config_path=config_path)
    loader.load()
    return loader
