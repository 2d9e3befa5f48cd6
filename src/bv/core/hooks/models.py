"""
Hook data models for bv.

Defines the phases at which export hooks fire, the validated hook definitions
produced by the loader, the export context handed to every hook, and the
results recorded by the executor.

Export hooks fire around an export:
- pre-export: After the export target is decided, before the artifact is written
- post-export: After the artifact exists on disk

The export context reaches hook commands as BV_* environment variables.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TIMEOUT_SECONDS = 30.0

# Longest accepted timeout (7 days); larger values overflow the poll timeout
MAX_TIMEOUT_SECONDS = 7 * 24 * 3600.0


class OnError(str, Enum):
    """What a failing hook does to the rest of its phase."""

    FAIL = "fail"
    CONTINUE = "continue"


class Phase(str, Enum):
    """Lifecycle point at which a list of hooks runs."""

    PRE_EXPORT = "pre-export"
    POST_EXPORT = "post-export"

    @property
    def default_on_error(self) -> OnError:
        """Error policy for hooks that do not declare one: fail before, continue after."""
        if self is Phase.PRE_EXPORT:
            return OnError.FAIL
        return OnError.CONTINUE


class HookErrorKind(str, Enum):
    """Why a hook execution failed."""

    NON_ZERO_EXIT = "non_zero_exit"
    TIMEOUT = "timeout"
    LAUNCH_FAILURE = "launch_failure"


class Hook(BaseModel):
    """
    A single configured hook command.

    Instances are only built by the loader after normalization, so every
    field is already resolved: the command is trimmed and non-empty, the
    timeout is positive and the error policy is concrete.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Display label (optional)")
    command: str = Field(min_length=1, description="Shell command line")
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        le=MAX_TIMEOUT_SECONDS,
        description="Wall-clock limit",
    )
    on_error: OnError = Field(description="Failure policy for this hook")
    env: dict[str, str] = Field(
        default_factory=dict,
        description="Extra environment variables; values may reference ${NAME}",
    )

    @property
    def display_name(self) -> str:
        """Name used in results and log lines."""
        return self.name or self.command


class HooksConfig(BaseModel):
    """
    Validated hook registry: ordered hooks per phase.

    Built once by the loader and immutable afterwards. An empty instance
    means "no hooks configured".
    """

    model_config = ConfigDict(frozen=True)

    pre_export: tuple[Hook, ...] = ()
    post_export: tuple[Hook, ...] = ()

    def get_hooks(self, phase: Phase) -> list[Hook]:
        """
        Get the ordered hooks for a phase.

        Args:
            phase: Lifecycle phase

        Returns:
            New list of hooks in declaration order (empty if none)
        """
        if phase is Phase.PRE_EXPORT:
            return list(self.pre_export)
        return list(self.post_export)

    def has_hooks(self) -> bool:
        """Check whether any phase has at least one hook."""
        return bool(self.pre_export or self.post_export)


class ExportContext(BaseModel):
    """
    Snapshot of the export that triggered the hooks.

    Produced by the export pipeline once it knows where the report goes,
    in which format, and how many issues it covers.
    """

    model_config = ConfigDict(frozen=True)

    export_path: str = Field(description="Path of the exported artifact")
    export_format: str = Field(description="Export format (e.g. 'markdown')")
    issue_count: int = Field(default=0, ge=0, description="Number of exported issues")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the export ran",
    )

    def to_env(self) -> dict[str, str]:
        """
        Convert the context into the BV_* environment variables.

        The timestamp is rendered as RFC 3339 in UTC with second precision.
        Naive datetimes are taken to be local time.

        Returns:
            Mapping of variable name to value

        Example:
            >>> ctx = ExportContext(
            ...     export_path="/tmp/export.md",
            ...     export_format="markdown",
            ...     issue_count=42,
            ...     timestamp=datetime(2025, 11, 30, 10, 30, tzinfo=timezone.utc),
            ... )
            >>> ctx.to_env()["BV_TIMESTAMP"]
            '2025-11-30T10:30:00Z'
        """
        utc = self.timestamp.astimezone(timezone.utc)
        return {
            "BV_EXPORT_PATH": self.export_path,
            "BV_EXPORT_FORMAT": self.export_format,
            "BV_ISSUE_COUNT": str(self.issue_count),
            "BV_TIMESTAMP": utc.strftime("%Y-%m-%dT%H:%M:%SZ"),
        }


class HookResult(BaseModel):
    """
    Result from one hook execution.

    Captures the success/failure status, trimmed output and timing of a
    single attempted hook. Exactly one result exists per attempt.
    """

    model_config = ConfigDict(frozen=True)

    hook_name: str = Field(description="Display name of the hook")
    phase: Phase = Field(description="Phase the hook ran in")
    success: bool = Field(description="Whether the hook exited with status 0")
    exit_code: int | None = Field(
        default=None, description="Exit code, or None if killed or never started"
    )
    stdout: str = Field(default="", description="Trimmed standard output")
    stderr: str = Field(default="", description="Trimmed standard error")
    error: str | None = Field(default=None, description="Error message if the hook failed")
    error_kind: HookErrorKind | None = Field(default=None, description="Failure category")
    duration_seconds: float = Field(description="Wall-clock execution time")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the hook finished",
    )

    @property
    def failed(self) -> bool:
        """Check if hook execution failed."""
        return not self.success

    @property
    def timed_out(self) -> bool:
        """Check if hook was killed for exceeding its timeout."""
        return self.error_kind is HookErrorKind.TIMEOUT
