"""
Custom exceptions for export hooks.

Exception Hierarchy:
    HookError (base)
    ├── HookConfigError (hooks.yaml unreadable, malformed or invalid)
    └── HookExecutionError (a fail-policy hook failed and aborted its phase)

Example:
    >>> from bv.core.hooks.exceptions import HookExecutionError
    >>> try:
    ...     executor.run_pre_export()
    ... except HookExecutionError as e:
    ...     print(f"Hook '{e.hook_name}' aborted {e.phase.value}: {e}")
"""

from pathlib import Path

from bv.core.hooks.models import HookErrorKind, HookResult, Phase


class HookError(Exception):
    """
    Base exception for all hook-related errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class HookConfigError(HookError):
    """
    Exception raised when the hook configuration cannot be loaded.

    Raised for documents that exist but are not valid YAML, do not have the
    expected shape, or carry values that cannot be normalized (unknown
    on_error policy, bad timeout). Missing configuration is never an error.

    Attributes:
        path: Path of the offending configuration file
    """

    def __init__(self, path: Path, message: str, **context: object) -> None:
        super().__init__(message, **context)
        self.path = path


class HookExecutionError(HookError):
    """
    Exception raised when a hook with on_error=fail fails.

    The phase stops at this hook; hooks that ran before it keep their
    recorded results.

    Attributes:
        hook_name: Display name of the failed hook
        phase: Phase that was aborted
        result: Recorded result of the failed hook
    """

    def __init__(self, hook_name: str, phase: Phase, result: HookResult) -> None:
        message = f"{phase.value} hook '{hook_name}' failed: {result.error}"
        super().__init__(message, hook_name=hook_name, phase=phase.value)
        self.hook_name = hook_name
        self.phase = phase
        self.result = result

    @property
    def kind(self) -> HookErrorKind | None:
        """Failure category of the underlying result."""
        return self.result.error_kind
