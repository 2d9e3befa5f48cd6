"""
Hook executor for export hooks.

This module runs the configured hook commands for one export. Each command is
run through the shell with the export context passed via BV_* environment
variables:
- BV_EXPORT_PATH: Path of the exported artifact
- BV_EXPORT_FORMAT: Export format (e.g. markdown)
- BV_ISSUE_COUNT: Number of exported issues
- BV_TIMESTAMP: Export time, RFC 3339 in UTC

Execution features:
- Hooks run one at a time, in declaration order
- Per-hook timeout (default 30s); the whole process group is killed on expiry
- Captures trimmed stdout and stderr
- Per-hook error policy: fail aborts the phase, continue moves on
- Every attempt is recorded, across phases, in execution order

Example hook command:
    command: pandoc "$BV_EXPORT_PATH" -o "${BV_EXPORT_PATH%.md}.pdf"

Usage:
    from bv.core.hooks.executor import HookExecutor
    from bv.core.hooks.models import ExportContext

    context = ExportContext(
        export_path="/tmp/report.md",
        export_format="markdown",
        issue_count=42,
    )
    executor = HookExecutor(loader.config, context)

    executor.run_pre_export()   # raises HookExecutionError on fail-policy failure
    write_report()
    executor.run_post_export()

    print(executor.summary())   # "2 succeeded, 0 failed"
"""

import logging
import os
import signal
import subprocess
import sys
import time
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path

from bv.core.hooks.environment import build_hook_environment
from bv.core.hooks.exceptions import HookExecutionError
from bv.core.hooks.models import (
    ExportContext,
    Hook,
    HookErrorKind,
    HookResult,
    HooksConfig,
    OnError,
    Phase,
)

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"
IS_UNIX = not IS_WINDOWS

DEFAULT_SHELL: tuple[str, ...] = ("cmd", "/C") if IS_WINDOWS else ("/bin/sh", "-c")

# How long to wait for a killed hook to be reaped
KILL_WAIT_SECONDS = 5.0


class HookExecutor:
    """
    Executor for the hooks of one export operation.

    The executor is bound to one HooksConfig and one ExportContext. It runs
    the hooks of a phase in order, enforces each hook's timeout, applies its
    error policy and records one HookResult per attempted hook.

    Results accumulate across phase calls, so after run_pre_export() and
    run_post_export() the results hold both phases in execution order.
    The executor is not thread-safe.

    Attributes:
        config: Validated hook configuration
        context: Export context exposed to every hook
        cwd: Working directory for hook processes (None = inherit)

    Example:
        >>> executor = HookExecutor(config, context)
        >>> executor.run_post_export()
        >>> for result in executor.results:
        ...     print(f"{result.hook_name}: {result.success}")
    """

    def __init__(
        self,
        config: HooksConfig,
        context: ExportContext,
        *,
        cwd: Path | None = None,
        environ: Mapping[str, str] | None = None,
        shell: Sequence[str] | None = None,
    ):
        """
        Initialize hook executor.

        Args:
            config: Validated hook configuration
            context: Export context for this operation
            cwd: Working directory for hook processes
            environ: Ambient environment (defaults to os.environ at each launch)
            shell: Interpreter argv prefix; the command is appended as last arg
        """
        self.config = config
        self.context = context
        self.cwd = cwd
        self._environ = environ
        self._shell = tuple(shell) if shell is not None else DEFAULT_SHELL
        self._results: list[HookResult] = []

    @property
    def results(self) -> tuple[HookResult, ...]:
        """All results recorded so far, in execution order."""
        return tuple(self._results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self._results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self._results if r.failed)

    def summary(self) -> str:
        """
        Summarize recorded results.

        Returns:
            Summary like "2 succeeded, 1 failed"
        """
        return f"{self.succeeded} succeeded, {self.failed} failed"

    def run_pre_export(self) -> None:
        """Run pre-export hooks. See run_phase()."""
        self.run_phase(Phase.PRE_EXPORT)

    def run_post_export(self) -> None:
        """Run post-export hooks. See run_phase()."""
        self.run_phase(Phase.POST_EXPORT)

    def run_phase(self, phase: Phase) -> None:
        """
        Run all hooks for a phase, in declaration order.

        Args:
            phase: Lifecycle phase to run

        Raises:
            HookExecutionError: If a hook with on_error=fail fails. Later
                hooks in the phase are not run.
        """
        hooks = self.config.get_hooks(phase)
        if not hooks:
            logger.debug(f"No {phase.value} hooks configured")
            return

        logger.info(f"Running {len(hooks)} {phase.value} hook(s)")

        for hook in hooks:
            result = self._execute_hook(hook, phase)
            self._results.append(result)

            if result.success:
                logger.info(
                    f"Hook {result.hook_name} completed successfully "
                    f"in {result.duration_seconds:.2f}s"
                )
            else:
                logger.error(f"Hook {result.hook_name} failed: {result.error}")

            if result.failed and hook.on_error is OnError.FAIL:
                raise HookExecutionError(result.hook_name, phase, result)

    def _execute_hook(self, hook: Hook, phase: Phase) -> HookResult:
        """
        Execute a single hook command.

        Args:
            hook: Hook to run
            phase: Phase it runs in

        Returns:
            HookResult with execution details
        """
        environ = self._environ if self._environ is not None else os.environ.copy()
        env = build_hook_environment(self.context, hook.env, environ)
        argv = [*self._shell, hook.command]

        logger.debug(f"Launching hook {hook.display_name}: {argv}")
        start_time = time.monotonic()
        try:
            process = subprocess.Popen(
                argv,
                cwd=str(self.cwd) if self.cwd else None,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=IS_UNIX,
            )
        except (OSError, ValueError) as e:
            return HookResult(
                hook_name=hook.display_name,
                phase=phase,
                success=False,
                duration_seconds=time.monotonic() - start_time,
                error=f"Failed to launch hook: {e}",
                error_kind=HookErrorKind.LAUNCH_FAILURE,
            )

        try:
            stdout, stderr = process.communicate(timeout=hook.timeout_seconds)
        except subprocess.TimeoutExpired:
            stdout, stderr = _terminate(process)
            duration = max(time.monotonic() - start_time, hook.timeout_seconds)
            return HookResult(
                hook_name=hook.display_name,
                phase=phase,
                success=False,
                stdout=stdout.strip(),
                stderr=stderr.strip(),
                duration_seconds=duration,
                timestamp=datetime.now(timezone.utc),
                error=f"Hook timed out after {hook.timeout_seconds:g}s",
                error_kind=HookErrorKind.TIMEOUT,
            )

        duration = time.monotonic() - start_time
        stdout = stdout.strip()
        stderr = stderr.strip()
        success = process.returncode == 0

        error = None
        if not success:
            error = f"exit code {process.returncode}"
            if stderr:
                error = f"{error}: {stderr}"

        return HookResult(
            hook_name=hook.display_name,
            phase=phase,
            success=success,
            exit_code=process.returncode,
            stdout=stdout,
            stderr=stderr,
            duration_seconds=duration,
            timestamp=datetime.now(timezone.utc),
            error=error,
            error_kind=None if success else HookErrorKind.NON_ZERO_EXIT,
        )


def _kill_process_group(process: subprocess.Popen[str]) -> None:
    """
    Kill the process and, on Unix, every process in its group.

    Hooks are started in their own session, so the group id equals the pid
    and covers anything the shell spawned that did not detach itself.
    """
    if IS_UNIX:
        try:
            os.killpg(os.getpgid(process.pid), signal.SIGKILL)
            logger.debug(f"Killed process group {process.pid}")
            return
        except (ProcessLookupError, OSError) as e:
            logger.debug(f"Process group kill failed (process may be dead): {e}")

    try:
        process.kill()
    except OSError as e:
        logger.debug(f"Process kill failed (process may be dead): {e}")


def _terminate(process: subprocess.Popen[str]) -> tuple[str, str]:
    """
    Kill a timed-out hook and reap it.

    Returns whatever output was produced before the kill. If a detached
    descendant keeps the pipes open, the pipes are abandoned after
    KILL_WAIT_SECONDS and the process itself is still waited for.

    Returns:
        Tuple of (stdout, stderr)
    """
    _kill_process_group(process)
    try:
        stdout, stderr = process.communicate(timeout=KILL_WAIT_SECONDS)
    except subprocess.TimeoutExpired:
        logger.warning(f"Hook process {process.pid} output still open after kill; abandoning")
        for pipe in (process.stdout, process.stderr):
            if pipe is not None:
                pipe.close()
        process.wait()
        return "", ""
    return stdout or "", stderr or ""
