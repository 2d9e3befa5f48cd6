"""
Export lifecycle hooks.

Runs user-configured commands around an export: pre-export hooks before the
artifact is written and post-export hooks after it exists. Hooks are declared
in .bv/hooks.yaml and receive the export context as BV_* environment
variables.

Key Classes:
    HookLoader: Locate, parse and normalize .bv/hooks.yaml
    HookExecutor: Run a phase's hooks with timeouts and error policy

Key Models:
    Phase: pre-export / post-export
    OnError: fail / continue
    Hook: One configured command
    HooksConfig: Ordered hooks per phase
    ExportContext: Export metadata exposed to hooks
    HookResult: Outcome of one hook execution

Usage:
    from bv.core.hooks import ExportContext, HookExecutor, load_hooks_config

    loader = load_hooks_config(project_dir)
    for warning in loader.warnings:
        print(f"Warning: {warning}")

    executor = HookExecutor(loader.config, ExportContext(
        export_path="report.md", export_format="markdown", issue_count=12,
    ))
    executor.run_pre_export()
    ...
    executor.run_post_export()
    print(executor.summary())
"""

from bv.core.hooks.environment import build_hook_environment, expand_env
from bv.core.hooks.exceptions import HookConfigError, HookError, HookExecutionError
from bv.core.hooks.executor import HookExecutor
from bv.core.hooks.loader import (
    HookLoader,
    get_hooks_config_path,
    load_hooks_config,
    parse_duration,
)
from bv.core.hooks.models import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_TIMEOUT_SECONDS,
    ExportContext,
    Hook,
    HookErrorKind,
    HookResult,
    HooksConfig,
    OnError,
    Phase,
)

__all__ = [
    # Loader
    "HookLoader",
    "load_hooks_config",
    "get_hooks_config_path",
    "parse_duration",
    # Executor
    "HookExecutor",
    "build_hook_environment",
    "expand_env",
    # Models
    "DEFAULT_TIMEOUT_SECONDS",
    "MAX_TIMEOUT_SECONDS",
    "Phase",
    "OnError",
    "Hook",
    "HooksConfig",
    "ExportContext",
    "HookErrorKind",
    "HookResult",
    # Exceptions
    "HookError",
    "HookConfigError",
    "HookExecutionError",
]
