"""
Export pipeline with lifecycle hooks.

Sequences one export:
    pre-export hooks -> write artifact -> post-export hooks

A failing pre-export hook (on_error=fail) aborts the export before anything is
written. A failing post-export hook cannot undo the export, so it is logged and
reported on the returned ExportRun instead of raised.

Usage:
    from bv.core.export.pipeline import run_export_with_hooks

    def write(ctx: ExportContext) -> None:
        Path(ctx.export_path).write_text(render_markdown(issues))

    run = run_export_with_hooks(context, write, loader.config)
    print(run.summary)
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from bv.core.hooks.exceptions import HookExecutionError
from bv.core.hooks.executor import HookExecutor
from bv.core.hooks.models import ExportContext, HookResult, HooksConfig

logger = logging.getLogger(__name__)


class ExportRun(BaseModel):
    """Outcome of an export and its hooks."""

    context: ExportContext
    results: list[HookResult] = Field(default_factory=list)
    summary: str = Field(default="", description="Hook summary, empty if hooks were skipped")
    post_export_error: str | None = Field(
        default=None, description="Error from a failed post-export hook"
    )

    @property
    def hooks_ran(self) -> bool:
        return bool(self.results)


def run_export_with_hooks(
    context: ExportContext,
    write_export: Callable[[ExportContext], None],
    config: HooksConfig | None,
    *,
    cwd: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ExportRun:
    """
    Run an export wrapped in its pre- and post-export hooks.

    Args:
        context: Export being performed
        write_export: Callable that produces the artifact
        config: Hook configuration, or None to skip hooks entirely
        cwd: Working directory for hook processes
        environ: Ambient environment for hooks (defaults to os.environ)

    Returns:
        ExportRun with all hook results

    Raises:
        HookExecutionError: If a pre-export hook with on_error=fail fails.
            The export is not written.
    """
    if config is None or not config.has_hooks():
        write_export(context)
        return ExportRun(context=context)

    executor = HookExecutor(config, context, cwd=cwd, environ=environ)

    try:
        executor.run_pre_export()
    except HookExecutionError:
        logger.error(f"Pre-export hook failed; export to {context.export_path} aborted")
        raise

    write_export(context)

    post_export_error = None
    try:
        executor.run_post_export()
    except HookExecutionError as e:
        logger.warning(f"Post-export hook failed: {e}")
        post_export_error = str(e)

    return ExportRun(
        context=context,
        results=list(executor.results),
        summary=executor.summary(),
        post_export_error=post_export_error,
    )
