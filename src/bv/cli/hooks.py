"""
Export hook commands.

Provides commands to inspect the hooks configured in .bv/hooks.yaml and to run
one phase by hand against a sample export, which is the quickest way to debug
a hook without producing a real export.
"""

from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bv.core.hooks.exceptions import HookConfigError, HookExecutionError
from bv.core.hooks.executor import HookExecutor
from bv.core.hooks.loader import HookLoader
from bv.core.hooks.models import ExportContext, HookResult, Phase

app = typer.Typer(
    name="hooks",
    help="Inspect and run export hooks",
    no_args_is_help=True,
)

console = Console()


def _load(project_dir: str, config_file: str | None) -> HookLoader:
    project_path = Path(project_dir).resolve()

    if not project_path.is_dir():
        console.print(f"[red]Error: Not a directory: {project_path}[/red]")
        raise typer.Exit(1)

    loader = HookLoader(
        project_dir=project_path,
        config_path=Path(config_file) if config_file else None,
    )
    try:
        loader.load()
    except HookConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    for warning in loader.warnings:
        console.print(f"[yellow]⚠[/yellow] {escape(warning)}")

    return loader


def _results_table(results: tuple[HookResult, ...]) -> Table:
    table = Table(title="Hook Results", show_header=True, header_style="bold")
    table.add_column("Phase", style="cyan", no_wrap=True)
    table.add_column("Hook", style="white")
    table.add_column("Status", width=9, no_wrap=True)
    table.add_column("Duration", justify="right", style="dim")
    table.add_column("Output / Error", style="white")

    for result in results:
        status = "[green]ok[/green]" if result.success else "[red]failed[/red]"
        detail = result.stdout if result.success else (result.error or "")
        table.add_row(
            result.phase.value,
            escape(result.hook_name),
            status,
            f"{result.duration_seconds:.2f}s",
            escape(detail),
        )
    return table


@app.command(name="list")
def list_hooks(
    project_dir: str = typer.Option(
        ".",
        "--project",
        "-p",
        help="Project directory (default: current directory)",
    ),
    config_file: str | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar="BV_HOOKS_FILE",
        help="Hook configuration file (default: <project>/.bv/hooks.yaml)",
    ),
) -> None:
    """
    Show the hooks configured for this project.

    Examples:
        bv hooks list              # Hooks of the current project
        bv hooks list -p ../other  # Hooks of another project
    """
    loader = _load(project_dir, config_file)

    if not loader.has_hooks():
        console.print(f"[dim]No hooks configured ({escape(str(loader.config_path))})[/dim]")
        raise typer.Exit(0)

    table = Table(title="Export Hooks", show_header=True, header_style="bold")
    table.add_column("Phase", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Command", style="white")
    table.add_column("Timeout", justify="right", style="dim")
    table.add_column("On Error", style="magenta", no_wrap=True)

    for phase in Phase:
        for hook in loader.get_hooks(phase):
            table.add_row(
                phase.value,
                escape(hook.name or "-"),
                escape(hook.command),
                f"{hook.timeout_seconds:g}s",
                hook.on_error.value,
            )

    console.print(table)


@app.command(name="run")
def run_hooks(
    phase: Phase = typer.Argument(..., help="Phase to run: pre-export or post-export"),
    project_dir: str = typer.Option(
        ".",
        "--project",
        "-p",
        help="Project directory (default: current directory)",
    ),
    config_file: str | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar="BV_HOOKS_FILE",
        help="Hook configuration file (default: <project>/.bv/hooks.yaml)",
    ),
    export_path: str = typer.Option(
        "export.md",
        "--export-path",
        help="Value passed to hooks as BV_EXPORT_PATH",
    ),
    export_format: str = typer.Option(
        "markdown",
        "--format",
        "-f",
        help="Value passed to hooks as BV_EXPORT_FORMAT",
    ),
    issue_count: int = typer.Option(
        0,
        "--issue-count",
        "-n",
        min=0,
        help="Value passed to hooks as BV_ISSUE_COUNT",
    ),
) -> None:
    """
    Run one hook phase against a sample export.

    No export is written; hooks only see the BV_* variables built from the
    options. Exits with status 1 if a hook with on_error=fail fails.

    Examples:
        bv hooks run pre-export
        bv hooks run post-export --export-path out/report.md -n 42
    """
    loader = _load(project_dir, config_file)

    hooks = loader.get_hooks(phase)
    if not hooks:
        console.print(f"[dim]No {phase.value} hooks configured[/dim]")
        raise typer.Exit(0)

    context = ExportContext(
        export_path=export_path,
        export_format=export_format,
        issue_count=issue_count,
        timestamp=datetime.now(timezone.utc),
    )
    executor = HookExecutor(loader.config, context, cwd=loader.project_dir)

    console.print(f"[blue]Running {len(hooks)} {phase.value} hook(s)[/blue]")

    aborted: HookExecutionError | None = None
    try:
        executor.run_phase(phase)
    except HookExecutionError as e:
        aborted = e

    console.print(_results_table(executor.results))
    console.print(f"\n{executor.summary()}")

    if aborted is not None:
        console.print(f"[red]✗[/red] {escape(str(aborted))}")
        raise typer.Exit(1)
