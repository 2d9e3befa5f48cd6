"""Export pipeline: runs an export between its pre- and post-export hooks."""

from bv.core.export.pipeline import ExportRun, run_export_with_hooks

__all__ = ["ExportRun", "run_export_with_hooks"]
