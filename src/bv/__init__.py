"""
bv - Beads Viewer export tooling

Exports issue-tracker data into reports and runs user-configured lifecycle
hooks around each export.
"""

__version__ = "0.4.0-dev"

from bv.core.hooks.models import ExportContext, HookResult, Phase

__all__ = ["ExportContext", "HookResult", "Phase", "__version__"]
