"""
Environment assembly for hook processes.

Every hook runs with the ambient environment, overlaid with the BV_* export
variables, overlaid with the hook's own ``env`` entries. Values in ``env`` are
templates: ``${NAME}`` and ``$NAME`` are replaced with the ambient value of
NAME before the process starts. An unset NAME expands to the empty string,
as it would in a POSIX shell.

This substitution only touches ``env`` values. The command line itself is
left alone and expanded by the shell at run time.
"""

import re
from collections.abc import Mapping

from bv.core.hooks.models import ExportContext

_VAR_PATTERN = re.compile(r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))")


def expand_env(value: str, environ: Mapping[str, str]) -> str:
    """
    Expand ${NAME} and $NAME references against an environment.

    A ``$`` that does not start a valid reference is kept as-is.

    Args:
        value: Template string
        environ: Variables to resolve against

    Returns:
        Expanded string

    Example:
        >>> expand_env("${HOME}/bin:$EXTRA", {"HOME": "/home/me"})
        '/home/me/bin:'
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group("braced") or match.group("bare")
        return environ.get(name, "")

    return _VAR_PATTERN.sub(_replace, value)


def build_hook_environment(
    context: ExportContext,
    hook_env: Mapping[str, str],
    environ: Mapping[str, str],
) -> dict[str, str]:
    """
    Build the environment dictionary for one hook process.

    Args:
        context: Export context providing the BV_* variables
        hook_env: The hook's own variables (templates)
        environ: Ambient environment, used as the base and for expansion

    Returns:
        Environment dictionary for subprocess
    """
    env = dict(environ)
    env.update(context.to_env())
    for key, template in hook_env.items():
        env[key] = expand_env(template, environ)
    return env
