"""
Expression template rendering.

Rule expressions and SLI queries use ``{{ .key }}`` placeholders
(``{{ .window }}`` being the one users write in their queries).
Rendering is strict: an unknown key or any other ``{{ ... }}`` action
raises ``TemplateError`` instead of leaking into the final expression.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from slogen.core.errors import TemplateError

__all__ = ["render_template", "template_variables"]

# Pattern matches any {{ ... }} action.
ACTION_PATTERN = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)

# Pattern matches the only supported action: {{ .key }}
VARIABLE_PATTERN = re.compile(r"^\s*\.(\w+)\s*$")


def render_template(text: str, data: Mapping[str, Any], name: str = "expr") -> str:
    """
    Substitute ``{{ .key }}`` placeholders in ``text``.

    Substituted values are not rendered again.

    Example:
        >>> render_template("rate(x[{{ .window }}])", {"window": "5m"})
        'rate(x[5m])'
    """

    def replacer(match: re.Match) -> str:
        action = match.group(1)
        var = VARIABLE_PATTERN.match(action)
        if var is None:
            raise TemplateError(
                f"could not render {name} template: unsupported action {{{{{action}}}}}"
            )
        key = var.group(1)
        if key not in data:
            raise TemplateError(f"could not render {name} template: missing key {key!r}")
        return str(data[key])

    if text.count("{{") != text.count("}}"):
        raise TemplateError(f"could not parse {name} template: unbalanced action delimiters")

    return ACTION_PATTERN.sub(replacer, text)


def template_variables(text: str) -> list[str]:
    """Return the variable names referenced by a template, in order of appearance."""
    names = []
    for match in ACTION_PATTERN.finditer(text):
        var = VARIABLE_PATTERN.match(match.group(1))
        if var is not None:
            names.append(var.group(1))
    return names
