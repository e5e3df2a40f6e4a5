"""Template Rendering - substitute params into config-supplied email templates.

Invariants:
    - {{name}} and {{&name}} / {{{name}}} follow mustache lookup: dotted names walk
      nested mappings, any other text is a literal key (first-name, user id, ...)
    - Unresolved placeholders, at any depth, render as the empty string
    - {{name}} values are HTML-escaped, {{{name}}} and {{&name}} are not
    - Param keys never reach Jinja as identifiers or keyword arguments

Design Decisions:
    - Placeholders are resolved in Python and handed to a sandboxed Jinja template
      as positional values: Jinja keeps escaping and parse errors, mustache keeps
      its lookup rules
    - Mustache sections and partials ({{#x}}, {{^x}}, {{/x}}, {{>x}}) are rejected
      as INVALID_TEMPLATE rather than silently rendered empty
"""

import re
from collections.abc import Mapping
from typing import Any

from jinja2 import TemplateError
from jinja2.sandbox import SandboxedEnvironment

from verimail.core.errors import TemplateRenderError

_env = SandboxedEnvironment(autoescape=True)

_PLACEHOLDER = re.compile(
    r"\{\{\{\s*(?P<triple>[^{}]+?)\s*\}\}\}"
    r"|\{\{\s*(?P<sigil>[&!#^/>=])?\s*(?P<name>[^{}]*?)\s*\}\}"
)
_UNSUPPORTED = "#^/>="


def lookup(params: Mapping[str, Any], name: str) -> Any:
    """Resolve a mustache name against params; None when any step is missing."""
    if name == ".":
        return params
    value: Any = params
    for part in name.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return None
        value = value[part]
    return value


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _translate(source: str, params: Mapping[str, Any]) -> tuple[str, list[str]]:
    values: list[str] = []

    def replace(match: re.Match) -> str:
        sigil = match.group("sigil")
        if sigil == "!":
            return ""
        if sigil and sigil in _UNSUPPORTED:
            raise TemplateRenderError(f"unsupported mustache tag {match.group(0)!r}")
        raw = match.group("triple") is not None or sigil == "&"
        name = match.group("triple") or match.group("name")
        if not name:
            raise TemplateRenderError("empty placeholder")
        values.append(_stringify(lookup(params, name)))
        index = len(values) - 1
        return f"{{{{ values[{index}]|safe }}}}" if raw else f"{{{{ values[{index}] }}}}"

    return _PLACEHOLDER.sub(replace, source), values


def render_template(source: str, params: Mapping[str, Any]) -> str:
    translated, values = _translate(source, params)
    try:
        return _env.from_string(translated).render({"values": values})
    except TemplateError as e:
        raise TemplateRenderError(str(e))
