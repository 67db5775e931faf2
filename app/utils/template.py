# app/utils/template.py
import re
from datetime import datetime
from typing import Any, Mapping

_SECTION_RE = re.compile(r"\{\{#(\w+)\}\}(.*?)\{\{/\1\}\}", re.DOTALL)
_TOKEN_RE = re.compile(r"\{\{(\w+)\}\}")


def render_placeholders(template: str, data: Mapping[str, Any]) -> str:
    """
    Fill an admin-authored template.

    `{{key}}` is replaced with the value of `key`. `{{#key}}...{{/key}}` keeps its
    body only when `key` is truthy. Tokens with no matching key are left as-is.
    """
    if not template:
        return ""

    values = {"year": str(datetime.utcnow().year)}
    values.update({k: v for k, v in data.items()})

    def _section(match: re.Match) -> str:
        return match.group(2) if values.get(match.group(1)) else ""

    # Sections first so tokens inside a dropped section are never rendered
    rendered = _SECTION_RE.sub(_section, template)

    def _token(match: re.Match) -> str:
        key = match.group(1)
        if key not in values:
            return match.group(0)
        value = values[key]
        return "" if value is None else str(value)

    return _TOKEN_RE.sub(_token, rendered)
