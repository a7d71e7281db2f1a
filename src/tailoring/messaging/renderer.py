"""Template renderer — ``{{variable}}`` substitution for message text.

Rendering is purely textual: numbers, amounts and dates are formatted by the
caller before they go into the context. A placeholder without a value in the
context is left in the output as-is.
"""

import re
from collections.abc import Mapping

from protean.exceptions import ValidationError

_VARIABLE_PATTERN = re.compile(r"\{\{(\w+)\}\}")


def _ensure_text(content) -> None:
    if not isinstance(content, str):
        raise ValidationError({"content": [f"Template content must be text, got {type(content).__name__}"]})


def extract_variables(content: str) -> list[str]:
    """Distinct placeholder names in order of first appearance."""
    _ensure_text(content)
    return list(dict.fromkeys(_VARIABLE_PATTERN.findall(content)))


def render(content: str, context: Mapping[str, object] | None = None) -> str:
    """Substitute every placeholder that has a non-None value in ``context``."""
    _ensure_text(content)
    context = context or {}

    def _substitute(match: re.Match) -> str:
        value = context.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return _VARIABLE_PATTERN.sub(_substitute, content)
