"""Substitution of calculation tokens in element text.

Text properties reference calculations of their element with
``{{CALC:<calculation id>}}`` tokens.
"""

import re
from collections.abc import Mapping
from typing import Any

from appcanvas.core.coercion import ValueCoercer

CALC_TOKEN_PATTERN = re.compile(r"\{\{CALC:([A-Za-z0-9_\-]+)\}\}")


def find_calculation_ids(text: str) -> list[str]:
    """Calculation ids referenced by a text, in order of first appearance."""
    seen: dict[str, None] = {}
    for match in CALC_TOKEN_PATTERN.finditer(text or ""):
        seen.setdefault(match.group(1), None)
    return list(seen)


def format_value(value: Any) -> str:
    """Render an evaluated value for display."""
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(item) for item in value)
    return ValueCoercer.to_string(value)


def substitute(text: str, values: Mapping[str, Any]) -> str:
    """Replace calculation tokens with formatted values; unknown ids render empty."""

    def _replace(match: re.Match[str]) -> str:
        return format_value(values.get(match.group(1)))

    return CALC_TOKEN_PATTERN.sub(_replace, text or "")
