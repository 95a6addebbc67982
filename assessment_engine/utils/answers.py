"""
Helpers for reading questionnaire answers.

Answers arrive from the wizard as camelCase JSON (``projectType``) or from
Python callers as snake_case (``project_type``).  Everything downstream reads
snake_case keys through these accessors, which treat wrong-typed values as
absent instead of raising.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake(key: str) -> str:
    """``mustHaveFeatures`` -> ``must_have_features``."""
    return _CAMEL_BOUNDARY.sub("_", key).replace("-", "_").lower()


def fold_keys(answers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of *answers* with snake_case keys.

    When both spellings of a key are present the snake_case one wins.
    """
    if not answers:
        return {}
    folded: dict[str, Any] = {}
    for key, value in answers.items():
        if not isinstance(key, str):
            continue
        snake = to_snake(key)
        if snake in folded and key != snake:
            continue
        folded[snake] = value
    return folded


def get_str(answers: Mapping[str, Any], key: str) -> str:
    value = answers.get(key)
    if isinstance(value, str):
        return value.strip()
    return ""


def get_list(answers: Mapping[str, Any], key: str) -> list[str]:
    """Return a list of non-empty strings; a bare string counts as one item."""
    value = answers.get(key)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    items = [v.strip() for v in value if isinstance(v, str) and v.strip()]
    if isinstance(value, (set, frozenset)):
        items.sort()
    return items


def get_bool(answers: Mapping[str, Any], key: str) -> bool:
    value = answers.get(key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "on")
    return False


def count_of(answers: Mapping[str, Any], key: str) -> int:
    """Quantity carried by an answer: list length, or a non-negative number."""
    value = answers.get(key)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(value))
    return len(get_list(answers, key))
