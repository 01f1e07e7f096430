"""Built-in validators for intake field values."""

from __future__ import annotations

import re
from typing import Any

# Registry of validator functions: name -> callable(value, **params) -> str | None
# Returns an error message string on failure, None on success.
VALIDATORS: dict[str, Any] = {}

_NON_DIGITS = re.compile(r"\D")


def register(name: str):
    """Decorator to register a validator function."""
    def decorator(fn):
        VALIDATORS[name] = fn
        return fn
    return decorator


def digits_only(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


@register("required")
def validate_required(value: Any, **_kwargs: Any) -> str | None:
    if _is_blank(value):
        return "This field is required."
    return None


@register("accepted")
def validate_accepted(value: Any, **_kwargs: Any) -> str | None:
    if value is not True:
        return "This box must be checked."
    return None


@register("min_length")
def validate_min_length(value: Any, length: int | str = 1, **_kwargs: Any) -> str | None:
    if len(value or "") < int(length):
        return f"Must be at least {length} characters."
    return None


@register("max_length")
def validate_max_length(value: Any, length: int | str = 500, **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str):
        return None
    if len(value) > int(length):
        return f"Must be at most {length} characters."
    return None


@register("digits")
def validate_digits(value: Any, count: int | str = 10, **_kwargs: Any) -> str | None:
    if value is None or not isinstance(value, str):
        return f"Please enter exactly {count} digits."
    if len(digits_only(value)) != int(count):
        return f"Please enter exactly {count} digits."
    return None


@register("max_items")
def validate_max_items(value: Any, count: int | str = 1, **_kwargs: Any) -> str | None:
    if value is not None and len(value) > int(count):
        return f"Select at most {count}."
    return None


@register("one_of")
def validate_one_of(
    value: Any, options: str = "", catalog: Any = None, **_kwargs: Any
) -> str | None:
    """Check a value (or each item of a list) against a catalogue option list.

    Skipped when no catalogue is supplied or the value is blank.
    """
    if catalog is None or _is_blank(value):
        return None
    allowed = set(catalog.options(options))
    values = value if isinstance(value, list) else [value]
    for item in values:
        if str(item) not in allowed:
            return f"'{item}' is not one of the available options."
    return None
