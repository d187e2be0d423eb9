"""Numeric and integer rules"""

from typing import Any

from .base import FunctionRule, Rule


def _is_number(value: Any) -> bool:
    # bool is a subclass of int but is not a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    if not _is_number(value):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return True


def is_number() -> Rule:
    """Value must be an int or a float."""
    return FunctionRule(lambda target, property, value: _is_number(value), name="is_number")


def is_number_equal_to(expected: float) -> Rule:
    return FunctionRule(
        lambda target, property, value: _is_number(value) and value == expected,
        name=f"is_number_equal_to({expected!r})",
    )


def is_number_not_equal_to(expected: float) -> Rule:
    return FunctionRule(
        lambda target, property, value: _is_number(value) and value != expected,
        name=f"is_number_not_equal_to({expected!r})",
    )


def is_number_greater_than(expected: float) -> Rule:
    return FunctionRule(
        lambda target, property, value: _is_number(value) and value > expected,
        name=f"is_number_greater_than({expected!r})",
    )


def is_number_lower_than(expected: float) -> Rule:
    return FunctionRule(
        lambda target, property, value: _is_number(value) and value < expected,
        name=f"is_number_lower_than({expected!r})",
    )


def is_integer() -> Rule:
    """Value must be a number without a fractional part (1.0 counts, inf does not)."""
    return FunctionRule(lambda target, property, value: _is_integer(value), name="is_integer")


def is_integer_equal_to(expected: int) -> Rule:
    return FunctionRule(
        lambda target, property, value: _is_integer(value) and value == expected,
        name=f"is_integer_equal_to({expected!r})",
    )


def is_integer_not_equal_to(expected: int) -> Rule:
    return FunctionRule(
        lambda target, property, value: _is_integer(value) and value != expected,
        name=f"is_integer_not_equal_to({expected!r})",
    )


def is_integer_greater_than(expected: int) -> Rule:
    return FunctionRule(
        lambda target, property, value: _is_integer(value) and value > expected,
        name=f"is_integer_greater_than({expected!r})",
    )


def is_integer_lower_than(expected: int) -> Rule:
    return FunctionRule(
        lambda target, property, value: _is_integer(value) and value < expected,
        name=f"is_integer_lower_than({expected!r})",
    )
