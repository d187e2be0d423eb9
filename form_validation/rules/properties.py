"""
Cross-property and enumeration rules.

Both families compare values with same-value semantics rather than plain
==, so that True does not count as 1 and "42" never counts as 42.
"""

from typing import Any, Iterable

from .base import FunctionRule, Rule, lookup


def _kind(value: Any) -> Any:
    if isinstance(value, bool):
        return bool
    if isinstance(value, (int, float)):
        return "number"
    return type(value)


def same_value(left: Any, right: Any) -> bool:
    """
    Compare two values the way the enumeration and property rules do.

    Booleans only equal booleans, ints and floats compare numerically with
    each other, anything else compares with == only when both sides share
    a type.
    """
    return _kind(left) == _kind(right) and left == right


def is_equal_to_property(other_property: str) -> Rule:
    """Value must equal the value of another property on the same target."""
    return FunctionRule(
        lambda target, property, value: same_value(lookup(target, other_property), value),
        name=f"is_equal_to_property({other_property!r})",
    )


def is_not_equal_to_property(other_property: str) -> Rule:
    """Value must differ from the value of another property on the same target."""
    return FunctionRule(
        lambda target, property, value: not same_value(lookup(target, other_property), value),
        name=f"is_not_equal_to_property({other_property!r})",
    )


def is_one_of(values: Iterable[Any]) -> Rule:
    """Value must be a member of a fixed enumeration."""
    enumeration = tuple(values)
    return FunctionRule(
        lambda target, property, value: any(same_value(item, value) for item in enumeration),
        name=f"is_one_of({list(enumeration)!r})",
    )


def is_not_one_of(values: Iterable[Any]) -> Rule:
    """Value must not be a member of a fixed enumeration."""
    enumeration = tuple(values)
    return FunctionRule(
        lambda target, property, value: not any(same_value(item, value) for item in enumeration),
        name=f"is_not_one_of({list(enumeration)!r})",
    )
