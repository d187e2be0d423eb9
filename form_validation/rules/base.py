"""
Abstract base class for validation rules.

All rules inherit from Rule and implement a single coroutine, is_valid().
The validation engine calls is_valid() once per rule per validation pass,
passing the full target, the property being checked and its current value.
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Optional


def lookup(target: Any, name: str) -> Any:
    """
    Read a property from a target object.

    Mappings are read by key, anything else by attribute. Absent
    properties come back as None so rules can decide how to treat them.

    Args:
        target: The object being validated
        name: Property name

    Returns:
        The property value, or None if the target has no such property
    """
    if isinstance(target, Mapping):
        return target.get(name)
    return getattr(target, name, None)


class Rule(ABC):
    """
    Abstract base class for all validation rules.

    A rule is a capability object with one operation. Any parameters it
    needs (thresholds, patterns, other property names) are captured when
    the rule is constructed and never change afterwards, so one instance
    can be shared between schemas and between concurrent validations.

    Rules must not mutate the target. Expected failures (a value of the
    wrong type, a pattern that cannot be applied, an unreachable remote
    service) resolve to False instead of raising.
    """

    @abstractmethod
    async def is_valid(self, target: Any, property: str, value: Any) -> bool:
        """
        Judge one property value.

        Args:
            target: The full object being validated
            property: Name of the property being checked
            value: Current value of that property (None when absent)

        Returns:
            True if the value passes this rule
        """


class FunctionRule(Rule):
    """Rule backed by a plain predicate, sync or async."""

    def __init__(self, predicate: Callable[..., Any], name: Optional[str] = None):
        """
        Initialize the rule with its predicate.

        Args:
            predicate: Callable taking (target, property, value) and returning
                a bool or an awaitable resolving to one
            name: Optional label used in repr() and log messages

        Raises:
            TypeError: If predicate is not callable
        """
        if not callable(predicate):
            raise TypeError(f"Rule predicate must be callable, got {type(predicate).__name__}")
        self._predicate = predicate
        self.name = name or getattr(predicate, "__name__", "rule")

    async def is_valid(self, target: Any, property: str, value: Any) -> bool:
        result = self._predicate(target, property, value)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"
