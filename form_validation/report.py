"""
Validation report value types.

A report mirrors the schema: one PropertyReport per property, holding one
boolean per rule name, plus the aggregate "is_valid" key at both levels.

    {
        "email": {"is_valid_email": True, "is_valid": True},
        "is_valid": True
    }

Reports are read-only once built and compare equal to any mapping (plain
dicts included) with the same keys and values.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterator, Tuple

IS_VALID = "is_valid"


class PropertyReport(Mapping):
    """Outcome of every rule under one property, plus the property aggregate."""

    __slots__ = ("_outcomes", "_is_valid")

    def __init__(self, outcomes: Dict[str, bool], is_valid: bool):
        self._outcomes = dict(outcomes)
        self._is_valid = bool(is_valid)

    @classmethod
    def from_outcomes(cls, outcomes: Dict[str, bool]) -> "PropertyReport":
        """Build a report whose aggregate is the AND of the outcomes (True when empty)."""
        return cls(outcomes, all(outcomes.values()))

    @property
    def is_valid(self) -> bool:
        return self._is_valid

    @property
    def outcomes(self) -> Dict[str, bool]:
        """Rule outcomes without the aggregate, as a new dict."""
        return dict(self._outcomes)

    def __getitem__(self, key: str) -> bool:
        if key == IS_VALID:
            return self._is_valid
        return self._outcomes[key]

    def __iter__(self) -> Iterator[str]:
        yield from self._outcomes
        yield IS_VALID

    def __len__(self) -> int:
        return len(self._outcomes) + 1

    def to_dict(self) -> Dict[str, bool]:
        return {**self._outcomes, IS_VALID: self._is_valid}

    def __repr__(self) -> str:
        return f"PropertyReport({self.to_dict()!r})"


class ValidationReport(Mapping):
    """Outcome of one validation pass over a whole target."""

    __slots__ = ("_properties", "_is_valid")

    def __init__(self, properties: Dict[str, PropertyReport], is_valid: bool):
        self._properties = dict(properties)
        self._is_valid = bool(is_valid)

    @classmethod
    def from_properties(cls, properties: Dict[str, PropertyReport]) -> "ValidationReport":
        """Build a report whose aggregate is the AND of every property aggregate."""
        return cls(properties, all(report.is_valid for report in properties.values()))

    @property
    def is_valid(self) -> bool:
        return self._is_valid

    @property
    def properties(self) -> Tuple[str, ...]:
        return tuple(self._properties)

    def __getitem__(self, key: str) -> Any:
        if key == IS_VALID:
            return self._is_valid
        return self._properties[key]

    def __iter__(self) -> Iterator[str]:
        yield from self._properties
        yield IS_VALID

    def __len__(self) -> int:
        return len(self._properties) + 1

    def failed_rules(self) -> Dict[str, Tuple[str, ...]]:
        """Map each invalid property to the names of the rules it failed."""
        return {
            name: tuple(rule for rule, passed in report.outcomes.items() if not passed)
            for name, report in self._properties.items()
            if not report.is_valid
        }

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested dicts, e.g. for JSON encoding or UI state."""
        result: Dict[str, Any] = {name: report.to_dict() for name, report in self._properties.items()}
        result[IS_VALID] = self._is_valid
        return result

    def __repr__(self) -> str:
        return f"ValidationReport({self.to_dict()!r})"
