"""
String rules: email addresses, password strength and regular expressions.

Every rule in this module fails on non-string values.
"""

import logging
import re
from typing import Any, Optional, Union

from .base import FunctionRule, Rule

logger = logging.getLogger(__name__)

# RFC 822 address building blocks. An atom is a run of characters other
# than controls, space, specials and 8-bit bytes; a quoted string or a
# domain literal may carry escaped pairs.
_ATOM = r"[^\x00-\x20\x22\x28\x29\x2c\x2e\x3a-\x3c\x3e\x40\x5b-\x5d\x7f-\xff]+"
_QUOTED_STRING = r"\x22(?:[^\x0d\x22\x5c\x80-\xff]|\x5c[\x00-\x7f])*\x22"
_DOMAIN_LITERAL = r"\x5b(?:[^\x0d\x5b-\x5d\x80-\xff]|\x5c[\x00-\x7f])*\x5d"

_WORD = rf"(?:{_ATOM}|{_QUOTED_STRING})"
_SUB_DOMAIN = rf"(?:{_ATOM}|{_DOMAIN_LITERAL})"
_LOCAL_PART = rf"{_WORD}(?:\.{_WORD})*"
_DOMAIN = rf"{_SUB_DOMAIN}(?:\.{_SUB_DOMAIN})*"
# Plain RFC 822 accepts "user@host"; a dotted suffix is required on top.
_TOP_LEVEL_SUFFIX = r"(?:\.\w{2,})+"

EMAIL_PATTERN = re.compile(rf"{_LOCAL_PART}@{_DOMAIN}{_TOP_LEVEL_SUFFIX}", re.ASCII)


def is_email() -> Rule:
    """Value must be an email address with a dotted domain suffix."""
    return FunctionRule(
        lambda target, property, value: isinstance(value, str)
        and EMAIL_PATTERN.fullmatch(value) is not None,
        name="is_email",
    )


def is_password(minimum: int = 8) -> Rule:
    """
    Value must be a strong password.

    Strong means at least `minimum` characters on a single line, with at
    least one lowercase letter, one uppercase letter, one digit and one
    character that is none of those.

    Raises:
        ValueError: If minimum is not a positive integer
    """
    if isinstance(minimum, bool) or not isinstance(minimum, int) or minimum < 1:
        raise ValueError(f"Password minimum length must be a positive integer, got {minimum!r}")

    pattern = re.compile(
        rf"(?=.*[0-9])(?=.*[a-z])(?=.*[A-Z])(?=.*[^0-9a-zA-Z]).{{{minimum},}}"
    )
    return FunctionRule(
        lambda target, property, value: isinstance(value, str)
        and pattern.fullmatch(value) is not None,
        name=f"is_password({minimum})",
    )


def _compile(pattern: Union[str, "re.Pattern[str]"]) -> "re.Pattern[str]":
    if isinstance(pattern, re.Pattern):
        return pattern
    if not isinstance(pattern, str):
        raise TypeError(f"Pattern must be a string or compiled regex, got {type(pattern).__name__}")
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid regular expression {pattern!r}: {e}") from e


def _search(regex: "re.Pattern[str]", value: Any) -> Optional[bool]:
    """Return whether regex matches somewhere in value, or None if it cannot be applied."""
    try:
        return regex.search(value) is not None
    except Exception as e:
        # e.g. a bytes pattern applied to a str
        logger.debug(f"Pattern {regex.pattern!r} could not be applied: {e}")
        return None


def does_match(pattern: Union[str, "re.Pattern[str]"]) -> Rule:
    """
    Value must be a string matched by a regular expression.

    Args:
        pattern: Regular expression source or compiled pattern

    Raises:
        ValueError: If a pattern string does not compile
    """
    regex = _compile(pattern)
    return FunctionRule(
        lambda target, property, value: isinstance(value, str) and _search(regex, value) is True,
        name=f"does_match({regex.pattern!r})",
    )


def does_not_match(pattern: Union[str, "re.Pattern[str]"]) -> Rule:
    """
    Value must be a string not matched by a regular expression.

    A pattern that cannot be applied counts as a failure, not as a non-match.
    """
    regex = _compile(pattern)
    return FunctionRule(
        lambda target, property, value: isinstance(value, str) and _search(regex, value) is False,
        name=f"does_not_match({regex.pattern!r})",
    )
