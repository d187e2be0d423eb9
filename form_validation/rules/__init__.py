"""
Rule catalogue.

Every constructor takes its parameters synchronously, does no I/O, and
returns a Rule ready to be placed in a schema.
"""

from .base import FunctionRule, Rule, lookup
from .numbers import (
    is_integer,
    is_integer_equal_to,
    is_integer_greater_than,
    is_integer_lower_than,
    is_integer_not_equal_to,
    is_number,
    is_number_equal_to,
    is_number_greater_than,
    is_number_lower_than,
    is_number_not_equal_to,
)
from .properties import (
    is_equal_to_property,
    is_not_equal_to_property,
    is_not_one_of,
    is_one_of,
    same_value,
)
from .remote import RemoteRule, is_accepted_by_remote
from .strings import does_match, does_not_match, is_email, is_password
from .structured import conforms_to_json_schema

__all__ = [
    "Rule",
    "FunctionRule",
    "RemoteRule",
    "lookup",
    "same_value",
    "is_number",
    "is_number_equal_to",
    "is_number_not_equal_to",
    "is_number_greater_than",
    "is_number_lower_than",
    "is_integer",
    "is_integer_equal_to",
    "is_integer_not_equal_to",
    "is_integer_greater_than",
    "is_integer_lower_than",
    "is_equal_to_property",
    "is_not_equal_to_property",
    "is_one_of",
    "is_not_one_of",
    "is_email",
    "is_password",
    "does_match",
    "does_not_match",
    "conforms_to_json_schema",
    "is_accepted_by_remote",
]
