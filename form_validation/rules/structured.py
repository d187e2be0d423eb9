"""
JSON Schema conformance rule.

Validates a single property value (typically a nested dict or list) against
a JSON Schema document using jsonschema.
"""

import logging
from typing import Any, Dict

from jsonschema import SchemaError, ValidationError, validators

from .base import FunctionRule, Rule

logger = logging.getLogger(__name__)


def conforms_to_json_schema(schema: Dict[str, Any]) -> Rule:
    """
    Value must conform to a JSON Schema document.

    The validator class is picked from the schema's "$schema" keyword
    (latest draft when absent) and the schema itself is checked up front.

    Args:
        schema: JSON Schema document as a dict

    Returns:
        Rule that passes when the value validates against the schema

    Raises:
        ValueError: If the schema is not a valid JSON Schema
    """
    validator_class = validators.validator_for(schema)
    try:
        validator_class.check_schema(schema)
    except SchemaError as e:
        raise ValueError(f"Invalid JSON schema: {e.message}") from e

    validator = validator_class(schema)

    def predicate(target, property, value):
        try:
            validator.validate(value)
            return True
        except ValidationError as e:
            error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
            logger.debug(f"{property} failed JSON schema at {error_path}: {e.message}")
            return False

    return FunctionRule(predicate, name="conforms_to_json_schema")
