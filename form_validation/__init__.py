"""
form-validation: declarative, asynchronous validation of objects against rule schemas

This library provides:
- A schema model mapping properties to named rules
- An asynchronous engine producing nested pass/fail reports
- An all-False initial report for seeding UI state
- A catalogue of numeric, string, enumeration and cross-property rules
- JSON Schema and remote-endpoint rules

Example:
    from form_validation import create_validator, is_email

    validator = create_validator({"email": {"is_valid_email": is_email()}})
    report = await validator.validate({"email": "email@domain.com"})
    report.is_valid  # True
"""

from .config_loader import ConfigLoader
from .report import PropertyReport, ValidationReport
from .rules import *  # noqa: F401,F403
from .rules import __all__ as _rules_all
from .validation_engine import ValidationEngine, create_validator

__version__ = "0.1.0"
__all__ = [
    "create_validator",
    "ValidationEngine",
    "ValidationReport",
    "PropertyReport",
    "ConfigLoader",
] + list(_rules_all)
