import asyncio
import inspect
import logging
import time
from collections.abc import Mapping
from typing import Any, Dict, List, Mapping as MappingType, Optional, Tuple

from .config_loader import ConfigLoader, get_default_config, reset_active_config, set_active_config
from .report import IS_VALID, PropertyReport, ValidationReport
from .rules.base import lookup

logger = logging.getLogger(__name__)

Schema = MappingType[str, MappingType[str, Any]]


class ValidationEngine:
    """Evaluates a schema of rules against target objects"""

    def __init__(self, schema: Schema, config: Optional[ConfigLoader] = None):
        """
        Initialize validation engine with a schema.

        The schema is checked and copied here; later changes to the caller's
        dicts do not affect the engine.

        Args:
            schema: Mapping of property name -> mapping of rule name -> Rule
            config: ConfigLoader instance (default: bundled defaults)

        Raises:
            TypeError: If schema is not a mapping of mappings of rules
            ValueError: If a property or rule name is reserved
        """
        self.config_loader = config or get_default_config()
        self.evaluation_mode = self.config_loader.get_evaluation_mode()
        self.slow_rule_threshold_ms = self.config_loader.get_slow_rule_threshold_ms()

        self._schema = self._check_schema(schema)
        self.initial_validation = self._build_initial_validation()

        logger.debug(
            f"Validation engine created: {len(self._schema)} properties, "
            f"{sum(len(rules) for rules in self._schema.values())} rules, "
            f"{self.evaluation_mode} evaluation"
        )

    @staticmethod
    def _check_schema(schema: Any) -> Dict[str, Dict[str, Any]]:
        """Validate schema shape and return a private copy."""
        if not isinstance(schema, Mapping):
            raise TypeError(f"Schema must be a mapping, got {type(schema).__name__}")

        checked = {}
        for property, rules in schema.items():
            if not isinstance(property, str):
                raise TypeError(f"Schema property names must be strings, got {property!r}")
            if property == IS_VALID:
                raise ValueError(f"'{IS_VALID}' is reserved and cannot be used as a property name")
            if not isinstance(rules, Mapping):
                raise TypeError(
                    f"Rules for property '{property}' must be a mapping, got {type(rules).__name__}"
                )

            checked_rules = {}
            for rule_name, rule in rules.items():
                if not isinstance(rule_name, str):
                    raise TypeError(
                        f"Rule names must be strings, got {rule_name!r} under '{property}'"
                    )
                if rule_name == IS_VALID:
                    raise ValueError(
                        f"'{IS_VALID}' is reserved and cannot be used as a rule name (under '{property}')"
                    )
                if not callable(getattr(rule, "is_valid", None)):
                    raise TypeError(
                        f"Rule '{property}.{rule_name}' must provide an is_valid() method, "
                        f"got {type(rule).__name__}"
                    )
                checked_rules[rule_name] = rule
            checked[property] = checked_rules

        return checked

    def _build_initial_validation(self) -> ValidationReport:
        """Report of the right shape with every boolean False."""
        properties = {
            property: PropertyReport({rule_name: False for rule_name in rules}, is_valid=False)
            for property, rules in self._schema.items()
        }
        return ValidationReport(properties, is_valid=False)

    @property
    def properties(self) -> Tuple[str, ...]:
        """Property names in schema order."""
        return tuple(self._schema)

    def rule_names(self, property: str) -> Tuple[str, ...]:
        """Rule names under a property, in schema order."""
        return tuple(self._schema[property])

    async def validate(self, target: Any) -> ValidationReport:
        """
        Evaluate every rule of the schema against a target.

        Properties absent from the target are passed to their rules as None.
        Properties not in the schema are ignored.

        Args:
            target: Mapping or object whose properties are read by name

        Returns:
            A new ValidationReport; never shared with any other call

        Raises:
            Exception: Whatever a rule raises, unchanged. No partial report
                is produced.
        """
        start = time.perf_counter()

        # Rules that read settings (e.g. remote timeouts) see this engine's config
        token = set_active_config(self.config_loader)
        try:
            if self.evaluation_mode == "concurrent":
                outcomes = await self._evaluate_concurrently(target)
            else:
                outcomes = await self._evaluate_sequentially(target)
        finally:
            reset_active_config(token)

        report = ValidationReport.from_properties(
            {property: PropertyReport.from_outcomes(results) for property, results in outcomes.items()}
        )

        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.debug(f"Validation complete: is_valid={report.is_valid} in {elapsed_ms}ms")

        return report

    async def _evaluate_sequentially(self, target: Any) -> Dict[str, Dict[str, bool]]:
        """Await each rule in schema order."""
        outcomes = {}
        for property, rules in self._schema.items():
            value = lookup(target, property)
            results = {}
            for rule_name, rule in rules.items():
                results[rule_name] = await self._evaluate_rule(target, property, rule_name, rule, value)
            outcomes[property] = results
        return outcomes

    async def _evaluate_concurrently(self, target: Any) -> Dict[str, Dict[str, bool]]:
        """
        Run every rule as its own task; results are placed back in schema order.

        If any rule raises, the remaining tasks are cancelled and awaited
        before the error propagates, so no rule outlives the failed pass.
        """
        keys: List[Tuple[str, str]] = []
        tasks = []
        for property, rules in self._schema.items():
            value = lookup(target, property)
            for rule_name, rule in rules.items():
                keys.append((property, rule_name))
                tasks.append(asyncio.ensure_future(
                    self._evaluate_rule(target, property, rule_name, rule, value)
                ))

        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        outcomes: Dict[str, Dict[str, bool]] = {property: {} for property in self._schema}
        for (property, rule_name), passed in zip(keys, results):
            outcomes[property][rule_name] = passed
        return outcomes

    async def _evaluate_rule(self, target: Any, property: str, rule_name: str, rule: Any, value: Any) -> bool:
        """
        Run a single rule with timing.

        Timing is wall-clock from the rule's first step to its result. In
        concurrent mode it also covers time other rules held the event loop,
        so a slow-rule warning there may be caused by a sibling.
        """
        start = time.perf_counter()
        try:
            passed = rule.is_valid(target, property, value)
            if inspect.isawaitable(passed):
                passed = await passed
        except Exception as e:
            logger.error(f"Rule '{property}.{rule_name}' raised {type(e).__name__}: {e}")
            raise
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)

        if elapsed_ms > self.slow_rule_threshold_ms:
            logger.warning(f"Slow rule '{property}.{rule_name}': {elapsed_ms}ms")

        return bool(passed)


def create_validator(schema: Schema, config: Optional[ConfigLoader] = None) -> ValidationEngine:
    """
    Create a validator for a schema.

    Example:
        validator = create_validator({"email": {"is_valid_email": is_email()}})
        validator.initial_validation["is_valid"]    # False
        report = await validator.validate({"email": "email@domain.com"})
        report.is_valid                              # True

    Args:
        schema: Mapping of property name -> mapping of rule name -> Rule
        config: Optional ConfigLoader (default: bundled defaults)

    Returns:
        ValidationEngine exposing initial_validation and validate()
    """
    return ValidationEngine(schema, config=config)
