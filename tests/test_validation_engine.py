"""
Tests for the validation engine

Covers create_validator(), initial_validation and validate() in both
evaluation modes.
"""
import asyncio

import pytest

from form_validation import (
    FunctionRule,
    Rule,
    ValidationEngine,
    ValidationReport,
    create_validator,
    is_email,
    is_equal_to_property,
    is_number_equal_to,
    is_one_of,
    is_password,
)


@pytest.fixture
def signup_schema():
    """Schema for a small signup form."""
    return {
        "email": {"is_valid_email": is_email()},
        "password": {"is_strong": is_password()},
        "confirmation": {"matches": is_equal_to_property("password")},
        "role": {"is_valid_role": is_one_of(["USER", "ADMIN"])},
    }


@pytest.fixture
def valid_signup():
    return {
        "email": "email@domain.com",
        "password": "Aa1!aaaa",
        "confirmation": "Aa1!aaaa",
        "role": "USER",
    }


class AlwaysRaises(Rule):
    """Badly-behaved rule used to check failure propagation."""

    async def is_valid(self, target, property, value):
        raise RuntimeError("remote check exploded")


class CountingRule(Rule):
    """Rule recording every call it receives."""

    def __init__(self, result=True):
        self.result = result
        self.calls = []

    async def is_valid(self, target, property, value):
        self.calls.append((property, value))
        await asyncio.sleep(0)
        return self.result


def assert_aggregates_hold(report, schema):
    """Check both aggregate invariants of a report against its schema."""
    for property, rules in schema.items():
        assert report[property]["is_valid"] == all(report[property][name] for name in rules)
    assert report["is_valid"] == all(report[property]["is_valid"] for property in schema)


class TestCreateValidator:
    """Test engine construction and schema checking."""

    def test_returns_engine(self, signup_schema):
        """Test that create_validator returns a ValidationEngine."""
        validator = create_validator(signup_schema)
        assert isinstance(validator, ValidationEngine)

    def test_schema_must_be_mapping(self):
        """Test that a non-mapping schema fails at construction."""
        with pytest.raises(TypeError):
            create_validator([("email", {"is_valid_email": is_email()})])

    def test_rules_must_be_mapping(self):
        """Test that a property whose rules are not a mapping fails."""
        with pytest.raises(TypeError):
            create_validator({"email": [is_email()]})

    def test_rule_must_have_is_valid(self):
        """Test that a value without is_valid() is rejected."""
        with pytest.raises(TypeError):
            create_validator({"email": {"is_valid_email": "not a rule"}})

    def test_property_names_must_be_strings(self):
        with pytest.raises(TypeError):
            create_validator({1: {"is_number": is_number_equal_to(1)}})

    def test_reserved_property_name(self):
        """Test that 'is_valid' cannot be a property name."""
        with pytest.raises(ValueError):
            create_validator({"is_valid": {"is_email": is_email()}})

    def test_reserved_rule_name(self):
        """Test that 'is_valid' cannot be a rule name."""
        with pytest.raises(ValueError):
            create_validator({"email": {"is_valid": is_email()}})

    def test_duck_typed_rule_accepted(self):
        """Test that any object with an is_valid() method counts as a rule."""

        class Anything:
            async def is_valid(self, target, property, value):
                return True

        validator = create_validator({"name": {"anything": Anything()}})
        assert validator.rule_names("name") == ("anything",)

    def test_schema_is_copied(self, signup_schema):
        """Test that mutating the caller's schema afterwards has no effect."""
        validator = create_validator(signup_schema)
        signup_schema["extra"] = {"is_valid_email": is_email()}
        signup_schema["email"]["another"] = is_email()

        assert validator.properties == ("email", "password", "confirmation", "role")
        assert validator.rule_names("email") == ("is_valid_email",)


class TestInitialValidation:
    """Test the all-False initial report."""

    def test_every_boolean_false(self, signup_schema):
        validator = create_validator(signup_schema)
        initial = validator.initial_validation

        assert initial["is_valid"] is False
        for property, rules in signup_schema.items():
            assert initial[property]["is_valid"] is False
            for rule_name in rules:
                assert initial[property][rule_name] is False

    def test_shape_matches_validate(self, signup_schema, valid_signup):
        """Test that initial_validation has exactly the keys of a real report."""
        validator = create_validator(signup_schema)
        report = asyncio.run(validator.validate(valid_signup))
        initial = validator.initial_validation

        assert list(initial) == list(report)
        for property in signup_schema:
            assert list(initial[property]) == list(report[property])

    def test_property_without_rules(self):
        """Test that a property with no rules still starts invalid."""
        validator = create_validator({"notes": {}})
        assert validator.initial_validation.to_dict() == {
            "notes": {"is_valid": False},
            "is_valid": False,
        }


class TestValidate:
    """Test validate() outcomes."""

    @pytest.mark.asyncio
    async def test_valid_email(self):
        validator = create_validator({"email": {"is_valid_email": is_email()}})
        report = await validator.validate({"email": "email@domain.com"})

        assert report["is_valid"] is True
        assert report["email"]["is_valid"] is True
        assert report["email"]["is_valid_email"] is True

    @pytest.mark.asyncio
    async def test_email_without_top_level_domain(self):
        validator = create_validator({"email": {"is_valid_email": is_email()}})
        report = await validator.validate({"email": "email@domain"})

        assert report["is_valid"] is False
        assert report["email"]["is_valid_email"] is False

    @pytest.mark.asyncio
    async def test_number_equal_to(self):
        validator = create_validator({"answer": {"is_valid_answer": is_number_equal_to(42)}})

        report = await validator.validate({"answer": 42})
        assert report == {"answer": {"is_valid_answer": True, "is_valid": True}, "is_valid": True}

        report = await validator.validate({"answer": "42"})
        assert report["answer"]["is_valid_answer"] is False
        assert report.is_valid is False

    @pytest.mark.asyncio
    async def test_password_confirmation(self):
        validator = create_validator({
            "password": {"is_strong": is_password()},
            "confirmation": {"matches": is_equal_to_property("password")},
        })

        report = await validator.validate({"password": "Aa1!aaaa", "confirmation": "Aa1!aaaa"})
        assert report["password"]["is_strong"] is True
        assert report["confirmation"]["matches"] is True
        assert report.is_valid is True

        report = await validator.validate({"password": "Aa1!aaaa", "confirmation": "Aa1!aaab"})
        assert report["password"]["is_strong"] is True
        assert report["confirmation"]["matches"] is False
        assert report["is_valid"] is False

    @pytest.mark.asyncio
    async def test_role_enumeration(self):
        validator = create_validator({"role": {"is_valid_role": is_one_of(["USER", "ADMIN"])}})

        assert (await validator.validate({"role": "GUEST"}))["role"]["is_valid_role"] is False
        assert (await validator.validate({"role": "ADMIN"}))["role"]["is_valid_role"] is True

    @pytest.mark.asyncio
    async def test_absent_property_reported(self, signup_schema):
        """Test that a schema property missing from the target is still reported."""
        validator = create_validator(signup_schema)
        report = await validator.validate({"email": "email@domain.com"})

        assert "role" in report
        assert report["role"]["is_valid_role"] is False
        assert report["role"]["is_valid"] is False
        assert report.is_valid is False

    @pytest.mark.asyncio
    async def test_absent_property_passed_as_none(self):
        rule = CountingRule()
        validator = create_validator({"missing": {"seen": rule}})

        await validator.validate({})

        assert rule.calls == [("missing", None)]

    @pytest.mark.asyncio
    async def test_extra_target_properties_ignored(self):
        validator = create_validator({"email": {"is_valid_email": is_email()}})
        report = await validator.validate({"email": "email@domain.com", "unrelated": object()})

        assert report.properties == ("email",)
        assert "unrelated" not in report

    @pytest.mark.asyncio
    async def test_object_target(self):
        """Test that non-mapping targets are read by attribute."""

        class Form:
            email = "email@domain.com"

        validator = create_validator({"email": {"is_valid_email": is_email()}})
        report = await validator.validate(Form())

        assert report.is_valid is True

    @pytest.mark.asyncio
    async def test_property_without_rules_is_valid(self):
        validator = create_validator({"notes": {}, "email": {"is_valid_email": is_email()}})
        report = await validator.validate({"email": "email@domain.com"})

        assert report["notes"]["is_valid"] is True
        assert report.is_valid is True

    @pytest.mark.asyncio
    async def test_empty_schema_is_valid(self):
        validator = create_validator({})
        report = await validator.validate({"anything": 1})

        assert report.to_dict() == {"is_valid": True}

    @pytest.mark.asyncio
    async def test_each_rule_evaluated_once(self):
        first, second = CountingRule(), CountingRule(result=False)
        validator = create_validator({"a": {"first": first}, "b": {"second": second}})

        await validator.validate({"a": 1, "b": 2})

        assert first.calls == [("a", 1)]
        assert second.calls == [("b", 2)]

    @pytest.mark.asyncio
    async def test_non_bool_result_coerced(self):
        validator = create_validator({"name": {"truthy": FunctionRule(lambda t, p, v: v)}})
        report = await validator.validate({"name": "alice"})

        assert report["name"]["truthy"] is True

    @pytest.mark.asyncio
    async def test_aggregates(self, signup_schema, valid_signup):
        """Test both aggregate invariants over valid and invalid targets."""
        validator = create_validator(signup_schema)
        targets = [
            valid_signup,
            {**valid_signup, "email": "nope"},
            {**valid_signup, "confirmation": "other", "role": "GUEST"},
            {},
        ]

        for target in targets:
            report = await validator.validate(target)
            assert_aggregates_hold(report, signup_schema)

    @pytest.mark.asyncio
    async def test_idempotent(self, signup_schema, valid_signup):
        """Test that two calls yield equal but distinct reports."""
        validator = create_validator(signup_schema)

        first = await validator.validate(valid_signup)
        second = await validator.validate(valid_signup)

        assert first == second
        assert first is not second
        assert first["email"] is not second["email"]

    @pytest.mark.asyncio
    async def test_report_independent_of_initial(self, signup_schema, valid_signup):
        validator = create_validator(signup_schema)
        report = await validator.validate(valid_signup)

        assert report is not validator.initial_validation
        assert validator.initial_validation.is_valid is False

    @pytest.mark.asyncio
    async def test_report_is_read_only(self, signup_schema, valid_signup):
        validator = create_validator(signup_schema)
        report = await validator.validate(valid_signup)

        with pytest.raises(TypeError):
            report["is_valid"] = False
        with pytest.raises(TypeError):
            report["email"]["is_valid_email"] = False

    @pytest.mark.asyncio
    async def test_failed_rules(self, signup_schema, valid_signup):
        validator = create_validator(signup_schema)
        report = await validator.validate({**valid_signup, "role": "GUEST"})

        assert report.failed_rules() == {"role": ("is_valid_role",)}

    @pytest.mark.asyncio
    async def test_rule_failure_propagates(self):
        """Test that a raising rule aborts validate() instead of producing a report."""
        validator = create_validator({
            "email": {"is_valid_email": is_email()},
            "username": {"is_unique": AlwaysRaises()},
        })

        with pytest.raises(RuntimeError, match="remote check exploded"):
            await validator.validate({"email": "email@domain.com", "username": "alice"})

    @pytest.mark.asyncio
    async def test_concurrent_validations_independent(self, signup_schema, valid_signup):
        """Test that overlapping validate() calls on one engine do not interfere."""
        validator = create_validator(signup_schema)
        invalid = {**valid_signup, "email": "email@domain"}

        reports = await asyncio.gather(
            validator.validate(valid_signup),
            validator.validate(invalid),
            validator.validate(valid_signup),
        )

        assert [report.is_valid for report in reports] == [True, False, True]


class TestConcurrentEvaluation:
    """Test the concurrent evaluation mode."""

    def test_mode_from_config(self, signup_schema, concurrent_config):
        validator = create_validator(signup_schema, config=concurrent_config)
        assert validator.evaluation_mode == "concurrent"

    @pytest.mark.asyncio
    async def test_same_reports_as_sequential(self, signup_schema, valid_signup, concurrent_config):
        sequential = create_validator(signup_schema)
        concurrent = create_validator(signup_schema, config=concurrent_config)

        for target in (valid_signup, {**valid_signup, "confirmation": "x"}, {}):
            assert await sequential.validate(target) == await concurrent.validate(target)

    @pytest.mark.asyncio
    async def test_rules_overlap(self, concurrent_config):
        """Test that rules actually run at the same time in concurrent mode."""
        running = 0
        peak = 0

        async def slow(target, property, value):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return True

        validator = create_validator(
            {"a": {"slow": FunctionRule(slow)}, "b": {"slow": FunctionRule(slow)}},
            config=concurrent_config,
        )
        report = await validator.validate({})

        assert report.is_valid is True
        assert peak == 2

    @pytest.mark.asyncio
    async def test_rule_failure_propagates(self, concurrent_config):
        validator = create_validator({"username": {"is_unique": AlwaysRaises()}}, config=concurrent_config)

        with pytest.raises(RuntimeError):
            await validator.validate({"username": "alice"})

    @pytest.mark.asyncio
    async def test_failure_cancels_remaining_rules(self, concurrent_config, caplog):
        """Test that sibling rules stop when one rule raises."""
        finished = []

        async def slow(target, property, value):
            await asyncio.sleep(0.05)
            finished.append(property)
            return True

        async def fails_later(target, property, value):
            await asyncio.sleep(0.01)
            raise ValueError("second failure")

        validator = create_validator(
            {
                "username": {"is_unique": AlwaysRaises()},
                "email": {"slow": FunctionRule(slow)},
                "nickname": {"fails_later": FunctionRule(fails_later)},
            },
            config=concurrent_config,
        )

        with pytest.raises(RuntimeError, match="remote check exploded"):
            await validator.validate({})
        await asyncio.sleep(0.1)

        assert finished == []
        assert "second failure" not in caplog.text


class TestReportValue:
    """Test ValidationReport conversions."""

    @pytest.mark.asyncio
    async def test_to_dict(self):
        validator = create_validator({"answer": {"is_valid_answer": is_number_equal_to(42)}})
        report = await validator.validate({"answer": 41})

        assert isinstance(report, ValidationReport)
        assert report.to_dict() == {
            "answer": {"is_valid_answer": False, "is_valid": False},
            "is_valid": False,
        }
        assert type(report.to_dict()["answer"]) is dict
