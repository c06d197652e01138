"""Unit tests for task title derivation, reward coercion and the status machine."""

from __future__ import annotations

from decimal import Decimal

import pytest

from swadrive.db.enums import TaskStatus
from swadrive.tasks.service import (
    DEFAULT_TITLE,
    MAX_REWARD,
    VALID_TRANSITIONS,
    InvalidRewardError,
    InvalidTransitionError,
    coerce_reward,
    derive_title,
    validate_transition,
)


class TestDeriveTitle:
    def test_category_and_problem(self):
        assert derive_title("Plumbing", "Leaking tap") == "Plumbing - Leaking tap"

    def test_component_when_no_problem(self):
        assert derive_title("Car", None, "Battery") == "Car - Battery"

    def test_problem_wins_over_component(self):
        assert derive_title("Car", "Flat tyre", "Wheel") == "Car - Flat tyre"

    def test_missing_category(self):
        assert derive_title(None, "Leaking tap") == "Service - Leaking tap"

    def test_category_only(self):
        assert derive_title("Electrician") == "Electrician - General Help"

    def test_nothing_given(self):
        assert derive_title() == DEFAULT_TITLE == "Service - General Help"

    def test_empty_strings_count_as_missing(self):
        assert derive_title("", "", "") == "Service - General Help"

    def test_explicit_title_when_no_structured_fields(self):
        assert derive_title(title="  Fix my fence  ") == "Fix my fence"

    def test_structured_fields_win_over_title(self):
        assert derive_title("Garden", "Mowing", title="Ignored") == "Garden - Mowing"


class TestCoerceReward:
    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "Infinity", True, False])
    def test_unusable_values_become_zero(self, value):
        assert coerce_reward(value) == Decimal("0")

    def test_number(self):
        assert coerce_reward(250) == Decimal("250.00")

    def test_float(self):
        assert coerce_reward(99.5) == Decimal("99.50")

    def test_numeric_string(self):
        assert coerce_reward(" 120.5 ") == Decimal("120.50")

    def test_rounds_to_cents(self):
        assert coerce_reward("10.004") == Decimal("10.00")
        assert coerce_reward("10.006") == Decimal("10.01")

    def test_zero_allowed(self):
        assert coerce_reward(0) == Decimal("0.00")

    def test_negative_rejected(self):
        with pytest.raises(InvalidRewardError):
            coerce_reward(-1)

    def test_negative_string_rejected(self):
        with pytest.raises(InvalidRewardError):
            coerce_reward("-0.01")

    def test_ceiling_allowed(self):
        assert coerce_reward("99999999.99") == MAX_REWARD

    @pytest.mark.parametrize("value", ["100000000", 99999999999, 1e30, "1e30"])
    def test_above_ceiling_rejected(self, value):
        with pytest.raises(InvalidRewardError, match="exceed"):
            coerce_reward(value)


class TestTaskStateMachine:
    def test_valid_transitions_structure(self):
        assert set(VALID_TRANSITIONS) == set(TaskStatus)

    def test_open_to_assigned(self):
        validate_transition(TaskStatus.OPEN, TaskStatus.ASSIGNED)

    def test_assigned_to_completed(self):
        validate_transition(TaskStatus.ASSIGNED, TaskStatus.COMPLETED)

    def test_completed_is_terminal(self):
        assert VALID_TRANSITIONS[TaskStatus.COMPLETED] == []

    def test_cannot_skip_assigned(self):
        with pytest.raises(InvalidTransitionError, match="Invalid transition"):
            validate_transition(TaskStatus.OPEN, TaskStatus.COMPLETED)

    def test_cannot_go_backwards(self):
        with pytest.raises(InvalidTransitionError, match="Invalid transition"):
            validate_transition(TaskStatus.ASSIGNED, TaskStatus.OPEN)

    def test_self_transition_rejected(self):
        with pytest.raises(InvalidTransitionError):
            validate_transition(TaskStatus.COMPLETED, TaskStatus.COMPLETED)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            validate_transition(TaskStatus.COMPLETED, TaskStatus.OPEN)
