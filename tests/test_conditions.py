import logging
from types import SimpleNamespace

import pytest

from academy.services.conditions import (
    ConditionKind,
    KnownCondition,
    UnknownCondition,
    is_eligible,
    parse_condition,
)


def _student(xp_total: int = 0):
    return SimpleNamespace(id="student-1", xp_total=xp_total)


def test_parse_known_condition():
    parsed = parse_condition({"type": "lessons_completed", "value": 10})
    assert parsed == KnownCondition(kind=ConditionKind.LESSONS_COMPLETED, value=10)


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "moon_phase", "value": 1},
        {"type": "lessons_completed", "value": "ten"},
        {"type": "lessons_completed", "value": True},
        {"type": "lessons_completed"},
        {"value": 3},
        "lessons_completed>=1",
        None,
    ],
)
def test_parse_malformed_condition_is_unknown(raw):
    parsed = parse_condition(raw)
    assert isinstance(parsed, UnknownCondition)
    assert parsed.raw == raw
    assert parsed.problem


def test_threshold_is_inclusive():
    condition = {"type": "quizzes_passed", "value": 3}
    assert is_eligible(_student(), condition, {"quizzes_passed": 3})
    assert is_eligible(_student(), condition, {"quizzes_passed": 4})
    assert not is_eligible(_student(), condition, {"quizzes_passed": 2})


def test_missing_fact_counts_as_zero():
    assert not is_eligible(_student(), {"type": "certificates_earned", "value": 1}, {})
    assert is_eligible(_student(), {"type": "certificates_earned", "value": 0}, {})


def test_xp_total_prefers_fact_over_stored_total():
    condition = {"type": "xp_total", "value": 500}
    assert is_eligible(_student(xp_total=0), condition, {"xp_total": 500})
    assert not is_eligible(_student(xp_total=900), condition, {"xp_total": 499})


def test_xp_total_falls_back_to_student():
    condition = {"type": "xp_total", "value": 500}
    assert is_eligible(_student(xp_total=650), condition, {})
    assert not is_eligible(_student(xp_total=10), condition, {})


def test_boolean_fact_counts_as_one():
    condition = {"type": "perfect_attendance_month", "value": 1}
    assert is_eligible(_student(), condition, {"perfect_attendance_month": True})
    assert not is_eligible(_student(), condition, {"perfect_attendance_month": False})


def test_unknown_type_is_ineligible_and_logged(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="academy.services.conditions"):
        result = is_eligible(_student(), {"type": "moon_phase", "value": 1}, {"moon_phase": 99})

    assert result is False
    assert "moon_phase" in caplog.text


def test_non_numeric_fact_is_ineligible(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="academy.services.conditions"):
        result = is_eligible(_student(), {"type": "lessons_completed", "value": 1}, {"lessons_completed": "many"})

    assert result is False
    assert "not a number" in caplog.text


def test_accepts_parsed_condition():
    condition = KnownCondition(kind=ConditionKind.EARLY_SUBMISSION, value=1)
    assert is_eligible(_student(), condition, {"early_submission": 1})
