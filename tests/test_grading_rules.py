import pytest

from marksledger.models import GradingRule, RuleType
from marksledger.services.grading_rules import (
    NO_GRADE, RuleTables, gpa_of, grade_of, resolve, round_half_up, sort_rules
)


def make_rules(table, rule_type=RuleType.SUBJECT_GPA):
    return sort_rules([
        GradingRule(rule_type=rule_type, min_value=min_value, grade=grade, gpa=gpa)
        for min_value, grade, gpa in table
    ])


GPA_TABLE = [(0, "NG", 0.0), (80, "A", 3.6), (90, "A+", 4.0), (40, "C", 2.0)]


def test_sort_rules_orders_by_min_value_descending():
    rules = make_rules(GPA_TABLE)
    assert [r.min_value for r in rules] == [90, 80, 40, 0]


@pytest.mark.parametrize("value,expected", [
    (100, 4.0),
    (90, 4.0),
    (89.99, 3.6),
    (80, 3.6),
    (55, 2.0),
    (39.99, 0.0),
])
def test_resolve_picks_highest_satisfied_band(value, expected):
    rules = make_rules(GPA_TABLE)
    assert gpa_of(resolve(rules, value)) == expected


def test_resolve_returned_rule_is_the_highest_satisfied_threshold():
    rules = make_rules(GPA_TABLE)
    for value in [0, 12.5, 40, 79.99, 80, 95]:
        rule = resolve(rules, value)
        assert value >= rule.min_value
        assert not any(r.min_value > rule.min_value and value >= r.min_value for r in rules)


def test_value_below_every_threshold_falls_back_to_lowest_band():
    rules = make_rules([(40, "C", 2.0), (80, "A", 3.6)])
    assert resolve(rules, 10).grade == "C"


def test_missing_rules_yield_no_grade_and_zero_gpa():
    assert resolve([], 75) is None
    assert grade_of(None) == NO_GRADE
    assert gpa_of(None) == 0.0


def test_rule_without_grade_reports_no_grade():
    rule = GradingRule(rule_type=RuleType.SUBJECT_GPA, min_value=0, gpa=1.0)
    assert grade_of(rule) == NO_GRADE
    assert gpa_of(rule) == 1.0


@pytest.mark.parametrize("value,expected", [
    (2.345, 2.35),
    (2.344, 2.34),
    (3.4666666666666663, 3.47),
    (80, 80.0),
    (0.005, 0.01),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_rule_tables_split_by_type():
    rules = (
        make_rules(GPA_TABLE, RuleType.SUBJECT_GPA)
        + make_rules([(0, "NG", None), (3.6, "A+", None)], RuleType.FINAL_GRADE)
    )
    tables = RuleTables.from_rules(rules)

    assert len(tables.subject_gpa) == 4
    assert tables.subject_grade == []
    assert [r.grade for r in tables.final_grade] == ["A+", "NG"]
