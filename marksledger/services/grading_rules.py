# marksledger/services/grading_rules.py
"""
Grading rule evaluation.

Rules of one type form closed-lower / open-upper bands keyed by ``min_value``.
Evaluated over a list sorted by ``min_value`` descending, the first satisfied
threshold wins, so a value sitting exactly on a boundary lands in the higher
band (ties favor the higher grade band). A value below every threshold falls
back to the lowest band.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..models.exam import GradingRule, RuleType

NO_GRADE = "NG"


def resolve(rules: Sequence[GradingRule], value: float) -> Optional[GradingRule]:
    """Pick the band for ``value`` from rules pre-sorted by min_value descending"""
    for rule in rules:
        if value >= float(rule.min_value):
            return rule
    return rules[-1] if rules else None


def grade_of(rule: Optional[GradingRule]) -> str:
    return rule.grade if rule is not None and rule.grade else NO_GRADE


def gpa_of(rule: Optional[GradingRule]) -> float:
    return float(rule.gpa) if rule is not None and rule.gpa is not None else 0.0


def round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def sort_rules(rules: Sequence[GradingRule]) -> List[GradingRule]:
    return sorted(rules, key=lambda r: float(r.min_value), reverse=True)


@dataclass
class RuleTables:
    subject_gpa: List[GradingRule] = field(default_factory=list)
    subject_grade: List[GradingRule] = field(default_factory=list)
    final_grade: List[GradingRule] = field(default_factory=list)

    @classmethod
    def from_rules(cls, rules: Sequence[GradingRule]) -> "RuleTables":
        def of_type(rule_type):
            return sort_rules([r for r in rules if r.rule_type == rule_type])

        return cls(
            subject_gpa=of_type(RuleType.SUBJECT_GPA),
            subject_grade=of_type(RuleType.SUBJECT_GRADE),
            final_grade=of_type(RuleType.FINAL_GRADE),
        )


async def load_rule_tables(db: AsyncSession, scheme_id: UUID) -> RuleTables:
    result = await db.execute(select(GradingRule).where(GradingRule.scheme_id == scheme_id))
    return RuleTables.from_rules(result.scalars().all())
