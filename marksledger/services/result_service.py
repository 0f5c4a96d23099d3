# marksledger/services/result_service.py
"""Per-student result computation (the "preview" read path)."""
from dataclasses import dataclass
from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from .catalog_service import CatalogSubject, CatalogResolver
from .component_config_service import ComponentConfig, ComponentConfigRegistry
from .grading_rules import RuleTables, load_rule_tables, resolve, grade_of, gpa_of, round_half_up
from .marks_service import MarksStore
from ..core.exceptions import ConfigError
from ..models.exam import GradingScheme, OverallMethod
from ..models.marks import Mark
from ..schemas.results import Result, SubjectResult

logger = logging.getLogger(__name__)

PASS = "PASS"
FAIL = "FAIL"
INCOMPLETE = "INCOMPLETE"


@dataclass
class SubjectTotals:
    subject_id: UUID
    subject_name: str
    total_obtained: float = 0.0
    total_full: float = 0.0
    total_credit: float = 0.0
    any_absent: bool = False
    any_missing: bool = False


def aggregate_subject(
    subject: CatalogSubject,
    enabled: Dict[str, ComponentConfig],
    marks: Dict[str, Mark]
) -> Optional[SubjectTotals]:
    """Sum the subject's enabled components; None when none of them is offered in the exam"""
    totals = SubjectTotals(subject_id=subject.subject_id, subject_name=subject.subject_name)
    offered = False

    for component in subject.components:
        cfg = enabled.get(component.component_code)
        if cfg is None:
            continue
        offered = True

        totals.total_full += cfg.full_marks
        totals.total_credit += component.credit_hour or 0.0

        mark = marks.get(component.component_code)
        if mark is not None and mark.is_absent:
            totals.any_absent = True
            totals.any_missing = True
        elif mark is None or mark.marks_obtained is None:
            totals.any_missing = True
        else:
            totals.total_obtained += float(mark.marks_obtained)

    return totals if offered else None


def grade_subject(totals: SubjectTotals, rules: RuleTables) -> SubjectResult:
    percent = 0.0
    if totals.total_full > 0:
        percent = totals.total_obtained / totals.total_full * 100
    percent = round_half_up(percent)

    gpa = gpa_of(resolve(rules.subject_gpa, percent))
    grade = grade_of(resolve(rules.subject_grade, percent))

    if totals.any_missing:
        status = INCOMPLETE
    elif gpa <= 0:
        status = FAIL
    else:
        status = PASS

    return SubjectResult(
        subject_id=totals.subject_id,
        subject_name=totals.subject_name,
        total_obtained=round_half_up(totals.total_obtained),
        total_full=round_half_up(totals.total_full),
        total_credit=round_half_up(totals.total_credit),
        percent=percent,
        grade=grade,
        gpa=round_half_up(gpa),
        any_absent=totals.any_absent,
        status=status
    )


def overall_gpa(subjects: List[SubjectResult], method: OverallMethod) -> float:
    """Average GPA over subjects that are not incomplete"""
    graded = [s for s in subjects if s.status != INCOMPLETE]
    if not graded:
        return 0.0

    if method == OverallMethod.CREDIT_WEIGHTED:
        weighted_sum = 0.0
        credit_sum = 0.0
        for subject in graded:
            # a subject without credit data still counts once
            credit = subject.total_credit if subject.total_credit > 0 else 1.0
            weighted_sum += subject.gpa * credit
            credit_sum += credit
        return round_half_up(weighted_sum / credit_sum)

    return round_half_up(sum(s.gpa for s in graded) / len(graded))


class ResultComputer:
    """
    Turns the current marks of one enrollment into a graded result.

    Pure read: no writes, no transaction. With unchanged marks and
    configuration two calls return identical results.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.registry = ComponentConfigRegistry(db)
        self.marks = MarksStore(db)
        self.catalog = CatalogResolver(db)

    async def compute(self, exam_id: UUID, enrollment_id: UUID) -> Result:
        exam = await self.registry.get_exam(exam_id)
        if not exam.grading_scheme_id:
            raise ConfigError("Exam grading scheme not set")

        result = await self.db.execute(
            select(GradingScheme).where(GradingScheme.id == exam.grading_scheme_id)
        )
        scheme = result.scalar_one_or_none()
        method = scheme.overall_method if scheme is not None else OverallMethod.SIMPLE_AVG
        rules = await load_rule_tables(self.db, exam.grading_scheme_id)

        enrollment = await self.marks.get_enrollment(enrollment_id)
        subject_ids = await self.marks.subject_ids_for(enrollment)
        subjects = await self.catalog.subjects_by_ids(subject_ids)

        enabled = await self.registry.enabled_for(exam_id)
        marks = await self.marks.marks_for(exam_id, enrollment_id)

        subject_results = []
        for subject in subjects:
            totals = aggregate_subject(subject, enabled, marks)
            if totals is not None:
                subject_results.append(grade_subject(totals, rules))

        subject_results.sort(key=lambda s: (s.subject_name.casefold(), s.subject_name, str(s.subject_id)))

        gpa = overall_gpa(subject_results, method)
        final_grade = grade_of(resolve(rules.final_grade, gpa))

        # incomplete subjects do not fail the overall result
        failed = any(s.status == FAIL for s in subject_results)

        logger.debug(f"Computed result for enrollment {enrollment_id} in exam {exam_id}: gpa={gpa}")
        return Result(
            exam_id=exam_id,
            enrollment_id=enrollment_id,
            overall_method=method.value,
            subjects=subject_results,
            overall_gpa=gpa,
            final_grade=final_grade,
            result_status=FAIL if failed else PASS
        )
