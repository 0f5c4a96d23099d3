# marksledger/services/ledger/planner.py
"""
Validation of parsed rows into an ImportPlan.

Nothing in this module touches the database: the importer loads an
ImportContext once, and every row is checked against it in document order.
A row-level problem becomes an entry in ``ImportPlan.errors`` and the cell or
row is simply left out of the plan.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID
import logging

from .cells import (
    CompulsoryMarkCell, GridRow, OptionalCodeCell, OptionalMarkCell, TabularRow,
    to_bool, to_date, to_number
)
from ..component_config_service import ComponentConfig
from ..marks_service import not_enabled_error, range_error
from ...schemas.imports import ImportRowError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentRef:
    enrollment_id: UUID
    student_id: UUID


@dataclass(frozen=True)
class OptionalSubject:
    component_code: str
    subject_id: UUID
    group_name: str
    full_marks: float


@dataclass
class ImportContext:
    exam_id: UUID
    enabled: Dict[str, ComponentConfig]
    enrollments: Dict[str, EnrollmentRef]
    # grid ledgers only
    compulsory_codes: List[str] = field(default_factory=list)
    optional_codes: Dict[str, OptionalSubject] = field(default_factory=dict)


@dataclass(frozen=True)
class PlannedMark:
    row_number: int
    enrollment_id: UUID
    component_code: str
    marks_obtained: Optional[float]
    is_absent: bool = False


@dataclass(frozen=True)
class PlannedBackfill:
    student_id: UUID
    full_name: Optional[str] = None
    regd_no: Optional[str] = None
    dob: Optional[date] = None

    def values(self) -> Dict[str, object]:
        """Only the fields the sheet actually filled in"""
        values = {"full_name": self.full_name, "regd_no": self.regd_no, "dob": self.dob}
        return {key: value for key, value in values.items() if value}


@dataclass
class ImportPlan:
    total_rows: int = 0
    marks: List[PlannedMark] = field(default_factory=list)
    choices: Dict[UUID, List[Tuple[str, UUID]]] = field(default_factory=dict)
    backfills: List[PlannedBackfill] = field(default_factory=list)
    errors: List[ImportRowError] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.marks)

    @property
    def skipped(self) -> int:
        return len(self.errors)

    def reject(self, row_number: int, reason: str):
        logger.debug(f"Row {row_number} skipped: {reason}")
        self.errors.append(ImportRowError(row=row_number, reason=reason))


def _checked_mark(
    plan: ImportPlan,
    row_number: int,
    ref: EnrollmentRef,
    code: str,
    value: float,
    context: ImportContext
) -> None:
    cfg = context.enabled.get(code)
    if cfg is None:
        plan.reject(row_number, not_enabled_error(code))
        return
    reason = range_error(code, value, cfg.full_marks)
    if reason:
        plan.reject(row_number, reason)
        return
    plan.marks.append(PlannedMark(row_number, ref.enrollment_id, code, value))


def plan_tabular(rows: Iterable[TabularRow], context: ImportContext) -> ImportPlan:
    plan = ImportPlan()
    for row in rows:
        plan.total_rows += 1

        if not row.symbol_no or not row.component_code:
            plan.reject(row.row_number, "Missing symbol_no or component_code")
            continue

        ref = context.enrollments.get(row.symbol_no)
        if ref is None:
            plan.reject(row.row_number, f"No enrollment found for symbol_no {row.symbol_no} in this exam context")
            continue

        code = row.component_code
        cfg = context.enabled.get(code)
        if cfg is None:
            plan.reject(row.row_number, not_enabled_error(code))
            continue

        if to_bool(row.is_absent):
            plan.marks.append(PlannedMark(row.row_number, ref.enrollment_id, code, None, True))
            continue

        value = to_number(row.marks_obtained)
        if value is None:
            plan.reject(row.row_number, f"marks_obtained missing for symbol_no {row.symbol_no}, code {code}")
            continue

        reason = range_error(code, value, cfg.full_marks)
        if reason:
            plan.reject(row.row_number, reason)
            continue
        plan.marks.append(PlannedMark(row.row_number, ref.enrollment_id, code, value))

    return plan


def _backfill(row: GridRow, ref: EnrollmentRef) -> Optional[PlannedBackfill]:
    identity = row.identity
    backfill = PlannedBackfill(
        student_id=ref.student_id,
        full_name=identity.full_name or None,
        regd_no=identity.regd_no or None,
        dob=to_date(identity.dob)
    )
    return backfill if backfill.values() else None


def plan_grid(rows: Iterable[GridRow], context: ImportContext) -> ImportPlan:
    plan = ImportPlan()
    for row in rows:
        plan.total_rows += 1
        symbol_no = row.identity.symbol_no

        if not symbol_no:
            plan.reject(row.row_number, "Missing symbol_no")
            continue

        ref = context.enrollments.get(symbol_no)
        if ref is None:
            plan.reject(row.row_number, f"No enrollment found for symbol_no {symbol_no} in this exam context")
            continue

        backfill = _backfill(row, ref)
        if backfill is not None:
            plan.backfills.append(backfill)

        choices: List[Tuple[str, UUID]] = []
        chosen: Dict[int, OptionalSubject] = {}
        invalid_code_columns = set()

        for cell in row.cells:
            if isinstance(cell, CompulsoryMarkCell):
                value = to_number(cell.value)
                if value is None:
                    if not cell.is_empty:
                        logger.debug(f"Row {row.row_number}: non-numeric mark in column {cell.column + 1} ignored")
                    continue
                if cell.position >= len(context.compulsory_codes):
                    # more compulsory columns than enabled compulsory subjects
                    continue
                code = context.compulsory_codes[cell.position]
                _checked_mark(plan, row.row_number, ref, code, value, context)

            elif isinstance(cell, OptionalCodeCell):
                if cell.is_empty:
                    continue
                subject = context.optional_codes.get(cell.code)
                if subject is None:
                    invalid_code_columns.add(cell.column)
                    plan.reject(row.row_number, f"Invalid optional code {cell.code} for {cell.group_label}")
                    continue
                chosen[cell.column] = subject
                choices.append((subject.group_name, subject.subject_id))

            elif isinstance(cell, OptionalMarkCell):
                value = to_number(cell.value)
                if value is None:
                    continue
                subject = chosen.get(cell.code_column)
                if subject is None:
                    # an invalid code is reported once, on the code cell
                    if cell.code_column not in invalid_code_columns:
                        plan.reject(row.row_number, f"Marks under {cell.group_label} without a subject code")
                    continue
                _checked_mark(plan, row.row_number, ref, subject.component_code, value, context)

        if choices:
            # the last row with a recognized code decides the enrollment's choices
            plan.choices[ref.enrollment_id] = choices

    return plan
