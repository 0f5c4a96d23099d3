# marksledger/services/ledger_import_service.py
"""Marks ledger upload: one uploaded file, one transaction."""
from typing import Dict, Optional, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from .catalog_service import CatalogResolver
from .component_config_service import ComponentConfig, ComponentConfigRegistry
from .ledger.applier import PlanApplier
from .ledger.cells import normalize_code
from .ledger.columns import LedgerLayout
from .ledger.parser import GRID, parse_sheet
from .ledger.planner import EnrollmentRef, ImportContext, OptionalSubject, plan_grid, plan_tabular
from .ledger.template import TemplateSubject, build_ledger_template
from .ledger.workbook import read_first_sheet
from ..core.config import settings
from ..core.exceptions import ConfigError, ExamLockedError, LedgerError, LedgerFormatError
from ..models.exam import Exam
from ..models.student import Student, StudentEnrollment
from ..schemas.actor import Actor
from ..schemas.imports import ImportReport

logger = logging.getLogger(__name__)


class LedgerImporter:
    """
    Imports a marks ledger workbook into one exam.

    Row-level problems (unknown symbol, disabled code, out-of-range marks,
    unrecognized optional code) are collected in the report and never abort
    the upload. Structural problems raise and roll back everything from the
    file: missing exam, locked exam, no enabled components, unreadable
    workbook, missing required header columns, no mappable compulsory column.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.registry = ComponentConfigRegistry(db)
        self.catalog = CatalogResolver(db)

    async def import_workbook(
        self,
        exam_id: UUID,
        content: bytes,
        filename: Optional[str],
        actor: Actor
    ) -> ImportReport:
        logger.info(f"Ledger import started for exam {exam_id} by {actor.id}: {filename}")

        try:
            exam = await self.registry.get_exam(exam_id)
            if exam.is_locked:
                raise ExamLockedError("Exam is locked (published). Import not allowed.")

            enabled = await self.registry.enabled_for(exam_id)
            if not enabled:
                raise ConfigError("No enabled component configs found for this exam")

            if len(content) > settings.import_max_file_size:
                raise LedgerFormatError("Uploaded file is too large")

            sheet = read_first_sheet(content, filename)
            parsed = parse_sheet(sheet.grid)
            context = ImportContext(
                exam_id=exam_id,
                enabled=enabled,
                enrollments=await self.enrollment_universe(exam)
            )

            if parsed.shape == GRID:
                await self._resolve_grid_columns(exam, context, parsed.layout)
                plan = plan_grid(parsed.rows, context)
            else:
                plan = plan_tabular(parsed.rows, context)

            await PlanApplier(self.db).apply(plan, exam_id, actor)
            await self.db.commit()

        except LedgerError as e:
            await self.db.rollback()
            logger.error(f"Ledger import rejected for exam {exam_id}: {e.message}")
            raise
        except Exception as e:
            await self.db.rollback()
            logger.exception(f"Ledger import failed for exam {exam_id}")
            raise LedgerError("Import failed", 500) from e

        report = ImportReport(
            exam_id=exam_id,
            sheet=sheet.name,
            shape=parsed.shape,
            total_rows=plan.total_rows,
            imported=plan.imported,
            skipped=plan.skipped,
            errors_count=len(plan.errors),
            errors=plan.errors[:settings.import_max_errors]
        )
        logger.info(
            f"Ledger import finished for exam {exam_id}: {report.shape} sheet, "
            f"{report.total_rows} rows, {report.imported} imported, {report.skipped} skipped"
        )
        return report

    async def enrollment_universe(self, exam: Exam) -> Dict[str, EnrollmentRef]:
        """symbol_no -> enrollment for the exam's campus, year, class and (if set) faculty"""
        stmt = (
            select(Student.symbol_no, StudentEnrollment.id, StudentEnrollment.student_id)
            .join(Student, Student.id == StudentEnrollment.student_id)
            .where(
                StudentEnrollment.campus_id == exam.campus_id,
                StudentEnrollment.academic_year_id == exam.academic_year_id,
                StudentEnrollment.class_id == exam.class_id
            )
        )
        if exam.faculty_id is not None:
            stmt = stmt.where(StudentEnrollment.faculty_id == exam.faculty_id)

        result = await self.db.execute(stmt)
        universe: Dict[str, EnrollmentRef] = {}
        for symbol_no, enrollment_id, student_id in result.all():
            symbol_no = (symbol_no or "").strip()
            if symbol_no:
                universe.setdefault(symbol_no, EnrollmentRef(enrollment_id, student_id))
        return universe

    async def _resolve_grid_columns(self, exam: Exam, context: ImportContext, layout: LedgerLayout) -> None:
        catalog = await self.catalog.subjects_for(exam.academic_year_id, exam.class_id, exam.faculty_id)
        mapped = enabled_compulsory(catalog.compulsory, context.enabled)

        columns = len(layout.compulsory_columns)
        subjects = len(mapped)
        if min(columns, subjects) == 0:
            raise LedgerFormatError(
                f"No compulsory subject columns could be mapped "
                f"({columns} ledger columns, {subjects} enabled compulsory subjects)"
            )
        if columns != subjects:
            message = (
                f"Ledger has {columns} compulsory columns but the exam has "
                f"{subjects} enabled compulsory subjects"
            )
            if settings.ledger_strict_compulsory_columns:
                raise LedgerFormatError(message)
            # columns map by position; the surplus on either side is ignored
            logger.warning(f"Exam {exam.id}: {message}; mapping the first {min(columns, subjects)}")

        context.compulsory_codes = [subject.canonical_code for subject in mapped]
        context.optional_codes = optional_code_map(catalog.optional_groups, context.enabled)

    async def build_template(self, exam_id: UUID) -> Tuple[str, bytes]:
        """File name and xlsx bytes of a blank ledger for the exam"""
        exam = await self.registry.get_exam(exam_id)
        enabled = await self.registry.enabled_for(exam_id)
        catalog = await self.catalog.subjects_for(exam.academic_year_id, exam.class_id, exam.faculty_id)

        compulsory = [
            TemplateSubject(subject.subject_name, enabled[subject.canonical_code].full_marks)
            for subject in enabled_compulsory(catalog.compulsory, enabled)
        ]

        content = build_ledger_template(
            title="Mark Ledger",
            exam_name=exam.name,
            compulsory=compulsory,
            optional_groups=[group.name for group in catalog.optional_groups]
        )
        filename = f"marks_ledger_{exam.name.replace(' ', '_')}.xlsx"
        return filename, content


def optional_code_map(groups, enabled: Dict[str, ComponentConfig]) -> Dict[str, OptionalSubject]:
    """Canonical codes of optional subjects offered in the exam, keyed without leading zeros"""
    codes: Dict[str, OptionalSubject] = {}
    for group in groups:
        for subject in group.subjects:
            code = subject.canonical_code
            cfg = enabled.get(code) if code else None
            if cfg is None:
                continue
            codes.setdefault(normalize_code(code), OptionalSubject(
                component_code=code,
                subject_id=subject.subject_id,
                group_name=group.name,
                full_marks=cfg.full_marks
            ))
    return codes


def enabled_compulsory(subjects, enabled: Dict[str, ComponentConfig]):
    """Compulsory subjects whose canonical component is enabled; ledger columns map onto these in order"""
    return [subject for subject in subjects if subject.canonical_code in enabled]
