# marksledger/services/report_service.py
"""Read-only reports over published result snapshots."""
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import case, func, select
import json
import logging

from .component_config_service import ComponentConfigRegistry
from .grading_rules import round_half_up
from .result_service import FAIL, PASS
from ..models.marks import ResultSnapshot
from ..models.student import Student, StudentEnrollment
from ..schemas.results import MeritEntry, MeritList, PassStats, TabulationReport, TabulationRow

logger = logging.getLogger(__name__)


def roll_order(roll_no: Optional[str]) -> int:
    """Numeric roll number for sorting; anything else sorts first"""
    try:
        return int(str(roll_no).strip())
    except (TypeError, ValueError):
        return 0


class ReportService:
    """
    Class reports built from published snapshots only.

    Unpublished snapshots can still be regenerated, so they never show up
    here; an exam with nothing published yields empty reports.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.registry = ComponentConfigRegistry(db)

    def _published(self, exam_id: UUID, section_id: Optional[UUID], *columns):
        stmt = (
            select(*columns)
            .select_from(ResultSnapshot)
            .join(StudentEnrollment, StudentEnrollment.id == ResultSnapshot.enrollment_id)
            .join(Student, Student.id == StudentEnrollment.student_id)
            .where(ResultSnapshot.exam_id == exam_id, ResultSnapshot.published_at.is_not(None))
        )
        if section_id is not None:
            stmt = stmt.where(StudentEnrollment.section_id == section_id)
        return stmt

    async def tabulation(self, exam_id: UUID, section_id: UUID) -> TabulationReport:
        """Every published result of one section, by roll number then name"""
        await self.registry.get_exam(exam_id)

        stmt = self._published(exam_id, section_id, ResultSnapshot, Student)
        rows = sorted(
            (await self.db.execute(stmt)).all(),
            key=lambda row: (roll_order(row[1].roll_no), row[1].full_name)
        )

        table: List[TabulationRow] = []
        for snapshot, student in rows:
            try:
                payload = json.loads(snapshot.payload_json)
            except (TypeError, ValueError):
                logger.warning(f"Snapshot {snapshot.id} has an unreadable payload")
                payload = {}
            table.append(TabulationRow(
                enrollment_id=snapshot.enrollment_id,
                roll_no=student.roll_no,
                symbol_no=student.symbol_no,
                regd_no=student.regd_no,
                full_name=student.full_name,
                overall_gpa=float(snapshot.overall_gpa or 0),
                final_grade=snapshot.final_grade,
                result_status=snapshot.result_status,
                subjects=payload.get("subjects") or []
            ))

        return TabulationReport(exam_id=exam_id, section_id=section_id, count=len(table), table=table)

    async def merit_list(self, exam_id: UUID, section_id: Optional[UUID] = None, limit: int = 10) -> MeritList:
        """Top published results by overall GPA; ties are broken by name"""
        await self.registry.get_exam(exam_id)

        stmt = (
            self._published(exam_id, section_id, ResultSnapshot, Student)
            .order_by(ResultSnapshot.overall_gpa.desc(), Student.full_name.asc())
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).all()

        merit = [
            MeritEntry(
                rank=position,
                enrollment_id=snapshot.enrollment_id,
                roll_no=student.roll_no,
                symbol_no=student.symbol_no,
                full_name=student.full_name,
                overall_gpa=float(snapshot.overall_gpa or 0),
                final_grade=snapshot.final_grade,
                result_status=snapshot.result_status
            )
            for position, (snapshot, student) in enumerate(rows, start=1)
        ]
        return MeritList(exam_id=exam_id, section_id=section_id, limit=limit, merit=merit)

    async def pass_stats(self, exam_id: UUID, section_id: Optional[UUID] = None) -> PassStats:
        """Pass and fail counts over published results"""
        await self.registry.get_exam(exam_id)

        stmt = self._published(
            exam_id, section_id,
            func.count(ResultSnapshot.id),
            func.sum(case((ResultSnapshot.result_status == PASS, 1), else_=0)),
            func.sum(case((ResultSnapshot.result_status == FAIL, 1), else_=0))
        )
        total, passed, failed = (await self.db.execute(stmt)).one()

        total, passed, failed = int(total or 0), int(passed or 0), int(failed or 0)
        pass_percent = round_half_up(passed / total * 100) if total else 0.0
        return PassStats(
            exam_id=exam_id,
            section_id=section_id,
            total=total,
            passed=passed,
            failed=failed,
            pass_percent=pass_percent
        )
