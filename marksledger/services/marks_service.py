# marksledger/services/marks_service.py
"""Keyed mark storage and optional-subject choices."""
from typing import Dict, Iterable, List, Optional, Tuple, Any
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
import logging

from .base_service import BaseService
from .catalog_service import CatalogResolver
from .component_config_service import ComponentConfig, ComponentConfigRegistry
from ..core.exceptions import ExamLockedError, ValidationException
from ..models.marks import Mark
from ..models.student import StudentEnrollment, StudentOptionalChoice
from ..schemas.actor import Actor
from ..schemas.marks import MarkIn

logger = logging.getLogger(__name__)

MarkKey = Tuple[UUID, UUID, str]


def format_number(value: float) -> str:
    return f"{value:g}"


def range_error(code: str, value: float, full_marks: float) -> Optional[str]:
    """Reason string when value falls outside [0, full_marks], else None"""
    if value < 0 or value > full_marks:
        return (
            f"marks_obtained {format_number(value)} out of range "
            f"(0..{format_number(full_marks)}) for code {code}"
        )
    return None


def not_enabled_error(code: str) -> str:
    return f"component_code {code} not enabled/configured for this exam"


class MarksStore(BaseService[StudentEnrollment]):
    """
    Marks keyed by (exam, enrollment, component_code).

    Rows are only ever written through ``upsert``; a second write to the same
    key updates the existing row. Objects created or loaded through this store
    are remembered for the life of the session, so repeated keys inside one
    transaction never produce a duplicate insert.
    """
    resource_name = "Enrollment"

    def __init__(self, db: AsyncSession):
        super().__init__(StudentEnrollment, db)
        self._rows: Dict[MarkKey, Mark] = {}

    async def get_enrollment(self, enrollment_id: UUID) -> StudentEnrollment:
        return await self.get_or_raise(enrollment_id)

    async def marks_for(self, exam_id: UUID, enrollment_id: UUID) -> Dict[str, Mark]:
        result = await self.db.execute(
            select(Mark).where(Mark.exam_id == exam_id, Mark.enrollment_id == enrollment_id)
        )
        return {mark.component_code: mark for mark in result.scalars().all()}

    async def preload_exam(self, exam_id: UUID) -> int:
        """Load every stored mark of the exam so upserts resolve without a query per cell"""
        result = await self.db.execute(select(Mark).where(Mark.exam_id == exam_id))
        count = 0
        for mark in result.scalars().all():
            self._rows[(mark.exam_id, mark.enrollment_id, mark.component_code)] = mark
            count += 1
        return count

    async def upsert(
        self,
        exam_id: UUID,
        enrollment_id: UUID,
        component_code: str,
        marks_obtained: Optional[float],
        is_absent: bool,
        actor: Actor
    ) -> Mark:
        """Insert or update one mark in the caller's transaction"""
        key = (exam_id, enrollment_id, component_code)
        mark = self._rows.get(key)
        if mark is None:
            result = await self.db.execute(
                select(Mark).where(
                    Mark.exam_id == exam_id,
                    Mark.enrollment_id == enrollment_id,
                    Mark.component_code == component_code
                )
            )
            mark = result.scalar_one_or_none()

        if mark is None:
            mark = Mark(
                exam_id=exam_id,
                enrollment_id=enrollment_id,
                component_code=component_code,
                entered_by=actor.id
            )
            self.db.add(mark)

        mark.is_absent = bool(is_absent)
        mark.marks_obtained = None if is_absent else marks_obtained
        mark.updated_by = actor.id
        self._rows[key] = mark
        return mark

    async def save_marks(
        self,
        exam_id: UUID,
        enrollment_id: UUID,
        marks: List[MarkIn],
        actor: Actor
    ) -> int:
        """Manual entry for one enrollment; all-or-nothing"""
        registry = ComponentConfigRegistry(self.db)
        try:
            exam = await registry.get_exam(exam_id)
            if exam.is_locked:
                raise ExamLockedError()
            await self.get_enrollment(enrollment_id)

            enabled = await registry.enabled_for(exam_id)
            for item in marks:
                cfg = enabled.get(item.component_code)
                if cfg is None:
                    raise ValidationException(not_enabled_error(item.component_code))
                if not item.is_absent and item.marks_obtained is not None:
                    reason = range_error(item.component_code, item.marks_obtained, cfg.full_marks)
                    if reason:
                        raise ValidationException(reason)

            for item in marks:
                await self.upsert(
                    exam_id, enrollment_id, item.component_code,
                    item.marks_obtained, item.is_absent, actor
                )

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Saved {len(marks)} marks for enrollment {enrollment_id} in exam {exam_id}")
        return len(marks)

    async def optional_choices(self, enrollment_id: UUID) -> List[StudentOptionalChoice]:
        result = await self.db.execute(
            select(StudentOptionalChoice).where(StudentOptionalChoice.enrollment_id == enrollment_id)
        )
        return list(result.scalars().all())

    async def replace_optional_choices(
        self,
        enrollment_id: UUID,
        choices: Iterable[Tuple[str, UUID]]
    ) -> int:
        """Full replace of an enrollment's choices, in the caller's transaction"""
        await self.db.execute(
            delete(StudentOptionalChoice).where(StudentOptionalChoice.enrollment_id == enrollment_id)
        )
        count = 0
        for group_name, subject_id in choices:
            if not group_name or not subject_id:
                continue
            self.db.add(StudentOptionalChoice(
                enrollment_id=enrollment_id,
                group_name=group_name,
                subject_id=subject_id
            ))
            count += 1
        return count

    async def set_optional_choices(self, enrollment_id: UUID, choices: Iterable[Tuple[str, UUID]]) -> int:
        try:
            await self.get_enrollment(enrollment_id)
            count = await self.replace_optional_choices(enrollment_id, choices)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return count

    async def student_ledger(self, exam_id: UUID, enrollment_id: UUID) -> List[Dict[str, Any]]:
        """Every component of the enrollment's subjects with its exam config and stored mark"""
        registry = ComponentConfigRegistry(self.db)
        configs: Dict[str, ComponentConfig] = await registry.config_for(exam_id)
        enrollment = await self.get_enrollment(enrollment_id)

        subject_ids = await self.subject_ids_for(enrollment)
        subjects = await CatalogResolver(self.db).subjects_by_ids(subject_ids)
        marks = await self.marks_for(exam_id, enrollment_id)

        ledger = []
        for subject in sorted(subjects, key=lambda s: s.subject_name.casefold()):
            for component in subject.components:
                cfg = configs.get(component.component_code)
                mark = marks.get(component.component_code)
                ledger.append({
                    "subject_id": str(subject.subject_id),
                    "subject_name": subject.subject_name,
                    "component_type": component.component_type.value,
                    "component_code": component.component_code,
                    "title": component.title,
                    "credit_hour": component.credit_hour,
                    "full_marks": cfg.full_marks if cfg else None,
                    "enabled_in_exam": cfg.is_enabled if cfg else False,
                    "marks_obtained": float(mark.marks_obtained) if mark and mark.marks_obtained is not None else None,
                    "is_absent": bool(mark.is_absent) if mark else False,
                })
        return ledger

    async def subject_ids_for(self, enrollment: StudentEnrollment) -> List[UUID]:
        """Compulsory subjects of the enrollment's year/class followed by its chosen optionals"""
        catalog = await CatalogResolver(self.db).subjects_for(
            enrollment.academic_year_id, enrollment.class_id
        )
        subject_ids = [s.subject_id for s in catalog.compulsory]
        subject_ids.extend(c.subject_id for c in await self.optional_choices(enrollment.id))
        return list(dict.fromkeys(subject_ids))
