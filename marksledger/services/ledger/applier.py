# marksledger/services/ledger/applier.py
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
import logging

from .planner import ImportPlan
from ..marks_service import MarksStore
from ...models.student import Student
from ...schemas.actor import Actor

logger = logging.getLogger(__name__)


class PlanApplier:
    """Writes an ImportPlan inside the caller's transaction; never commits"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = MarksStore(db)

    async def apply(self, plan: ImportPlan, exam_id: UUID, actor: Actor) -> None:
        await self.store.preload_exam(exam_id)

        for backfill in plan.backfills:
            # blank cells never overwrite stored identity fields
            values = backfill.values()
            await self.db.execute(
                update(Student)
                .where(Student.id == backfill.student_id)
                .values(**values)
            )

        for enrollment_id, choices in plan.choices.items():
            await self.store.replace_optional_choices(enrollment_id, choices)

        for mark in plan.marks:
            await self.store.upsert(
                exam_id, mark.enrollment_id, mark.component_code,
                mark.marks_obtained, mark.is_absent, actor
            )

        await self.db.flush()
        logger.debug(
            f"Applied plan for exam {exam_id}: {len(plan.marks)} marks, "
            f"{len(plan.choices)} choice sets, {len(plan.backfills)} backfills"
        )
