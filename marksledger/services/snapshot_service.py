# marksledger/services/snapshot_service.py
"""Persisted result snapshots: generate one, read it back, publish the exam."""
from datetime import datetime, timezone
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
import json
import logging

from .component_config_service import ComponentConfigRegistry
from .result_service import ResultComputer
from ..core.config import settings
from ..core.exceptions import ConfigError, ExamLockedError, NotFoundError
from ..models.exam import Exam
from ..models.marks import ResultSnapshot
from ..schemas.actor import Actor
from ..schemas.results import SnapshotOut

logger = logging.getLogger(__name__)


class SnapshotService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.registry = ComponentConfigRegistry(db)

    async def generate(self, exam_id: UUID, enrollment_id: UUID, actor: Actor) -> ResultSnapshot:
        """Compute and store (or refresh) one enrollment's snapshot"""
        try:
            exam = await self.registry.get_exam(exam_id)
            if exam.is_locked and actor.role != settings.privileged_role:
                raise ExamLockedError()

            result = await ResultComputer(self.db).compute(exam_id, enrollment_id)

            stmt = select(ResultSnapshot).where(
                ResultSnapshot.exam_id == exam_id,
                ResultSnapshot.enrollment_id == enrollment_id
            )
            snapshot = (await self.db.execute(stmt)).scalar_one_or_none()
            if snapshot is None:
                snapshot = ResultSnapshot(exam_id=exam_id, enrollment_id=enrollment_id)
                self.db.add(snapshot)
            elif snapshot.published_at is not None:
                raise ExamLockedError("Snapshot already published")

            snapshot.overall_gpa = result.overall_gpa
            snapshot.final_grade = result.final_grade
            snapshot.result_status = result.result_status
            snapshot.payload_json = result.model_dump_json()
            snapshot.generated_by = actor.id
            snapshot.generated_at = datetime.now(timezone.utc)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Snapshot generated for enrollment {enrollment_id} in exam {exam_id}")
        return snapshot

    async def get(self, exam_id: UUID, enrollment_id: UUID) -> SnapshotOut:
        stmt = select(ResultSnapshot).where(
            ResultSnapshot.exam_id == exam_id,
            ResultSnapshot.enrollment_id == enrollment_id
        )
        snapshot = (await self.db.execute(stmt)).scalar_one_or_none()
        if snapshot is None:
            raise NotFoundError("Snapshot")

        return SnapshotOut(
            exam_id=snapshot.exam_id,
            enrollment_id=snapshot.enrollment_id,
            overall_gpa=float(snapshot.overall_gpa or 0),
            final_grade=snapshot.final_grade,
            result_status=snapshot.result_status,
            generated_at=snapshot.generated_at,
            published_at=snapshot.published_at,
            payload=json.loads(snapshot.payload_json) if snapshot.payload_json else None
        )

    async def publish(self, exam_id: UUID, actor: Actor) -> int:
        """Publish every generated snapshot of the exam and lock it"""
        try:
            exam = await self.registry.get_exam(exam_id)
            if exam.is_locked:
                raise ExamLockedError("Exam already published/locked")

            now = datetime.now(timezone.utc)
            result = await self.db.execute(
                update(ResultSnapshot)
                .where(ResultSnapshot.exam_id == exam_id, ResultSnapshot.published_at.is_(None))
                .values(published_at=now)
            )
            if not result.rowcount:
                raise ConfigError("No generated snapshots to publish")

            await self.db.execute(
                update(Exam).where(Exam.id == exam_id).values(is_locked=True, published_at=now)
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Exam {exam_id} published by {actor.id}: {result.rowcount} snapshots")
        return result.rowcount
