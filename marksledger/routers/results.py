# marksledger/routers/results.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .deps import get_actor
from ..core.database import get_db
from ..schemas.actor import Actor
from ..schemas.results import Result, SnapshotOut
from ..services.result_service import ResultComputer
from ..services.snapshot_service import SnapshotService

router = APIRouter(prefix="/api/v1/results", tags=["Results"])

@router.get("/{exam_id}/{enrollment_id}/preview", response_model=Result)
async def preview_result(exam_id: UUID, enrollment_id: UUID, db: AsyncSession = Depends(get_db)):
    """Result computed from current marks; nothing is stored"""
    return await ResultComputer(db).compute(exam_id, enrollment_id)

@router.post("/{exam_id}/{enrollment_id}/generate", response_model=SnapshotOut)
async def generate_snapshot(
    exam_id: UUID,
    enrollment_id: UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db)
):
    service = SnapshotService(db)
    await service.generate(exam_id, enrollment_id, actor)
    return await service.get(exam_id, enrollment_id)

@router.get("/{exam_id}/{enrollment_id}/snapshot", response_model=SnapshotOut)
async def get_snapshot(exam_id: UUID, enrollment_id: UUID, db: AsyncSession = Depends(get_db)):
    return await SnapshotService(db).get(exam_id, enrollment_id)

@router.post("/{exam_id}/publish", response_model=dict)
async def publish_exam(
    exam_id: UUID,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db)
):
    """Publish all generated snapshots and lock the exam"""
    published = await SnapshotService(db).publish(exam_id, actor)
    return {"ok": True, "exam_id": str(exam_id), "published": published}
