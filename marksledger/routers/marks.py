# marksledger/routers/marks.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .deps import get_actor
from ..core.database import get_db
from ..schemas.actor import Actor
from ..schemas.marks import MarksUpsertRequest
from ..services.marks_service import MarksStore

router = APIRouter(prefix="/api/v1/marks", tags=["Marks"])

@router.get("/{exam_id}/{enrollment_id}", response_model=dict)
async def get_student_marks(exam_id: UUID, enrollment_id: UUID, db: AsyncSession = Depends(get_db)):
    """Every component of the student's subjects with config and stored mark"""
    store = MarksStore(db)
    components = await store.student_ledger(exam_id, enrollment_id)
    return {
        "ok": True,
        "exam_id": str(exam_id),
        "enrollment_id": str(enrollment_id),
        "components": components
    }

@router.put("/{exam_id}/{enrollment_id}", response_model=dict)
async def put_student_marks(
    exam_id: UUID,
    enrollment_id: UUID,
    payload: MarksUpsertRequest,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db)
):
    """Manual mark entry; rejected as a whole if any mark is invalid"""
    store = MarksStore(db)
    saved = await store.save_marks(exam_id, enrollment_id, payload.marks, actor)
    return {"ok": True, "saved": saved}
