# marksledger/routers/students.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..schemas.marks import OptionalChoicesRequest
from ..services.marks_service import MarksStore

router = APIRouter(prefix="/api/v1/students", tags=["Students"])

@router.put("/{enrollment_id}/optional-choices", response_model=dict)
async def put_optional_choices(
    enrollment_id: UUID,
    payload: OptionalChoicesRequest,
    db: AsyncSession = Depends(get_db)
):
    """Replace all optional-subject choices of an enrollment"""
    store = MarksStore(db)
    saved = await store.set_optional_choices(
        enrollment_id,
        [(choice.group_name, choice.subject_id) for choice in payload.choices]
    )
    return {"ok": True, "saved": saved}
