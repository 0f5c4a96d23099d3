# marksledger/routers/exams.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..schemas.marks import ComponentConfigsRequest
from ..services.component_config_service import ComponentConfigRegistry

router = APIRouter(prefix="/api/v1/exams", tags=["Exam Components"])

@router.get("/{exam_id}/components", response_model=dict)
async def get_exam_components(exam_id: UUID, db: AsyncSession = Depends(get_db)):
    """Catalog groups of the exam's class with each component's exam config"""
    registry = ComponentConfigRegistry(db)
    return {"ok": True, **(await registry.exam_components(exam_id))}

@router.put("/{exam_id}/components", response_model=dict)
async def put_exam_components(
    exam_id: UUID,
    payload: ComponentConfigsRequest,
    db: AsyncSession = Depends(get_db)
):
    """Replace the exam's component configuration"""
    registry = ComponentConfigRegistry(db)
    saved = await registry.replace_configs(exam_id, payload.components)
    return {"ok": True, "saved": saved}
