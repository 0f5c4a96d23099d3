# marksledger/routers/reports.py
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..schemas.results import MeritList, PassStats, TabulationReport
from ..services.report_service import ReportService

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])

@router.get("/tabulation", response_model=TabulationReport)
async def tabulation(
    exam_id: UUID = Query(...),
    section_id: UUID = Query(...),
    db: AsyncSession = Depends(get_db)
):
    """Published results of one section with per-subject detail"""
    return await ReportService(db).tabulation(exam_id, section_id)

@router.get("/merit-list", response_model=MeritList)
async def merit_list(
    exam_id: UUID = Query(...),
    section_id: Optional[UUID] = Query(None),
    limit: int = Query(10, ge=1, le=500),
    db: AsyncSession = Depends(get_db)
):
    return await ReportService(db).merit_list(exam_id, section_id, limit)

@router.get("/pass-stats", response_model=PassStats)
async def pass_stats(
    exam_id: UUID = Query(...),
    section_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    return await ReportService(db).pass_stats(exam_id, section_id)
