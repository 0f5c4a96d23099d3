# marksledger/routers/imports.py
from uuid import UUID
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from .deps import get_actor
from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import LedgerFormatError, ValidationException
from ..schemas.actor import Actor
from ..schemas.imports import ImportReport
from ..services.ledger.template import CONTENT_TYPE
from ..services.ledger_import_service import LedgerImporter

router = APIRouter(prefix="/api/v1/import", tags=["Ledger Import"])

ALLOWED_EXTENSIONS = (".xlsx", ".xlsm", ".csv")

@router.post("/marks", response_model=ImportReport)
async def import_marks(
    exam_id: UUID = Query(...),
    file: UploadFile = File(...),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload a marks ledger (xlsx or csv) for one exam.

    Bad rows are reported and skipped; a structural problem with the file
    rejects the whole upload.
    """
    filename = file.filename or ""
    if not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise ValidationException("Only .xlsx or .csv files are allowed")

    content = await file.read()
    if not content:
        raise LedgerFormatError("Uploaded file is empty")
    if len(content) > settings.import_max_file_size:
        raise LedgerFormatError("Uploaded file is too large")

    return await LedgerImporter(db).import_workbook(exam_id, content, filename, actor)

@router.get("/marks-ledger-template")
async def download_ledger_template(exam_id: UUID = Query(...), db: AsyncSession = Depends(get_db)):
    """Blank grid ledger matching the exam's catalog and configured full marks"""
    filename, content = await LedgerImporter(db).build_template(exam_id)
    return Response(
        content=content,
        media_type=CONTENT_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
