# marksledger/schemas/imports.py
from typing import List
from uuid import UUID
from pydantic import BaseModel

class ImportRowError(BaseModel):
    row: int
    reason: str

class ImportReport(BaseModel):
    ok: bool = True
    exam_id: UUID
    sheet: str
    shape: str  # "tabular" or "grid"
    total_rows: int
    imported: int
    skipped: int
    errors_count: int
    errors: List[ImportRowError] = []
