# marksledger/schemas/results.py
"""Pydantic schemas for computed results and snapshots."""
from typing import List, Optional, Any, Dict
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel

class SubjectResult(BaseModel):
    subject_id: UUID
    subject_name: str
    total_obtained: float
    total_full: float
    total_credit: float
    percent: float
    grade: str
    gpa: float
    any_absent: bool
    status: str  # PASS | FAIL | INCOMPLETE

class Result(BaseModel):
    exam_id: UUID
    enrollment_id: UUID
    overall_method: str
    subjects: List[SubjectResult] = []
    overall_gpa: float
    final_grade: str
    result_status: str  # PASS | FAIL

class SnapshotOut(BaseModel):
    exam_id: UUID
    enrollment_id: UUID
    overall_gpa: float
    final_grade: str
    result_status: str
    generated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    payload: Optional[Dict[str, Any]] = None

class TabulationRow(BaseModel):
    enrollment_id: UUID
    roll_no: Optional[str] = None
    symbol_no: Optional[str] = None
    regd_no: Optional[str] = None
    full_name: str
    overall_gpa: float
    final_grade: str
    result_status: str
    subjects: List[Dict[str, Any]] = []

class TabulationReport(BaseModel):
    exam_id: UUID
    section_id: UUID
    count: int
    table: List[TabulationRow]

class MeritEntry(BaseModel):
    rank: int
    enrollment_id: UUID
    roll_no: Optional[str] = None
    symbol_no: Optional[str] = None
    full_name: str
    overall_gpa: float
    final_grade: str
    result_status: str

class MeritList(BaseModel):
    exam_id: UUID
    section_id: Optional[UUID] = None
    limit: int
    merit: List[MeritEntry]

class PassStats(BaseModel):
    exam_id: UUID
    section_id: Optional[UUID] = None
    total: int
    passed: int
    failed: int
    pass_percent: float
