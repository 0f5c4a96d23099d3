# marksledger/models/marks.py
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Numeric, Text, Uuid, UniqueConstraint
from .base import Base

class Mark(Base):
    __tablename__ = "marks"
    __table_args__ = (UniqueConstraint("exam_id", "enrollment_id", "component_code", name="uq_marks_exam_enrollment_code"),)

    exam_id = Column(Uuid(as_uuid=True), ForeignKey("exams.id"), nullable=False, index=True)
    enrollment_id = Column(Uuid(as_uuid=True), ForeignKey("student_enrollments.id"), nullable=False, index=True)
    component_code = Column(String(20), nullable=False)

    # Always NULL when is_absent is set
    marks_obtained = Column(Numeric(8, 2, asdecimal=False))
    is_absent = Column(Boolean, default=False, nullable=False)

    entered_by = Column(Uuid(as_uuid=True))
    updated_by = Column(Uuid(as_uuid=True))

class ResultSnapshot(Base):
    __tablename__ = "result_snapshots"
    __table_args__ = (UniqueConstraint("exam_id", "enrollment_id", name="uq_snapshot_exam_enrollment"),)

    exam_id = Column(Uuid(as_uuid=True), ForeignKey("exams.id"), nullable=False, index=True)
    enrollment_id = Column(Uuid(as_uuid=True), ForeignKey("student_enrollments.id"), nullable=False, index=True)

    overall_gpa = Column(Numeric(4, 2, asdecimal=False))
    final_grade = Column(String(5))
    result_status = Column(String(10))
    payload_json = Column(Text, nullable=False)

    generated_by = Column(Uuid(as_uuid=True))
    generated_at = Column(DateTime(timezone=True))
    # Immutable once set
    published_at = Column(DateTime(timezone=True))
