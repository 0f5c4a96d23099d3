# marksledger/models/exam.py
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Numeric, Uuid, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base
import enum

class OverallMethod(enum.Enum):
    SIMPLE_AVG = "SIMPLE_AVG"
    CREDIT_WEIGHTED = "CREDIT_WEIGHTED"

class RuleType(enum.Enum):
    SUBJECT_GPA = "SUBJECT_GPA"
    SUBJECT_GRADE = "SUBJECT_GRADE"
    FINAL_GRADE = "FINAL_GRADE"

class GradingScheme(Base):
    __tablename__ = "grading_schemes"

    name = Column(String(100), nullable=False)
    overall_method = Column(Enum(OverallMethod), default=OverallMethod.SIMPLE_AVG, nullable=False)

    rules = relationship("GradingRule", back_populates="scheme", cascade="all, delete-orphan")

class GradingRule(Base):
    __tablename__ = "grading_rules"

    scheme_id = Column(Uuid(as_uuid=True), ForeignKey("grading_schemes.id"), nullable=False, index=True)
    rule_type = Column(Enum(RuleType), nullable=False)

    # Lower bound (inclusive) of the band
    min_value = Column(Numeric(6, 2, asdecimal=False), nullable=False)
    grade = Column(String(5))
    gpa = Column(Numeric(4, 2, asdecimal=False))

    scheme = relationship("GradingScheme", back_populates="rules")

class Exam(Base):
    __tablename__ = "exams"

    # Scope; campuses, years, classes and faculties are managed elsewhere
    campus_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    academic_year_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    class_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    faculty_id = Column(Uuid(as_uuid=True), nullable=True)

    name = Column(String(150), nullable=False)
    exam_type = Column(String(20), default="INTERNAL", nullable=False)
    grading_scheme_id = Column(Uuid(as_uuid=True), ForeignKey("grading_schemes.id"), nullable=True)

    # Lock / publish state
    is_locked = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime(timezone=True))

    component_configs = relationship("ExamComponentConfig", back_populates="exam", cascade="all, delete-orphan")

class ExamComponentConfig(Base):
    __tablename__ = "exam_component_configs"
    __table_args__ = (UniqueConstraint("exam_id", "component_code"),)

    exam_id = Column(Uuid(as_uuid=True), ForeignKey("exams.id"), nullable=False, index=True)
    component_code = Column(String(20), nullable=False)
    full_marks = Column(Numeric(8, 2, asdecimal=False), nullable=False)
    pass_marks = Column(Numeric(8, 2, asdecimal=False))  # stored, not used for grading
    is_enabled = Column(Boolean, default=True, nullable=False)

    exam = relationship("Exam", back_populates="component_configs")
