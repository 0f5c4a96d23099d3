# marksledger/models/student.py
from sqlalchemy import Column, String, Date, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import Base

class Student(Base):
    __tablename__ = "students"

    full_name = Column(String(150), nullable=False)
    dob = Column(Date)
    symbol_no = Column(String(30), index=True)
    regd_no = Column(String(30))
    roll_no = Column(String(20))

    enrollments = relationship("StudentEnrollment", back_populates="student")

class StudentEnrollment(Base):
    __tablename__ = "student_enrollments"

    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id"), nullable=False, index=True)

    # Scope; managed elsewhere
    campus_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    academic_year_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    class_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    faculty_id = Column(Uuid(as_uuid=True), nullable=True)
    section_id = Column(Uuid(as_uuid=True), nullable=True)

    student = relationship("Student", back_populates="enrollments")

class StudentOptionalChoice(Base):
    __tablename__ = "student_optional_choices"

    enrollment_id = Column(Uuid(as_uuid=True), ForeignKey("student_enrollments.id"), nullable=False, index=True)
    group_name = Column(String(50), nullable=False)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id"), nullable=False)
