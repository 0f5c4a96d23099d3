import os

# settings are read at import time; point them at sqlite before importing the package
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("LOG_LEVEL", "warning")

import uuid
from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from marksledger.models import (
    Base, CatalogGroup, CatalogGroupSubject, ComponentType, Exam, ExamComponentConfig,
    GradingRule, GradingScheme, OverallMethod, RuleType, Student, StudentEnrollment,
    Subject, SubjectComponent
)

SUBJECT_GPA = [(90, 4.0), (80, 3.6), (70, 3.2), (60, 2.8), (50, 2.4), (40, 2.0), (35, 1.6), (0, 0.0)]
SUBJECT_GRADE = [(90, "A+"), (80, "A"), (70, "B+"), (60, "B"), (50, "C+"), (40, "C"), (35, "D"), (0, "NG")]
FINAL_GRADE = [(3.6, "A+"), (3.2, "A"), (2.8, "B+"), (2.4, "B"), (2.0, "C+"), (1.6, "C"), (0, "NG")]

# subject -> [(type, code, credit_hour)]
SUBJECTS = {
    "English": [(ComponentType.TH, "1", 3), (ComponentType.IN, "2", 1)],
    "Nepali": [(ComponentType.TH, "11", 2), (ComponentType.IN, "12", 1)],
    "Physics": [(ComponentType.TH, "21", 5)],
    "Economics": [(ComponentType.TH, "31", 4)],
    "Computer": [(ComponentType.PR, "42", 2), (ComponentType.TH, "41", 2)],
}
FULL_MARKS = {"1": 75, "2": 25, "11": 75, "12": 25, "21": 100, "31": 100, "41": 50, "42": 50}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seed(session_factory):
    """One class with two compulsory subjects, two optional groups, one exam and three students"""
    campus_id, year_id, class_id = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

    async with session_factory() as session:
        subjects = {}
        for name, components in SUBJECTS.items():
            subject = Subject(id=uuid.uuid4(), name=name)
            session.add(subject)
            for component_type, code, credit in components:
                session.add(SubjectComponent(
                    subject_id=subject.id,
                    component_type=component_type,
                    component_code=code,
                    title=f"{name} {component_type.value}",
                    credit_hour=credit
                ))
            subjects[name] = subject

        groups = [
            ("COMPULSORY", 0, ["English", "Nepali"]),
            ("Opt. 1st", 1, ["Physics", "Economics"]),
            ("Opt. 2nd", 2, ["Computer"]),
        ]
        for group_name, sort_order, names in groups:
            group = CatalogGroup(
                id=uuid.uuid4(),
                academic_year_id=year_id,
                class_id=class_id,
                name=group_name,
                sort_order=sort_order
            )
            session.add(group)
            for position, name in enumerate(names):
                session.add(CatalogGroupSubject(
                    catalog_group_id=group.id,
                    subject_id=subjects[name].id,
                    sort_order=position
                ))

        scheme = GradingScheme(id=uuid.uuid4(), name="NEB GPA", overall_method=OverallMethod.SIMPLE_AVG)
        session.add(scheme)
        for rule_type, table in (
            (RuleType.SUBJECT_GPA, [(m, None, g) for m, g in SUBJECT_GPA]),
            (RuleType.SUBJECT_GRADE, [(m, g, None) for m, g in SUBJECT_GRADE]),
            (RuleType.FINAL_GRADE, [(m, g, None) for m, g in FINAL_GRADE]),
        ):
            for min_value, grade, gpa in table:
                session.add(GradingRule(
                    scheme_id=scheme.id, rule_type=rule_type,
                    min_value=min_value, grade=grade, gpa=gpa
                ))

        exam = Exam(
            id=uuid.uuid4(),
            campus_id=campus_id,
            academic_year_id=year_id,
            class_id=class_id,
            name="First Terminal",
            grading_scheme_id=scheme.id,
            is_locked=False
        )
        session.add(exam)
        for code, full_marks in FULL_MARKS.items():
            session.add(ExamComponentConfig(exam_id=exam.id, component_code=code, full_marks=full_marks))

        students = {}
        enrollments = {}
        for symbol_no, full_name, regd_no, target_class in (
            ("7801", "Ram Thapa", "R-001", class_id),
            ("7802", "Sita Rai", None, class_id),
            ("7803", "Hari Shrestha", None, uuid.uuid4()),
        ):
            student = Student(
                id=uuid.uuid4(), full_name=full_name, symbol_no=symbol_no,
                regd_no=regd_no, dob=date(2007, 5, 14) if regd_no else None
            )
            session.add(student)
            enrollment = StudentEnrollment(
                id=uuid.uuid4(),
                student_id=student.id,
                campus_id=campus_id,
                academic_year_id=year_id,
                class_id=target_class
            )
            session.add(enrollment)
            students[symbol_no] = student
            enrollments[symbol_no] = enrollment

        await session.commit()

    return SimpleNamespace(
        campus_id=campus_id,
        year_id=year_id,
        class_id=class_id,
        exam_id=exam.id,
        scheme_id=scheme.id,
        subjects={name: s.id for name, s in subjects.items()},
        students={symbol: s.id for symbol, s in students.items()},
        enrollments={symbol: e.id for symbol, e in enrollments.items()},
    )
