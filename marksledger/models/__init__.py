# marksledger/models/__init__.py
"""Import all models here so Alembic and create_all see every table."""
from .base import Base
from .catalog import (
    Subject, SubjectComponent, CatalogGroup, CatalogGroupSubject, ComponentType,
    COMPULSORY_GROUP, OPTIONAL_GROUP_PREFIX
)
from .exam import Exam, ExamComponentConfig, GradingScheme, GradingRule, OverallMethod, RuleType
from .student import Student, StudentEnrollment, StudentOptionalChoice
from .marks import Mark, ResultSnapshot

__all__ = [
    "Base",
    "Subject",
    "SubjectComponent",
    "CatalogGroup",
    "CatalogGroupSubject",
    "ComponentType",
    "COMPULSORY_GROUP",
    "OPTIONAL_GROUP_PREFIX",
    "Exam",
    "ExamComponentConfig",
    "GradingScheme",
    "GradingRule",
    "OverallMethod",
    "RuleType",
    "Student",
    "StudentEnrollment",
    "StudentOptionalChoice",
    "Mark",
    "ResultSnapshot",
]
