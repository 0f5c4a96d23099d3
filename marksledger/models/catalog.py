# marksledger/models/catalog.py
from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, Uuid, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base
import enum

COMPULSORY_GROUP = "COMPULSORY"
OPTIONAL_GROUP_PREFIX = "opt"

class ComponentType(enum.Enum):
    TH = "TH"  # Theory
    IN = "IN"  # Internal
    PR = "PR"  # Practical

# Display / evaluation order of components within a subject
COMPONENT_TYPE_ORDER = {ComponentType.TH: 0, ComponentType.PR: 1, ComponentType.IN: 2}

class Subject(Base):
    __tablename__ = "subjects"

    name = Column(String(150), nullable=False)

    components = relationship("SubjectComponent", back_populates="subject", cascade="all, delete-orphan")

class SubjectComponent(Base):
    __tablename__ = "subject_components"

    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id"), nullable=False, index=True)
    component_type = Column(Enum(ComponentType), nullable=False)

    # Globally unique across all subjects
    component_code = Column(String(20), nullable=False, unique=True)
    title = Column(String(150))
    credit_hour = Column(Numeric(5, 2, asdecimal=False))

    subject = relationship("Subject", back_populates="components")

class CatalogGroup(Base):
    __tablename__ = "catalog_groups"

    # Scope; academic years, classes and faculties are managed elsewhere
    academic_year_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    class_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    faculty_id = Column(Uuid(as_uuid=True), nullable=True)

    name = Column(String(50), nullable=False)  # "COMPULSORY" or "Opt. 1st", ...
    sort_order = Column(Integer, default=0, nullable=False)

    subjects = relationship("CatalogGroupSubject", back_populates="group", cascade="all, delete-orphan")

class CatalogGroupSubject(Base):
    __tablename__ = "catalog_group_subjects"
    __table_args__ = (UniqueConstraint("catalog_group_id", "subject_id"),)

    catalog_group_id = Column(Uuid(as_uuid=True), ForeignKey("catalog_groups.id"), nullable=False, index=True)
    subject_id = Column(Uuid(as_uuid=True), ForeignKey("subjects.id"), nullable=False, index=True)
    sort_order = Column(Integer, default=0, nullable=False)

    group = relationship("CatalogGroup", back_populates="subjects")
    subject = relationship("Subject")
