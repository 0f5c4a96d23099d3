# marksledger/services/catalog_service.py
"""Subject catalog lookups for a (year, class[, faculty]) scope."""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
import logging

from ..models.catalog import (
    CatalogGroup, CatalogGroupSubject, Subject, SubjectComponent, ComponentType,
    COMPONENT_TYPE_ORDER, COMPULSORY_GROUP, OPTIONAL_GROUP_PREFIX
)

logger = logging.getLogger(__name__)


@dataclass
class ComponentInfo:
    component_code: str
    component_type: ComponentType
    title: Optional[str]
    credit_hour: Optional[float]


@dataclass
class CatalogSubject:
    subject_id: UUID
    subject_name: str
    components: List[ComponentInfo] = field(default_factory=list)

    @property
    def canonical_code(self) -> Optional[str]:
        """Code identifying the subject in ledger columns: its TH code, else the smallest code"""
        theory = [c.component_code for c in self.components if c.component_type == ComponentType.TH]
        if theory:
            return min(theory)
        codes = [c.component_code for c in self.components]
        return min(codes) if codes else None


@dataclass
class CatalogGroupInfo:
    name: str
    sort_order: int
    faculty_id: Optional[UUID] = None
    subjects: List[CatalogSubject] = field(default_factory=list)


@dataclass
class SubjectCatalog:
    compulsory: List[CatalogSubject] = field(default_factory=list)
    optional_groups: List[CatalogGroupInfo] = field(default_factory=list)


def is_optional_group(name: str) -> bool:
    return (name or "").strip().lower().startswith(OPTIONAL_GROUP_PREFIX)


def component_sort_key(component: SubjectComponent):
    return (COMPONENT_TYPE_ORDER.get(component.component_type, 99), component.component_code)


class CatalogResolver:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def groups_for(
        self,
        academic_year_id: UUID,
        class_id: UUID,
        faculty_id: Optional[UUID] = None
    ) -> List[CatalogGroupInfo]:
        """All catalog groups of the scope, ordered by sort_order, with their ordered subjects"""
        faculty_filter = CatalogGroup.faculty_id.is_(None)
        if faculty_id is not None:
            faculty_filter = or_(faculty_filter, CatalogGroup.faculty_id == faculty_id)

        stmt = select(CatalogGroup).where(
            CatalogGroup.academic_year_id == academic_year_id,
            CatalogGroup.class_id == class_id,
            faculty_filter
        ).order_by(CatalogGroup.sort_order.asc(), CatalogGroup.name.asc())
        result = await self.db.execute(stmt)
        groups = result.scalars().all()
        if not groups:
            return []

        stmt = (
            select(CatalogGroupSubject.catalog_group_id, Subject.id, Subject.name)
            .join(Subject, Subject.id == CatalogGroupSubject.subject_id)
            .where(CatalogGroupSubject.catalog_group_id.in_([g.id for g in groups]))
            .order_by(CatalogGroupSubject.sort_order.asc(), Subject.name.asc())
        )
        result = await self.db.execute(stmt)
        links = result.all()

        components = await self._components_by_subject({row[1] for row in links})

        out = []
        for group in groups:
            info = CatalogGroupInfo(name=group.name, sort_order=group.sort_order, faculty_id=group.faculty_id)
            for group_id, subject_id, subject_name in links:
                if group_id != group.id:
                    continue
                info.subjects.append(CatalogSubject(
                    subject_id=subject_id,
                    subject_name=subject_name,
                    components=components.get(subject_id, [])
                ))
            out.append(info)
        return out

    async def subjects_for(
        self,
        academic_year_id: UUID,
        class_id: UUID,
        faculty_id: Optional[UUID] = None
    ) -> SubjectCatalog:
        """Compulsory subjects (shared catalog) and ordered optional groups for the scope"""
        groups = await self.groups_for(academic_year_id, class_id, faculty_id)

        catalog = SubjectCatalog()
        for group in groups:
            if group.name == COMPULSORY_GROUP and group.faculty_id is None:
                if not catalog.compulsory:
                    catalog.compulsory = group.subjects
            elif is_optional_group(group.name):
                catalog.optional_groups.append(group)

        logger.debug(
            f"Catalog for year={academic_year_id} class={class_id}: "
            f"{len(catalog.compulsory)} compulsory, {len(catalog.optional_groups)} optional groups"
        )
        return catalog

    async def subjects_by_ids(self, subject_ids: Iterable[UUID]) -> List[CatalogSubject]:
        ids = list(dict.fromkeys(subject_ids))
        if not ids:
            return []

        result = await self.db.execute(select(Subject).where(Subject.id.in_(ids)))
        subjects = {s.id: s for s in result.scalars().all()}
        components = await self._components_by_subject(subjects.keys())

        return [
            CatalogSubject(subject_id=sid, subject_name=subjects[sid].name, components=components.get(sid, []))
            for sid in ids
            if sid in subjects
        ]

    async def _components_by_subject(self, subject_ids) -> Dict[UUID, List[ComponentInfo]]:
        subject_ids = list(subject_ids)
        if not subject_ids:
            return {}

        result = await self.db.execute(
            select(SubjectComponent).where(SubjectComponent.subject_id.in_(subject_ids))
        )
        by_subject: Dict[UUID, List[ComponentInfo]] = {}
        for component in sorted(result.scalars().all(), key=component_sort_key):
            by_subject.setdefault(component.subject_id, []).append(ComponentInfo(
                component_code=component.component_code,
                component_type=component.component_type,
                title=component.title,
                credit_hour=float(component.credit_hour) if component.credit_hour is not None else None
            ))
        return by_subject
