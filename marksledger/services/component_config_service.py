# marksledger/services/component_config_service.py
"""Per-exam component configuration and lock state."""
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
import logging

from .base_service import BaseService
from .catalog_service import CatalogResolver
from ..core.exceptions import ExamLockedError
from ..models.exam import Exam, ExamComponentConfig
from ..schemas.marks import ComponentConfigIn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentConfig:
    component_code: str
    full_marks: float
    pass_marks: Optional[float]
    is_enabled: bool


class ComponentConfigRegistry(BaseService[Exam]):
    """
    Which component codes an exam offers, with their full/pass marks.

    A code that is absent from the exam's configuration, or present but
    disabled, is not offered in that exam. Nothing here ever falls back to a
    default full_marks.
    """
    resource_name = "Exam"

    def __init__(self, db: AsyncSession):
        super().__init__(Exam, db)

    async def get_exam(self, exam_id: UUID) -> Exam:
        return await self.get_or_raise(exam_id)

    async def config_for(self, exam_id: UUID) -> Dict[str, ComponentConfig]:
        await self.get_exam(exam_id)

        result = await self.db.execute(
            select(ExamComponentConfig).where(ExamComponentConfig.exam_id == exam_id)
        )
        return {
            row.component_code: ComponentConfig(
                component_code=row.component_code,
                full_marks=float(row.full_marks),
                pass_marks=float(row.pass_marks) if row.pass_marks is not None else None,
                is_enabled=bool(row.is_enabled)
            )
            for row in result.scalars().all()
        }

    async def enabled_for(self, exam_id: UUID) -> Dict[str, ComponentConfig]:
        configs = await self.config_for(exam_id)
        return {code: cfg for code, cfg in configs.items() if cfg.is_enabled}

    async def is_locked(self, exam_id: UUID) -> bool:
        exam = await self.get_exam(exam_id)
        return bool(exam.is_locked)

    async def replace_configs(self, exam_id: UUID, components: List[ComponentConfigIn]) -> int:
        """Replace the exam's whole configuration (delete then insert)"""
        try:
            exam = await self.get_exam(exam_id)
            if exam.is_locked:
                raise ExamLockedError()

            await self.db.execute(
                delete(ExamComponentConfig).where(ExamComponentConfig.exam_id == exam_id)
            )

            seen = set()
            for component in components:
                code = component.component_code.strip()
                if not code or code in seen:
                    continue
                seen.add(code)
                self.db.add(ExamComponentConfig(
                    exam_id=exam_id,
                    component_code=code,
                    full_marks=component.full_marks,
                    pass_marks=component.pass_marks,
                    is_enabled=component.is_enabled
                ))

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Exam {exam_id}: configured {len(seen)} components")
        return len(seen)

    async def exam_components(self, exam_id: UUID) -> Dict[str, Any]:
        """Catalog groups of the exam's scope with each component's current config"""
        exam = await self.get_exam(exam_id)
        configs = await self.config_for(exam_id)
        groups = await CatalogResolver(self.db).groups_for(exam.academic_year_id, exam.class_id)

        def component_out(component):
            cfg = configs.get(component.component_code)
            return {
                "component_type": component.component_type.value,
                "component_code": component.component_code,
                "title": component.title,
                "credit_hour": component.credit_hour,
                "full_marks": cfg.full_marks if cfg else None,
                "pass_marks": cfg.pass_marks if cfg else None,
                "is_enabled": cfg.is_enabled if cfg else False,
            }

        return {
            "exam_id": str(exam.id),
            "name": exam.name,
            "is_locked": bool(exam.is_locked),
            "published_at": exam.published_at.isoformat() if exam.published_at else None,
            "groups": [
                {
                    "name": group.name,
                    "sort_order": group.sort_order,
                    "subjects": [
                        {
                            "id": str(subject.subject_id),
                            "name": subject.subject_name,
                            "canonical_code": subject.canonical_code,
                            "components": [component_out(c) for c in subject.components],
                        }
                        for subject in group.subjects
                    ],
                }
                for group in groups
            ],
        }
