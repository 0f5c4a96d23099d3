# marksledger/schemas/marks.py
"""Request payloads for marks, optional choices and exam component configs."""
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, model_validator

class MarkIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    component_code: str = Field(..., min_length=1, description="Component code, e.g. '21'")
    marks_obtained: Optional[float] = Field(default=None, description="Ignored when is_absent is true")
    is_absent: bool = False

    @model_validator(mode='after')
    def clear_marks_when_absent(self):
        if self.is_absent:
            self.marks_obtained = None
        return self

class MarksUpsertRequest(BaseModel):
    marks: List[MarkIn] = Field(..., min_length=1)

class OptionalChoiceIn(BaseModel):
    group_name: str = Field(..., min_length=1, description="Optional group, e.g. 'Opt. 1st'")
    subject_id: UUID

class OptionalChoicesRequest(BaseModel):
    choices: List[OptionalChoiceIn] = Field(default_factory=list, description="Empty list clears all choices")

class ComponentConfigIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    component_code: str = Field(..., min_length=1)
    full_marks: float = Field(..., ge=0)
    pass_marks: Optional[float] = Field(default=None, ge=0)
    is_enabled: bool = True

class ComponentConfigsRequest(BaseModel):
    components: List[ComponentConfigIn] = Field(..., min_length=1)
