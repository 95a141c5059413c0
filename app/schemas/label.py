from typing import Optional
from pydantic import BaseModel, field_validator


DEFAULT_LABEL_COLOR = "#6B7280"


class LabelCreate(BaseModel):
    name: str
    color: str = DEFAULT_LABEL_COLOR

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('name must not be empty')
        return v


class LabelUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('name must not be empty')
        return v


class LabelResponse(BaseModel):
    id: str
    name: str
    color: str
    project_id: str

    class Config:
        from_attributes = True
