from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

from app.models.project import ProjectRole


class ProjectCreate(BaseModel):
    name: str
    description: Optional[str] = None
    color: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('name must not be empty')
        return v


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None
    role: Optional[ProjectRole] = None

    class Config:
        from_attributes = True


class ProjectMemberCreate(BaseModel):
    email: EmailStr
    role: ProjectRole = ProjectRole.MEMBER


class ProjectMemberResponse(BaseModel):
    user_id: str
    project_id: str
    role: ProjectRole
    created_at: str

    class Config:
        from_attributes = True
