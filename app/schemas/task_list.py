from typing import Optional, List
from pydantic import BaseModel, field_validator

from app.models.project import ProjectRole
from app.schemas.task import TaskResponse


def _unique_roles(v: Optional[List[ProjectRole]]) -> Optional[List[ProjectRole]]:
    if v is None:
        return v
    # порядок сохраняем, дубликаты убираем
    return list(dict.fromkeys(v))


class ListCreate(BaseModel):
    name: str
    color: Optional[str] = None
    position: Optional[int] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('name must not be empty')
        return v


class ListUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    required_role_to_enter: Optional[List[ProjectRole]] = None
    required_role_to_leave: Optional[List[ProjectRole]] = None

    @field_validator('required_role_to_enter', 'required_role_to_leave')
    @classmethod
    def validate_roles(cls, v: Optional[List[ProjectRole]]) -> Optional[List[ProjectRole]]:
        return _unique_roles(v)


class FlowControlUpdate(BaseModel):
    required_role_to_enter: List[ProjectRole] = []
    required_role_to_leave: List[ProjectRole] = []

    @field_validator('required_role_to_enter', 'required_role_to_leave')
    @classmethod
    def validate_roles(cls, v: List[ProjectRole]) -> List[ProjectRole]:
        return _unique_roles(v)


class ListsReorder(BaseModel):
    list_ids: List[str]


class ListResponse(BaseModel):
    id: str
    project_id: str
    name: str
    color: Optional[str] = None
    position: int
    is_archive: bool
    required_role_to_enter: List[ProjectRole] = []
    required_role_to_leave: List[ProjectRole] = []
    created_at: str
    updated_at: Optional[str] = None
    task_count: int = 0

    class Config:
        from_attributes = True


class ListWithTasks(ListResponse):
    tasks: List[TaskResponse] = []
