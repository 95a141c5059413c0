from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, field_validator

from app.models.task import Priority
from app.schemas.label import LabelResponse


def _unique_ids(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    return list(dict.fromkeys(v))


def _validate_iso_datetime(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        datetime.fromisoformat(v.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError("due_date must be ISO 8601 (YYYY-MM-DDTHH:MM:SS)")
    return v


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    due_date: Optional[str] = None
    assignee_id: Optional[str] = None
    label_ids: List[str] = []

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('title must not be empty')
        return v

    @field_validator('due_date')
    @classmethod
    def validate_due_date(cls, v: Optional[str]) -> Optional[str]:
        return _validate_iso_datetime(v)

    @field_validator('label_ids')
    @classmethod
    def validate_label_ids(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _unique_ids(v)


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[str] = None
    assignee_id: Optional[str] = None
    label_ids: Optional[List[str]] = None

    @field_validator('due_date')
    @classmethod
    def validate_due_date(cls, v: Optional[str]) -> Optional[str]:
        return _validate_iso_datetime(v)

    @field_validator('label_ids')
    @classmethod
    def validate_label_ids(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _unique_ids(v)


class TaskMove(BaseModel):
    list_id: str
    position: Optional[int] = None

    @field_validator('position')
    @classmethod
    def validate_position(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError('position must not be negative')
        return v


class TaskRestore(BaseModel):
    list_id: Optional[str] = None


class TasksReorder(BaseModel):
    task_ids: List[str]


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    priority: Priority
    position: int
    due_date: Optional[str] = None
    list_id: str
    project_id: str
    assignee_id: Optional[str] = None
    archived_at: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None
    labels: List[LabelResponse] = []

    class Config:
        from_attributes = True
