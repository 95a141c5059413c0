from typing import Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.task import Task
from app.models.task_list import TaskList
from app.schemas.task import TaskResponse
from app.schemas.task_list import ListResponse, ListWithTasks

ARCHIVE_LIST_NAME = "Archive"
ARCHIVE_LIST_POSITION = 999

# Списки, которые создаются вместе с проектом
DEFAULT_LISTS = [
    {"name": "To Do", "position": 0, "color": "#6B7280"},
    {"name": "In Progress", "position": 1, "color": "#3B82F6"},
    {"name": "Done", "position": 2, "color": "#10B981"},
    {"name": ARCHIVE_LIST_NAME, "position": ARCHIVE_LIST_POSITION, "color": "#9CA3AF", "is_archive": True},
]


def create_default_lists(db: Session, project_id: str, timestamp: str) -> List[TaskList]:
    """Стандартные списки нового проекта, включая единственный архивный список"""
    lists = [
        TaskList(
            project_id=project_id,
            name=defaults["name"],
            position=defaults["position"],
            color=defaults["color"],
            is_archive=defaults.get("is_archive", False),
            required_role_to_enter=[],
            required_role_to_leave=[],
            created_at=timestamp,
        )
        for defaults in DEFAULT_LISTS
    ]
    db.add_all(lists)
    return lists


def get_archive_list(db: Session, project_id: str) -> Optional[TaskList]:
    return db.query(TaskList).filter(
        TaskList.project_id == project_id,
        TaskList.is_archive.is_(True),
    ).first()


def get_first_list(db: Session, project_id: str) -> Optional[TaskList]:
    """Первый (по позиции) не архивный список проекта"""
    return db.query(TaskList).filter(
        TaskList.project_id == project_id,
        TaskList.is_archive.is_(False),
    ).order_by(TaskList.position).first()


def next_list_position(db: Session, project_id: str) -> int:
    """Позиция после последнего не архивного списка"""
    last_position = db.query(func.max(TaskList.position)).filter(
        TaskList.project_id == project_id,
        TaskList.is_archive.is_(False),
    ).scalar()
    return 0 if last_position is None else last_position + 1


def count_active_tasks(db: Session, list_ids: Iterable[str]) -> Dict[str, int]:
    list_ids = list(list_ids)
    if not list_ids:
        return {}
    rows = db.query(Task.list_id, func.count(Task.id)).filter(
        Task.list_id.in_(list_ids),
        Task.archived_at.is_(None),
    ).group_by(Task.list_id).all()
    return {list_id: count for list_id, count in rows}


def build_list_response(task_list: TaskList, task_count: int = 0) -> ListResponse:
    return ListResponse(
        id=task_list.id,
        project_id=task_list.project_id,
        name=task_list.name,
        color=task_list.color,
        position=task_list.position,
        is_archive=bool(task_list.is_archive),
        required_role_to_enter=list(task_list.required_role_to_enter or []),
        required_role_to_leave=list(task_list.required_role_to_leave or []),
        created_at=task_list.created_at,
        updated_at=task_list.updated_at,
        task_count=task_count,
    )


def build_list_with_tasks(task_list: TaskList, tasks: List[Task]) -> ListWithTasks:
    base = build_list_response(task_list, task_count=len(tasks))
    return ListWithTasks(
        **base.model_dump(),
        tasks=[TaskResponse.model_validate(task) for task in tasks],
    )
