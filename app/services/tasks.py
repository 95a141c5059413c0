from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.task import Task
from app.models.task_list import TaskList


def next_task_position(db: Session, list_id: str, exclude_task_id: Optional[str] = None) -> int:
    """Позиция в конце списка (среди не архивных задач)"""
    query = db.query(func.max(Task.position)).filter(
        Task.list_id == list_id,
        Task.archived_at.is_(None),
    )
    if exclude_task_id:
        query = query.filter(Task.id != exclude_task_id)
    last_position = query.scalar()
    return 0 if last_position is None else last_position + 1


def archive_task(task: Task, archive_list: TaskList, timestamp: str) -> None:
    """Мягкое удаление: задача переезжает в архивный список"""
    task.list_id = archive_list.id
    task.archived_at = timestamp
    task.updated_at = timestamp


def restore_task(db: Session, task: Task, target_list: TaskList, timestamp: str) -> None:
    """Возврат задачи из архива в конец target_list"""
    task.position = next_task_position(db, target_list.id, exclude_task_id=task.id)
    task.list_id = target_list.id
    task.archived_at = None
    task.updated_at = timestamp
