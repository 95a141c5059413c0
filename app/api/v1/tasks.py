import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.label import Label
from app.models.project import ProjectMember, ProjectRole
from app.models.task import Task
from app.models.task_list import TaskList
from app.schemas.auth import MessageResponse
from app.schemas.task import (
    TaskCreate,
    TaskMove,
    TaskResponse,
    TaskRestore,
    TasksReorder,
    TaskUpdate,
)
from app.api.deps import ProjectAccess, require_list_access, require_task_access
from app.services.auth import get_current_timestamp
from app.services.flow_control import decide
from app.services.lists import get_archive_list, get_first_list
from app.services.tasks import archive_task, next_task_position, restore_task

router = APIRouter()
logger = logging.getLogger(__name__)


def get_task_or_404(db: Session, task_id: str) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="task not found",
        )
    return task


def ensure_assignee_is_member(db: Session, project_id: str, assignee_id: str) -> None:
    membership = db.query(ProjectMember).filter(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == assignee_id,
    ).first()
    if not membership:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="assignee must be a project member",
        )


def resolve_task_labels(db: Session, project_id: str, label_ids: List[str]) -> List[Label]:
    """Метки по ID; все должны принадлежать проекту задачи"""
    if not label_ids:
        return []
    labels = db.query(Label).filter(
        Label.id.in_(label_ids),
        Label.project_id == project_id,
    ).all()
    if len(labels) != len(label_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="labels must belong to the project",
        )
    return labels


@router.post("/lists/{list_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    list_id: str,
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_list_access()),
):
    """Создать задачу в конце списка"""
    task_list = db.query(TaskList).filter(TaskList.id == list_id).first()

    if task_list.is_archive:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="tasks cannot be created in the archive list",
        )

    if task_data.assignee_id:
        ensure_assignee_is_member(db, task_list.project_id, task_data.assignee_id)
    labels = resolve_task_labels(db, task_list.project_id, task_data.label_ids)

    task = Task(
        title=task_data.title,
        description=task_data.description,
        priority=task_data.priority.value,
        due_date=task_data.due_date,
        assignee_id=task_data.assignee_id,
        list_id=list_id,
        project_id=task_list.project_id,
        position=next_task_position(db, list_id),
        labels=labels,
        created_at=get_current_timestamp(),
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    logger.info(f"Создана задача: ID={task.id}, title='{task.title}', list={list_id}, user='{access.user.email}'")
    return task


@router.patch("/lists/{list_id}/tasks/reorder", response_model=MessageResponse)
def reorder_tasks(
    list_id: str,
    reorder_data: TasksReorder,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_list_access()),
):
    """Новый порядок задач внутри списка (flow control не применяется)"""
    task_ids = reorder_data.task_ids
    tasks = db.query(Task).filter(
        Task.id.in_(task_ids),
        Task.list_id == list_id,
        Task.archived_at.is_(None),
    ).all()

    if len(set(task_ids)) != len(task_ids) or len(tasks) != len(task_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="invalid task ids",
        )

    timestamp = get_current_timestamp()
    positions = {task_id: index for index, task_id in enumerate(task_ids)}
    for task in tasks:
        task.position = positions[task.id]
        task.updated_at = timestamp
    db.commit()

    return MessageResponse(message="tasks reordered")


@router.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_task_access()),
):
    return get_task_or_404(db, task_id)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_task_access()),
):
    """Обновить поля задачи; архивные задачи не редактируются"""
    task = get_task_or_404(db, task_id)

    if task.archived_at is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="archived tasks cannot be edited",
        )

    # Явный null очищает поле, отсутствующее поле не трогаем
    fields_set = task_data.model_fields_set

    if task_data.title is not None:
        title = task_data.title.strip()
        if not title:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="title must not be empty",
            )
        task.title = title

    if "description" in fields_set:
        task.description = task_data.description

    if task_data.priority is not None:
        task.priority = task_data.priority.value

    if "due_date" in fields_set:
        task.due_date = task_data.due_date

    if "assignee_id" in fields_set:
        if task_data.assignee_id is not None:
            ensure_assignee_is_member(db, task.project_id, task_data.assignee_id)
        task.assignee_id = task_data.assignee_id

    if task_data.label_ids is not None:
        task.labels = resolve_task_labels(db, task.project_id, task_data.label_ids)

    task.updated_at = get_current_timestamp()
    db.commit()
    db.refresh(task)

    logger.info(f"Обновлена задача: ID={task.id}, user='{access.user.email}'")
    return task


@router.patch("/tasks/{task_id}/move", response_model=TaskResponse)
def move_task(
    task_id: str,
    move_data: TaskMove,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_task_access()),
):
    """Переместить задачу в другой список (или на другую позицию в том же).

    Перемещение между списками проверяется правилами flow control
    исходного и целевого списков для роли пользователя в проекте.
    """
    task = get_task_or_404(db, task_id)

    target_list = db.query(TaskList).filter(TaskList.id == move_data.list_id).first()
    if not target_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="target list not found",
        )

    if target_list.project_id != task.project_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="task cannot be moved to another project",
        )

    if task.archived_at is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="archived tasks must be restored before moving",
        )

    if target_list.is_archive:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="use archive to move a task into the archive list",
        )

    source_list = task.task_list
    if source_list.id != target_list.id:
        decision = decide(source_list, target_list, access.role)
        if not decision.allowed:
            logger.warning(
                f"Flow control: перемещение задачи {task.id} из '{source_list.name}' "
                f"в '{target_list.name}' запрещено для роли {access.role.value} "
                f"(user='{access.user.email}')"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=decision.reason,
            )

    position = move_data.position
    if position is None:
        position = next_task_position(db, target_list.id, exclude_task_id=task.id)

    task.list_id = target_list.id
    task.position = position
    task.updated_at = get_current_timestamp()
    db.commit()
    db.refresh(task)

    logger.info(
        f"Перемещена задача: ID={task.id}, '{source_list.name}' -> '{target_list.name}', "
        f"position={position}, user='{access.user.email}'"
    )
    return task


@router.delete("/tasks/{task_id}", response_model=TaskResponse)
def delete_task(
    task_id: str,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_task_access(ProjectRole.ADMIN)),
):
    """Мягкое удаление (ADMIN+): задача переезжает в архивный список"""
    task = get_task_or_404(db, task_id)

    if task.archived_at is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="task is already archived",
        )

    archive_list = get_archive_list(db, task.project_id)
    if not archive_list:
        logger.error(f"У проекта {task.project_id} нет архивного списка")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="archive list not found",
        )

    archive_task(task, archive_list, get_current_timestamp())
    db.commit()
    db.refresh(task)

    logger.info(f"Задача {task.id} перемещена в архив, user='{access.user.email}'")
    return task


@router.post("/tasks/{task_id}/restore", response_model=TaskResponse)
def restore_archived_task(
    task_id: str,
    restore_data: Optional[TaskRestore] = None,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_task_access(ProjectRole.ADMIN)),
):
    """Вернуть задачу из архива (ADMIN+) в указанный или первый список проекта"""
    task = get_task_or_404(db, task_id)

    if task.archived_at is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="task is not archived",
        )

    if restore_data and restore_data.list_id:
        target_list = db.query(TaskList).filter(TaskList.id == restore_data.list_id).first()
        if not target_list or target_list.project_id != task.project_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="target list not found",
            )
        if target_list.is_archive:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="cannot restore into the archive list",
            )
    else:
        target_list = get_first_list(db, task.project_id)
        if not target_list:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="project has no list to restore into",
            )

    restore_task(db, task, target_list, get_current_timestamp())
    db.commit()
    db.refresh(task)

    logger.info(f"Задача {task.id} восстановлена в список '{target_list.name}', user='{access.user.email}'")
    return task


@router.delete("/tasks/{task_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
def delete_task_permanently(
    task_id: str,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_task_access(ProjectRole.ADMIN)),
):
    """Окончательное удаление (ADMIN+), только для задач из архива"""
    task = get_task_or_404(db, task_id)

    if task.archived_at is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="only archived tasks can be deleted permanently",
        )

    db.delete(task)
    db.commit()

    logger.info(f"Задача {task_id} удалена окончательно, user='{access.user.email}'")
