import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.project import ProjectRole
from app.models.task import Task
from app.models.task_list import TaskList
from app.schemas.auth import MessageResponse
from app.schemas.task_list import (
    FlowControlUpdate,
    ListCreate,
    ListResponse,
    ListsReorder,
    ListUpdate,
    ListWithTasks,
)
from app.api.deps import ProjectAccess, require_list_access, require_project_access
from app.services.auth import get_current_timestamp
from app.services.lists import (
    build_list_response,
    build_list_with_tasks,
    count_active_tasks,
    get_archive_list,
    next_list_position,
)
from app.services.tasks import archive_task

router = APIRouter()
logger = logging.getLogger(__name__)


def get_list_or_404(db: Session, list_id: str) -> TaskList:
    task_list = db.query(TaskList).filter(TaskList.id == list_id).first()
    if not task_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="list not found",
        )
    return task_list


@router.get("/projects/{project_id}/lists", response_model=List[ListWithTasks])
def get_project_lists(
    project_id: str,
    include_archive: bool = Query(False, description="Включить архивный список"),
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access()),
):
    """Доска проекта: списки по позиции с активными задачами"""
    query = db.query(TaskList).filter(TaskList.project_id == project_id)
    if not include_archive:
        query = query.filter(TaskList.is_archive.is_(False))
    lists = query.order_by(TaskList.position).all()

    tasks_by_list = {task_list.id: [] for task_list in lists}
    if lists:
        tasks = db.query(Task).filter(
            Task.list_id.in_(tasks_by_list.keys()),
            Task.archived_at.is_(None),
        ).order_by(Task.position).all()
        for task in tasks:
            tasks_by_list[task.list_id].append(task)

    return [build_list_with_tasks(task_list, tasks_by_list[task_list.id]) for task_list in lists]


@router.get("/projects/{project_id}/lists/archive", response_model=ListWithTasks)
def get_project_archive(
    project_id: str,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access()),
):
    """Архивный список с архивными задачами (сначала самые новые)"""
    archive_list = get_archive_list(db, project_id)
    if not archive_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="archive list not found",
        )

    tasks = db.query(Task).filter(
        Task.list_id == archive_list.id,
        Task.archived_at.isnot(None),
    ).order_by(Task.archived_at.desc()).all()
    return build_list_with_tasks(archive_list, tasks)


@router.post("/projects/{project_id}/lists", response_model=ListResponse, status_code=status.HTTP_201_CREATED)
def create_list(
    project_id: str,
    list_data: ListCreate,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access()),
):
    """Создать список (по умолчанию - после последнего не архивного)"""
    position = list_data.position
    if position is None:
        position = next_list_position(db, project_id)

    task_list = TaskList(
        project_id=project_id,
        name=list_data.name,
        color=list_data.color,
        position=position,
        is_archive=False,
        required_role_to_enter=[],
        required_role_to_leave=[],
        created_at=get_current_timestamp(),
    )
    db.add(task_list)
    db.commit()
    db.refresh(task_list)

    logger.info(f"Создан список: ID={task_list.id}, name='{task_list.name}', project={project_id}")
    return build_list_response(task_list)


@router.patch("/projects/{project_id}/lists/reorder", response_model=MessageResponse)
def reorder_lists(
    project_id: str,
    reorder_data: ListsReorder,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access()),
):
    """Новый порядок списков; архивный список не участвует"""
    list_ids = reorder_data.list_ids
    lists = db.query(TaskList).filter(
        TaskList.id.in_(list_ids),
        TaskList.project_id == project_id,
        TaskList.is_archive.is_(False),
    ).all()

    if len(set(list_ids)) != len(list_ids) or len(lists) != len(list_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="invalid list ids",
        )

    timestamp = get_current_timestamp()
    positions = {list_id: index for index, list_id in enumerate(list_ids)}
    for task_list in lists:
        task_list.position = positions[task_list.id]
        task_list.updated_at = timestamp
    db.commit()

    return MessageResponse(message="lists reordered")


@router.get("/lists/{list_id}", response_model=ListResponse)
def get_list(
    list_id: str,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_list_access()),
):
    task_list = get_list_or_404(db, list_id)
    task_count = count_active_tasks(db, [list_id]).get(list_id, 0)
    return build_list_response(task_list, task_count)


@router.put("/lists/{list_id}", response_model=ListResponse)
def update_list(
    list_id: str,
    list_data: ListUpdate,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_list_access(ProjectRole.ADMIN)),
):
    """Обновить список (ADMIN+). Архивный список нельзя переименовать и ограничить."""
    task_list = get_list_or_404(db, list_id)

    if task_list.is_archive:
        if list_data.name is not None and list_data.name != task_list.name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="the archive list cannot be renamed",
            )
        if list_data.required_role_to_enter is not None or list_data.required_role_to_leave is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="flow control of the archive list cannot be changed",
            )

    if list_data.name is not None:
        name = list_data.name.strip()
        if not name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="name must not be empty",
            )
        task_list.name = name

    if list_data.color is not None:
        task_list.color = list_data.color

    if list_data.required_role_to_enter is not None:
        task_list.required_role_to_enter = [role.value for role in list_data.required_role_to_enter]

    if list_data.required_role_to_leave is not None:
        task_list.required_role_to_leave = [role.value for role in list_data.required_role_to_leave]

    task_list.updated_at = get_current_timestamp()
    db.commit()
    db.refresh(task_list)

    logger.info(f"Обновлен список: ID={task_list.id}, name='{task_list.name}', user='{access.user.email}'")
    task_count = count_active_tasks(db, [list_id]).get(list_id, 0)
    return build_list_response(task_list, task_count)


@router.put("/lists/{list_id}/flow-control", response_model=ListResponse)
def update_flow_control(
    list_id: str,
    flow_data: FlowControlUpdate,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_list_access(ProjectRole.ADMIN)),
):
    """Задать роли, которым разрешено перемещать задачи в список и из списка (ADMIN+)"""
    task_list = get_list_or_404(db, list_id)

    if task_list.is_archive:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="flow control of the archive list cannot be changed",
        )

    task_list.required_role_to_enter = [role.value for role in flow_data.required_role_to_enter]
    task_list.required_role_to_leave = [role.value for role in flow_data.required_role_to_leave]
    task_list.updated_at = get_current_timestamp()
    db.commit()
    db.refresh(task_list)

    logger.info(
        f"Flow control списка {task_list.id}: enter={task_list.required_role_to_enter}, "
        f"leave={task_list.required_role_to_leave}, user='{access.user.email}'"
    )
    task_count = count_active_tasks(db, [list_id]).get(list_id, 0)
    return build_list_response(task_list, task_count)


@router.delete("/lists/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_list(
    list_id: str,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_list_access(ProjectRole.ADMIN)),
):
    """Удалить список (ADMIN+); его задачи переезжают в архив"""
    task_list = get_list_or_404(db, list_id)

    if task_list.is_archive:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="the archive list cannot be deleted",
        )

    archive_list = get_archive_list(db, task_list.project_id)
    if not archive_list:
        logger.error(f"У проекта {task_list.project_id} нет архивного списка")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="archive list not found",
        )

    timestamp = get_current_timestamp()
    tasks = db.query(Task).filter(Task.list_id == list_id).all()
    for task in tasks:
        archive_task(task, archive_list, timestamp)
    db.flush()
    db.delete(task_list)
    db.commit()

    logger.info(
        f"Удален список: ID={list_id}, задач перенесено в архив: {len(tasks)}, user='{access.user.email}'"
    )
