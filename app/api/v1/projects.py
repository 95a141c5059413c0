import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.label import Label
from app.models.project import Project, ProjectMember, ProjectRole
from app.models.user import User
from app.schemas.label import LabelCreate, LabelResponse, LabelUpdate
from app.schemas.project import (
    ProjectCreate,
    ProjectMemberCreate,
    ProjectMemberResponse,
    ProjectResponse,
)
from app.api.deps import ProjectAccess, get_current_user, require_project_access
from app.services.auth import get_current_timestamp
from app.services.lists import create_default_lists

router = APIRouter()
logger = logging.getLogger(__name__)


def build_project_response(project: Project, role: ProjectRole) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        color=project.color,
        created_at=project.created_at,
        updated_at=project.updated_at,
        role=role,
    )


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    project_data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Создать проект: автор становится OWNER, создаются стандартные списки и архив"""
    timestamp = get_current_timestamp()
    project = Project(
        name=project_data.name,
        description=project_data.description,
        color=project_data.color,
        created_at=timestamp,
    )
    db.add(project)
    db.flush()  # Получаем ID проекта

    db.add(
        ProjectMember(
            user_id=current_user.id,
            project_id=project.id,
            role=ProjectRole.OWNER.value,
            created_at=timestamp,
        )
    )
    create_default_lists(db, project.id, timestamp)
    db.commit()
    db.refresh(project)

    logger.info(f"Создан проект: ID={project.id}, name='{project.name}', user='{current_user.email}'")
    return build_project_response(project, ProjectRole.OWNER)


@router.get("/projects", response_model=dict)
def get_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Проекты текущего пользователя с его ролью"""
    rows = db.query(Project, ProjectMember.role).join(
        ProjectMember, ProjectMember.project_id == Project.id
    ).filter(
        ProjectMember.user_id == current_user.id
    ).order_by(Project.created_at.desc()).all()

    return {
        "projects": [
            build_project_response(project, ProjectRole(role))
            for project, role in rows
        ]
    }


@router.get("/projects/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access()),
):
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="project not found",
        )
    return build_project_response(project, access.role)


@router.post(
    "/projects/{project_id}/members",
    response_model=ProjectMemberResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_project_member(
    project_id: str,
    member_data: ProjectMemberCreate,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access(ProjectRole.ADMIN)),
):
    """Добавить участника в проект (ADMIN+; роль OWNER может выдать только OWNER)"""
    if member_data.role == ProjectRole.OWNER and access.role != ProjectRole.OWNER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="only an owner can grant the OWNER role",
        )

    user = db.query(User).filter(User.email == member_data.email.strip().lower()).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="user not found",
        )

    existing = db.query(ProjectMember).filter(
        ProjectMember.user_id == user.id,
        ProjectMember.project_id == project_id,
    ).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="user is already a project member",
        )

    membership = ProjectMember(
        user_id=user.id,
        project_id=project_id,
        role=member_data.role.value,
        created_at=get_current_timestamp(),
    )
    db.add(membership)
    db.commit()
    db.refresh(membership)

    logger.info(
        f"Добавлен участник проекта: project={project_id}, user='{user.email}', "
        f"role={membership.role}, by='{access.user.email}'"
    )
    return membership


def get_label_or_404(db: Session, project_id: str, label_id: str) -> Label:
    label = db.query(Label).filter(
        Label.id == label_id,
        Label.project_id == project_id,
    ).first()
    if not label:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="label not found",
        )
    return label


def ensure_label_name_is_free(db: Session, project_id: str, name: str, exclude_id: Optional[str] = None) -> None:
    query = db.query(Label).filter(Label.project_id == project_id, Label.name == name)
    if exclude_id:
        query = query.filter(Label.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="label with this name already exists",
        )


@router.get("/projects/{project_id}/labels", response_model=List[LabelResponse])
def get_project_labels(
    project_id: str,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access()),
):
    return db.query(Label).filter(Label.project_id == project_id).order_by(Label.name).all()


@router.post(
    "/projects/{project_id}/labels",
    response_model=LabelResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_label(
    project_id: str,
    label_data: LabelCreate,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access(ProjectRole.ADMIN)),
):
    """Создать метку проекта (ADMIN+); имя уникально в пределах проекта"""
    ensure_label_name_is_free(db, project_id, label_data.name)

    label = Label(
        project_id=project_id,
        name=label_data.name,
        color=label_data.color,
        created_at=get_current_timestamp(),
    )
    db.add(label)
    db.commit()
    db.refresh(label)

    logger.info(f"Создана метка: ID={label.id}, name='{label.name}', project={project_id}, user='{access.user.email}'")
    return label


@router.put("/projects/{project_id}/labels/{label_id}", response_model=LabelResponse)
def update_label(
    project_id: str,
    label_id: str,
    label_data: LabelUpdate,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access(ProjectRole.ADMIN)),
):
    label = get_label_or_404(db, project_id, label_id)

    if label_data.name is not None and label_data.name != label.name:
        ensure_label_name_is_free(db, project_id, label_data.name, exclude_id=label.id)
        label.name = label_data.name

    if label_data.color is not None:
        label.color = label_data.color

    db.commit()
    db.refresh(label)

    logger.info(f"Обновлена метка: ID={label.id}, user='{access.user.email}'")
    return label


@router.delete("/projects/{project_id}/labels/{label_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_label(
    project_id: str,
    label_id: str,
    db: Session = Depends(get_db),
    access: ProjectAccess = Depends(require_project_access(ProjectRole.ADMIN)),
):
    """Удалить метку; она снимается со всех задач"""
    label = get_label_or_404(db, project_id, label_id)
    db.delete(label)
    db.commit()

    logger.info(f"Удалена метка: ID={label_id}, project={project_id}, user='{access.user.email}'")
