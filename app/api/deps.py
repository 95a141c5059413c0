from dataclasses import dataclass
from typing import NoReturn, Optional
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.models.project import ProjectMember, ProjectRole, has_min_role
from app.models.task_list import TaskList
from app.models.task import Task
from app.services.auth import verify_access_token, INVALID_ACCESS_TOKEN
from app.services.errors import AuthError, ErrorKind
from app.services.sessions import SessionManager

security = HTTPBearer(auto_error=False)


def raise_auth_error(error: AuthError) -> NoReturn:
    """Преобразование ошибки сервиса в HTTP-ответ"""
    headers = None
    if error.kind == ErrorKind.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    raise HTTPException(status_code=error.status_code, detail=error.reason, headers=headers)


def get_session_manager(db: Session = Depends(get_db)) -> SessionManager:
    return SessionManager(db)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Получить текущего пользователя из JWT токена"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise_auth_error(AuthError.unauthorized("access token not found"))

    claims = verify_access_token(credentials.credentials)
    if isinstance(claims, AuthError):
        raise_auth_error(claims)

    user = db.query(User).filter(User.id == claims.user_id).first()
    if user is None:
        raise_auth_error(AuthError.unauthorized(INVALID_ACCESS_TOKEN))

    return user


@dataclass
class ProjectAccess:
    """Текущий пользователь и его роль в проекте"""
    user: User
    project_id: str
    role: ProjectRole


def _check_membership(
    db: Session,
    user: User,
    project_id: str,
    min_role: Optional[ProjectRole],
) -> ProjectAccess:
    membership = db.query(ProjectMember).filter(
        ProjectMember.user_id == user.id,
        ProjectMember.project_id == project_id,
    ).first()

    if membership is None:
        raise_auth_error(AuthError.forbidden("no access to this project"))

    role = ProjectRole(membership.role)
    if min_role is not None and not has_min_role(role, min_role):
        raise_auth_error(AuthError.forbidden(f"insufficient project role: {min_role.value} required"))

    return ProjectAccess(user=user, project_id=project_id, role=role)


def require_project_access(min_role: Optional[ProjectRole] = None):
    """Dependency: пользователь - участник проекта {project_id} с ролью не ниже min_role"""
    def check_project_access(
        project_id: str,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> ProjectAccess:
        return _check_membership(db, current_user, project_id, min_role)

    return check_project_access


def require_list_access(min_role: Optional[ProjectRole] = None):
    """Dependency: доступ к проекту через список {list_id}"""
    def check_list_access(
        list_id: str,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> ProjectAccess:
        task_list = db.query(TaskList).filter(TaskList.id == list_id).first()
        if task_list is None:
            raise_auth_error(AuthError.not_found("list not found"))
        return _check_membership(db, current_user, task_list.project_id, min_role)

    return check_list_access


def require_task_access(min_role: Optional[ProjectRole] = None):
    """Dependency: доступ к проекту через задачу {task_id}"""
    def check_task_access(
        task_id: str,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> ProjectAccess:
        task = db.query(Task).filter(Task.id == task_id).first()
        if task is None:
            raise_auth_error(AuthError.not_found("task not found"))
        return _check_membership(db, current_user, task.project_id, min_role)

    return check_task_access
