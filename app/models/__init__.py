from app.models.user import User
from app.models.refresh_token import RefreshToken
from app.models.project import Project, ProjectMember, ProjectRole
from app.models.task_list import TaskList
from app.models.task import Task, Priority
from app.models.label import Label

__all__ = ["User", "RefreshToken", "Project", "ProjectMember", "ProjectRole", "TaskList", "Task", "Priority", "Label"]
