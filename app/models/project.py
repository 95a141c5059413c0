import enum
import uuid
from sqlalchemy import Column, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class ProjectRole(str, enum.Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


# Иерархия ролей проекта: используется только для административных проверок
# (require_project_access и т.п.), но не для flow control списков
PROJECT_ROLE_RANK = {
    ProjectRole.OWNER: 3,
    ProjectRole.ADMIN: 2,
    ProjectRole.MEMBER: 1,
}


def has_min_role(role: ProjectRole, min_role: ProjectRole) -> bool:
    return PROJECT_ROLE_RANK[ProjectRole(role)] >= PROJECT_ROLE_RANK[ProjectRole(min_role)]


class Project(Base):
    __tablename__ = "projects"

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=True)

    # Relationships
    members = relationship("ProjectMember", back_populates="project", cascade="all, delete-orphan")
    lists = relationship(
        "TaskList",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="TaskList.position",
    )
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")
    labels = relationship("Label", back_populates="project", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Project(id={self.id}, name={self.name})>"


class ProjectMember(Base):
    __tablename__ = "project_members"

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Text, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Text, nullable=False, default=ProjectRole.MEMBER.value)
    created_at = Column(Text, nullable=False)

    # Relationships
    user = relationship("User", back_populates="project_memberships")
    project = relationship("Project", back_populates="members")

    # Пользователь состоит в проекте не более одного раза
    __table_args__ = (
        UniqueConstraint("user_id", "project_id", name="uq_project_member"),
    )

    def __repr__(self):
        return f"<ProjectMember(user_id={self.user_id}, project_id={self.project_id}, role={self.role})>"
