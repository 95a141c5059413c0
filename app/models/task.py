import enum
import uuid
from sqlalchemy import Column, Text, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.label import task_labels


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(Text, nullable=False, default=Priority.MEDIUM.value)
    position = Column(Integer, nullable=False, default=0)
    due_date = Column(Text, nullable=True)  # ISO 8601
    list_id = Column(Text, ForeignKey("lists.id"), nullable=False, index=True)
    project_id = Column(Text, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    assignee_id = Column(Text, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    archived_at = Column(Text, nullable=True)  # заполнено, пока задача лежит в архивном списке
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=True)

    # Relationships
    task_list = relationship("TaskList", back_populates="tasks")
    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User", back_populates="assigned_tasks")
    labels = relationship("Label", secondary=task_labels, back_populates="tasks", order_by="Label.name")

    __table_args__ = (
        Index("idx_tasks_list_position", "list_id", "position"),
    )

    def __repr__(self):
        return f"<Task(id={self.id}, title={self.title}, list_id={self.list_id})>"
