import uuid
from sqlalchemy import Column, Text, Integer, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship

from app.database import Base


class TaskList(Base):
    __tablename__ = "lists"

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(Text, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    color = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    # Ровно один архивный список на проект
    is_archive = Column(Boolean, nullable=False, default=False)
    # Роли, которым разрешено перемещать задачи в список / из списка; пустой список = без ограничений
    required_role_to_enter = Column(JSON, nullable=False, default=list)
    required_role_to_leave = Column(JSON, nullable=False, default=list)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=True)

    # Relationships
    project = relationship("Project", back_populates="lists")
    tasks = relationship("Task", back_populates="task_list", order_by="Task.position")

    def __repr__(self):
        return f"<TaskList(id={self.id}, name={self.name}, is_archive={self.is_archive})>"
