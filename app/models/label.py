import uuid
from sqlalchemy import Column, Text, ForeignKey, Table, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


# Связь задача <-> метка (многие ко многим)
task_labels = Table(
    "task_labels",
    Base.metadata,
    Column("task_id", Text, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", Text, ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True),
)


class Label(Base):
    __tablename__ = "labels"

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(Text, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    color = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)

    # Relationships
    project = relationship("Project", back_populates="labels")
    tasks = relationship("Task", secondary=task_labels, back_populates="labels")

    # Имя метки уникально в пределах проекта
    __table_args__ = (
        UniqueConstraint("name", "project_id", name="uq_label_name_project"),
    )

    def __repr__(self):
        return f"<Label(id={self.id}, name={self.name}, project_id={self.project_id})>"
