from sqlalchemy import Column, String, Integer, Date, ForeignKey, Text, Index, Uuid, text
from sqlalchemy.orm import relationship
from .base import BaseModel
from ..core.constants import SprintStatus


_ACTIVE_ONLY = text("status = 'Active'")


class Sprint(BaseModel):
    __tablename__ = "sprints"
    __table_args__ = (
        # At most one active sprint per project
        Index(
            "uq_sprints_one_active_per_project",
            "project_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )

    name = Column(String(100), nullable=False)
    goal = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=SprintStatus.PLANNING.value)

    # Frozen at completion
    velocity = Column(Integer, nullable=True)

    # Foreign keys
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="sprints")
    creator = relationship("User")
    backlog_items = relationship("BacklogItem", back_populates="sprint")
    history = relationship(
        "SprintHistory",
        back_populates="sprint",
        cascade="all, delete-orphan"
    )
