from sqlalchemy import Column, String, Integer, Text, ForeignKey, JSON, Index, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel
from ..core.constants import ItemStatus, ItemType, Priority


class BacklogItem(BaseModel):
    __tablename__ = "backlog_items"
    __table_args__ = (
        Index("ix_backlog_items_project_position", "project_id", "position"),
    )

    # Core fields
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, default=ItemType.TASK.value)
    priority = Column(String(20), nullable=False, default=Priority.MEDIUM.value)
    status = Column(String(20), nullable=False, default=ItemStatus.NEW.value)
    story_points = Column(Integer, nullable=True)
    labels = Column(JSON, nullable=False, default=list)
    position = Column(Integer, nullable=False, default=0)

    # Foreign keys
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    sprint_id = Column(Uuid, ForeignKey("sprints.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="backlog_items")
    sprint = relationship("Sprint", back_populates="backlog_items")
    creator = relationship("User")
    history = relationship(
        "ItemHistory",
        back_populates="item",
        cascade="all, delete-orphan"
    )
    # Sprint ledger rows keep their place but lose the item reference
    sprint_events = relationship("SprintHistory", back_populates="item")
