from sqlalchemy import Column, String, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel


class Project(BaseModel):
    __tablename__ = "projects"

    name = Column(String(100), nullable=False)
    key = Column(String(10), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)

    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False)

    # Relationships
    creator = relationship("User")
    sprints = relationship(
        "Sprint",
        back_populates="project",
        cascade="all, delete-orphan"
    )
    backlog_items = relationship(
        "BacklogItem",
        back_populates="project",
        cascade="all, delete-orphan"
    )
