from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel, utcnow


class ItemHistory(BaseModel):
    """Append-only ledger of backlog item changes.

    ``old_value``/``new_value`` hold serialized JSON. The ledger never
    interprets them; readers decode them on the way out.
    """
    __tablename__ = "item_histories"

    action = Column(String(50), nullable=False)
    field_changed = Column(String(50), nullable=True)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    comment = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # Foreign keys
    item_id = Column(Uuid, ForeignKey("backlog_items.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    item = relationship("BacklogItem", back_populates="history")
    user = relationship("User")


class SprintHistory(BaseModel):
    """Append-only ledger of sprint lifecycle and membership changes."""
    __tablename__ = "sprint_histories"

    action = Column(String(50), nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # Foreign keys
    sprint_id = Column(Uuid, ForeignKey("sprints.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    item_id = Column(Uuid, ForeignKey("backlog_items.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    sprint = relationship("Sprint", back_populates="history")
    user = relationship("User")
    item = relationship("BacklogItem", back_populates="sprint_events")
