from sqlalchemy import Column, String
from .base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    google_id = Column(String, unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    avatar_url = Column(String, nullable=True)
