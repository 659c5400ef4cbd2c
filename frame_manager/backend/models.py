"""
Database models for the Frame Manager
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class Frame(Base):
    """
    A named frame image; the bytes live in the storage bucket, this row
    only points at them through image_url
    """
    __tablename__ = "frames"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    image_url = Column(String(1024), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Frame(id={self.id}, name={self.name!r}, is_active={self.is_active})>"
