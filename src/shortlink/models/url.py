from datetime import datetime, UTC

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from src.shortlink.db.base import Base


class URL(Base):
    __tablename__ = "urls"

    # The short code doubles as the primary key
    id = Column(String(64), primary_key=True)
    original_url = Column(String, unique=True, index=True, nullable=False)
    short_url = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    owner_id = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)

    owner = relationship("User", back_populates="urls")
