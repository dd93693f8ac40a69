from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from src.shortlink.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    username = Column(String(64), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    urls = relationship("URL", back_populates="owner")
