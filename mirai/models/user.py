from sqlalchemy import Column, String, DateTime, Integer, JSON, Text, func
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from mirai.db.session import Base


def generate_uuid():
    return str(uuid.uuid4())


# TEXT[] on PostgreSQL, JSON list everywhere else (SQLite in tests)
StringList = postgresql.ARRAY(Text).with_variant(JSON(), "sqlite")


class User(Base):
    __tablename__ = "User"

    id = Column(String, primary_key=True, default=generate_uuid)
    # Both identities are unique: reconciliation relinks rather than duplicates
    clerkUserId = Column(String, unique=True, nullable=False)
    email = Column(String, unique=True, nullable=False)
    name = Column(String)
    imageUrl = Column(String)
    industry = Column(String)
    bio = Column(Text)
    experience = Column(Integer)
    skills = Column(StringList)
    # Timestamps: prefer server-managed, but also provide client-side defaults to satisfy NOT NULL without DB defaults
    createdAt = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updatedAt = Column(DateTime, default=datetime.utcnow, server_default=func.now(), onupdate=func.now())

    resume = relationship("Resume", back_populates="user", uselist=False)
