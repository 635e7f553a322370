from sqlalchemy import Column, String, DateTime, Float, ForeignKey, Text, func
from sqlalchemy.orm import relationship
from datetime import datetime

from mirai.db.session import Base
from mirai.models.user import generate_uuid


class Resume(Base):
    __tablename__ = "Resume"

    id = Column(String, primary_key=True, default=generate_uuid)
    # UNIQUE: one resume per user
    userId = Column(String, ForeignKey("User.id"), unique=True)
    content = Column(Text)
    # Stored for the scoring feature; nothing in this service computes them
    atsScore = Column(Float, nullable=True)
    feedback = Column(Text, nullable=True)
    createdAt = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updatedAt = Column(DateTime, default=datetime.utcnow, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="resume")
