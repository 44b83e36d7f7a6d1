from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from myblog.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    # Same value as users.id (one profile per account)
    id = Column(String, primary_key=True, index=True)

    user_id = Column(
        String,
        ForeignKey("users.id"),
        unique=True,
        nullable=False
    )

    email = Column(String, nullable=True, index=True)
    nickname = Column(String, unique=True, nullable=True, index=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String, nullable=True)

    email_public = Column(Boolean, default=True, nullable=False)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # -------------------------------------------------------
    # RELATIONSHIPS
    # -------------------------------------------------------

    user = relationship("User", back_populates="profile", foreign_keys=[user_id])
