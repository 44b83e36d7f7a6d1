from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from myblog.database import Base


class PostLike(Base):
    __tablename__ = "likes"
    __table_args__ = (
        # one like per person per post
        UniqueConstraint("post_id", "user_id", name="likes_post_id_user_id_key"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(String, ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    post = relationship("Post", back_populates="likes")
