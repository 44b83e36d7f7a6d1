# myblog/models/comment.py

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from myblog.database import Base


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(String, ForeignKey("posts.id"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)

    # null for comments attached directly to the post
    parent_id = Column(String, ForeignKey("comments.id"), nullable=True, index=True)

    content = Column(Text, nullable=False)
    likes_count = Column(Integer, default=0, nullable=False)

    # Soft delete: content is hidden but the row keeps reply threads intact
    deleted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # -------------------------
    # RELATIONSHIPS
    # -------------------------

    post = relationship(
        "Post",
        back_populates="comments",
    )

    parent = relationship(
        "Comment",
        remote_side=[id],
        uselist=False,
    )

    likes = relationship(
        "CommentLike",
        back_populates="comment",
        cascade="all, delete-orphan",
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
