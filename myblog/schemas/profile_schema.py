# myblog/schemas/profile_schema.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ProfileUpdate(BaseModel):
    nickname: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    email_public: Optional[bool] = None


class ProfileOut(BaseModel):
    id: str
    user_id: str

    nickname: Optional[str]
    bio: Optional[str] = None
    avatar_url: Optional[str] = None

    # omitted for other people unless email_public
    email: Optional[str] = None
    email_public: bool = True

    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileSearchResult(BaseModel):
    id: str
    nickname: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None

    class Config:
        from_attributes = True
