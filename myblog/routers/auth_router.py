import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr

from myblog.database import get_db
from myblog.auth import (
    register_user,
    authenticate_user,
    create_access_token,
    get_current_user,
)
from myblog.models.profile import Profile
from myblog.models.user import User

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/auth", tags=["Authentication"])

MIN_PASSWORD_LENGTH = 8
MIN_NICKNAME_LENGTH = 2


# ---------- Pydantic request models ----------

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    password_confirm: str
    nickname: str
    bio: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# ----------------- REGISTER ------------------

@router.post("/register", status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    nickname = payload.nickname.strip()

    if payload.password != payload.password_confirm:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )

    if len(nickname) < MIN_NICKNAME_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Nickname must be at least {MIN_NICKNAME_LENGTH} characters long",
        )

    taken = db.query(Profile).filter(Profile.nickname == nickname).first()
    if taken:
        raise HTTPException(status_code=400, detail="Nickname already in use")

    try:
        user = register_user(db, email=payload.email, password=payload.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # Profile shares the account id
    profile = Profile(
        id=user.id,
        user_id=user.id,
        email=user.email,
        nickname=nickname,
        bio=(payload.bio or "").strip() or None,
        email_public=True,
    )
    db.add(profile)
    db.commit()

    logger.info(f"Registered user {user.id}")

    return {
        "message": "Registration successful",
        "user_id": user.id,
        "profile_id": profile.id,
    }


# ------------------- LOGIN -------------------

@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, email=payload.email, password=payload.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    token = create_access_token({"sub": user.id})

    return {
        "access_token": token,
        "token_type": "bearer",
    }


# -------------------- ME ---------------------

@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return {
        "id": current_user.id,
        "email": current_user.email,
        "created_at": current_user.created_at,
    }
