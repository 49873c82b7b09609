
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from storehub.core.config import Settings
from storehub.db.model.user import User
from storehub.db.session import get_db
from storehub.services.auth_service import (
    clear_cookie, get_current_user, get_settings, login_user,
)


router = APIRouter(prefix="/auth", tags=["auth"])


class LoginInput(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    id: int
    email: str
    name: str | None = None


def _to_out(user: User) -> UserOut:
    return UserOut(id=user.id, email=user.email, name=user.name)


@router.post("/login", response_model=UserOut)
def login(
    data: LoginInput,
    response: Response,
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
):
    user = login_user(response, db, data.email, data.password, cfg)
    return _to_out(user)


@router.post("/logout")
def logout(response: Response, cfg: Settings = Depends(get_settings)):
    clear_cookie(response, cfg)
    return {"ok": True}


@router.get("/me", response_model=UserOut)
def me(current: User = Depends(get_current_user)):
    return _to_out(current)
