
from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import Optional
from storehub.db.model.user import User


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_by_email(db: Session, email: str) -> Optional[User]:
    stmt = select(User).where(User.email == _normalize_email(email))
    return db.scalars(stmt).first()


def get_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def create_user(db: Session, email: str, hashed_password: str, name: str | None = None) -> User:
    user = User(
        email=_normalize_email(email),
        hashed_password=hashed_password,
        name=name,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_or_create_user(db: Session, email: str, hashed_password: str, name: str | None = None) -> tuple[User, bool]:
    """Return (user, created). Existing users are left untouched."""
    existing = get_by_email(db, email)
    if existing:
        return existing, False
    return create_user(db, email, hashed_password, name=name), True
