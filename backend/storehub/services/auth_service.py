
from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session
from storehub.core.config import Settings
from storehub.core.errors import AuthorizationError
from storehub.core.security import verify_password, create_access_token, decode_token
from storehub.db.model.user import User
from storehub.db.session import get_db
from storehub.repository.user_repo import get_by_email


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


'''
Cookie 策略：
    - 只有一枚 HttpOnly Cookie，过期时间与 JWT exp 对齐
    - 本地 http 开发 Secure=False，线上由 COOKIE_SECURE 打开
'''
def set_auth_cookie(resp: Response, token: str, max_age: int, cfg: Settings) -> None:
    resp.set_cookie(
        key=cfg.COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=cfg.COOKIE_SECURE,
        samesite=cfg.COOKIE_SAMESITE,
        domain=cfg.COOKIE_DOMAIN or None,
        path="/",
    )


def clear_cookie(response: Response, cfg: Settings) -> None:
    response.delete_cookie(key=cfg.COOKIE_NAME, domain=cfg.COOKIE_DOMAIN or None, path="/")


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    user = get_by_email(db, email)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


'''
登录：校验密码 → 签发 JWT → 写 HttpOnly Cookie
'''
def login_user(response: Response, db: Session, email: str, password: str, cfg: Settings) -> User:
    user = authenticate_user(db, email, password)
    if not user:
        raise AuthorizationError("Invalid credentials")

    expires_minutes = int(cfg.ACCESS_TOKEN_EXPIRE_MINUTES or 480)
    token = create_access_token(
        {"user_id": user.id, "email": user.email},
        expires_minutes=expires_minutes,
        cfg=cfg,
    )
    set_auth_cookie(response, token, expires_minutes * 60, cfg)
    return user


'''
获取当前登录用户
    - Cookie 里拿 token（也接受 Authorization: Bearer，方便脚本调用）→ decode_token
    - 任何一步失败都是 401，handler 不会执行
'''
def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
) -> User:
    raw = request.cookies.get(cfg.COOKIE_NAME)
    if not raw:
        auth = request.headers.get("authorization") or ""
        if auth.lower().startswith("bearer "):
            raw = auth[7:].strip()
    if not raw:
        raise AuthorizationError()

    payload = decode_token(raw, cfg=cfg)
    if not payload or "user_id" not in payload:
        raise AuthorizationError()

    user = db.get(User, payload["user_id"])
    if not user or not user.is_active:
        raise AuthorizationError()
    return user
