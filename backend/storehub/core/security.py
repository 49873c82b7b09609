
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext
from storehub.core.config import Settings, settings as default_settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _secret(cfg: Settings) -> str:
    return cfg.SECRET_KEY.get_secret_value()


'''
生成 JWT, 塞进 Cookie
  - 无状态会话：服务端不存 session，过期时间写在 exp 里
'''
def create_access_token(
    subject: dict[str, Any],
    expires_minutes: int | None = None,
    cfg: Settings | None = None,
) -> str:
    cfg = cfg or default_settings
    expire = datetime.now(tz=timezone.utc) + timedelta(
        minutes=expires_minutes or cfg.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode = {"exp": expire, **subject}
    return jwt.encode(to_encode, _secret(cfg), algorithm=ALGORITHM)


def decode_token(token: str, cfg: Settings | None = None) -> Optional[dict[str, Any]]:
    cfg = cfg or default_settings
    try:
        return jwt.decode(token, _secret(cfg), algorithms=[ALGORITHM])
    except JWTError:
        return None
