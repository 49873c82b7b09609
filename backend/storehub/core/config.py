# 环境变量和配置
# pydantic‑settings 读取 .env = core/config.py

from typing import Optional
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


# 本机直接跑 uvicorn 时（不走 Docker），会读取 backend/.env

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
        populate_by_name=True,
    )

    # ========= project config =========
    PROJECT_NAME: str = "Store Hub"
    ENVIRONMENT: str = "dev"
    API_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = Field("INFO", alias="LOG_LEVEL")


    # ========= 登录 / 鉴权 / CORS =========
    SECRET_KEY: SecretStr = Field(SecretStr("CHANGE_ME"), alias="SECRET_KEY")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(480, alias="ACCESS_TOKEN_EXPIRE_MINUTES")   # 8h
    COOKIE_NAME: str = Field("access_token", alias="COOKIE_NAME")
    COOKIE_DOMAIN: Optional[str] = Field(None, alias="COOKIE_DOMAIN")
    COOKIE_SECURE: bool = Field(False, alias="COOKIE_SECURE")                            # 生产时改 True
    COOKIE_SAMESITE: str = Field("lax", alias="COOKIE_SAMESITE")
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000"


    # ========= Database =========
    # 容器内默认连 docker 网络里的 "db" 服务；测试用 sqlite://
    DATABASE_URL: str = Field(
        default="postgresql+psycopg://sh_user:sh_pass@db:5432/storehub_dev",
        alias="DATABASE_URL",
    )
    DB_ECHO: bool = Field(False, alias="DB_ECHO")


    # ========= 导入互斥锁 =========
    # 配了 REDIS_URL 就用 Redis 锁（多进程/多机共享），否则进程内锁
    REDIS_URL: Optional[str] = Field(None, alias="REDIS_URL")
    IMPORT_LOCK_TIMEOUT_SEC: float = Field(30.0, ge=0, alias="IMPORT_LOCK_TIMEOUT_SEC")   # 等锁最长时间
    IMPORT_LOCK_TTL_SEC: int = Field(15 * 60, ge=1, alias="IMPORT_LOCK_TTL_SEC")          # Redis 锁自动过期


    # ========= Shopify REST Admin API =========
    SHOPIFY_API_VERSION: str = Field("2023-10", alias="SHOPIFY_API_VERSION")
    SHOPIFY_HTTP_TIMEOUT: int = Field(30, ge=1, alias="SHOPIFY_HTTP_TIMEOUT")
    SHOPIFY_PAGE_LIMIT: int = Field(250, ge=1, le=250, alias="SHOPIFY_PAGE_LIMIT")       # REST 单页上限 250
    SHOPIFY_MAX_PAGES: int = Field(200, ge=1, alias="SHOPIFY_MAX_PAGES")
    # 没有 remote id 的新 metafield 是否在 Shopify 上创建（默认只存本地）
    SHOPIFY_CREATE_NEW_METAFIELDS: bool = Field(False, alias="SHOPIFY_CREATE_NEW_METAFIELDS")


    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.BACKEND_CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()  # 只从环境读取（含 .env）
