from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storehub.api.v1 import api_v1
from storehub.core.config import Settings, settings
from storehub.core.errors import register_exception_handlers
from storehub.core.logging import configure_logging
from storehub.db import build_engine, build_session_factory, create_all
from storehub.infrastructure.locks import build_store_lock
from storehub.services.product_sync.client import StoreClientFactory, shopify_client_factory


'''
  应用工厂：engine / session 工厂 / 远端 client 工厂 / 导入锁都挂在 app.state 上
  测试传入自己的 Settings（sqlite 内存库）和假 client 工厂
'''
def create_app(
    cfg: Optional[Settings] = None,
    *,
    client_factory: Optional[StoreClientFactory] = None,
    store_lock=None,
) -> FastAPI:
    cfg = cfg or settings
    logger = configure_logging(cfg.LOG_LEVEL)

    engine = build_engine(cfg)
    if engine.dialect.name == "sqlite":
        # sqlite 只用于本地/测试，直接建表；Postgres 走 alembic
        create_all(engine)

    app = FastAPI(title=cfg.PROJECT_NAME)

    app.state.settings = cfg
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.client_factory = client_factory or shopify_client_factory(cfg)
    app.state.store_lock = store_lock or build_store_lock(cfg)

    # 从环境读取前端白名单（逗号分隔）。本地可配：
    # BACKEND_CORS_ORIGINS=http://localhost:5173,https://app.local.test:5173
    origins = cfg.cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,     # 配成明确白名单（本地 http://localhost:5173，线上是前端域名）
        allow_credentials=True,    # Access-Control-Allow-Credentials: true
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Origin 校验（仅对改数据方法）
    trusted = set(origins)

    @app.middleware("http")
    async def origin_check(request: Request, call_next):
        if request.method in {"POST", "PUT", "PATCH", "DELETE"}:
            origin = request.headers.get("origin")
            # 没有 Origin（如 curl/健康检查）则放行；有 Origin 但不在白名单里才拒绝
            if origin and origin not in trusted:
                logger.warning("origin.rejected origin=%s path=%s", origin, request.url.path)
                return JSONResponse(status_code=403, content={"error": "Bad Origin"})
        return await call_next(request)

    register_exception_handlers(app)
    app.include_router(api_v1, prefix=cfg.API_PREFIX)
    logger.info("app.created env=%s db=%s", cfg.ENVIRONMENT, engine.dialect.name)

    # 根路径健康探活（方便测试或 Docker 健康检查）
    @app.get("/")
    def root():
        return {
            "app": cfg.PROJECT_NAME,
            "env": cfg.ENVIRONMENT,
            "ok": True,
        }

    return app


app = create_app()
