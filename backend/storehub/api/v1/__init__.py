from fastapi import APIRouter, Depends
from storehub.services.auth_service import get_current_user


# 非受保护路由
from .routes_health import router as health_router
from .auth import router as auth_router


# 需要登录的受保护路由
from .stores import router as stores_router
from .products import router as products_router


api_v1 = APIRouter()
api_v1.include_router(health_router)      # /health 不需要登录
api_v1.include_router(auth_router)        # /auth 登录相关

# --- 需要登录的接口 ---
protected = APIRouter(dependencies=[Depends(get_current_user)])

protected.include_router(stores_router)
protected.include_router(products_router)

# 把受保护路由注册进主路由
api_v1.include_router(protected)
