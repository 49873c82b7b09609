# 导出入口，给脚本/测试建表用

from sqlalchemy.engine import Engine

from .session import build_engine, build_session_factory, get_db, session_scope
from storehub.db.model import *  # 确保把所有模型加载进 Base.metadata
from .base import Base


"""
    空库快速建表（测试 / 本地 sqlite）。
    生产环境请使用 `alembic upgrade head`
"""
def create_all(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
