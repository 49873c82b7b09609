# Alembic 驱动脚本：连接串来自 Settings，可用 `alembic -x db_url=...` 临时指定

from __future__ import annotations

from alembic import context
from sqlalchemy import engine_from_config, pool
from logging.config import fileConfig
import logging

from storehub.core.config import settings
from storehub.core.logging import configure_logging
from storehub.db.base import Base
import storehub.db.model  # 关键：导入所有模型


config = context.config

if config.config_file_name and config.file_config.has_section("loggers"):
    fileConfig(config.config_file_name, disable_existing_loggers=False)
else:
    configure_logging(settings.LOG_LEVEL)

logger = logging.getLogger("storehub.migrations")

target_metadata = Base.metadata


def _database_url() -> str:
    """优先级：-x db_url > Settings.DATABASE_URL > alembic.ini"""
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    return override or settings.DATABASE_URL or config.get_main_option("sqlalchemy.url")


# ini 走 configparser 插值，URL 里的 % 要转义
config.set_main_option("sqlalchemy.url", _database_url().replace("%", "%%"))


"""离线模式：只输出 SQL"""
def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


"""在线模式：直接连库执行"""
def run_migrations_online():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        dialect = connection.dialect.name
        logger.info("alembic.migrate dialect=%s", dialect)
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=dialect == "sqlite",   # SQLite 改表需要 batch 模式
            compare_type=True,                     # Numeric(10, 2) 等精度变化也要比较
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
