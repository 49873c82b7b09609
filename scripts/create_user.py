
import argparse
import getpass

from storehub.core.config import settings
from storehub.core.logging import configure_logging
from storehub.core.security import get_password_hash
from storehub.db import build_engine, build_session_factory, session_scope
from storehub.repository.user_repo import get_or_create_user


# 在容器里运行一次：python scripts/create_user.py --email admin@example.com --name Admin
# （确保 PYTHONPATH 指向 backend 目录，数据库已经 alembic upgrade head）

def main():
    parser = argparse.ArgumentParser(description="Create a login user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default=None)
    parser.add_argument("--password", default=None, help="不传则交互输入")
    args = parser.parse_args()

    logger = configure_logging(settings.LOG_LEVEL)
    password = args.password or getpass.getpass("Password: ")

    engine = build_engine(settings)
    try:
        with session_scope(build_session_factory(engine)) as db:
            user, created = get_or_create_user(db, args.email, get_password_hash(password), name=args.name)
            if created:
                logger.info("user.created id=%s email=%s", user.id, user.email)
            else:
                logger.info("user.exists id=%s email=%s", user.id, user.email)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
