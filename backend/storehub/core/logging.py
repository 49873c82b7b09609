import logging
import os
import sys
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# 第三方库的 DEBUG 日志会带完整 URL / 请求体，最低压到 WARNING
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "multipart")


def configure_logging(level: Optional[str] = None, *, noisy: Iterable[str] = NOISY_LOGGERS) -> logging.Logger:
    """
    根 logger：没有 handler 时装一个 stdout handler；已有（uvicorn 先配好的）只调级别。
    返回 "storehub" logger，各模块仍用 logging.getLogger(__name__)。
    """
    resolved_level = (level or DEFAULT_LEVEL).upper()
    root_logger = logging.getLogger()

    if not root_logger.handlers:
        logging.basicConfig(
            level=resolved_level,
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
        )
    else:
        root_logger.setLevel(resolved_level)

    for name in noisy:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_logger.level))
    logging.captureWarnings(True)
    return logging.getLogger("storehub")


def mask_token(token: Optional[str]) -> str:
    """日志里只露出 access token 的后 4 位"""
    if not token:
        return "<empty>"
    return f"***{token[-4:]}" if len(token) > 4 else "***"
