"""모듈 로거 헬퍼."""

import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _attach_stdout_handler(logger: logging.Logger) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    # 루트가 나중에 구성되어도 같은 줄이 두 번 찍히지 않도록
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """`name` 로거를 반환합니다.

    서버에서는 `configure_logging()`이 루트 핸들러를 먼저 구성하므로 전파만 하고,
    루트 구성 없이 import된 경우(단독 스크립트 등)에만 stdout 핸들러를 붙입니다.
    """
    logger = logging.getLogger(name)
    if not logger.handlers and not logging.getLogger().handlers:
        _attach_stdout_handler(logger)
    return logger
