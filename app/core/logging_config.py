"""서버 로깅 구성. uvicorn 기본 포맷터를 그대로 사용합니다."""

from __future__ import annotations

import copy
import logging.config
import os
from typing import Any

from uvicorn.config import LOGGING_CONFIG as UVICORN_LOGGING_CONFIG

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# 이미지 디코딩, HTTP 커넥션 풀, SQL, multipart 파서의 DEBUG 출력은 끈다
_QUIET_LOGGERS = ("PIL", "urllib3", "sqlalchemy.engine", "multipart")


def build_logging_config(level: str | None = None) -> dict[str, Any]:
    """dictConfig 설정을 만듭니다. `level`이 없으면 `LOG_LEVEL` 환경변수(기본 INFO)를 사용합니다."""
    log_level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()

    config = copy.deepcopy(UVICORN_LOGGING_CONFIG)
    config["root"] = {"handlers": ["default"], "level": log_level}
    config["loggers"].update({name: {**config["loggers"][name], "level": log_level} for name in _UVICORN_LOGGERS})
    config["loggers"].update({name: {"level": "WARNING"} for name in _QUIET_LOGGERS})
    return config


def configure_logging(level: str | None = None) -> None:
    logging.config.dictConfig(build_logging_config(level))
