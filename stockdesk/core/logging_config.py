# 📄 stockdesk/core/logging_config.py
# 목적: 서버/도구 공통 로깅 설정 (stdlib logging)
# 사용: configure_logging(settings.log_level) - 앱 부팅 또는 CLI 시작 시 1회

from __future__ import annotations

import logging
from typing import Union

DEV_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"

# DEBUG가 아니면 조용히 시킬 로거들
NOISY_LOGGERS = ("sqlalchemy.engine", "urllib3", "httpx", "uvicorn.access")


def coerce_level(raw_level: Union[int, str, None]) -> int:
    if isinstance(raw_level, int):
        return raw_level
    if isinstance(raw_level, str):
        return getattr(logging, raw_level.strip().upper(), logging.INFO)
    return logging.INFO


def configure_logging(level: Union[int, str, None] = "INFO") -> int:
    lvl = coerce_level(level)
    logging.basicConfig(level=lvl, format=DEV_FORMAT)
    logging.getLogger().setLevel(lvl)

    if lvl > logging.DEBUG:
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    return lvl
