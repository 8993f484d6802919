# 📄 stockdesk/core/config.py
# 목적: .env / OS 환경변수 → Settings 단일 객체
# 규칙:
#   - 값 해석은 여기서만 한다(다른 모듈은 settings.xxx만 읽는다)
#   - 검증(형식/범위)은 tools/envcheck.py 담당

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def _csv(name: str, default: str) -> List[str]:
    return [x.strip() for x in os.getenv(name, default).split(",") if x.strip()]


class Settings:
    # ─────────────────────────────────────────────
    # 클라이언트(Add Stock 폼)
    # ─────────────────────────────────────────────
    api_url: str = os.getenv("STOCKDESK_API_URL", "http://localhost:8000").rstrip("/")
    debounce_seconds: float = float(os.getenv("DEBOUNCE_SECONDS", "0.5"))
    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    # 재고 스냅샷: limit 단위로 짧은 페이지가 나올 때까지 조회
    stock_snapshot_limit: int = int(os.getenv("STOCK_SNAPSHOT_LIMIT", "100"))
    stock_snapshot_max_pages: int = int(os.getenv("STOCK_SNAPSHOT_MAX_PAGES", "50"))

    # ─────────────────────────────────────────────
    # 서버(재고 API)
    # ─────────────────────────────────────────────
    database_url: str = (
        os.getenv("DB_URL")
        or os.getenv("DATABASE_URL")
        or "sqlite:///./stockdesk.db"  # 개발 편의 기본값
    )
    database_echo: bool = _bool("DB_ECHO", "false")
    auto_create_tables: bool = _bool("AUTO_CREATE_TABLES", "true")
    cors_origins: List[str] = _csv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
