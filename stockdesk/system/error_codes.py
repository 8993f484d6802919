# 📄 stockdesk/system/error_codes.py
# 목적: 재고추가(Add Stock) 공통 에러 코드·메시지·HTTP 상태 정규화 + 전역 핸들링
# 규칙: <DOMAIN>-<TYPE>-<NNN>
#   - DOMAIN: PRODUCT, STOCK, SYSTEM
#   - TYPE:   VALID, NOTFOUND, CONFLICT, STATE, NETWORK, DB, UNKNOWN
#   - NNN 대역: VALID 001-099, NOTFOUND 100-199, CONFLICT 200-299,
#               STATE 451-499, DB 900-949, UNKNOWN 950-999 (NETWORK 960-979 포함)
# 사용:
#   - 서비스/리컨사일러: raise DomainError(code, detail=..., ctx=...)  → 전역핸들러가 HTTP 변환
#   - 클라이언트: ValidationError / ConflictError / NotFoundError / TransportError / ServerError
#   - 앱 시작 시: register_global_handlers(app) 한 줄로 전역 핸들러 장착

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple, Any
from datetime import datetime, timezone
from uuid import uuid4
import logging
import re

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────
# 타입 정의
# ─────────────────────────────────────────────────────────
ErrorStage = Literal["router", "service", "client"]
Domain = Literal["PRODUCT", "STOCK", "SYSTEM"]
Type = Literal["VALID", "NOTFOUND", "CONFLICT", "STATE", "NETWORK", "DB", "UNKNOWN"]

ERROR_SPEC_VERSION = "v1.0"
_CODE_PATTERN = re.compile(r"^(PRODUCT|STOCK|SYSTEM)-(VALID|NOTFOUND|CONFLICT|STATE|NETWORK|DB|UNKNOWN)-\d{3}$")


@dataclass(frozen=True)
class ErrorSpec:
    http: int
    message: str
    hint: str


# ─────────────────────────────────────────────────────────
# 레지스트리: 공통 기본 세트
# ─────────────────────────────────────────────────────────
REGISTRY: Dict[str, ErrorSpec] = {
    # SYSTEM
    "SYSTEM-UNKNOWN-999": ErrorSpec(500, "Error processing your request", "Try again later."),
    "SYSTEM-DB-901":      ErrorSpec(500, "A database error occurred", "Contact the administrator."),
    "SYSTEM-VALID-001":   ErrorSpec(422, "Invalid request", "Check the request values."),
    "SYSTEM-NETWORK-961": ErrorSpec(503, "Error checking stock information", "Check the API connection."),

    # PRODUCT
    "PRODUCT-VALID-001":    ErrorSpec(422, "Invalid product request", "Check the product fields."),
    "PRODUCT-NOTFOUND-101": ErrorSpec(404, "Product ID does not exist", "Check the product id."),
    "PRODUCT-CONFLICT-201": ErrorSpec(409, "Product already exists", "Use a different product id or sku."),

    # STOCK
    "STOCK-VALID-001":    ErrorSpec(422, "All fields are required", "Fill in stock id, product id and quantity."),
    "STOCK-VALID-002":    ErrorSpec(422, "Value must be a non-negative integer", "Check the numeric fields."),
    "STOCK-CONFLICT-201": ErrorSpec(409, "Stock ID is already assigned to another product", "Use a different stock id."),
    "STOCK-CONFLICT-202": ErrorSpec(409, "Product already has a stock record", "Top up the existing stock id."),
    "STOCK-STATE-451":    ErrorSpec(409, "A submission is already in progress", "Wait for the current request."),
    "STOCK-UNKNOWN-999":  ErrorSpec(500, "Error processing your request", "Try again later."),
}

# ─────────────────────────────────────────────────────────
# 유틸
# ─────────────────────────────────────────────────────────

def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _normalize_code(code: str) -> str:
    # 공백 제거, 대문자 변환
    c = (code or "").strip().upper()
    if not _CODE_PATTERN.match(c):
        return "SYSTEM-UNKNOWN-999"
    return c


def _lookup(code: str) -> Tuple[str, ErrorSpec]:
    c = _normalize_code(code)
    return c, REGISTRY.get(c, REGISTRY["SYSTEM-UNKNOWN-999"])


def code_type(code: str) -> str:
    """코드에서 TYPE 부분만 꺼낸다. 예: STOCK-CONFLICT-201 → CONFLICT"""
    return _normalize_code(code).split("-")[1]


# ─────────────────────────────────────────────────────────
# 도메인 예외: 서비스/클라이언트는 이 예외만 던진다
# ─────────────────────────────────────────────────────────
class DomainError(Exception):
    """
    도메인 예외.
    메시지 조립, HTTP 상태 결정은 하지 않는다.
    detail이 비어 있으면 레지스트리 메시지를 사람용 문구로 쓴다.
    """
    default_code = "SYSTEM-UNKNOWN-999"

    def __init__(
        self,
        code: Optional[str] = None,
        *,
        detail: str = "",
        ctx: Optional[dict] = None,
        stage: ErrorStage = "service",
        domain: Optional[str] = None,
        trace_id: Optional[str] = None,
    ) -> None:
        self.code = _normalize_code(code or self.default_code)
        self.detail = detail
        self.ctx = ctx or {}
        self.stage = stage
        self.domain = domain
        self.trace_id = trace_id  # 없으면 핸들러에서 생성
        super().__init__(self.code)

    @property
    def message(self) -> str:
        return self.detail or _lookup(self.code)[1].message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


# ─────────────────────────────────────────────────────────
# 클라이언트 측 예외: 종류별 기본 코드만 다르다
# ─────────────────────────────────────────────────────────
class ValidationError(DomainError):
    default_code = "STOCK-VALID-001"


class ConflictError(DomainError):
    default_code = "STOCK-CONFLICT-201"


class NotFoundError(DomainError):
    default_code = "PRODUCT-NOTFOUND-101"


class TransportError(DomainError):
    default_code = "SYSTEM-NETWORK-961"


class ServerError(DomainError):
    default_code = "STOCK-UNKNOWN-999"


_KIND_BY_TYPE = {
    "VALID": ValidationError,
    "CONFLICT": ConflictError,
    "NOTFOUND": NotFoundError,
    "NETWORK": TransportError,
}


def error_for_code(code: str, *, detail: str = "", ctx: Optional[dict] = None) -> DomainError:
    """코드 TYPE에 맞는 예외 인스턴스를 만든다(STATE/DB/UNKNOWN은 DomainError/ServerError)."""
    t = code_type(code)
    cls = _KIND_BY_TYPE.get(t)
    if cls is None:
        cls = DomainError if t == "STATE" else ServerError
    return cls(code, detail=detail, ctx=ctx, stage="client")


# ─────────────────────────────────────────────────────────
# 에러 바디 빌더
# ─────────────────────────────────────────────────────────
def build_error(
    code: str,
    *,
    detail: str = "",
    ctx: Optional[dict] = None,
    stage: ErrorStage = "service",
    domain: Optional[str] = None,
    trace_id: Optional[str] = None,
) -> Tuple[int, dict]:
    """
    반환값: (http_status, body)
    body:
    {
      "ok": False,
      "error": {
        "code": "...",
        "message": "...",
        "hint": "...",
        "detail": "...",
        "ctx": {...},
        "stage": "router" | "service",
        "domain": "stock.register",
        "trace_id": "req-...",
        "timestamp": "UTC ISO8601Z"
      },
      "meta": {"spec_version": "v1.0"}
    }
    """
    code_norm, spec = _lookup(code)
    body = {
        "ok": False,
        "error": {
            "code": code_norm,
            "message": spec.message,
            "hint": spec.hint,
            "detail": detail,
            "ctx": ctx or {},
            "stage": stage,
            "domain": domain,
            "trace_id": trace_id or f"req-{uuid4().hex}",
            "timestamp": _utc_now_iso(),
        },
        "meta": {"spec_version": ERROR_SPEC_VERSION},
    }
    return spec.http, body


def error_text(body: Any, fallback: str = "Error processing your request") -> str:
    """
    에러 바디에서 사람이 읽을 문구를 꺼낸다.
    - {"error": "문구"} 형태와 표준 바디({"error": {"detail", "message"}}) 모두 지원
    """
    if not isinstance(body, dict):
        return fallback
    err = body.get("error")
    if isinstance(err, str) and err.strip():
        return err
    if isinstance(err, dict):
        return err.get("detail") or err.get("message") or fallback
    return fallback


def error_code(body: Any) -> Optional[str]:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("code")
    return None


# ─────────────────────────────────────────────────────────
# 예외 → 표준 에러로 매핑
# ─────────────────────────────────────────────────────────
def map_exception(exc: Exception) -> Tuple[int, dict]:
    """
    임의의 예외를 표준 에러 바디로 변환한다.
    - DomainError: 선언된 코드 사용
    - ValueError, KeyError: VALID 422
    - IntegrityError(문자열로 탐지): SYSTEM DB 500
    - 그 외: SYSTEM UNKNOWN 500
    """
    if isinstance(exc, DomainError):
        return build_error(
            exc.code,
            detail=exc.message,
            ctx=exc.ctx,
            stage=exc.stage,
            domain=exc.domain,
            trace_id=exc.trace_id,
        )

    name = exc.__class__.__name__
    msg = str(exc)

    if name in ("ValueError", "TypeError", "KeyError"):
        return build_error("SYSTEM-VALID-001", detail=msg, ctx={"exc": name})

    # SQLAlchemy IntegrityError 탐지(직접 임포트 없이 문자열로)
    if "IntegrityError" in name or "IntegrityError" in msg:
        return build_error("SYSTEM-DB-901", detail=msg, ctx={"exc": name})

    return build_error("SYSTEM-UNKNOWN-999", detail=msg, ctx={"exc": name})


# ─────────────────────────────────────────────────────────
# FastAPI 전역 핸들러 등록
# ─────────────────────────────────────────────────────────
def register_global_handlers(app: FastAPI) -> None:
    """
    앱 부팅 시 1회 호출:
        from stockdesk.system.error_codes import register_global_handlers
        register_global_handlers(app)
    """

    @app.exception_handler(DomainError)
    async def _domain_error_handler(request: Request, exc: DomainError):
        status, body = map_exception(exc)
        return JSONResponse(status_code=status, content=body)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        status, body = build_error(
            "SYSTEM-VALID-001",
            detail=f"{loc}: {first.get('msg', 'invalid value')}" if loc else "Invalid request",
            ctx={"errors": len(errors)},
            stage="router",
        )
        return JSONResponse(status_code=status, content=body)

    @app.exception_handler(HTTPException)  # 라우터에서 직접 raise한 경우
    async def _http_exception_handler(request: Request, exc: HTTPException):
        # detail이 우리가 만든 포맷이면 그대로 사용, 아니면 표준 바디로 감싼다
        if isinstance(exc.detail, dict) and "error" in exc.detail and "ok" in exc.detail:
            return JSONResponse(status_code=exc.status_code, content=exc.detail)
        _, body = build_error(
            "SYSTEM-UNKNOWN-999",
            detail=str(exc.detail),
            ctx={"status_code": exc.status_code},
            stage="router",
        )
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(Exception)  # 최후의 보루
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        status, body = map_exception(exc)
        return JSONResponse(status_code=status, content=body)
