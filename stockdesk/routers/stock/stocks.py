# 📄 stockdesk/routers/stock/stocks.py
# 페이지: 재고추가(Add Stock)
# 역할: 요청 → DTO파싱 → 서비스 호출 → 응답
#
# ✅ 엔드포인트
# - GET  /api/stocks?page&limit : 재고 목록 (폼의 충돌 검사용 스냅샷)
# - POST /api/stocks            : 신규 생성(201) 또는 수량 추가(200)

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from stockdesk.core.schemas_stock import StockWriteRequest
from stockdesk.db.session import get_sync_session
from stockdesk.services.stock.stock_register_service import MAX_LIMIT, StockRegisterService

ROUTE_PREFIX = "/api/stocks"
ROUTE_TAGS = ["stocks"]

stocks = APIRouter(prefix=ROUTE_PREFIX, tags=ROUTE_TAGS)
__all__ = ["stocks"]


def get_service(session: Session = Depends(get_sync_session)) -> StockRegisterService:
    return StockRegisterService(session=session)


# ──────────────────────────────────────────
# 1) 목록 조회
# ──────────────────────────────────────────
@stocks.get("")
async def list_stocks(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=100, ge=1, le=MAX_LIMIT),
    svc: StockRegisterService = Depends(get_service),
):
    return svc.list_items(page=page, limit=limit)


# ──────────────────────────────────────────
# 2) 등록 (생성 / 수량 추가)
# ──────────────────────────────────────────
@stocks.post("")
async def register_stock(
    payload: StockWriteRequest,
    svc: StockRegisterService = Depends(get_service),
):
    result = svc.register(payload)
    code = status.HTTP_200_OK if result.is_update else status.HTTP_201_CREATED
    return JSONResponse(status_code=code, content=result.to_wire())
