# 📄 stockdesk/routers/products/products.py
# 페이지: 재고추가 폼: 상품 존재 확인
# 역할: 요청 → DTO파싱 → 서비스 호출 → 응답
#
# ✅ 라우터 원칙
# - 비즈니스 로직 없음(계산/검증/트랜잭션 금지)
# - 서비스 호출 + 응답래핑 + 문서화만 담당
# - 에러는 DomainError 그대로 던지고 전역 핸들러에서 처리

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from stockdesk.core.schemas_stock import ProductCreate
from stockdesk.db.session import get_sync_session
from stockdesk.services.products.product_lookup_service import ProductLookupService

ROUTE_PREFIX = "/api/products"
ROUTE_TAGS = ["products"]

products = APIRouter(prefix=ROUTE_PREFIX, tags=ROUTE_TAGS)
__all__ = ["products"]


def get_service(session: Session = Depends(get_sync_session)) -> ProductLookupService:
    return ProductLookupService(session=session)


# ──────────────────────────────────────────
# 1) 단건 조회 / 목록 조회
#    - ?id=1      → {"product": {...} | null}
#    - (id 없음)  → {"products": [...], "page", "limit", "total"}
# ──────────────────────────────────────────
@products.get("")
async def get_products(
    id: Optional[int] = Query(default=None, ge=0, description="조회할 상품 ID"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=500),
    svc: ProductLookupService = Depends(get_service),
):
    if id is not None:
        product = svc.get_by_id(id)
        return {"product": product.model_dump() if product else None}
    return svc.list_items(page=page, limit=limit)


# ──────────────────────────────────────────
# 2) 단건 등록
# ──────────────────────────────────────────
@products.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    svc: ProductLookupService = Depends(get_service),
):
    return svc.create(payload).model_dump()
