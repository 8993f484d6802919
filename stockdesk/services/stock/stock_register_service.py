# 📄 stockdesk/services/stock/stock_register_service.py
# 페이지: 재고추가(Add Stock)
# 역할:
#   - 재고 목록 조회 (page/limit, id 오름차순)
#   - 재고 등록: 신규 생성 또는 같은 상품 재고에 수량 추가
# 규칙:
#   - sync(Session 전용)
#   - 충돌 판정은 stock_reconcile.reconcile 재사용 (폼 미리보기와 같은 문구)
#   - 서버는 페이지 스냅샷이 아니라 id/product_id 정확 조회로 판정한다
#   - DomainError만 발생

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockdesk.core.schemas_stock import (
    CandidateInput,
    StockRecord,
    StockWriteRequest,
    StockWriteResult,
)
from stockdesk.models import Product, Stock
from stockdesk.services.stock.stock_reconcile import Rejected, Update, reconcile
from stockdesk.system.error_codes import DomainError

logger = logging.getLogger(__name__)

PAGE_ID = "stock.register"
PAGE_VERSION = "v1.0"

MAX_LIMIT = 500


class StockRegisterService:
    page_id = PAGE_ID
    page_version = PAGE_VERSION

    def __init__(self, *, session: Session):
        self.session = session

    # ======================================================
    # 1) 목록 조회
    # ======================================================
    def list_items(self, *, page: int, limit: int) -> Dict[str, Any]:
        if page <= 0 or limit <= 0 or limit > MAX_LIMIT:
            raise DomainError(
                "STOCK-VALID-002",
                detail=f"page must be >= 1 and limit between 1 and {MAX_LIMIT}",
                ctx={"page_id": PAGE_ID, "page": page, "limit": limit},
            )

        total = self.session.execute(select(func.count()).select_from(Stock)).scalar_one()
        rows = (
            self.session.execute(
                select(Stock).order_by(Stock.id).offset((page - 1) * limit).limit(limit)
            )
            .scalars()
            .all()
        )
        return {
            "stocks": [StockRecord.model_validate(r).model_dump() for r in rows],
            "page": page,
            "limit": limit,
            "total": total,
        }

    # ======================================================
    # 2) 등록 (생성 또는 수량 추가)
    # ======================================================
    def _relevant_stocks(self, payload: StockWriteRequest) -> List[StockRecord]:
        rows = (
            self.session.execute(
                select(Stock).where(
                    (Stock.id == payload.id) | (Stock.product_id == payload.product_id)
                )
            )
            .scalars()
            .all()
        )
        return [StockRecord.model_validate(r) for r in rows]

    def _product_exists(self, product_id: int) -> bool:
        return self.session.get(Product, product_id) is not None

    def register(self, payload: StockWriteRequest) -> StockWriteResult:
        candidate = CandidateInput(
            stock_id=str(payload.id),
            product_id=str(payload.product_id),
            quantity=str(payload.quantity),
        )
        result = reconcile(candidate, self._product_exists, self._relevant_stocks(payload))

        if isinstance(result, Rejected):
            err = result.to_error()
            err.stage = "service"
            err.domain = PAGE_ID
            err.ctx = {"id": payload.id, "product_id": payload.product_id}
            raise err

        if isinstance(result, Update):
            stock = self.session.get(Stock, result.existing_id)
            stock.quantity = result.new_quantity
            out = StockWriteResult(
                id=stock.id,
                product_id=stock.product_id,
                quantity=result.new_quantity,
                previous_quantity=result.previous_quantity,
                added_quantity=result.added_quantity,
                new_quantity=result.new_quantity,
            )
        else:
            stock = Stock(id=payload.id, product_id=payload.product_id, quantity=payload.quantity)
            self.session.add(stock)
            out = StockWriteResult(
                id=payload.id, product_id=payload.product_id, quantity=payload.quantity
            )

        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DomainError(
                "SYSTEM-DB-901",
                detail="Failed to save stock",
                ctx={"page_id": PAGE_ID, "error": str(e.orig)},
            )

        if out.is_update:
            logger.info(
                "stock %s topped up: %s + %s = %s",
                out.id, out.previous_quantity, out.added_quantity, out.new_quantity,
            )
        else:
            logger.info("stock %s created for product %s (qty=%s)", out.id, out.product_id, out.quantity)
        return out
