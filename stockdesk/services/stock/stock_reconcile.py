# 📄 stockdesk/services/stock/stock_reconcile.py
# 역할: 재고추가 입력(stockId, productId, quantity) ↔ 기존 재고/상품 대조
#   - 신규 생성(Create) / 수량 추가(Update) / 거절(Rejected) 판정 + 안내 문구
#   - 폼 미리보기(디바운스), 폼 제출 직전, 서버 POST /api/stocks 모두 같은 판정을 쓴다
# 규칙:
#   - 순수 함수(I/O 없음). 스냅샷은 호출 측이 매번 새로 넘긴다
#   - 숫자 아닌 입력은 호출 전에 걸러져야 한다(들어오면 STOCK-VALID-002)

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Container, Iterable, Optional, Union

from stockdesk.core.schemas_stock import CandidateInput, StockRecord
from stockdesk.system.error_codes import DomainError, error_for_code

ProductLookup = Union[Callable[[int], bool], Container[int]]

MSG_PRODUCT_MISSING = "Product ID does not exist"
MSG_FIELDS_REQUIRED = "All fields are required"


# ─────────────────────────────────────────────
# 판정 결과
# ─────────────────────────────────────────────
@dataclass(frozen=True)
class Pending:
    """입력이 덜 채워져 미리보기할 것이 없음(거절 아님)"""
    kind = "pending"

    @property
    def message(self) -> str:
        return ""


@dataclass(frozen=True)
class Create:
    """아직 존재하지 않는 재고 레코드의 미리보기"""
    record: StockRecord
    kind = "create"

    @property
    def message(self) -> str:
        r = self.record
        return f"Stock ID {r.id} will be created for Product ID {r.product_id} with quantity {r.quantity}."


@dataclass(frozen=True)
class Update:
    existing_id: int
    previous_quantity: int
    added_quantity: int
    new_quantity: int
    kind = "update"

    @property
    def message(self) -> str:
        return f"Current stock quantity: {self.previous_quantity}. New quantity will be added to this."


@dataclass(frozen=True)
class Rejected:
    reason: str
    code: str = "STOCK-CONFLICT-201"
    kind = "rejected"

    @property
    def message(self) -> str:
        return self.reason

    def to_error(self) -> DomainError:
        return error_for_code(self.code, detail=self.reason)


ReconciliationResult = Union[Pending, Create, Update, Rejected]


# ─────────────────────────────────────────────
# 내부 유틸
# ─────────────────────────────────────────────
def _product_exists(known_products: ProductLookup, product_id: int) -> bool:
    if callable(known_products):
        return bool(known_products(product_id))
    return product_id in known_products


def _find(stocks: Iterable[StockRecord], pred: Callable[[StockRecord], bool]) -> Optional[StockRecord]:
    for s in stocks:
        if pred(s):
            return s
    return None


# ─────────────────────────────────────────────
# 판정
# ─────────────────────────────────────────────
def check_complete(candidate: CandidateInput) -> Optional[Rejected]:
    """제출 전 필수값 검사. 하나라도 비면 Rejected(STOCK-VALID-001)"""
    if not candidate.is_complete:
        return Rejected(MSG_FIELDS_REQUIRED, code="STOCK-VALID-001")
    return None


def reconcile(
    candidate: CandidateInput,
    known_products: ProductLookup,
    known_stocks: Iterable[StockRecord],
) -> ReconciliationResult:
    """
    후보 입력을 기존 상품/재고 스냅샷과 대조한다.

    1) productId가 있고 상품이 없으면 거절
    2) stockId가 다른 상품에 묶여 있으면 거절
    3) productId가 다른 stockId를 이미 갖고 있으면 거절
    4) stockId·productId가 같은 레코드를 가리키면 수량 추가(Update)
    5) 그 외 삼중값이 모두 있으면 신규 생성(Create), 아니면 Pending
    """
    stock_id = candidate.stock_id_int()
    product_id = candidate.product_id_int()
    quantity = candidate.quantity_int()

    if stock_id is None and product_id is None:
        return Pending()

    if product_id is not None and not _product_exists(known_products, product_id):
        return Rejected(MSG_PRODUCT_MISSING, code="PRODUCT-NOTFOUND-101")

    stocks = list(known_stocks)
    existing = _find(stocks, lambda s: s.id == stock_id) if stock_id is not None else None
    product_stock = (
        _find(stocks, lambda s: s.product_id == product_id) if product_id is not None else None
    )

    if existing is not None and product_id is not None and existing.product_id != product_id:
        return Rejected(
            f"Stock ID {stock_id} is already assigned to Product ID {existing.product_id}",
            code="STOCK-CONFLICT-201",
        )

    if product_stock is not None and (existing is None or existing.id != product_stock.id):
        return Rejected(
            f"Product ID {product_id} already has Stock ID {product_stock.id}",
            code="STOCK-CONFLICT-202",
        )

    if existing is not None and existing.product_id == product_id:
        added = quantity or 0
        return Update(
            existing_id=existing.id,
            previous_quantity=existing.quantity,
            added_quantity=added,
            new_quantity=existing.quantity + added,
        )

    if stock_id is not None and product_id is not None and quantity is not None:
        return Create(StockRecord(id=stock_id, product_id=product_id, quantity=quantity))

    return Pending()
