# schemas_stock.py
# 재고추가 폼/재고 API 공용 DTO (pydantic v2)
# - 와이어 키는 원래 API 그대로(stockId, previousQuantity 등 camelCase)
# - 파이썬 쪽 필드명은 snake_case, alias로 연결

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from stockdesk.system.error_codes import DomainError

_INT_LITERAL = re.compile(r"^\d+$")

FIELD_NAMES = ("stockId", "productId", "quantity")


def is_integer_literal(value: str) -> bool:
    """빈 문자열 또는 음이 아닌 정수 리터럴이면 True (폼 입력 허용 기준)"""
    v = (value or "").strip()
    return v == "" or bool(_INT_LITERAL.match(v))


def parse_field(value: Optional[str], *, field: str = "") -> Optional[int]:
    """
    폼 입력 문자열 → int
    - 빈 값: None
    - 음수/숫자 아님: DomainError(STOCK-VALID-002)
    """
    v = (value or "").strip()
    if v == "":
        return None
    if not _INT_LITERAL.match(v):
        raise DomainError(
            "STOCK-VALID-002",
            detail=f"{field or 'value'} must be a non-negative integer",
            ctx={"field": field, "value": value},
        )
    return int(v)


class StockRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., ge=0)
    product_id: int = Field(..., ge=0)
    quantity: int = Field(..., ge=0)


class ProductRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., ge=0)
    name: Optional[str] = None
    sku: Optional[str] = None


class ProductCreate(BaseModel):
    id: Optional[int] = Field(default=None, ge=0)
    name: Optional[str] = Field(default=None, max_length=200)
    sku: Optional[str] = Field(default=None, max_length=50)


class CandidateInput(BaseModel):
    """키 입력마다 새로 만들어지는 원시 입력값(아직 완전한 삼중값 검증 전)"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    stock_id: str = Field(default="", alias="stockId")
    product_id: str = Field(default="", alias="productId")
    quantity: str = Field(default="")

    @property
    def is_complete(self) -> bool:
        return all(v.strip() for v in (self.stock_id, self.product_id, self.quantity))

    def stock_id_int(self) -> Optional[int]:
        return parse_field(self.stock_id, field="stockId")

    def product_id_int(self) -> Optional[int]:
        return parse_field(self.product_id, field="productId")

    def quantity_int(self) -> Optional[int]:
        return parse_field(self.quantity, field="quantity")

    def with_field(self, name: str, value: str) -> "CandidateInput":
        return self.model_copy(update={_ATTR_BY_FIELD[name]: value})


_ATTR_BY_FIELD = {"stockId": "stock_id", "productId": "product_id", "quantity": "quantity"}


class StockWriteRequest(BaseModel):
    """POST /api/stocks 바디"""
    id: int = Field(..., ge=0)
    product_id: int = Field(..., ge=0)
    quantity: int = Field(..., ge=0)


class StockWriteResult(BaseModel):
    """
    POST /api/stocks 응답
    - 신규: {id, product_id, quantity}
    - 추가: {id, product_id, quantity, previousQuantity, addedQuantity, newQuantity}
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int
    product_id: int
    quantity: int
    previous_quantity: Optional[int] = Field(default=None, alias="previousQuantity")
    added_quantity: Optional[int] = Field(default=None, alias="addedQuantity")
    new_quantity: Optional[int] = Field(default=None, alias="newQuantity")

    @property
    def is_update(self) -> bool:
        return self.previous_quantity is not None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
