# 📄 stockdesk/models.py
# 목적: 재고추가 API SQLAlchemy 모델 정의 (product / stock)
#
# ✅ 기본 원칙
# 1) stock.id는 운영자가 직접 입력한다(자동증가 아님).
# 2) 상품 1개당 재고 레코드는 최대 1개 (stock.product_id UNIQUE).
# 3) 수량은 음수가 될 수 없다 (CHECK quantity >= 0).

from __future__ import annotations

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    CheckConstraint,
    text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


# ─────────────────────────────────────────────
# 공통 Mixin
# ─────────────────────────────────────────────
class CreatedUpdatedMixin:
    """
    created_at, updated_at 둘 다 있는 테이블용 Mixin.
    - created_at: 행이 처음 만들어진 시각
    - updated_at: 행이 생성되거나 수정될 때마다 자동 갱신
    """

    created_at = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


# ─────────────────────────────────────────────
# 1. 상품: product
# ─────────────────────────────────────────────
class Product(CreatedUpdatedMixin, Base):
    __tablename__ = "product"

    id = Column(Integer, primary_key=True)
    sku = Column(String(50), unique=True)                          # 내부 관리용 SKU (선택)
    name = Column(String(200))                                     # 상품명 (선택)

    stock = relationship("Stock", back_populates="product", uselist=False)


# ─────────────────────────────────────────────
# 2. 재고: stock
# ─────────────────────────────────────────────
class Stock(CreatedUpdatedMixin, Base):
    __tablename__ = "stock"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_stock_quantity_nonneg"),
    )

    id = Column(Integer, primary_key=True, autoincrement=False)    # 운영자 입력 Stock ID
    product_id = Column(
        Integer,
        ForeignKey("product.id"),
        nullable=False,
        unique=True,
    )
    quantity = Column(
        Integer,
        nullable=False,
        server_default=text("0"),
    )

    product = relationship("Product", back_populates="stock")
