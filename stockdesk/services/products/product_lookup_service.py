# 📄 stockdesk/services/products/product_lookup_service.py
# 페이지: 재고추가 폼: 상품 존재 확인
# 역할:
#   - 상품 id 단건 조회 (없으면 None → 라우터가 {"product": null})
#   - 상품 목록 조회 (page/limit)
#   - 상품 단건 등록 (시드/운영 보조)
# 규칙:
#   - sync(Session 전용)
#   - DomainError만 발생

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockdesk.core.schemas_stock import ProductCreate, ProductRef
from stockdesk.models import Product
from stockdesk.system.error_codes import DomainError

logger = logging.getLogger(__name__)

PAGE_ID = "product.lookup"
PAGE_VERSION = "v1.0"


class ProductLookupService:
    page_id = PAGE_ID
    page_version = PAGE_VERSION

    def __init__(self, *, session: Session):
        self.session = session

    # ======================================================
    # 1) 단건 조회
    # ======================================================
    def get_by_id(self, product_id: int) -> Optional[ProductRef]:
        product = self.session.get(Product, product_id)
        if product is None:
            return None
        return ProductRef.model_validate(product)

    def exists(self, product_id: int) -> bool:
        return self.session.get(Product, product_id) is not None

    # ======================================================
    # 2) 목록 조회
    # ======================================================
    def list_items(self, *, page: int, limit: int) -> Dict[str, Any]:
        if page <= 0 or limit <= 0:
            raise DomainError(
                "PRODUCT-VALID-001",
                detail="page and limit must be positive",
                ctx={"page_id": PAGE_ID, "page": page, "limit": limit},
            )

        total = self.session.execute(select(func.count()).select_from(Product)).scalar_one()
        rows = (
            self.session.execute(
                select(Product).order_by(Product.id).offset((page - 1) * limit).limit(limit)
            )
            .scalars()
            .all()
        )
        return {
            "products": [ProductRef.model_validate(r).model_dump() for r in rows],
            "page": page,
            "limit": limit,
            "total": total,
        }

    # ======================================================
    # 3) 단건 등록
    # ======================================================
    def create(self, payload: ProductCreate) -> ProductRef:
        if payload.id is not None and self.exists(payload.id):
            raise DomainError(
                "PRODUCT-CONFLICT-201",
                detail=f"Product ID {payload.id} already exists",
                ctx={"id": payload.id},
            )

        sku = (payload.sku or "").strip() or None
        if sku is not None:
            dup = self.session.execute(select(Product.id).where(Product.sku == sku)).first()
            if dup:
                raise DomainError(
                    "PRODUCT-CONFLICT-201",
                    detail=f"SKU {sku} already exists",
                    ctx={"sku": sku},
                )

        obj = Product(id=payload.id, sku=sku, name=(payload.name or "").strip() or None)
        self.session.add(obj)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DomainError(
                "SYSTEM-DB-901",
                detail="Failed to save product",
                ctx={"error": str(e.orig)},
            )

        self.session.refresh(obj)
        logger.info("product %s created", obj.id)
        return ProductRef.model_validate(obj)
