"""
stock_api.py

A small client for the stock API used by the Add Stock form.

Endpoints:
- GET  /api/products?id={id}          -> {"product": {...} | null}
- GET  /api/stocks?page={p}&limit={n} -> {"stocks": [...], ...}
- POST /api/stocks                    -> record, or record + previousQuantity/addedQuantity/newQuantity

Failure handling:
- product lookup: any transport/API failure reads as "product not found"
- stock listing: TransportError (also for rows that do not match the schema)
- stock write: the server's error text (ConflictError/NotFoundError/ServerError ...)
  or ServerError when a 2xx body does not match the schema
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pydantic
import requests

from stockdesk.core.config import settings
from stockdesk.core.schemas_stock import (
    ProductRef,
    StockRecord,
    StockWriteRequest,
    StockWriteResult,
)
from stockdesk.system.error_codes import (
    ServerError,
    TransportError,
    error_code,
    error_for_code,
    error_text,
)

logger = logging.getLogger(__name__)

MSG_LISTING_FAILED = "Error checking stock information"
MSG_WRITE_FAILED = "Error processing your request"


@dataclass
class StockApiClient:
    base_url: str = settings.api_url
    timeout: float = settings.http_timeout_seconds
    snapshot_limit: int = settings.stock_snapshot_limit
    snapshot_max_pages: int = settings.stock_snapshot_max_pages
    session: Any = field(default_factory=requests.Session)

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        return self.session.get(
            self._url(path),
            params=params,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )

    @staticmethod
    def _json(resp: Any) -> Any:
        try:
            return resp.json()
        except ValueError:
            return None

    # ─────────────────────────────────────────────
    # products
    # ─────────────────────────────────────────────
    def find_product(self, product_id: int) -> Optional[ProductRef]:
        try:
            resp = self._get("/api/products", {"id": product_id})
        except requests.RequestException as e:
            logger.warning("product lookup failed for id=%s: %s", product_id, e)
            return None

        if resp.status_code >= 400:
            logger.warning("product lookup for id=%s returned %s", product_id, resp.status_code)
            return None

        data = self._json(resp)
        product = data.get("product") if isinstance(data, dict) else None
        if not product:
            return None
        try:
            return ProductRef.model_validate(product)
        except pydantic.ValidationError as e:
            logger.warning("product lookup for id=%s returned a malformed body: %s", product_id, e)
            return None

    def product_exists(self, product_id: int) -> bool:
        return self.find_product(product_id) is not None

    # ─────────────────────────────────────────────
    # stocks
    # ─────────────────────────────────────────────
    def list_stocks(self, page: int = 1, limit: int = 100) -> List[StockRecord]:
        try:
            resp = self._get("/api/stocks", {"page": page, "limit": limit})
        except requests.RequestException as e:
            logger.warning("stock listing failed (page=%s): %s", page, e)
            raise TransportError(detail=MSG_LISTING_FAILED, ctx={"error": str(e)})

        data = self._json(resp)
        if resp.status_code >= 400 or not isinstance(data, dict):
            logger.warning("stock listing returned %s: %s", resp.status_code, error_text(data))
            raise TransportError(detail=MSG_LISTING_FAILED, ctx={"status": resp.status_code})

        try:
            return [StockRecord.model_validate(s) for s in data.get("stocks") or []]
        except pydantic.ValidationError as e:
            logger.warning("stock listing page=%s returned malformed rows: %s", page, e)
            raise TransportError(detail=MSG_LISTING_FAILED, ctx={"error": str(e)})

    def fetch_stock_snapshot(self) -> List[StockRecord]:
        """Page through /api/stocks until a short page comes back."""
        out: List[StockRecord] = []
        for page in range(1, self.snapshot_max_pages + 1):
            rows = self.list_stocks(page=page, limit=self.snapshot_limit)
            out.extend(rows)
            if len(rows) < self.snapshot_limit:
                return out
        logger.warning(
            "stock snapshot stopped at %s pages (%s rows); conflict checks may be incomplete",
            self.snapshot_max_pages, len(out),
        )
        return out

    def register_stock(self, stock_id: int, product_id: int, quantity: int) -> StockWriteResult:
        body = StockWriteRequest(id=stock_id, product_id=product_id, quantity=quantity)
        try:
            resp = self.session.post(
                self._url("/api/stocks"),
                json=body.model_dump(),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("stock write failed: %s", e)
            raise ServerError(detail=MSG_WRITE_FAILED, ctx={"error": str(e)})

        data = self._json(resp)
        if resp.status_code >= 400:
            message = error_text(data, fallback=MSG_WRITE_FAILED)
            logger.warning("stock write returned %s: %s", resp.status_code, message)
            raise error_for_code(
                error_code(data) or "STOCK-UNKNOWN-999",
                detail=message,
                ctx={"status": resp.status_code},
            )

        if not isinstance(data, dict):
            raise ServerError(detail=MSG_WRITE_FAILED, ctx={"status": resp.status_code})
        try:
            return StockWriteResult.model_validate(data)
        except pydantic.ValidationError as e:
            logger.warning("stock write returned a malformed body: %s", e)
            raise ServerError(detail=MSG_WRITE_FAILED, ctx={"error": str(e)})
