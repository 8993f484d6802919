# 📄 stockdesk/client/add_stock_form.py
# 페이지: 재고추가(Add Stock) 폼
# 역할: 입력 수락 → 디바운스 미리보기(상품 확인 + 재고 스냅샷 대조) → 제출
# 상태: Idle → Previewing → Submitting → Done | Failed → (open/close) Idle
#
# ✅ 규칙
# - 화면(표시 계층)은 form.state(FormState, 불변)만 읽어서 그린다
# - 편집마다 이전 미리보기 작업은 취소되고 DEBOUNCE_SECONDS 뒤에 새로 실행
# - 제출 시 대조는 디바운스 없이 즉시 실행, 제출 중 재제출 금지(STOCK-STATE-451)
# - 블로킹 HTTP 호출은 anyio.to_thread로 워커 스레드에서 실행

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Optional

import anyio

from stockdesk.client.stock_api import MSG_LISTING_FAILED, MSG_WRITE_FAILED
from stockdesk.core.config import settings
from stockdesk.core.schemas_stock import (
    FIELD_NAMES,
    CandidateInput,
    StockWriteResult,
    is_integer_literal,
)
from stockdesk.services.stock.stock_reconcile import (
    MSG_PRODUCT_MISSING,
    Create,
    ReconciliationResult,
    Rejected,
    Update,
    check_complete,
    reconcile,
)
from stockdesk.system.error_codes import DomainError, TransportError

logger = logging.getLogger(__name__)

MSG_CREATED = "Stock added successfully"


class FormPhase(str, Enum):
    IDLE = "idle"
    PREVIEWING = "previewing"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class FormState:
    phase: FormPhase = FormPhase.IDLE
    fields: CandidateInput = field(default_factory=CandidateInput)
    # 미리보기에서 나온 거절 사유. 비어 있지 않으면 제출 불가
    product_error: str = ""
    # 안내/오류 문구(현재 수량 안내, 성공 문구, 서버 오류 등)
    message: str = ""
    preview: Optional[ReconciliationResult] = None
    result: Optional[StockWriteResult] = None

    @property
    def rejected(self) -> bool:
        return bool(self.product_error)

    @property
    def current_stock(self) -> Optional[Update]:
        return self.preview if isinstance(self.preview, Update) else None

    @property
    def submit_label(self) -> str:
        if self.phase is FormPhase.SUBMITTING:
            return "Processing..."
        return "Add to Stock" if self.current_stock else "Create Stock"


def success_message(result: StockWriteResult) -> str:
    if result.is_update:
        return (
            f"Successfully updated stock. Previous: {result.previous_quantity}, "
            f"Added: {result.added_quantity}, New Total: {result.new_quantity}"
        )
    return MSG_CREATED


class AddStockForm:
    """
    Add Stock 폼 1개 인스턴스.

    client는 StockApiClient와 같은 모양이면 된다:
        product_exists(id) -> bool
        fetch_stock_snapshot() -> list[StockRecord]
        register_stock(id, product_id, quantity) -> StockWriteResult

    edit/open/close/state/can_submit은 동기 호출이다. 디바운스 미리보기는 실행 중인
    asyncio 루프가 있을 때만 예약되고, 루프가 없으면 refresh_preview()를 await해서 갱신한다.
    제출 중에는 open/close로 폼을 초기화해도 다음 submit()은 STOCK-STATE-451.
    """

    def __init__(
        self,
        client: Any,
        *,
        debounce_seconds: float = settings.debounce_seconds,
        on_submit: Optional[Callable[[StockWriteResult], None]] = None,
    ):
        self.client = client
        self.debounce_seconds = debounce_seconds
        self.on_submit = on_submit
        self._state = FormState()
        self._pending: Optional[asyncio.Task] = None
        # 편집/초기화마다 증가. 끝난 작업의 세대가 다르면 결과를 버린다
        self._generation = 0
        # open/close마다 증가. 제출 결과는 같은 epoch의 폼에만 반영
        self._epoch = 0
        self._submitting = False

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def can_submit(self) -> bool:
        return not self._submitting and not self._state.rejected

    @property
    def preview_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    # ─────────────────────────────────────────────
    # 열기/닫기
    # ─────────────────────────────────────────────
    def open(self) -> FormState:
        self._cancel_pending()
        self._epoch += 1
        self._state = FormState()
        return self._state

    def close(self) -> FormState:
        return self.open()

    # ─────────────────────────────────────────────
    # 입력
    # ─────────────────────────────────────────────
    def edit(self, name: str, value: str) -> bool:
        """
        필드 하나 수정. 음이 아닌 정수(또는 빈 값)가 아니면 무시하고 False.
        실행 중인 이벤트 루프가 있으면 디바운스 미리보기를 예약한다.
        """
        if name not in FIELD_NAMES:
            raise ValueError(f"unknown field: {name}")
        if not is_integer_literal(value):
            return False

        value = (value or "").strip()
        phase = self._state.phase
        if phase is not FormPhase.SUBMITTING:
            phase = FormPhase.PREVIEWING
        self._state = replace(self._state, fields=self._state.fields.with_field(name, value), phase=phase)
        self._schedule_preview()
        return True

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _schedule_preview(self) -> None:
        self._cancel_pending()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # 루프 밖(동기 화면)에서는 예약하지 않는다. refresh_preview()로 직접 실행
            return
        self._pending = loop.create_task(self._debounced(self._generation))

    async def _debounced(self, generation: int) -> None:
        await asyncio.sleep(self.debounce_seconds)
        try:
            await self._preview(generation)
        except Exception:
            logger.exception("stock preview crashed")
            if generation == self._generation:
                self._state = replace(self._state, preview=None, message=MSG_LISTING_FAILED)

    async def wait_for_preview(self) -> FormState:
        """예약된 미리보기가 있으면 끝날 때까지 기다린다."""
        task = self._pending
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self._state

    # ─────────────────────────────────────────────
    # 대조
    # ─────────────────────────────────────────────
    async def _reconcile(self, candidate: CandidateInput) -> ReconciliationResult:
        """상품 존재 확인 → 재고 스냅샷 → reconcile. 스냅샷 실패는 TransportError"""
        product_id = candidate.product_id_int()
        if product_id is not None:
            exists = await anyio.to_thread.run_sync(self.client.product_exists, product_id)
            if not exists:
                return Rejected(MSG_PRODUCT_MISSING, code="PRODUCT-NOTFOUND-101")

        stocks = await anyio.to_thread.run_sync(self.client.fetch_stock_snapshot)
        known = {product_id} if product_id is not None else set()
        return reconcile(candidate, known, stocks)

    def _apply(self, result: ReconciliationResult) -> None:
        if isinstance(result, Rejected):
            logger.debug("preview rejected: %s", result.reason)
            self._state = replace(self._state, product_error=result.reason, preview=None, message="")
        elif isinstance(result, Update):
            self._state = replace(self._state, product_error="", preview=result, message=result.message)
        else:
            preview = result if isinstance(result, Create) else None
            self._state = replace(self._state, product_error="", preview=preview, message="")

    async def refresh_preview(self) -> FormState:
        """디바운스 없이 지금 미리보기를 실행한다."""
        self._cancel_pending()
        await self._preview(self._generation)
        return self._state

    async def _preview(self, generation: int) -> None:
        candidate = self._state.fields
        if not candidate.stock_id and not candidate.product_id:
            return

        try:
            result = await self._reconcile(candidate)
        except TransportError as e:
            if generation == self._generation:
                self._state = replace(self._state, message=e.message)
            return

        if generation != self._generation:
            return
        self._apply(result)

    # ─────────────────────────────────────────────
    # 제출
    # ─────────────────────────────────────────────
    async def submit(self) -> FormState:
        # 닫기/다시 열기로는 풀리지 않는다. 쓰기가 끝나야 다음 제출 가능
        if self._submitting:
            raise DomainError(
                "STOCK-STATE-451",
                detail="A submission is already in progress",
                stage="client",
            )

        candidate = self._state.fields
        missing = check_complete(candidate)
        if missing is not None:
            self._state = replace(self._state, message=missing.reason)
            return self._state
        if self._state.rejected:
            return self._state

        self._cancel_pending()
        epoch = self._epoch
        self._submitting = True
        self._state = replace(self._state, phase=FormPhase.SUBMITTING, message="")

        try:
            result = await self._reconcile(candidate)
            if isinstance(result, Rejected):
                if epoch == self._epoch:
                    self._apply(result)
                    self._state = replace(self._state, phase=FormPhase.PREVIEWING)
                return self._state

            written = await anyio.to_thread.run_sync(
                self.client.register_stock,
                candidate.stock_id_int(),
                candidate.product_id_int(),
                candidate.quantity_int(),
            )
        except DomainError as e:
            logger.warning("stock submit failed: %s", e)
            if epoch == self._epoch:
                self._state = replace(self._state, phase=FormPhase.FAILED, message=e.message)
            return self._state
        except Exception:
            # 예상 못 한 예외는 그대로 올리되 SUBMITTING에 머물지 않는다
            logger.exception("stock submit crashed")
            if epoch == self._epoch:
                self._state = replace(self._state, phase=FormPhase.FAILED, message=MSG_WRITE_FAILED)
            raise
        finally:
            self._submitting = False

        if epoch != self._epoch:
            # 폼이 이미 닫혔거나 다시 열렸다. 새 폼 상태는 건드리지 않는다
            logger.info("stock %s written after the form was reset", written.id)
            return self._state

        self._state = replace(
            self._state,
            phase=FormPhase.DONE,
            message=success_message(written),
            preview=None,
            result=written,
        )
        if self.on_submit is not None:
            self.on_submit(written)
        return self._state
