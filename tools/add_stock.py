# 📄 tools/add_stock.py
# 목적: 터미널용 재고추가 폼 (Add Stock)
# 사용:
#   python -m tools.add_stock --stock-id 101 --product-id 1 --quantity 20
#   python -m tools.add_stock --stock-id 101 --product-id 1 --quantity 20 --dry-run
#
# 동작 요약
# - 입력값을 폼에 넣고 미리보기(상품 확인 + 재고 대조) 결과를 출력
# - --dry-run 이면 미리보기까지만, 아니면 제출 후 결과 문구 출력
# - 거절/실패 시 종료 코드 1

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from stockdesk.client.add_stock_form import AddStockForm, FormPhase, FormState
from stockdesk.client.stock_api import StockApiClient
from stockdesk.core.config import settings
from stockdesk.core.logging_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Add Stock: create or top up a stock record")
    p.add_argument("--stock-id", default="", help="Stock ID (e.g. 101)")
    p.add_argument("--product-id", default="", help="Product ID (e.g. 1)")
    p.add_argument("--quantity", default="", help="Quantity to add")
    p.add_argument("--api-url", default=settings.api_url, help="stock API base url")
    p.add_argument("--dry-run", action="store_true", help="preview only, do not submit")
    p.add_argument("--log-level", default=settings.log_level)
    return p


def render(state: FormState) -> List[str]:
    lines: List[str] = []
    if state.product_error:
        lines.append(f"✖ {state.product_error}")
    current = state.current_stock
    if current is not None:
        lines.append(f"Current stock: {current.previous_quantity} units")
        if state.fields.quantity:
            lines.append(f"After adding: {current.new_quantity} units")
    elif state.message:
        lines.append(state.message)
    elif state.preview is not None:
        lines.append(state.preview.message)
    return lines


async def run(args: argparse.Namespace) -> int:
    form = AddStockForm(StockApiClient(base_url=args.api_url), debounce_seconds=0)
    form.open()

    for name, value in (
        ("stockId", args.stock_id),
        ("productId", args.product_id),
        ("quantity", args.quantity),
    ):
        if not form.edit(name, value):
            print(f"✖ {name} must be a non-negative integer: {value!r}")
            return 1

    state = await form.wait_for_preview()
    for line in render(state):
        print(line)

    if args.dry_run:
        return 1 if state.rejected else 0

    print(f"→ {state.submit_label}")
    state = await form.submit()
    if state.phase is not FormPhase.DONE:
        if not state.product_error:
            print(f"✖ {state.message}")
        else:
            print(f"✖ {state.product_error}")
        return 1

    print(f"✔ {state.message}")
    form.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
