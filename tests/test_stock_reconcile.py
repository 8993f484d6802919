import pytest

from stockdesk.core.schemas_stock import CandidateInput, StockRecord
from stockdesk.services.stock.stock_reconcile import (
    Create,
    Pending,
    Rejected,
    Update,
    check_complete,
    reconcile,
)
from stockdesk.system.error_codes import ConflictError, DomainError, NotFoundError


def _c(stock_id="", product_id="", quantity=""):
    return CandidateInput(stock_id=stock_id, product_id=product_id, quantity=quantity)


STOCKS = [StockRecord(id=101, product_id=1, quantity=50)]


@pytest.mark.parametrize("stock_id,quantity", [("", ""), ("101", "20"), ("555", "3")])
def test_missing_product_is_rejected_regardless_of_other_fields(stock_id, quantity):
    result = reconcile(_c(stock_id, "999", quantity), {1}, STOCKS)

    assert result == Rejected("Product ID does not exist", code="PRODUCT-NOTFOUND-101")


def test_stock_id_bound_to_other_product_names_that_product():
    result = reconcile(_c("101", "2", "5"), {1, 2}, STOCKS)

    assert isinstance(result, Rejected)
    assert result.reason == "Stock ID 101 is already assigned to Product ID 1"
    assert result.code == "STOCK-CONFLICT-201"


def test_product_bound_to_other_stock_names_that_stock():
    result = reconcile(_c("102", "1"), {1}, STOCKS)

    assert result == Rejected("Product ID 1 already has Stock ID 101", code="STOCK-CONFLICT-202")


def test_top_up_preview_adds_quantity():
    result = reconcile(_c("101", "1", "20"), {1}, STOCKS)

    assert result == Update(existing_id=101, previous_quantity=50, added_quantity=20, new_quantity=70)
    assert result.message == "Current stock quantity: 50. New quantity will be added to this."


def test_top_up_preview_is_stable_across_runs():
    candidate = _c("101", "1", "20")

    assert reconcile(candidate, {1}, STOCKS) == reconcile(candidate, {1}, STOCKS)


def test_top_up_without_quantity_adds_nothing():
    result = reconcile(_c("101", "1"), {1}, STOCKS)

    assert isinstance(result, Update)
    assert result.new_quantity == 50


def test_new_stock_preview_uses_exact_triple():
    result = reconcile(_c("200", "1", "10"), {1}, [])

    assert result == Create(StockRecord(id=200, product_id=1, quantity=10))


def test_partial_input_without_conflict_is_pending():
    assert reconcile(_c("200", "1"), {1}, []) == Pending()
    assert reconcile(_c("101"), {1}, STOCKS) == Pending()
    assert reconcile(_c(), {1}, STOCKS) == Pending()


def test_product_lookup_accepts_callable():
    seen = []

    def lookup(pid):
        seen.append(pid)
        return pid == 1

    assert isinstance(reconcile(_c("200", "1", "1"), lookup, []), Create)
    assert seen == [1]


def test_non_numeric_input_never_reaches_the_decision():
    with pytest.raises(DomainError) as exc:
        reconcile(_c("abc", "1", "1"), {1}, [])

    assert exc.value.code == "STOCK-VALID-002"


def test_check_complete():
    assert check_complete(_c("1", "1", "1")) is None
    rejected = check_complete(_c("1", "", "1"))
    assert rejected.reason == "All fields are required"
    assert rejected.code == "STOCK-VALID-001"


def test_rejected_maps_to_client_error_kind():
    assert isinstance(Rejected("x", code="STOCK-CONFLICT-202").to_error(), ConflictError)
    err = Rejected("Product ID does not exist", code="PRODUCT-NOTFOUND-101").to_error()
    assert isinstance(err, NotFoundError)
    assert err.message == "Product ID does not exist"
