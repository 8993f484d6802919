from stockdesk.system.error_codes import (
    REGISTRY,
    ConflictError,
    DomainError,
    NotFoundError,
    ServerError,
    TransportError,
    ValidationError,
    build_error,
    code_type,
    error_for_code,
    error_text,
    map_exception,
)


def test_unknown_codes_normalize_to_system_unknown():
    status, body = build_error("nonsense")

    assert status == 500
    assert body["error"]["code"] == "SYSTEM-UNKNOWN-999"
    assert body["ok"] is False


def test_build_error_uses_registry():
    status, body = build_error(" stock-conflict-202 ", detail="Product ID 1 already has Stock ID 101")

    assert status == 409
    assert body["error"]["code"] == "STOCK-CONFLICT-202"
    assert body["error"]["detail"] == "Product ID 1 already has Stock ID 101"
    assert body["error"]["trace_id"].startswith("req-")


def test_client_error_kinds_have_default_codes():
    assert ValidationError().code == "STOCK-VALID-001"
    assert ConflictError().code == "STOCK-CONFLICT-201"
    assert NotFoundError().code == "PRODUCT-NOTFOUND-101"
    assert TransportError().code == "SYSTEM-NETWORK-961"
    assert ServerError().code == "STOCK-UNKNOWN-999"


def test_message_falls_back_to_registry():
    assert NotFoundError().message == "Product ID does not exist"
    assert ValidationError(detail="stockId is empty").message == "stockId is empty"


def test_error_for_code_picks_kind():
    assert isinstance(error_for_code("STOCK-VALID-002"), ValidationError)
    assert isinstance(error_for_code("SYSTEM-NETWORK-961"), TransportError)
    assert isinstance(error_for_code("SYSTEM-DB-901"), ServerError)
    state = error_for_code("STOCK-STATE-451")
    assert type(state) is DomainError
    assert code_type("PRODUCT-NOTFOUND-101") == "NOTFOUND"


def test_error_text_reads_both_payload_shapes():
    _, body = build_error("STOCK-CONFLICT-201", detail="Stock ID 5 is already assigned to Product ID 2")

    assert error_text(body) == "Stock ID 5 is already assigned to Product ID 2"
    assert error_text({"error": "plain message"}) == "plain message"
    assert error_text({"error": {"message": "from registry", "detail": ""}}) == "from registry"
    assert error_text(None) == "Error processing your request"
    assert error_text({}, fallback="x") == "x"


def test_map_exception_heuristics():
    assert map_exception(ValueError("bad"))[0] == 422
    assert map_exception(RuntimeError("IntegrityError: duplicate key"))[1]["error"]["code"] == "SYSTEM-DB-901"
    assert map_exception(RuntimeError("boom"))[0] == 500


def test_registry_holds_only_codes_in_use():
    assert set(REGISTRY) == {
        "SYSTEM-UNKNOWN-999",
        "SYSTEM-DB-901",
        "SYSTEM-VALID-001",
        "SYSTEM-NETWORK-961",
        "PRODUCT-VALID-001",
        "PRODUCT-NOTFOUND-101",
        "PRODUCT-CONFLICT-201",
        "STOCK-VALID-001",
        "STOCK-VALID-002",
        "STOCK-CONFLICT-201",
        "STOCK-CONFLICT-202",
        "STOCK-STATE-451",
        "STOCK-UNKNOWN-999",
    }
    assert build_error("STOCK-NOTFOUND-101")[1]["error"]["message"] == "Error processing your request"
