from stockdesk.models import Stock


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}
    assert api.get("/api/health").json() == {"status": "ok"}


def test_product_lookup_found_and_missing(api, seed):
    seed(products=[1])

    found = api.get("/api/products", params={"id": 1})
    assert found.status_code == 200
    assert found.json()["product"]["id"] == 1

    missing = api.get("/api/products", params={"id": 999})
    assert missing.status_code == 200
    assert missing.json() == {"product": None}


def test_create_product_and_duplicate(api):
    created = api.post("/api/products", json={"id": 7, "name": "Widget", "sku": "W-7"})
    assert created.status_code == 201
    assert created.json() == {"id": 7, "name": "Widget", "sku": "W-7"}

    dup = api.post("/api/products", json={"id": 7})
    assert dup.status_code == 409
    body = dup.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "PRODUCT-CONFLICT-201"


def test_list_stocks_pages_in_id_order(api, seed):
    seed(products=[1, 2, 3], stocks=[(103, 3, 1), (101, 1, 50), (102, 2, 5)])

    first = api.get("/api/stocks", params={"page": 1, "limit": 2}).json()
    second = api.get("/api/stocks", params={"page": 2, "limit": 2}).json()

    assert [s["id"] for s in first["stocks"]] == [101, 102]
    assert [s["id"] for s in second["stocks"]] == [103]
    assert first["total"] == 3
    assert first["stocks"][0] == {"id": 101, "product_id": 1, "quantity": 50}


def test_list_stocks_rejects_bad_limit(api):
    resp = api.get("/api/stocks", params={"limit": 0})

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "SYSTEM-VALID-001"


def test_post_creates_new_stock(api, seed, db):
    seed(products=[1])

    resp = api.post("/api/stocks", json={"id": 200, "product_id": 1, "quantity": 10})

    assert resp.status_code == 201
    assert resp.json() == {"id": 200, "product_id": 1, "quantity": 10}
    db.expire_all()
    assert db.get(Stock, 200).quantity == 10


def test_post_tops_up_existing_stock(api, seed, db):
    seed(products=[1], stocks=[(101, 1, 50)])

    resp = api.post("/api/stocks", json={"id": 101, "product_id": 1, "quantity": 20})

    assert resp.status_code == 200
    assert resp.json() == {
        "id": 101,
        "product_id": 1,
        "quantity": 70,
        "previousQuantity": 50,
        "addedQuantity": 20,
        "newQuantity": 70,
    }
    db.expire_all()
    assert db.get(Stock, 101).quantity == 70


def test_post_rejects_missing_product(api):
    resp = api.post("/api/stocks", json={"id": 1, "product_id": 999, "quantity": 1})

    assert resp.status_code == 404
    assert resp.json()["error"]["detail"] == "Product ID does not exist"


def test_post_rejects_cross_assignment(api, seed):
    seed(products=[1, 2], stocks=[(101, 1, 50)])

    other_product = api.post("/api/stocks", json={"id": 101, "product_id": 2, "quantity": 1})
    other_stock = api.post("/api/stocks", json={"id": 102, "product_id": 1, "quantity": 1})

    assert other_product.status_code == 409
    assert other_product.json()["error"]["detail"] == "Stock ID 101 is already assigned to Product ID 1"
    assert other_stock.status_code == 409
    assert other_stock.json()["error"]["detail"] == "Product ID 1 already has Stock ID 101"


def test_post_rejects_negative_quantity(api, seed):
    seed(products=[1])

    resp = api.post("/api/stocks", json={"id": 5, "product_id": 1, "quantity": -3})

    assert resp.status_code == 422
    assert resp.json()["ok"] is False
