"""
Pytest configuration and shared fixtures for stockdesk tests.
"""
import os

# stockdesk 모듈 임포트 전에 설정
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from stockdesk.core.schemas_stock import StockRecord, StockWriteResult
from stockdesk.db.session import create_tables, get_sync_session
from stockdesk.main import app
from stockdesk.models import Product, Stock
from stockdesk.system.error_codes import TransportError


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def api(session_factory):
    """TestClient bound to an in-memory database."""
    def _override():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_sync_session] = _override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed(db):
    """seed(products=[1, 2], stocks=[(101, 1, 50)])"""
    def _seed(products=(), stocks=()):
        for pid in products:
            db.add(Product(id=pid, name=f"product-{pid}"))
        db.flush()
        for sid, pid, qty in stocks:
            db.add(Stock(id=sid, product_id=pid, quantity=qty))
        db.commit()
    return _seed


class FakeStockClient:
    """In-memory stand-in for StockApiClient used by form tests."""

    def __init__(self, products=(), stocks=()):
        self.products = set(products)
        self.stocks = [StockRecord(id=s, product_id=p, quantity=q) for s, p, q in stocks]
        self.product_calls = 0
        self.listing_calls = 0
        self.writes = []
        self.listing_error = False
        self.write_error = None

    def product_exists(self, product_id):
        self.product_calls += 1
        return product_id in self.products

    def fetch_stock_snapshot(self):
        self.listing_calls += 1
        if self.listing_error:
            raise TransportError(detail="Error checking stock information")
        return list(self.stocks)

    def register_stock(self, stock_id, product_id, quantity):
        self.writes.append((stock_id, product_id, quantity))
        if self.write_error is not None:
            raise self.write_error
        for i, s in enumerate(self.stocks):
            if s.id == stock_id:
                new = s.quantity + quantity
                self.stocks[i] = StockRecord(id=s.id, product_id=s.product_id, quantity=new)
                return StockWriteResult(
                    id=s.id,
                    product_id=s.product_id,
                    quantity=new,
                    previous_quantity=s.quantity,
                    added_quantity=quantity,
                    new_quantity=new,
                )
        self.stocks.append(StockRecord(id=stock_id, product_id=product_id, quantity=quantity))
        return StockWriteResult(id=stock_id, product_id=product_id, quantity=quantity)


@pytest.fixture
def make_fake_client():
    return FakeStockClient


@pytest.fixture
def fake_client():
    return FakeStockClient(products=[1, 2], stocks=[(101, 1, 50)])
