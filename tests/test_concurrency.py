# tests/test_concurrency.py
import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.database import build_engine, get_db, init_db
from app.main import app


@pytest.fixture()
def file_engine(tmp_path):
    # a file database so concurrent requests get their own connections
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    init_db(engine)
    Session = sessionmaker(bind=engine, autoflush=False)

    def _get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield engine
    app.dependency_overrides.clear()
    engine.dispose()


async def _deliver(payload):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        return await ac.post("/orders/status", json=payload)


def test_duplicate_payment_events_delivered_concurrently(file_engine):
    client = TestClient(app)
    pid = client.post("/products", headers={"X-User-Id": "1", "X-User-Role": "admin"}).json()["id"]
    placed = client.post("/orders", json={"items": [{"productId": pid, "quantity": 1, "price": 1000}]},
                         headers={"X-User-Id": "5"}).json()
    payload = {"event": "payment.succeeded", "object": placed["payment"]}

    async def _all():
        return await asyncio.gather(*(_deliver(payload) for _ in range(5)))

    results = asyncio.run(_all())
    assert [r.status_code for r in results] == [200] * 5
    # exactly one delivery performs the transition
    assert sum(r.json()["changed"] for r in results) == 1
    assert all(r.json()["status"] == "PAYED" for r in results)

    orders = client.get("/orders", headers={"X-User-Id": "5"}).json()
    assert orders[0]["status"] == "PAYED"
