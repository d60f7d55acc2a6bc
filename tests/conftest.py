# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.database import build_engine, get_db, init_db
from app.main import app
from app.models import Category, Product, Review


def _override(engine):
    Session = sessionmaker(bind=engine, autoflush=False)

    def _get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()
    return _get_db


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture()
def client(engine):
    app.dependency_overrides[get_db] = _override(engine)
    yield TestClient(app)
    app.dependency_overrides.clear()


class Seeder:
    """Inserts catalog rows directly, with controllable creation times."""

    def __init__(self, db):
        self.db = db
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self):
        self._clock += timedelta(minutes=1)
        return self._clock

    def category(self, name, slug=None):
        category = Category(name=name, slug=slug or name.lower().replace(" ", "-"), created_at=self._tick())
        self.db.add(category)
        self.db.commit()
        return category

    def product(self, name, price, category=None, description="", ratings=()):
        product = Product(
            name=name,
            slug=name.lower().replace(" ", "-"),
            description=description,
            price=price,
            images=[],
            category=category,
            created_at=self._tick(),
        )
        self.db.add(product)
        self.db.flush()
        for rating in ratings:
            self.db.add(Review(rating=rating, text="", user_id=99, product_id=product.id, created_at=self._tick()))
        self.db.commit()
        return product


@pytest.fixture()
def seed(db):
    return Seeder(db)
