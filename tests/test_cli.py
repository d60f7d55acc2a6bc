# tests/test_cli.py
from rich.console import Console

import cli


def _recording(monkeypatch):
    console = Console(record=True, width=200)
    monkeypatch.setattr(cli, "console", console)
    return console


def test_show_products_renders_rows(monkeypatch):
    console = _recording(monkeypatch)
    cli.show_products([
        {"id": 1, "name": "Oak Chair", "slug": "oak-chair", "price": 120,
         "category": {"name": "Furniture"}, "reviews": [{"rating": 4}, {"rating": 5}]},
        {"id": 2, "name": "", "slug": "", "price": 0, "category": None, "reviews": []},
    ], count=10)
    out = console.export_text()
    assert "Oak Chair" in out
    assert "Furniture" in out
    assert "4.5" in out
    assert "<draft>" in out
    assert "2 of 10" in out


def test_show_orders(monkeypatch):
    console = _recording(monkeypatch)
    cli.show_orders([{"id": 7, "status": "PAYED", "total": 25, "created_at": "2024-01-01T00:00:00",
                      "items": [{"product_id": 1, "quantity": 2}, {"product_id": 2, "quantity": 1}]}])
    out = console.export_text()
    assert "PAYED" in out
    assert "#1 x2" in out


def test_empty_views(monkeypatch):
    console = _recording(monkeypatch)
    cli.show_products([])
    cli.show_orders([])
    out = console.export_text()
    assert "No products found" in out
    assert "No orders found" in out
