# app/statistics.py
from typing import Any, Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import Order, OrderStatus, Review


class StatisticsService:
    def __init__(self, db: Session):
        self.db = db

    def main(self, user_id: int) -> List[Dict[str, Any]]:
        orders = self.db.scalar(select(func.count(Order.id)).where(Order.user_id == user_id))
        paid = self.db.scalar(
            select(func.count(Order.id)).where(Order.user_id == user_id, Order.status == OrderStatus.PAYED)
        )
        reviews = self.db.scalar(select(func.count(Review.id)).where(Review.user_id == user_id))
        total = self.db.scalar(select(func.coalesce(func.sum(Order.total), 0)).where(Order.user_id == user_id))
        return [
            {"name": "Orders length", "value": orders or 0},
            {"name": "Payed orders", "value": paid or 0},
            {"name": "Reviews length", "value": reviews or 0},
            {"name": "Total amount", "value": int(total or 0)},
        ]
