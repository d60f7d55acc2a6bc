"""
Order lifecycle: placing orders and advancing their status from payment
gateway notifications.

Notifications are delivered at least once and in any order, so status
changes are conditional updates that only ever move an order forward.
Re-delivering an event for an order that is already past that status is a
no-op.
"""
import logging
import re
from typing import Iterable, List

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from .core import OrderItemIn, PaymentEvent, PaymentEventResult, PaymentObject, PaymentRequest
from .errors import MalformedEvent, NotFound, ValidationFailed
from .models import STATUS_RANK, Order, OrderItem, OrderStatus
from .pagination import MAX_STORE_INT, parse_positive_int

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment.succeeded"
PAYMENT_WAITING_FOR_CAPTURE = "payment.waiting_for_capture"

ORDER_REFERENCE_KEY = "order_id"
_DESCRIPTION_REFERENCE = re.compile(r"#(\d+)\b")


def normalize_event_name(event: str) -> str:
    name = (event or "").strip().lower()
    return name if "." in name else f"payment.{name}"


def payment_request_for(order: Order) -> PaymentRequest:
    return PaymentRequest(
        description=f"Order #{order.id}",
        metadata={ORDER_REFERENCE_KEY: str(order.id)},
    )


def resolve_order_reference(payment: PaymentObject) -> int:
    """Find the order id a payment belongs to.

    The metadata reference set by payment_request_for() wins; the
    ``#<id>`` in the description is only read when metadata carries none.
    """
    raw = payment.metadata.get(ORDER_REFERENCE_KEY)
    if raw is None:
        match = _DESCRIPTION_REFERENCE.search(payment.description or "")
        if match is None:
            raise MalformedEvent("Payment event does not reference an order")
        raw = match.group(1)

    order_id = parse_positive_int(raw)
    if order_id is None:
        raise MalformedEvent(f"Invalid order reference: {raw!r}")
    return order_id


class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def _orders(self):
        return (
            select(Order)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
        )

    def list_all(self) -> List[Order]:
        return list(self.db.scalars(self._orders()).all())

    def list_for_user(self, user_id: int) -> List[Order]:
        return list(self.db.scalars(self._orders().where(Order.user_id == user_id)).all())

    def get(self, order_id: int) -> Order:
        if parse_positive_int(order_id) is None:
            raise NotFound("Order not found")
        order = self.db.scalar(select(Order).where(Order.id == order_id).options(selectinload(Order.items)))
        if order is None:
            raise NotFound("Order not found")
        return order

    def place_order(self, user_id: int, items: Iterable[OrderItemIn]) -> Order:
        items = list(items)
        if not items:
            raise ValidationFailed("Order must contain at least one item")
        for item in items:
            if item.quantity < 1 or item.price < 0:
                raise ValidationFailed("Order items need quantity >= 1 and price >= 0")

        # client-supplied unit prices are trusted as-is
        total = sum(item.quantity * item.price for item in items)
        if total > MAX_STORE_INT:
            raise ValidationFailed("Order total is too large")
        order = Order(
            user_id=user_id,
            status=OrderStatus.PENDING,
            total=total,
            items=[OrderItem(product_id=i.product_id, quantity=i.quantity, price=i.price) for i in items],
        )
        # order and items go out in one transaction
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        logger.info("Order %s placed by user %s (total=%s, items=%d)", order.id, user_id, total, len(items))
        return order

    def advance_status(self, order_id: int, target: OrderStatus) -> bool:
        """Move an order forward to target. Returns False when it was already there or beyond."""
        earlier = [s for s, rank in STATUS_RANK.items() if rank < STATUS_RANK[target]]
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status.in_(earlier))
            .values(status=target)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount:
            return True

        if self.db.get(Order, order_id) is None:
            # may simply not be committed yet; the gateway retries non-2xx callbacks
            raise NotFound(f"Order {order_id} not found")
        return False

    def apply_payment_event(self, event: PaymentEvent) -> PaymentEventResult:
        name = normalize_event_name(event.event)

        if name == PAYMENT_WAITING_FOR_CAPTURE:
            logger.info("Payment %s waiting for capture; no status change", event.object.id)
            return PaymentEventResult(event=name, message="Waiting for capture")

        if name != PAYMENT_SUCCEEDED:
            return PaymentEventResult(event=name)

        try:
            order_id = resolve_order_reference(event.object)
        except MalformedEvent as e:
            logger.error("Malformed %s event (payment=%s): %s", name, event.object.id, e.detail)
            raise

        try:
            changed = self.advance_status(order_id, OrderStatus.PAYED)
        except NotFound:
            logger.warning("Payment succeeded for unknown order %s (payment=%s)", order_id, event.object.id)
            raise

        if changed:
            logger.info("Order %s marked %s", order_id, OrderStatus.PAYED.value)
        else:
            logger.info("Duplicate %s event for order %s ignored", name, order_id)

        status = self.db.scalar(select(Order.status).where(Order.id == order_id))
        return PaymentEventResult(event=name, changed=changed, order_id=order_id, status=status)

