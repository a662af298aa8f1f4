# backend/services/order_lifecycle.py
"""
Order lifecycle: creation, status transitions and deletion.

STATE MACHINE:
    pending -> processing -> completed
    pending -> completed
    pending | processing -> cancelled

completed and cancelled are terminal. Completing an order deducts the stock
of every item in the same transaction as the status change; if any product
lacks stock nothing is written. Because completed is terminal an order can
never deduct stock twice.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import update, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from models.customer import Customer
from models.order import Order, OrderItem
from models.product import Product
from services.errors import OrderNotFound, ProductNotFound, InvalidTransition, ValidationFailed
from services.inventory import deduct_for_item

logger = logging.getLogger(__name__)

PENDING = "pending"
PROCESSING = "processing"
COMPLETED = "completed"
CANCELLED = "cancelled"

VALID_STATUSES = {PENDING, PROCESSING, COMPLETED, CANCELLED}
TERMINAL_STATUSES = {COMPLETED, CANCELLED}

_TRANSITIONS = {
    (PENDING, PROCESSING),
    (PENDING, COMPLETED),
    (PENDING, CANCELLED),
    (PROCESSING, COMPLETED),
    (PROCESSING, CANCELLED),
}


def validate_status(status: str) -> None:
    if status not in VALID_STATUSES:
        raise ValidationFailed(
            f"Invalid status '{status}'. Must be one of: {', '.join(sorted(VALID_STATUSES))}"
        )


def can_transition(from_status: str, to_status: str) -> bool:
    """
    True when an order in from_status may be moved to to_status.

    Staying in the same non-terminal status is allowed (no-op). Nothing
    leaves a terminal status, not even a repeat of the same status.
    """
    validate_status(from_status)
    validate_status(to_status)

    if from_status in TERMINAL_STATUSES:
        return False
    if from_status == to_status:
        return True
    return (from_status, to_status) in _TRANSITIONS


def _find_customer(db: Session, phone: str) -> Optional[Customer]:
    return db.query(Customer).filter(Customer.customer_phone == phone).first()


def _find_or_create_customer(db: Session, name: str, phone: str, address: str) -> Customer:
    """
    Must run before any other write of the checkout transaction: losing the
    race on customers.customer_phone rolls the transaction back and the
    customer committed by the other checkout is used instead.
    """
    customer = _find_customer(db, phone)
    if customer is not None:
        return customer

    customer = Customer(customer_name=name, customer_phone=phone, customer_address=address)
    db.add(customer)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        customer = _find_customer(db, phone)
        if customer is None:
            raise
        logger.info("Customer with phone %s created concurrently, reusing id %s", phone, customer.id)
    return customer


def create_order(db: Session, payload) -> Order:
    """
    Insert an order (status pending) and its items in one transaction.

    payload is a schemas.order.OrderCreate. Stock is not touched here.
    """
    if not payload.items:
        raise ValidationFailed("Order must contain at least one item")

    product_ids = {item.product_id for item in payload.items}
    found = set(db.execute(select(Product.id).where(Product.id.in_(product_ids))).scalars())
    missing = sorted(product_ids - found)
    if missing:
        raise ProductNotFound(missing[0])

    total = payload.total_amount
    if total is None:
        total = sum(Decimal(str(i.price_at_purchase)) * i.quantity for i in payload.items)

    try:
        customer = _find_or_create_customer(
            db, payload.customer_name, payload.customer_phone, payload.customer_address
        )
        order = Order(
            customer_id=customer.id,
            customer_name=payload.customer_name,
            customer_address=payload.customer_address,
            customer_phone=payload.customer_phone,
            total_amount=total,
            payment_method=payload.payment_method,
            payment_type=payload.payment_type,
            payment_status=payload.payment_status,
            change_needed=payload.change_needed,
            status=PENDING,
        )
        order.items = [
            OrderItem(product_id=i.product_id, quantity=i.quantity, price_at_purchase=i.price_at_purchase)
            for i in payload.items
        ]
        db.add(order)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    logger.info("Order %s created with %d item(s)", order.id, len(payload.items))
    return order


def get_order(db: Session, order_id: int) -> Order:
    order = db.query(Order).options(joinedload(Order.items)).filter(Order.id == order_id).first()
    if order is None:
        raise OrderNotFound(order_id)
    return order


def list_orders(db: Session, status: Optional[str] = None) -> List[Order]:
    query = db.query(Order)
    if status:
        validate_status(status)
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def change_status(db: Session, order_id: int, new_status: str) -> Order:
    """
    Move an order to new_status; completing it deducts stock atomically.

    Raises OrderNotFound, InvalidTransition or InsufficientStock. On any
    error the transaction is rolled back and the order keeps its old status.
    """
    validate_status(new_status)

    try:
        current = db.execute(select(Order.status).where(Order.id == order_id)).scalar_one_or_none()
        if current is None:
            raise OrderNotFound(order_id)
        if not can_transition(current, new_status):
            raise InvalidTransition(current, new_status)

        if current != new_status:
            # Compare-and-set so a concurrent transition cannot slip in between
            result = db.execute(
                update(Order)
                .where(Order.id == order_id, Order.status == current)
                .values(status=new_status)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise InvalidTransition(current, new_status)

            if new_status == COMPLETED:
                items = db.execute(
                    select(OrderItem.product_id, OrderItem.quantity)
                    .where(OrderItem.order_id == order_id)
                    .order_by(OrderItem.id)
                ).all()
                for product_id, quantity in items:
                    if product_id is None:
                        # Product removed from the catalog, nothing left to deduct
                        continue
                    deduct_for_item(db, product_id, quantity)

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Order %s: %s -> %s", order_id, current, new_status)
    return get_order(db, order_id)


def delete_order(db: Session, order_id: int) -> None:
    """Hard delete of an order and its items. Stock is not restored."""
    try:
        exists = db.execute(select(Order.id).where(Order.id == order_id)).first()
        if exists is None:
            raise OrderNotFound(order_id)
        db.query(OrderItem).filter(OrderItem.order_id == order_id).delete(synchronize_session=False)
        db.query(Order).filter(Order.id == order_id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Order %s deleted", order_id)
