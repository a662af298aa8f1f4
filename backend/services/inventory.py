# backend/services/inventory.py
"""
Inventory ledger: the two writers of Product.stock_quantity.

Both writers are single conditional UPDATE statements so the stock check and
the write happen atomically in the database. Two concurrent completions of
orders for the same product are serialized by the row lock the UPDATE takes;
the second one re-evaluates the WHERE clause and matches zero rows when stock
ran out.
"""
import logging

from sqlalchemy import update, select
from sqlalchemy.orm import Session

from models.product import Product
from services.errors import ProductNotFound, InsufficientStock

logger = logging.getLogger(__name__)


def deduct_for_item(db: Session, product_id: int, quantity: int) -> None:
    """Guarded decrement used on order completion. Does not commit."""
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock_quantity >= quantity)
        .values(stock_quantity=Product.stock_quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise InsufficientStock(product_id, quantity)


def adjust_stock(db: Session, product_id: int, delta: int) -> int:
    """
    Manual stock adjustment (signed delta). Rejects adjustments that would
    leave the counter below zero. Commits and returns the new quantity.
    """
    try:
        result = db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock_quantity + delta >= 0)
            .values(stock_quantity=Product.stock_quantity + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            exists = db.execute(select(Product.id).where(Product.id == product_id)).first()
            if exists is None:
                raise ProductNotFound(product_id)
            raise InsufficientStock(product_id, -delta)

        new_quantity = db.execute(
            select(Product.stock_quantity).where(Product.id == product_id)
        ).scalar_one()
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Stock of product %s adjusted by %s -> %s", product_id, delta, new_quantity)
    return new_quantity
