# backend/scripts/manage.py
# Maintenance commands (run from the backend directory):
# - python -m scripts.manage init-db
#   Create all tables on DATABASE_URL (development; production uses alembic).
# - python -m scripts.manage create-admin --username admin --password "..." [--role super_admin]
#   Bootstrap a back-office account.
# - python -m scripts.manage reset-password --username admin --password "..."
#   Re-hash and store a new password for an existing account.
# - python -m scripts.manage backfill-stock --yes
#   Deduct the stock of orders that were completed before automatic deduction existed.
#   Run once; running it again deducts the same orders again.
#   Aborts without changes when a product's stock cannot cover its completed orders.
# - python -m scripts.manage migrate-customers
#   Create customers from the contact data of old orders and link them.
import logging
from collections import defaultdict
from typing import Dict, Optional

import click
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from config import settings
from database import Database
from models.customer import Customer
from models.order import Order, OrderItem
from models.product import Product
from models.users import User
from services.errors import InsufficientStock
from utils.hashing import get_password_hash

logger = logging.getLogger(__name__)


def reset_password(db: Session, username: str, new_password: str) -> bool:
    """Returns False when no such user exists (nothing is written)."""
    user = db.query(User).filter(User.username == username).first()
    if not user:
        return False
    user.password_hash = get_password_hash(new_password)
    db.commit()
    return True


def create_admin(db: Session, username: str, password: str, role: str = "admin") -> User:
    user = User(username=username, password_hash=get_password_hash(password), role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def backfill_stock(db: Session) -> Dict[int, int]:
    """
    Deduct the quantities of every completed order from product stock.

    Quantities are summed per product first. Products that no longer exist
    are skipped with a warning. A product whose stock cannot cover its total
    raises InsufficientStock and nothing is written. Returns
    {product_id: deducted quantity}.
    """
    rows = db.execute(
        select(OrderItem.product_id, OrderItem.quantity)
        .join(Order, OrderItem.order_id == Order.id)
        .where(Order.status == "completed", OrderItem.product_id.is_not(None))
    ).all()

    totals: Dict[int, int] = defaultdict(int)
    for product_id, quantity in rows:
        totals[product_id] += quantity

    deducted = {}
    try:
        for product_id, quantity in sorted(totals.items()):
            result = db.execute(
                update(Product)
                .where(Product.id == product_id, Product.stock_quantity >= quantity)
                .values(stock_quantity=Product.stock_quantity - quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                exists = db.execute(select(Product.id).where(Product.id == product_id)).first()
                if exists is not None:
                    raise InsufficientStock(product_id, quantity)
                logger.warning("Product %s not found, stock not updated", product_id)
                continue
            deducted[product_id] = quantity
        db.commit()
    except Exception:
        db.rollback()
        raise
    return deducted


def migrate_customers(db: Session) -> Dict[str, int]:
    """Link orders without customer_id to a customer found or created by phone."""
    orders = db.query(Order).filter(Order.customer_id.is_(None), Order.customer_phone.is_not(None)).all()
    created, updated = 0, 0
    phone_cache: Dict[str, int] = {}

    try:
        for order in orders:
            phone = (order.customer_phone or "").strip()
            if not phone:
                logger.warning("Order %s skipped: no phone number", order.id)
                continue

            customer_id: Optional[int] = phone_cache.get(phone)
            if customer_id is None:
                customer = db.query(Customer).filter(Customer.customer_phone == phone).first()
                if customer is None:
                    customer = Customer(
                        customer_name=order.customer_name,
                        customer_phone=phone,
                        customer_address=order.customer_address,
                    )
                    db.add(customer)
                    db.flush()
                    created += 1
                customer_id = customer.id
                phone_cache[phone] = customer_id

            order.customer_id = customer_id
            updated += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"customers_created": created, "orders_updated": updated}


# ---- CLI ----
@click.group()
@click.option("--database-url", default=None, help="Overrides DATABASE_URL")
@click.pass_context
def cli(ctx, database_url):
    logging.basicConfig(level=settings.LOG_LEVEL)
    ctx.obj = Database(database_url)
    ctx.call_on_close(ctx.obj.dispose)


@cli.command("init-db")
@click.pass_obj
def init_db_command(database: Database):
    database.init_db()
    click.echo("Tables created.")


@cli.command("create-admin")
@click.option("--username", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--role", type=click.Choice(["admin", "super_admin"]), default="admin")
@click.pass_obj
def create_admin_command(database: Database, username, password, role):
    with database.session() as db:
        user = create_admin(db, username, password, role)
        click.echo(f"Created {user.role} '{user.username}' (id={user.id})")


@cli.command("reset-password")
@click.option("--username", default="admin", show_default=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_obj
def reset_password_command(database: Database, username, password):
    with database.session() as db:
        if reset_password(db, username, password):
            click.echo(f"Password for '{username}' has been reset.")
        else:
            raise click.ClickException(f"User '{username}' not found. Nothing was changed.")


@cli.command("backfill-stock")
@click.confirmation_option(prompt="Deduct stock for all completed orders? Run this only once.")
@click.pass_obj
def backfill_stock_command(database: Database):
    with database.session() as db:
        try:
            deducted = backfill_stock(db)
        except InsufficientStock as e:
            raise click.ClickException(f"{e.message}. Nothing was changed.")
    if not deducted:
        click.echo("No completed order items to process.")
        return
    for product_id, quantity in deducted.items():
        click.echo(f"- product {product_id}: -{quantity}")
    click.echo("Historic stock updated.")


@cli.command("migrate-customers")
@click.pass_obj
def migrate_customers_command(database: Database):
    with database.session() as db:
        counts = migrate_customers(db)
    click.echo(f"Customers created: {counts['customers_created']}")
    click.echo(f"Orders updated: {counts['orders_updated']}")


if __name__ == "__main__":
    cli()
