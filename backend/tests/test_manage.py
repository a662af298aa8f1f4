import pytest
from click.testing import CliRunner

from conftest import stock_of
from database import Database
from models.brand import Brand
from models.category import Category
from models.customer import Customer
from models.order import Order, OrderItem
from models.product import Product
from models.users import User
from scripts import manage
from services.errors import InsufficientStock
from utils.hashing import verify_password


def _order(db_session, product, quantity, status="completed", phone="551100000001", **kwargs):
    order = Order(
        customer_name=kwargs.get("name", "Carlos"), customer_address="Rua B, 2", customer_phone=phone,
        total_amount=quantity * 10, payment_method="pix", payment_status="paid", status=status,
        customer_id=kwargs.get("customer_id"),
    )
    order.items = [OrderItem(product_id=product.id, quantity=quantity, price_at_purchase=10)]
    db_session.add(order)
    db_session.commit()
    return order


def test_reset_password(db_session, admin_user):
    assert manage.reset_password(db_session, "admin", "new-secret")
    db_session.expire_all()
    assert verify_password("new-secret", db_session.get(User, admin_user.id).password_hash)


def test_reset_password_unknown_user(db_session):
    assert manage.reset_password(db_session, "nobody", "x") is False


def test_backfill_stock_sums_completed_orders(db_session, make_product):
    beer = make_product(name="Cerveja", stock_quantity=20)
    water = make_product(name="Agua", stock_quantity=10)
    _order(db_session, beer, 3)
    _order(db_session, beer, 2)
    _order(db_session, water, 4, status="pending")

    deducted = manage.backfill_stock(db_session)

    assert deducted == {beer.id: 5}
    assert stock_of(db_session, beer.id) == 15
    assert stock_of(db_session, water.id) == 10


def test_migrate_customers_groups_by_phone(db_session, make_product):
    product = make_product(stock_quantity=50)
    first = _order(db_session, product, 1, phone="5511911111111", name="Rita")
    second = _order(db_session, product, 1, phone="5511911111111", name="Rita")
    third = _order(db_session, product, 1, phone="5511922222222", name="Paulo")

    counts = manage.migrate_customers(db_session)

    assert counts == {"customers_created": 2, "orders_updated": 3}
    db_session.expire_all()
    assert db_session.get(Order, first.id).customer_id == db_session.get(Order, second.id).customer_id
    assert db_session.get(Order, third.id).customer_id != db_session.get(Order, first.id).customer_id
    assert db_session.query(Customer).count() == 2

    # Second run finds nothing left to link
    assert manage.migrate_customers(db_session) == {"customers_created": 0, "orders_updated": 0}


def test_cli_create_admin_and_reset(tmp_path):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    runner = CliRunner()

    assert runner.invoke(manage.cli, ["--database-url", url, "init-db"]).exit_code == 0
    created = runner.invoke(manage.cli, ["--database-url", url, "create-admin",
                                         "--username", "boss", "--password", "pw", "--role", "super_admin"])
    assert created.exit_code == 0, created.output
    assert "super_admin 'boss'" in created.output

    missing = runner.invoke(manage.cli, ["--database-url", url, "reset-password", "--username", "ghost", "--password", "x"])
    assert missing.exit_code != 0
    assert "not found" in missing.output


def test_backfill_stock_aborts_when_stock_cannot_cover_orders(db_session, make_product):
    beer = make_product(name="Cerveja", stock_quantity=20)
    water = make_product(name="Agua", stock_quantity=2)
    _order(db_session, beer, 3)
    _order(db_session, water, 4)

    with pytest.raises(InsufficientStock) as excinfo:
        manage.backfill_stock(db_session)

    assert excinfo.value.product_id == water.id
    assert stock_of(db_session, beer.id) == 20
    assert stock_of(db_session, water.id) == 2


def test_cli_backfill_stock_names_uncovered_product(tmp_path):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    database = Database(url)
    database.init_db()
    with database.session() as db:
        category = Category(name="Bebidas")
        brand = Brand(name="Crystal", category=category)
        product = Product(name="Agua", price=3, stock_quantity=1, category=category, brand=brand)
        db.add(product)
        db.commit()
        _order(db, product, 2)
        product_id = product.id
    database.dispose()

    result = CliRunner().invoke(manage.cli, ["--database-url", url, "backfill-stock", "--yes"])

    assert result.exit_code == 1
    assert f"Insufficient stock for product {product_id}" in result.output
    assert "Nothing was changed" in result.output
    assert "Traceback" not in result.output
