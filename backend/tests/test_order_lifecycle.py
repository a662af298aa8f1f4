import threading

import pytest
from sqlalchemy import event

from conftest import stock_of
from database import normalize_url
from models.customer import Customer
from schemas.order import OrderCreate
from services import order_lifecycle
from services.errors import InsufficientStock, InvalidTransition, OrderNotFound, ValidationFailed


@pytest.mark.parametrize("from_status,to_status", [
    ("pending", "processing"),
    ("pending", "completed"),
    ("pending", "cancelled"),
    ("processing", "completed"),
    ("processing", "cancelled"),
    ("pending", "pending"),
    ("processing", "processing"),
])
def test_allowed_transitions(from_status, to_status):
    assert order_lifecycle.can_transition(from_status, to_status)


@pytest.mark.parametrize("from_status,to_status", [
    ("processing", "pending"),
    ("completed", "completed"),
    ("completed", "cancelled"),
    ("completed", "processing"),
    ("cancelled", "cancelled"),
    ("cancelled", "pending"),
])
def test_rejected_transitions(from_status, to_status):
    assert not order_lifecycle.can_transition(from_status, to_status)


def test_unknown_status_is_a_validation_error():
    with pytest.raises(ValidationFailed):
        order_lifecycle.can_transition("pending", "shipped")


def _payload(product_id, quantity):
    return OrderCreate(
        customer_name="Ana", customer_address="Rua A, 1", customer_phone="551100000000",
        payment_method="card", items=[{"product_id": product_id, "quantity": quantity, "price_at_purchase": 4.25}],
    )


def test_service_complete_and_errors(db_session, make_product):
    product = make_product(stock_quantity=4)
    order = order_lifecycle.create_order(db_session, _payload(product.id, 4))
    assert float(order.total_amount) == 17.0

    completed = order_lifecycle.change_status(db_session, order.id, "completed")
    assert completed.status == "completed"
    assert stock_of(db_session, product.id) == 0

    with pytest.raises(InvalidTransition):
        order_lifecycle.change_status(db_session, order.id, "completed")
    with pytest.raises(OrderNotFound):
        order_lifecycle.change_status(db_session, order.id + 100, "processing")


def test_service_insufficient_stock_rolls_back(db_session, make_product):
    product = make_product(stock_quantity=1)
    order = order_lifecycle.create_order(db_session, _payload(product.id, 2))

    with pytest.raises(InsufficientStock) as excinfo:
        order_lifecycle.change_status(db_session, order.id, "completed")

    assert excinfo.value.product_id == product.id
    assert order_lifecycle.get_order(db_session, order.id).status == "pending"
    assert stock_of(db_session, product.id) == 1


def test_same_status_is_noop(db_session, make_product):
    product = make_product(stock_quantity=3)
    order = order_lifecycle.create_order(db_session, _payload(product.id, 1))

    assert order_lifecycle.change_status(db_session, order.id, "pending").status == "pending"
    assert stock_of(db_session, product.id) == 3


def test_checkout_reuses_customer_created_by_concurrent_checkout(client, db_session, make_product):
    product = make_product(stock_quantity=5)
    payload = _payload(product.id, 1)

    # Another checkout with the same phone commits its customer first
    def commit_same_customer(session, flush_context, instances):
        other = client.app.state.db.session()
        try:
            other.add(Customer(customer_name="Ana", customer_phone=payload.customer_phone))
            other.commit()
        finally:
            other.close()

    event.listen(db_session, "before_flush", commit_same_customer, once=True)
    order = order_lifecycle.create_order(db_session, payload)

    customers = db_session.query(Customer).filter(Customer.customer_phone == payload.customer_phone).all()
    assert len(customers) == 1
    assert order.customer_id == customers[0].id
    assert order.status == "pending"
    assert len(order.items) == 1


def test_concurrent_completions_never_oversell(client, db_session, make_product):
    product = make_product(stock_quantity=5)
    order_ids = [order_lifecycle.create_order(db_session, _payload(product.id, 3)).id for _ in range(2)]
    barrier = threading.Barrier(len(order_ids), timeout=10)
    outcomes = {}

    def complete(order_id):
        session = client.app.state.db.session()
        try:
            barrier.wait()
            order_lifecycle.change_status(session, order_id, "completed")
            outcomes[order_id] = "completed"
        except Exception as e:
            outcomes[order_id] = e
        finally:
            session.close()

    threads = [threading.Thread(target=complete, args=(order_id,)) for order_id in order_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    winners = [order_id for order_id, outcome in outcomes.items() if outcome == "completed"]
    losers = [order_id for order_id in order_ids if order_id not in winners]
    assert len(winners) == 1, outcomes
    assert isinstance(outcomes[losers[0]], (InsufficientStock, InvalidTransition)), outcomes
    assert stock_of(db_session, product.id) == 2
    assert order_lifecycle.get_order(db_session, losers[0]).status == "pending"


def test_normalize_url():
    assert normalize_url("postgres://u:p@h/db") == "postgresql://u:p@h/db"
    assert normalize_url("mysql://u:p@h/db") == "mysql+pymysql://u:p@h/db"
    assert normalize_url("sqlite:///./x.db") == "sqlite:///./x.db"
