from conftest import stock_of
from models.log import Log


def test_manual_adjustment_adds_and_removes(client, db_session, make_product):
    product = make_product(stock_quantity=5)

    response = client.patch(f"/api/products/{product.id}/stock", json={"quantity": 7})
    assert response.status_code == 200
    assert response.json() == {"new_stock_quantity": 12}

    response = client.patch(f"/api/products/{product.id}/stock", json={"quantity": -12})
    assert response.json() == {"new_stock_quantity": 0}
    assert stock_of(db_session, product.id) == 0


def test_adjustment_below_zero_is_rejected(client, db_session, make_product):
    product = make_product(stock_quantity=0)

    response = client.patch(f"/api/products/{product.id}/stock", json={"quantity": -1})

    assert response.status_code == 409
    assert stock_of(db_session, product.id) == 0
    failures = db_session.query(Log).filter(Log.action == "STOCK_ADJUSTMENT", Log.status == "FAIL").count()
    assert failures == 1


def test_adjustment_requires_integer(client, make_product):
    product = make_product()
    assert client.patch(f"/api/products/{product.id}/stock", json={"quantity": "5"}).status_code == 400
    assert client.patch(f"/api/products/{product.id}/stock", json={}).status_code == 400


def test_adjustment_of_missing_product(client):
    assert client.patch("/api/products/999/stock", json={"quantity": 1}).status_code == 404
