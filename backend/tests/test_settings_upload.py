from utils.audit import write_log


def test_settings_created_on_first_read(client):
    response = client.get("/api/settings")
    assert response.status_code == 200
    assert response.json()["id"] == 1
    assert response.json()["store_name"] is None


def test_settings_partial_update_in_place(client):
    client.put("/api/settings", json={"store_name": "Distribuidora", "whatsapp_number": "5511988887777"})
    response = client.put("/api/settings", json={"pix_key": "loja@pix.com"})

    assert response.status_code == 200
    body = client.get("/api/settings").json()
    assert body["id"] == 1
    assert body["store_name"] == "Distribuidora"
    assert body["whatsapp_number"] == "5511988887777"
    assert body["pix_key"] == "loja@pix.com"


def test_upload_stores_locally_without_cloudinary(client, upload_dir):
    response = client.post(
        "/api/upload",
        files={"image": ("logo.png", b"\x89PNG fake", "image/png")},
        data={"type": "logo"},
    )
    assert response.status_code == 200
    url = response.json()["imageUrl"]
    assert url.startswith("/uploads/logo/") and url.endswith(".png")
    assert len(list((upload_dir / "logo").iterdir())) == 1


def test_upload_unknown_type_goes_to_default_folder(client, upload_dir):
    response = client.post("/api/upload", files={"image": ("x.jpg", b"data", "image/jpeg")})
    assert response.json()["imageUrl"].startswith("/uploads/outros/")


def test_upload_rejects_missing_file_and_bad_format(client):
    assert client.post("/api/upload", data={"type": "product"}).status_code == 400
    bad = client.post("/api/upload", files={"image": ("notes.txt", b"text", "text/plain")})
    assert bad.status_code == 400


def test_health(client):
    assert client.get("/").status_code == 200


def test_audit_log_listing(client, make_product):
    product = make_product()
    client.patch(f"/api/products/{product.id}/stock", json={"quantity": 1})

    page = client.get("/api/logs", params={"resource": "products"}).json()
    assert page["total"] == 1
    assert page["items"][0]["action"] == "STOCK_ADJUSTMENT"
    assert page["items"][0]["meta"]["delta"] == 1


def test_write_log_commits_the_entry(client, db_session):
    write_log(db_session, action="ORDER_DELETE", resource="orders", ip="10.0.0.1", meta={"order_id": 7})
    db_session.rollback()

    page = client.get("/api/logs", params={"action": "ORDER_DELETE"}).json()
    assert page["total"] == 1
    assert page["items"][0]["ip"] == "10.0.0.1"
    assert page["items"][0]["meta"] == {"order_id": 7}
