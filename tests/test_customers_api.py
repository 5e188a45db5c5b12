from .factories import create_buyer, create_customer, create_order


def test_create_customer_normalizes_phone(client):
    customer = create_customer(client, name="  Sari  ", phone="0812-3456-7890")

    assert customer["name"] == "Sari"
    assert customer["phone"] == "+6281234567890"
    assert customer["phone_code"] == "+62"
    assert customer["order_count"] == 0


def test_create_customer_with_foreign_code(client):
    customer = create_customer(client, phone="6502530000", phone_code="1")

    assert customer["phone"] == "+16502530000"
    assert customer["phone_code"] == "+1"


def test_duplicate_phone_conflicts(client):
    create_customer(client, phone="081234567890")

    response = client.post(
        "/api/customers", json={"name": "Other", "phone": "+6281234567890"}
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Customer with this phone number already exists"


def test_invalid_phone_is_rejected(client):
    response = client.post("/api/customers", json={"name": "Sari", "phone": "12"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid phone number"


def test_blank_name_fails_validation(client):
    response = client.post("/api/customers", json={"name": "  ", "phone": "081234567890"})

    assert response.status_code == 422
    assert "name" in response.json()["data"]["fields"]


def test_list_customers_with_order_counts(client):
    sari = create_customer(client, name="Sari")
    create_customer(client, name="Dewi", phone="081298765432")
    buyer = create_buyer(client)
    create_order(client, sari["id"], buyer["id"])

    response = client.get("/api/customers")

    assert response.status_code == 200
    counts = {row["name"]: row["order_count"] for row in response.json()["data"]}
    assert counts == {"Sari": 1, "Dewi": 0}


def test_get_update_and_missing_customer(client):
    customer = create_customer(client)

    updated = client.put(
        f"/api/customers/{customer['id']}",
        json={"name": "Sari W", "phone": "081234567890", "shopee_name": "sari.shop"},
    )
    fetched = client.get(f"/api/customers/{customer['id']}")

    assert updated.status_code == 200
    assert fetched.json()["data"]["name"] == "Sari W"
    assert fetched.json()["data"]["shopee_name"] == "sari.shop"
    assert client.get("/api/customers/999").status_code == 404


def test_update_to_taken_phone_conflicts(client):
    create_customer(client, name="Sari", phone="081234567890")
    dewi = create_customer(client, name="Dewi", phone="081298765432")

    response = client.put(
        f"/api/customers/{dewi['id']}", json={"name": "Dewi", "phone": "081234567890"}
    )

    assert response.status_code == 409


def test_delete_customer(client):
    customer = create_customer(client)

    response = client.delete(f"/api/customers/{customer['id']}")

    assert response.status_code == 200
    assert client.get(f"/api/customers/{customer['id']}").status_code == 404


def test_customer_with_orders_cannot_be_deleted(client):
    customer = create_customer(client)
    buyer = create_buyer(client)
    create_order(client, customer["id"], buyer["id"])

    response = client.delete(f"/api/customers/{customer['id']}")

    assert response.status_code == 409
