"""Create records through the API the way the counter UI does."""

US_BUYER = {
    "full_name": "Ann Lee",
    "address1": "1600 Amphitheatre Pkwy",
    "city": "Mountain View",
    "state": "california",
    "zip": "94043",
    "country": "United States",
    "email": "Ann@Example.com",
    "phone": "6502530000",
    "phone_code": "1",
}

ID_BUYER = {
    "full_name": "Budi Santoso",
    "address1": "Jl. Sudirman 10",
    "city": "Jakarta",
    "state": "",
    "zip": "10220",
    "country": "ID",
    "email": "",
    "phone": "081234567890",
    "phone_code": "62",
}


def create_customer(client, name="Sari", phone="081234567890", **extra):
    response = client.post("/api/customers", json={"name": name, "phone": phone, **extra})
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def create_buyer(client, **overrides):
    response = client.post("/api/buyers", json={**US_BUYER, **overrides})
    assert response.status_code == 201, response.json()
    return response.json()["data"]


def create_order(client, customer_id, buyer_id, **overrides):
    body = {
        "customer_id": customer_id,
        "buyer_id": buyer_id,
        "service": "ES",
        "weight_grams": 800,
        "total_value": 12.5,
        "package_description": "Batik shirt",
        **overrides,
    }
    response = client.post("/api/orders", json=body)
    assert response.status_code == 201, response.json()
    return response.json()["data"]
