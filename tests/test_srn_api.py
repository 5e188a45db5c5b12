import pytest

from .factories import create_buyer


def test_check_existing_srn(client):
    buyer = create_buyer(client, sale_record_number=1001)

    taken = client.get("/api/srns/check", params={"srn": "1001"})
    own = client.get(
        "/api/srns/check", params={"srn": "1001", "exclude_buyer_id": buyer["id"]}
    )
    free = client.get("/api/srns/check", params={"srn": "2002"})

    assert taken.json()["data"] == {"exists": True, "srn": 1001}
    assert own.json()["data"] == {"exists": False, "srn": 1001}
    assert free.json()["data"] == {"exists": False, "srn": 2002}


@pytest.mark.parametrize(
    "srn, message",
    [
        ("", "srn is required"),
        ("abc", "SRN must be numeric"),
        ("0", "Invalid SRN number"),
    ],
)
def test_check_rejects_bad_numbers(client, srn, message):
    response = client.get("/api/srns/check", params={"srn": srn})

    assert response.status_code == 400
    assert response.json()["message"] == message


def test_lookup_by_number(client):
    buyer = create_buyer(client, sale_record_number=1001)

    response = client.get("/api/srn/1001")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["sale_record_number"] == 1001
    assert data["kurasi_shipment_id"] is None
    assert data["buyer"]["id"] == buyer["id"]
    assert "srns" not in data["buyer"]


def test_lookup_unknown_keys(client):
    assert client.get("/api/srn/4242").status_code == 404
    assert client.get("/api/srn/krs404").status_code == 404
    invalid = client.get("/api/srn/hello")
    assert invalid.status_code == 400
    assert invalid.json()["message"] == "Invalid key. Use numeric SRN or a KRS… id."
