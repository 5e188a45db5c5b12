from datetime import datetime

from models import KurasiShipment
from shipping_partner.kurasi.kurasi import Kurasi
from utils.country import get_country_table

from .conftest import TestingSessionLocal
from .kurasi_fakes import FakeResponse

LISTING_ROWS = [
    {
        "kurasiShipmentId": "KRS10",
        "saleRecordNumber": "3003",
        "buyerFullName": "Ann Lee",
        "buyerCountry": "United States",
        "buyerCity": "Mountain View",
        "buyerState": "CA",
        "buyerZip": "94043",
        "buyerPhone": "6502530000",
        "phoneCode": "1",
        "serviceName": "EX",
        "carrier": "DHL",
        "shippingFee": "104,000",
        "chargeableWeight": "1200",
        "actualWeight": "1100.5",
        "trackingNumber": "TN10",
        "shippedDatetime": "2024/01/05 10:30:00",
        "labelCreatedDatetime": "null",
    },
    {
        "kurasiShipmentId": "KRS11",
        "saleRecordNumber": "3004",
        "buyerFullName": "Arta Hoxha",
        "buyerCountry": "Albania",
        "buyerCity": "Tirana",
        "buyerPhone": "0691234567",
        "phoneCode": "355",
        "serviceName": "ES",
        "shippingFee": "55,000",
        "chargeableWeight": "2600",
    },
    {
        "kurasiShipmentId": "KRS12",
        "saleRecordNumber": "3005",
        "buyerFullName": "Besa Kola",
        "buyerCountry": "Albania",
        "serviceName": "null",
        "actualWeight": "400",
    },
    {"saleRecordNumber": "3006", "buyerCountry": "Albania"},
]


def _ok(data=None):
    return FakeResponse(json_data={"status": "SUCCESS", "data": data})


def _sync(client, kurasi_api, rows=LISTING_ROWS):
    kurasi_api["routes"]["/api/v1/me"] = _ok({"clientCode": "C001"})
    kurasi_api["routes"]["/api/v1/shipmentManagement"] = FakeResponse(
        json_data={"data": rows, "total": len(rows)}
    )
    client.cookies.set("kurasi_token", "tok-abcdef123456")
    response = client.post(
        "/api/kurasi/sync-buyers",
        json={"startDate": "2024-01-01", "endDate": "2024-01-31"},
    )
    assert response.status_code == 200, response.json()
    return response.json()


def _stored(shipment_id):
    with TestingSessionLocal() as db:
        return (
            db.query(KurasiShipment)
            .filter(KurasiShipment.kurasi_shipment_id == shipment_id)
            .one()
        )


# ============================================
# LISTING ROW MAPPING
# ============================================


def test_listing_row_becomes_a_shipment_copy():
    shipment = Kurasi.to_shipment_input(LISTING_ROWS[0], get_country_table())

    assert shipment.kurasi_shipment_id == "KRS10"
    assert shipment.buyer_country == "US"
    assert shipment.shipping_fee == "104,000"
    assert shipment.shipping_fee_minor == 104000
    assert (shipment.chargeable_weight, shipment.actual_weight) == (1200, 1100)
    assert shipment.shipped_at.tzinfo is not None
    assert shipment.shipped_at.replace(tzinfo=None) == datetime(2024, 1, 5, 10, 30)
    assert shipment.label_created_at is None


def test_row_without_shipment_id_is_not_copied():
    assert Kurasi.to_shipment_input(LISTING_ROWS[3], get_country_table()) is None


def test_unparseable_values_are_left_empty():
    shipment = Kurasi.to_shipment_input(
        {
            "kurasiShipmentId": "KRS99",
            "buyerCountry": "Atlantis",
            "shippingFee": "n/a",
            "shippedDatetime": "yesterday",
        },
        get_country_table(),
    )

    assert shipment.buyer_country == "Atlantis"
    assert shipment.shipping_fee_minor is None
    assert shipment.shipped_at is None


# ============================================
# SYNC
# ============================================


def test_sync_keeps_a_copy_of_every_shipment(client, kurasi_api):
    result = _sync(client, kurasi_api)

    assert result["synced"] == 4
    assert result["shipments"] == {"created": 3, "updated": 0}

    copy = _stored("KRS10")
    assert copy.sale_record_number == "3003"
    assert copy.buyer_country == "US"
    assert copy.carrier == "DHL"
    assert copy.tracking_number == "TN10"
    assert copy.local_fee_minor is None

    assert _stored("KRS12").service_name is None


def test_sync_again_refreshes_existing_copies(client, kurasi_api):
    _sync(client, kurasi_api)
    changed = [dict(LISTING_ROWS[0], trackingNumber="TN10-B", shippingFee="99,000")]

    result = _sync(client, kurasi_api, rows=changed)

    assert result["shipments"] == {"created": 0, "updated": 1}
    copy = _stored("KRS10")
    assert copy.tracking_number == "TN10-B"
    assert copy.shipping_fee_minor == 99000
    with TestingSessionLocal() as db:
        assert db.query(KurasiShipment).count() == 3


# ============================================
# STATS
# ============================================


def test_shipment_stats(client, kurasi_api):
    _sync(client, kurasi_api)

    response = client.get("/api/kurasi/shipments-stats")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 3
    assert data["total_fees"] == 159000
    assert data["total_local_fees"] == 0
    assert data["by_country"] == [
        {"country": "AL", "count": 2},
        {"country": "US", "count": 1},
    ]
    assert sorted((s["service"], s["count"]) for s in data["by_service"]) == [
        ("ES", 1),
        ("EX", 1),
        ("Unknown", 1),
    ]
    assert {s["kurasi_shipment_id"] for s in data["recent"]} == {"KRS10", "KRS11", "KRS12"}


def test_shipment_stats_when_nothing_was_synced(client):
    data = client.get("/api/kurasi/shipments-stats").json()["data"]

    assert data == {
        "total": 0,
        "total_fees": 0,
        "total_local_fees": 0,
        "by_country": [],
        "by_service": [],
        "recent": [],
    }


# ============================================
# FEE BACKFILL
# ============================================


def test_backfill_fills_shipment_local_fees(client, kurasi_api):
    _sync(client, kurasi_api)

    response = client.post("/api/fees/backfill")

    data = response.json()["data"]
    # US 1200 g: tier 1 + surcharge; AL 2600 g: tier 3; AL 400 g actual weight: tier 1
    assert data["shipments_updated"] == 3
    assert data["fees_total"] == 60000
    assert data["shipment_fees"] == 60000
    assert data["grand_total"] == 60000
    assert _stored("KRS10").local_fee_minor == 20000
    assert _stored("KRS11").local_fee_minor == 30000
    assert _stored("KRS12").local_fee_minor == 10000

    stats = client.get("/api/kurasi/shipments-stats").json()["data"]
    assert stats["total_local_fees"] == 60000
    assert client.post("/api/fees/backfill").json()["data"]["shipments_updated"] == 0


# ============================================
# DRAFT SHIPMENTS
# ============================================


def test_temp_shipments_proxy(client, kurasi_api):
    kurasi_api["routes"]["/api/v1/me"] = _ok({"clientCode": "C001"})
    kurasi_api["routes"]["/api/v1/shipmentTemp"] = FakeResponse(
        json_data={"data": [{"kurasiShipmentId": "TMP1"}], "total": 1}
    )
    client.cookies.set("kurasi_token", "tok-abcdef123456")

    response = client.post(
        "/api/kurasi/shipments-temp",
        json={"startDate": "2024-02-01", "endDate": "2024-02-29"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "status": "SUCCESS",
        "data": [{"kurasiShipmentId": "TMP1"}],
        "total": 1,
        "dateRange": {"startDate": "2024-02-01", "endDate": "2024-02-29"},
    }
    query = kurasi_api["calls"][-1]["json"]
    assert query["clientCode"] == "C001"
    assert query["shipmentStatus"] == "All"
    assert query["branchIdList"] == []


def test_temp_shipments_default_window(client, kurasi_api):
    kurasi_api["routes"]["/api/v1/me"] = _ok({"clientCode": "C001"})
    kurasi_api["routes"]["/api/v1/shipmentTemp"] = FakeResponse(json_data={"data": []})
    client.cookies.set("kurasi_token", "tok-abcdef123456")

    response = client.post("/api/kurasi/shipments-temp")

    date_range = response.json()["dateRange"]
    start = datetime.strptime(date_range["startDate"], "%Y-%m-%d")
    end = datetime.strptime(date_range["endDate"], "%Y-%m-%d")
    assert (end - start).days == 30


def test_temp_shipments_carrier_failure_is_forwarded(client, kurasi_api):
    kurasi_api["routes"]["/api/v1/me"] = _ok({"clientCode": "C001"})
    kurasi_api["routes"]["/api/v1/shipmentTemp"] = FakeResponse(
        status_code=502, json_data={"message": "upstream down"}
    )
    client.cookies.set("kurasi_token", "tok-abcdef123456")

    response = client.post("/api/kurasi/shipments-temp", json={})

    assert response.status_code == 502
    assert response.json() == {"status": "FAIL", "errorMessage": "upstream down"}


def test_temp_shipments_needs_a_token(client, kurasi_api):
    response = client.post("/api/kurasi/shipments-temp", json={})

    assert response.status_code == 401
    assert kurasi_api["calls"] == []
