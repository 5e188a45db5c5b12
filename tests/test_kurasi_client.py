from decimal import Decimal

import pytest
import requests

from models import Buyer, Order, PackageDetail
from shipping_partner.kurasi.kurasi import Kurasi
from shipping_partner.kurasi.kurasi_schema import QuoteRequest, ShipmentListQuery
from utils.country import DEFAULT_COUNTRY_TABLE

from .kurasi_fakes import FakeResponse, quote_block, quote_body


@pytest.mark.parametrize(
    "payload, expected",
    [
        ([{"a": 1}], ([{"a": 1}], None)),
        ({"rows": [{"a": 1}], "total": 9}, ([{"a": 1}], 9)),
        ({"data": [{"a": 1}], "total": 4}, ([{"a": 1}], 4)),
        ({"data": {"rows": [{"a": 1}], "total": 2}}, ([{"a": 1}], 2)),
        ({"data": {"data": [{"a": 1}], "total": 3}}, ([{"a": 1}], 3)),
        ({"data": {"unexpected": True}}, ([], None)),
        ("garbage", ([], None)),
    ],
)
def test_extract_rows(payload, expected):
    assert Kurasi.extract_rows(payload) == expected


def test_quote_payload_stringifies_numbers():
    payload = Kurasi.build_quote_payload(
        QuoteRequest(country="Albania", actual_weight=250.0, actual_length=12.5)
    )

    assert payload["actualWeight"] == "250"
    assert payload["actualLength"] == "12.5"
    assert payload["actualWidth"] == "0"
    assert payload["currencyType"] == "IDR"
    assert payload["supportedCountryCode"] == "ID"


def test_quote_sends_token_header(monkeypatch):
    seen = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        seen["headers"] = headers
        return FakeResponse(json_data=quote_body(esr=quote_block(1000)))

    monkeypatch.setattr(requests, "post", fake_post)

    result = Kurasi.fetch_carrier_quote(
        QuoteRequest(country="Albania", actual_weight=100), auth_token="tok"
    )

    assert result.ok
    assert result.quote.esr.doubleAmount == 1000
    assert result.quote.epr is None
    assert seen["headers"]["X-Ship-Auth-Token"] == "tok"


def test_quote_without_token_has_no_auth_header(monkeypatch):
    seen = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        seen["headers"] = headers
        return FakeResponse(json_data=quote_body())

    monkeypatch.setattr(requests, "post", fake_post)

    Kurasi.fetch_carrier_quote(QuoteRequest(country="Albania", actual_weight=100))

    assert "X-Ship-Auth-Token" not in seen["headers"]


def test_quote_refusal_is_fail(monkeypatch):
    monkeypatch.setattr(
        requests,
        "post",
        lambda *a, **kw: FakeResponse(json_data={"status": "FAIL", "message": "nope"}),
    )

    result = Kurasi.fetch_carrier_quote(QuoteRequest(country="Albania", actual_weight=100))

    assert result.status == "FAIL"
    assert result.http_status == 400
    assert result.message == "nope"


def test_quote_transport_error_is_error(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.Timeout("timed out")

    monkeypatch.setattr(requests, "post", fake_post)

    result = Kurasi.fetch_carrier_quote(QuoteRequest(country="Albania", actual_weight=100))

    assert result.status == "ERROR"
    assert result.http_status == 500
    assert result.message == "timed out"


def test_listing_flattens_rows(monkeypatch):
    monkeypatch.setattr(
        requests,
        "post",
        lambda *a, **kw: FakeResponse(json_data={"data": {"rows": [{"x": 1}], "total": 1}}),
    )

    result = Kurasi.list_shipments(
        ShipmentListQuery(startDate="2024-01-01", endDate="2024-01-07"), "tok"
    )

    assert result.ok
    assert result.data == {"rows": [{"x": 1}], "total": 1}


def test_login_without_token_fails(monkeypatch):
    monkeypatch.setattr(
        requests,
        "request",
        lambda *a, **kw: FakeResponse(json_data={"status": "SUCCESS", "data": {}}),
    )

    result = Kurasi.login("ann", "secret")

    assert result.status == "FAIL"
    assert result.http_status == 401


LISTING_ROW = {
    "saleRecordNumber": "1001",
    "buyerFullName": "Ann  Lee",
    "buyerAddress1": "1600 Amphitheatre Pkwy",
    "buyerAddress2": "null",
    "buyerCity": "Mountain View",
    "buyerState": "CA",
    "buyerZip": "94043",
    "buyerCountry": "United States",
    "buyerEmail": "Ann@Example.com",
    "buyerPhone": "6502530000",
    "phoneCode": "1",
}


def test_to_buyer_input_maps_row():
    buyer = Kurasi.to_buyer_input(LISTING_ROW, DEFAULT_COUNTRY_TABLE)

    assert buyer.sale_record_number == 1001
    assert buyer.full_name == "Ann Lee"
    assert buyer.address2 == ""
    assert buyer.country == "US"
    assert buyer.phone == "+16502530000"
    assert buyer.email == "ann@example.com"


def test_to_buyer_input_uses_country_short_name():
    row = dict(LISTING_ROW, buyerCountry=None, countryShortName="US")

    assert Kurasi.to_buyer_input(row, DEFAULT_COUNTRY_TABLE).country == "US"


@pytest.mark.parametrize(
    "override",
    [
        {"saleRecordNumber": "abc"},
        {"saleRecordNumber": "null"},
        {"buyerCountry": "Nonexistentland"},
        {"buyerPhone": ""},
    ],
)
def test_to_buyer_input_skips_unusable_rows(override):
    assert Kurasi.to_buyer_input(dict(LISTING_ROW, **override), DEFAULT_COUNTRY_TABLE) is None


def _order(service, total_value=None, hs_code=None):
    order = Order(srn_id=1001, notes="fragile", sale_channel="Shopee")
    order.buyer = Buyer(
        full_name="Ann Lee",
        address1="1600 Amphitheatre Pkwy",
        address2="",
        city="Mountain View",
        state="CA",
        zip="94043",
        country="US",
        email="ann@example.com",
        phone="+16502530000",
    )
    order.package = PackageDetail(
        service=service,
        weight_grams=800,
        total_value=total_value,
        currency="USD",
        description="Batik shirt",
        hs_code=hs_code,
    )
    return order


def test_express_payload_carries_content_item():
    payload = Kurasi.build_shipment_payload(_order("Express", total_value=Decimal("12.50")))

    assert payload["serviceName"] == "EX"
    assert payload["totalValue"] == 12.5
    assert payload["hsCode"] == ""
    assert payload["buyerPhone"] == "6502530000"
    assert payload["phoneCode"] == "1"
    assert payload["saleRecordNumber"] == "1001"
    assert payload["totalWeight"] == "800"
    assert payload["contentItem"] == [
        {
            "description": "Batik shirt",
            "quantity": "1",
            "value": "12.5",
            "itemWeight": "800",
            "currency": "USD",
            "sku": "",
            "hsCode": "490900",
            "countryOfOrigin": "ID",
        }
    ]


def test_non_express_payload_uses_string_value():
    payload = Kurasi.build_shipment_payload(_order("ES", hs_code="620520"))

    assert payload["serviceName"] == "ES"
    assert payload["totalValue"] == "7"
    assert payload["hsCode"] == "620520"
    assert payload["contentItem"] == []
    assert payload["shipmentRemark"] == "fragile"
    assert payload["saleChannel"] == "Shopee"


def test_update_payload_adds_shipment_fields():
    order = _order("EP")
    order.krs_tracking_number = "KRS123"

    payload = Kurasi.build_update_payload(order, "C001")

    assert payload["shipmentId"] == "KRS123"
    assert payload["id"] == "KRS123"
    assert payload["clientCode"] == "C001"
    assert payload["countryShortName"] == "US"
    assert payload["totalValue"] == "7"
    assert payload["contentItem"][0]["quantity"] == 1
    assert "iossCheck" not in payload
