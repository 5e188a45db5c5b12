import asyncio
import time

import httpx
import pytest
import requests

from main import app
from modules.fees.fee_calculator import FeeSchedule, get_fee_schedule
from utils.country import CountryRecord, CountryTable, get_country_table

from .kurasi_fakes import FakeResponse, quote_block, quote_body

URL = "/api/shipping-quote"


@pytest.fixture()
def calculator(monkeypatch):
    """Records calculator calls and answers with whatever the test sets."""
    state = {"calls": [], "response": FakeResponse(json_data=quote_body())}

    def fake_post(url, json=None, headers=None, timeout=None):
        state["calls"].append({"url": url, "json": json, "headers": headers})
        response = state["response"]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(requests, "post", fake_post)
    return state


@pytest.fixture()
def flat_fee():
    app.dependency_overrides[get_fee_schedule] = lambda: FeeSchedule(
        tier_fee_minor=5000, country_surcharges={}
    )
    yield
    app.dependency_overrides.pop(get_fee_schedule, None)


def test_all_services_sorted_with_local_fee(client, calculator, flat_fee):
    calculator["response"] = FakeResponse(
        json_data=quote_body(
            esr=quote_block(50000),
            epr=quote_block(60000),
            err=quote_block(90000),
            ppr=quote_block(55000),
            chargeableWeight=100,
            volumetricWeight=12.5,
        )
    )

    response = client.post(URL, json={"country": "Albania", "actualWeight": 100})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "SUCCESS"
    assert body["meta"] == {
        "currency": "IDR",
        "chargeableWeight": 100,
        "volumetricWeight": 12.5,
    }
    assert [(s["code"], s["totalFee"]) for s in body["services"]] == [
        ("ES", 55000),
        ("PP", 60000),
        ("EP", 65000),
        ("EX", 95000),
    ]
    assert body["services"][0]["title"] == "Economy Standard"
    assert body["services"][0]["maxWeight"] == "30 kg"


def test_calculator_receives_string_fields(client, calculator):
    calculator["response"] = FakeResponse(json_data=quote_body(esr=quote_block(50000)))

    client.post(
        URL,
        json={"country": "Albania", "actualWeight": 100.0, "actualLength": 10},
    )

    sent = calculator["calls"][0]
    assert sent["url"].endswith("/api/v1/ship/calculator")
    assert sent["json"] == {
        "country": "Albania",
        "actualWeight": "100",
        "actualHeight": "0",
        "actualLength": "10",
        "actualWidth": "0",
        "currencyType": "IDR",
        "supportedCountryCode": "ID",
    }


def test_default_schedule_adds_us_surcharge(client, calculator):
    calculator["response"] = FakeResponse(json_data=quote_body(err=quote_block(90000)))

    response = client.post(URL, json={"country": "United States", "actualWeight": 2000})

    assert response.json()["services"] == [
        {"code": "EX", "title": "Express", "totalFee": 120000, "maxWeight": "30 kg"}
    ]


def test_overweight_parcel_has_no_service(client, calculator):
    calculator["response"] = FakeResponse(
        json_data=quote_body(
            esr=quote_block(None),
            epr=quote_block(None),
            err=quote_block(None),
            ppr=quote_block(None),
        )
    )

    response = client.post(URL, json={"country": "Albania", "actualWeight": 50000})

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "FAIL"
    assert body["errorMessage"] == (
        "No shipping services available for this destination/weight combination"
    )
    assert "services" not in body


def test_unknown_country_names_the_country(client, calculator):
    response = client.post(
        URL, json={"country": "Nonexistentland", "actualWeight": 100}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "ERROR"
    assert "Nonexistentland" in body["errorMessage"]
    assert calculator["calls"] == []


def test_country_code_overrides_lookup(client, calculator):
    calculator["response"] = FakeResponse(json_data=quote_body(esr=quote_block(1000)))

    response = client.post(
        URL,
        json={"country": "Nonexistentland", "countryCode": "us", "actualWeight": 100},
    )

    assert response.status_code == 200
    # tier 1 plus the US surcharge
    assert response.json()["services"][0]["totalFee"] == 21000


def test_alternate_country_table(client, calculator):
    app.dependency_overrides[get_country_table] = lambda: CountryTable(
        [CountryRecord(iso_code="XL", display_name="Testland", calling_code="+999")]
    )
    calculator["response"] = FakeResponse(json_data=quote_body(esr=quote_block(1000)))
    try:
        ok = client.post(URL, json={"country": "Testland", "actualWeight": 100})
        missing = client.post(URL, json={"country": "Albania", "actualWeight": 100})
    finally:
        app.dependency_overrides.pop(get_country_table, None)

    assert ok.status_code == 200
    assert missing.status_code == 400


def test_invalid_json_body(client, calculator):
    response = client.post(
        URL, content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"status": "ERROR", "errorMessage": "Invalid JSON body"}


def test_body_must_be_an_object(client, calculator):
    response = client.post(URL, json=["Albania", 100])

    assert response.status_code == 400
    assert response.json()["errorMessage"] == "Invalid JSON body"


@pytest.mark.parametrize("body", [{"actualWeight": 100}, {"country": "", "actualWeight": 100}, {"country": 7, "actualWeight": 100}])
def test_country_is_required(client, calculator, body):
    response = client.post(URL, json=body)

    assert response.status_code == 400
    assert response.json()["errorMessage"] == "Missing required field: country"


@pytest.mark.parametrize("weight", [None, 0, -1, "100", True])
def test_weight_must_be_a_positive_number(client, calculator, weight):
    body = {"country": "Albania"}
    if weight is not None:
        body["actualWeight"] = weight

    response = client.post(URL, json=body)

    assert response.status_code == 400
    assert response.json() == {
        "status": "ERROR",
        "errorMessage": "Missing or invalid field: actualWeight (must be positive number in grams)",
    }


@pytest.mark.parametrize("literal", ["Infinity", "-Infinity", "NaN"])
def test_weight_must_be_finite(client, calculator, literal):
    response = client.post(
        URL,
        content='{"country": "Albania", "actualWeight": %s}' % literal,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["status"] == "ERROR"
    assert response.json()["errorMessage"].startswith("Missing or invalid field: actualWeight")
    assert calculator["calls"] == []


@pytest.mark.parametrize(
    "field, value",
    [
        ("actualLength", {"a": 1}),
        ("actualWidth", "10"),
        ("actualHeight", -1),
        ("actualLength", True),
        ("actualWidth", [10]),
    ],
)
def test_dimensions_must_be_non_negative_numbers(client, calculator, field, value):
    response = client.post(
        URL, json={"country": "Albania", "actualWeight": 100, field: value}
    )

    assert response.status_code == 400
    assert response.json() == {
        "status": "ERROR",
        "errorMessage": f"Invalid field: {field} (must be a non-negative number in cm)",
    }
    assert calculator["calls"] == []


def test_infinite_dimension_is_rejected(client, calculator):
    response = client.post(
        URL,
        content='{"country": "Albania", "actualWeight": 100, "actualHeight": Infinity}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["errorMessage"].startswith("Invalid field: actualHeight")


def test_null_dimensions_default_to_zero(client, calculator):
    calculator["response"] = FakeResponse(json_data=quote_body(esr=quote_block(50000)))

    response = client.post(
        URL, json={"country": "Albania", "actualWeight": 100, "actualWidth": None}
    )

    assert response.status_code == 200
    assert calculator["calls"][0]["json"]["actualWidth"] == "0"


def test_carrier_refusal_is_forwarded(client, calculator):
    calculator["response"] = FakeResponse(
        status_code=200,
        json_data={"status": "FAIL", "errorMessage": "Country not supported"},
    )

    response = client.post(URL, json={"country": "Albania", "actualWeight": 100})

    assert response.status_code == 400
    assert response.json() == {"status": "FAIL", "errorMessage": "Country not supported"}


def test_carrier_http_error_keeps_its_status(client, calculator):
    calculator["response"] = FakeResponse(status_code=503, json_data=None)

    response = client.post(URL, json={"country": "Albania", "actualWeight": 100})

    assert response.status_code == 503
    assert response.json()["status"] == "FAIL"
    assert response.json()["errorMessage"] == "Kurasi API returned status: 503"


def test_carrier_unreachable_is_an_error(client, calculator):
    calculator["response"] = requests.ConnectionError("connection refused")

    response = client.post(URL, json={"country": "Albania", "actualWeight": 100})

    assert response.status_code == 500
    assert response.json() == {"status": "ERROR", "errorMessage": "connection refused"}


def test_unexpected_failure_is_a_500(client, calculator, monkeypatch):
    from modules.shipping_quote import shipping_quote_service

    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(shipping_quote_service, "combine", boom)
    calculator["response"] = FakeResponse(json_data=quote_body(esr=quote_block(1)))

    response = client.post(URL, json={"country": "Albania", "actualWeight": 100})

    assert response.status_code == 500
    assert response.json() == {"status": "ERROR", "errorMessage": "boom"}


@pytest.mark.anyio
@pytest.mark.parametrize("path", [URL, "/api/kurasi/quote"])
async def test_slow_carrier_does_not_hold_up_other_requests(client, monkeypatch, path):
    def slow_post(url, json=None, headers=None, timeout=None):
        time.sleep(1.5)
        return FakeResponse(json_data=quote_body(esr=quote_block(50000)))

    monkeypatch.setattr(requests, "post", slow_post)

    async def timed_status(http_client):
        await asyncio.sleep(0.2)
        started = time.monotonic()
        response = await http_client.get("/status")
        return response, time.monotonic() - started

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://kurasyit") as http_client:
        quote, (status, waited) = await asyncio.gather(
            http_client.post(path, json={"country": "Albania", "actualWeight": 100}),
            timed_status(http_client),
        )

    assert quote.status_code == 200
    assert status.status_code == 200
    assert waited < 0.5
