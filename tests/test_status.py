def test_landing(client):
    assert client.get("/").json() == {"service": "Kurasyit", "api": "/api", "docs": "/docs"}


def test_status(client):
    response = client.get("/status")

    assert response.status_code == 200
    assert response.json() == {"status": "OK", "service": "kurasyit"}


def test_deep_status_reports_database_and_carrier_settings(client):
    response = client.get("/deepstatus")

    assert response.status_code == 200
    body = response.json()
    assert body["db"] is True
    assert body["kurasi"]["serverToken"] is False
    assert body["kurasi"]["clientCode"] is False
    assert body["kurasi"]["base"].startswith("http")
