"""Endpoint tests for /country-info/{country_name}."""

from __future__ import annotations

import httpx
from fastapi.testclient import TestClient

from country_info.api.dependencies import get_country_info_service
from country_info.core.config import Settings
from country_info.main import REQUEST_ID_HEADER, create_app
from tests.conftest import build_service


def test_returns_composite_payload(api_client):
    response = api_client.get("/country-info/France")

    assert response.status_code == 200
    assert response.headers["X-Cache-Status"] == "miss"
    body = response.json()
    assert body["fromCache"] is False
    assert body["country"]["name"] == "France"
    assert body["country"]["officialName"] == "French Republic"
    assert body["country"]["capital"] == "Paris"
    assert body["country"]["latlng"] == [46.0, 2.0]
    assert body["country"]["currencies"] == {"EUR": {"name": "Euro", "symbol": "€"}}
    assert body["weather"]["current"]["temp"] == 14.2
    assert body["weather"]["current"]["windSpeed"] == 4.1
    assert len(body["weather"]["forecast"]["list"]) == 8
    assert body["exchange"] == {
        "base": "EUR",
        "rates": {"USD": 1.08, "EUR": 1.0, "GBP": 0.86},
        "date": "2026-10-19",
    }
    assert len(body["airQuality"]["results"]) == 5
    assert body["airQuality"]["results"][0]["aqiStatus"] == "Good"
    assert "fetchedAt" in body


def test_second_request_is_a_cache_hit(api_client, provider_stub):
    first = api_client.get("/country-info/France")
    second = api_client.get("/country-info/%20france%20")

    assert second.status_code == 200
    assert second.json()["fromCache"] is True
    assert second.headers["X-Cache-Status"] == "hit"
    assert second.json()["fetchedAt"] == first.json()["fetchedAt"]
    assert len(provider_stub.calls_to("country")) == 1


def test_blank_name_returns_400(api_client, provider_stub):
    response = api_client.get("/country-info/%20%20")

    assert response.status_code == 400
    assert response.json() == {"error": "Country name required"}
    assert provider_stub.requests == []


def test_missing_name_returns_400(api_client):
    for path in ("/country-info", "/country-info/"):
        response = api_client.get(path)
        assert response.status_code == 400
        assert response.json() == {"error": "Country name required"}


def test_unknown_country_returns_404(api_client):
    response = api_client.get("/country-info/Atlantis")

    assert response.status_code == 404
    assert set(response.json()) == {"error"}
    assert response.json()["error"]


def test_country_provider_failure_returns_500(api_client, provider_stub):
    provider_stub.overrides["country"] = lambda request: httpx.Response(
        502, text="gateway down"
    )

    response = api_client.get("/country-info/France")

    assert response.status_code == 500
    assert response.json()["error"].startswith("HTTP 502 Bad Gateway")


def test_failed_sub_record_is_replaced_by_error_marker(api_client, provider_stub):
    provider_stub.overrides["weather"] = lambda request: httpx.Response(500)

    response = api_client.get("/country-info/France")

    assert response.status_code == 200
    weather = response.json()["weather"]
    assert set(weather) == {"error", "errorKind"}
    assert weather["errorKind"] == "http_status"
    assert response.json()["exchange"]["base"] == "EUR"


def test_missing_weather_key_is_reported_in_body(
    http_client, composite_cache, provider_stub
):
    settings = Settings(OPENWEATHER_API_KEY="", OPENAQ_API_KEY="test-aq-key")
    app = create_app()
    app.dependency_overrides[get_country_info_service] = lambda: build_service(
        settings, http_client, composite_cache
    )

    response = TestClient(app).get("/country-info/France")

    assert response.status_code == 200
    assert response.json()["weather"] == {
        "error": "No lat/lon or OpenWeather API key not set",
        "errorKind": "precondition",
    }
    assert provider_stub.calls_to("weather") == []


def test_responses_carry_request_id(api_client):
    response = api_client.get(
        "/country-info/France", headers={REQUEST_ID_HEADER: "req-123"}
    )
    assert response.headers[REQUEST_ID_HEADER] == "req-123"

    response = api_client.get("/country-info/Atlantis")
    assert response.headers[REQUEST_ID_HEADER]


class ExplodingService:
    async def get_country_info(self, raw_name):
        raise RuntimeError("boom")


def test_unexpected_failure_returns_500_message_only(api_client):
    api_client.app.dependency_overrides[get_country_info_service] = ExplodingService

    response = api_client.get("/country-info/France")

    assert response.status_code == 500
    assert response.json() == {"error": "boom"}
    assert "Traceback" not in response.text


def test_unexpected_failure_keeps_request_id(api_client):
    api_client.app.dependency_overrides[get_country_info_service] = ExplodingService

    response = api_client.get(
        "/country-info/France", headers={REQUEST_ID_HEADER: "req-500"}
    )
    assert response.status_code == 500
    assert response.headers[REQUEST_ID_HEADER] == "req-500"

    response = api_client.get("/country-info/France")
    assert response.headers[REQUEST_ID_HEADER]
