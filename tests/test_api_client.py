# run with: pytest tests/test_api_client.py -v

import httpx
import pytest

from conftest import API_BASE, CUSTOMER
from storefront.catalog.client import ApiClient, resolve_base_url
from storefront.errors import NetworkError, ParseError


def client_for(handler):
    return ApiClient(API_BASE, transport=httpx.MockTransport(handler))


@pytest.mark.parametrize(
    "base, origin, expected",
    [
        ("/api", "http://localhost:8080", "http://localhost:8080/api"),
        ("api/", "http://localhost:8080/", "http://localhost:8080/api"),
        ("https://shop.example.com/api/", "http://localhost:8080", "https://shop.example.com/api"),
    ],
)
def test_resolve_base_url(base, origin, expected):
    assert resolve_base_url(base, origin) == expected


def test_list_products_skips_malformed_entries(api_client, fake_api):
    fake_api.products.append({"name": "No id", "price": 10})
    products = api_client.list_products()

    assert [p.id for p in products] == ["p1", "p2", "p3", "p4"]
    method, path, auth = fake_api.calls[-1]
    assert (method, path, auth) == ("GET", "/api/products", None)


def test_list_banners_rejects_non_list_payload():
    client = client_for(lambda request: httpx.Response(200, json={"banners": []}))
    with pytest.raises(NetworkError) as excinfo:
        client.list_banners()
    assert isinstance(excinfo.value.__cause__, ParseError)


def test_bearer_token_is_attached_only_when_given(api_client, fake_api):
    api_client.get_profile("tok-1")
    api_client.list_products()

    assert fake_api.calls[0][2] == "Bearer tok-1"
    assert fake_api.calls[1][2] is None


def test_authenticate_returns_token_and_customer(api_client):
    token, customer = api_client.authenticate("ayesha@example.com", "Secret123!")
    assert token == "tok-1"
    assert customer == CUSTOMER


@pytest.mark.parametrize(
    "payload",
    [
        {"token": "tok-1"},
        {"customer": CUSTOMER},
        {"data": {"token": "tok-1", "customer": CUSTOMER}},
        ["tok-1"],
    ],
)
def test_authenticate_rejects_other_response_shapes(payload):
    client = client_for(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(NetworkError) as excinfo:
        client.authenticate("a@example.com", "pw")
    assert excinfo.value.message == "Invalid response from server"
    assert isinstance(excinfo.value.__cause__, ParseError)


def test_non_2xx_maps_to_network_error_with_status(api_client):
    with pytest.raises(NetworkError) as excinfo:
        api_client.authenticate("ayesha@example.com", "wrong")
    assert excinfo.value.status_code == 401
    assert excinfo.value.is_unauthorized


def test_transport_failure_maps_to_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError) as excinfo:
        client_for(handler).list_products()
    assert excinfo.value.status_code is None
    assert not excinfo.value.is_unauthorized


def test_malformed_json_maps_to_network_error():
    client = client_for(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
    with pytest.raises(NetworkError) as excinfo:
        client.get_profile("tok-1")
    assert isinstance(excinfo.value.__cause__, ParseError)


def test_orders_round_trip_through_fake(api_client, fake_api):
    orders = api_client.list_my_orders("tok-1")
    assert [o["_id"] for o in orders] == ["o1", "o2"]

    created = api_client.create_order({"items": [], "totalAmount": 0}, token="tok-1")
    assert created["_id"] == "o101"
    assert fake_api.created_orders == [{"items": [], "totalAmount": 0}]


def test_categories_accept_data_envelope(api_client):
    categories = api_client.list_categories()
    assert [c.id for c in categories] == ["c-shirts", "c-dupatta", "c-silk"]
    assert categories[2].parent_id == "c-shirts"


def test_brands_skip_malformed_entries(api_client):
    assert [b.slug for b in api_client.list_brands()] == ["khaadi", "sapphire"]


@pytest.mark.parametrize("payload", [{"brands": []}, "nope", {"data": "nope"}])
def test_brands_reject_non_list_payload(payload):
    client = client_for(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(NetworkError) as excinfo:
        client.list_brands()
    assert isinstance(excinfo.value.__cause__, ParseError)


def test_register_returns_token_and_customer(api_client, fake_api):
    token, customer = api_client.register({"email": "sara@example.com", "password": "pw", "firstName": "Sara"})
    assert token == "tok-new"
    assert customer["email"] == "sara@example.com"
    assert "password" not in customer
    assert fake_api.registered == [{"email": "sara@example.com", "password": "pw", "firstName": "Sara"}]


def test_register_conflict_keeps_upstream_status(api_client):
    with pytest.raises(NetworkError) as excinfo:
        api_client.register({"email": "ayesha@example.com", "password": "pw"})
    assert excinfo.value.status_code == 409


def test_register_rejects_response_without_token():
    client = client_for(lambda request: httpx.Response(201, json={"customer": {"_id": "c"}}))
    with pytest.raises(NetworkError) as excinfo:
        client.register({"email": "a@b.c", "password": "pw"})
    assert isinstance(excinfo.value.__cause__, ParseError)
