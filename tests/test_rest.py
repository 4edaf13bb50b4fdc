from types import SimpleNamespace

import pytest
import requests

from listdeck.errors import ApiError
from listdeck.models import PriceRange, Query
from listdeck.rest import RestListClient, parse_item


class DummyResponse:

    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self.payload is None:
            raise ValueError("no json")
        return self.payload


class FakeSession:

    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append(SimpleNamespace(method=method, url=url, timeout=timeout, **kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def build_client(*responses, **kwargs) -> tuple[RestListClient, FakeSession]:
    session = FakeSession(responses)
    client = RestListClient(
        base_url="https://api.example.com/",
        resource="properties",
        session=session,
        **kwargs,
    )
    return client, session


def test_parse_item_accepts_mongo_and_plain_ids():
    assert parse_item({"_id": "abc", "isActive": False}).id == "abc"
    item = parse_item({"id": 7, "title": "Plot"})
    assert item.id == "7"
    assert item.is_active is True
    assert item.data["title"] == "Plot"


def test_parse_item_without_id_raises():
    with pytest.raises(ApiError):
        parse_item({"title": "orphan"})


def test_parse_item_keeps_falsy_ids():
    assert parse_item({"id": 0}).id == "0"
    assert parse_item({"_id": 0, "id": 9}).id == "0"


def test_parse_item_reads_string_flags():
    assert parse_item({"_id": "a", "isActive": "false"}).is_active is False
    assert parse_item({"_id": "b", "isActive": " True "}).is_active is True
    with pytest.raises(ApiError):
        parse_item({"_id": "c", "isActive": "maybe"})


def test_get_page_sends_query_params_and_parses_envelope():
    client, session = build_client(
        DummyResponse({
            "success": True,
            "data": [{"_id": "p1", "isActive": True}, {"_id": "p2", "isActive": False}],
            "page": 2,
            "pages": 3,
            "total": 22,
        }),
        token="secret",
        timeout=5,
    )
    query = Query.build(
        search_term="Mumbai",
        fields={"propertyType": "villa", "price": PriceRange(0, 1_000_000)},
        page=2,
        page_size=10,
    )

    page = client.get_page(query)

    call = session.calls[0]
    assert call.method == "GET"
    assert call.url == "https://api.example.com/api/properties"
    assert call.timeout == 5
    assert call.params == {
        "page": "2",
        "limit": "10",
        "search": "Mumbai",
        "propertyType": "villa",
        "minPrice": "0",
        "maxPrice": "1000000",
    }
    assert session.headers["Authorization"] == "Bearer secret"
    assert [item.id for item in page.items] == ["p1", "p2"]
    assert page.items[1].is_active is False
    assert (page.page, page.total_pages, page.total_count) == (2, 3, 22)


def test_get_page_defaults_totals_from_data():
    client, _ = build_client(DummyResponse({"success": True, "data": [{"_id": "u1"}]}))
    page = client.get_page(Query.build(page_size=10))
    assert page.total_count == 1
    assert page.total_pages == 1
    assert page.page == 1


def test_http_error_uses_server_message():
    client, _ = build_client(DummyResponse({"success": False, "message": "Property not found"}, 404))
    with pytest.raises(ApiError) as excinfo:
        client.remove("missing")
    assert str(excinfo.value) == "Property not found"
    assert excinfo.value.status_code == 404


def test_http_error_without_body_reports_status():
    client, _ = build_client(DummyResponse(None, 502))
    with pytest.raises(ApiError, match="status: 502"):
        client.get_page(Query.build())


def test_unsuccessful_envelope_is_an_error():
    client, _ = build_client(DummyResponse({"success": False, "message": "Not authorized"}))
    with pytest.raises(ApiError, match="Not authorized"):
        client.get_page(Query.build())


def test_transport_failure_is_wrapped():
    client, _ = build_client(requests.ConnectionError("refused"))
    with pytest.raises(ApiError, match="refused"):
        client.get_page(Query.build())


def test_toggle_and_delete_urls():
    client, session = build_client(
        DummyResponse({"success": True, "data": {"id": "p 1", "isActive": False}}),
        DummyResponse({"success": True, "data": {}}),
        DummyResponse({"success": True, "message": "deleted"}),
    )

    assert client.patch_toggle("p 1") is False
    assert client.patch_toggle("p2") is None
    client.remove("p3")

    assert [(call.method, call.url) for call in session.calls] == [
        ("PATCH", "https://api.example.com/api/properties/p%201/toggle"),
        ("PATCH", "https://api.example.com/api/properties/p2/toggle"),
        ("DELETE", "https://api.example.com/api/properties/p3"),
    ]


@pytest.mark.asyncio
async def test_async_methods_delegate_to_blocking_calls():
    client, _ = build_client(
        DummyResponse({"success": True, "data": [{"_id": "b1"}], "pages": 1, "total": 1}),
        DummyResponse({"success": True, "data": {"isActive": True}}),
        DummyResponse({"success": True}),
    )

    page = await client.fetch_page(Query.build())
    assert page.items[0].id == "b1"
    assert await client.toggle_status("b1") is True
    assert await client.delete_item("b1") is None
