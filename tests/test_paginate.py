import json
import pathlib
import sys
from dataclasses import dataclass, field

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from shopify_graphql.client import ShopifyClient
from shopify_graphql.errors import GraphQLError
from shopify_graphql.paginate import cursor_pages
from shopify_graphql.session import ShopifySession
from shopify_graphql.transport import Transport

FIXTURES = pathlib.Path(__file__).resolve().parent / "fixtures"


def load(name):
    with open(FIXTURES / name) as fh:
        return json.load(fh)


@dataclass
class DummyResponse:
    status_code: int
    body: dict
    headers: dict = field(default_factory=dict)

    @property
    def text(self):
        return json.dumps(self.body)


class ListTransport(Transport):
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def post(self, url, headers, data, timeout):
        payload = json.loads(data)
        self.calls.append({"query": payload["query"], "variables": payload.get("variables")})
        return self.responses.pop(0)


def make_session(transport):
    return ShopifySession("https://test.myshopify.com", "token", transport=transport)


def test_cursor_pages_streams_all_items():
    transport = ListTransport([
        DummyResponse(200, load("products_page1.json")),
        DummyResponse(200, load("products_page2.json")),
    ])
    items = list(
        cursor_pages(
            make_session(transport),
            "query",
            connection_path="products",
            variables={},
            page_size=2,
        )
    )
    assert [item["id"] for item in items] == [
        "gid://shopify/Product/1",
        "gid://shopify/Product/2",
        "gid://shopify/Product/3",
    ]
    assert transport.calls[0]["variables"] == {"first": 2, "after": None}
    assert transport.calls[1]["variables"]["after"] == "cursor1"


def test_cursor_pages_keeps_caller_first_and_accepts_client():
    transport = ListTransport([DummyResponse(200, load("products_page2.json"))])
    client = ShopifyClient(make_session(transport))
    items = list(cursor_pages(client, "query", "products", variables={"first": 7, "query": "hat"}))
    assert len(items) == 1
    assert transport.calls[0]["variables"] == {"first": 7, "query": "hat", "after": None}


def test_cursor_pages_reads_edges():
    body = {
        "data": {
            "shop": {
                "orders": {
                    "edges": [{"node": {"id": "o1"}, "cursor": "c1"}],
                    "pageInfo": {"hasNextPage": False},
                }
            }
        }
    }
    transport = ListTransport([DummyResponse(200, body)])
    items = list(cursor_pages(make_session(transport), "query", "shop.orders"))
    assert items == [{"id": "o1"}]


def test_cursor_pages_bad_path():
    transport = ListTransport([DummyResponse(200, load("products_page1.json"))])
    with pytest.raises(ValueError):
        list(
            cursor_pages(
                make_session(transport),
                "query",
                connection_path="missing",
                variables={},
                page_size=2,
            )
        )


def test_cursor_pages_requires_nodes_or_edges():
    body = {"data": {"products": {"pageInfo": {"hasNextPage": False}}}}
    transport = ListTransport([DummyResponse(200, body)])
    with pytest.raises(ValueError):
        list(cursor_pages(make_session(transport), "query", "products"))


def test_cursor_pages_raises_on_graphql_errors():
    first = load("products_page1.json")
    failing = {"data": None, "errors": [{"message": "Throttled"}]}
    transport = ListTransport([DummyResponse(200, first), DummyResponse(200, failing)])
    pages = cursor_pages(make_session(transport), "query", "products", page_size=2)
    assert next(pages)["id"] == "gid://shopify/Product/1"
    assert next(pages)["id"] == "gid://shopify/Product/2"
    with pytest.raises(GraphQLError) as exc:
        next(pages)
    assert exc.value.graphql_errors == [{"message": "Throttled"}]


def test_cursor_pages_requires_end_cursor_to_continue():
    body = {
        "data": {
            "products": {
                "nodes": [{"id": "p1"}],
                "pageInfo": {"hasNextPage": True, "endCursor": None},
            }
        }
    }
    transport = ListTransport([DummyResponse(200, body), DummyResponse(200, body)])
    pages = cursor_pages(make_session(transport), "query", "products")
    assert next(pages) == {"id": "p1"}
    with pytest.raises(ValueError):
        next(pages)
    assert len(transport.calls) == 1
