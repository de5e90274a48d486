import dataclasses
import json
import pathlib
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from shopify_graphql.errors import GraphQLError
from shopify_graphql.response import GraphQLResponse, RateLimitInfo


def test_dotted_lookup():
    resp = GraphQLResponse({"data": {"shop": {"name": "Acme", "plan": None}}})
    assert resp.get("shop.name") == "Acme"
    assert resp.get("shop") == {"name": "Acme", "plan": None}
    assert resp.get("shop.missing", "X") == "X"
    assert resp.get("shop.name.x") is None
    assert resp.get("shop.name.x", "X") == "X"
    assert resp.get("shop.plan", "X") is None


def test_lookup_does_not_index_lists():
    resp = GraphQLResponse({"data": {"nodes": [{"id": 1}]}})
    assert resp.get("nodes.0.id", "X") == "X"


def test_lookup_without_data_returns_default():
    resp = GraphQLResponse({"errors": [{"message": "boom"}]})
    assert resp.data is None
    assert resp.get("shop.name", "X") == "X"


@pytest.mark.parametrize("body", [{"data": {}}, {"data": {}, "errors": []}, {"data": {}, "errors": None}])
def test_successful_without_errors(body):
    resp = GraphQLResponse(body)
    assert resp.successful
    assert not resp.has_errors
    assert resp.errors == []
    assert resp.first_error is None
    assert resp.raise_for_errors() is resp


def test_errors_make_response_unsuccessful():
    errors = [{"message": "Throttled", "extensions": {"code": "THROTTLED"}}]
    resp = GraphQLResponse({"data": {"shop": {"name": "Acme"}}, "errors": errors})
    assert not resp.successful
    assert resp.errors == errors
    assert resp.first_error == "Throttled"
    assert resp.get("shop.name") == "Acme"
    with pytest.raises(GraphQLError) as exc:
        resp.raise_for_errors()
    assert exc.value.graphql_errors == errors
    assert exc.value.has_graphql_errors
    assert "Throttled" in str(exc.value)


def test_extensions_and_metadata():
    resp = GraphQLResponse(
        {"data": {}, "extensions": {"cost": {"actualQueryCost": 3}}},
        headers={"X-Request-Id": "abc"},
        rate_limit=RateLimitInfo(currently_available=997),
    )
    assert resp.extensions == {"cost": {"actualQueryCost": 3}}
    assert resp.headers["X-Request-Id"] == "abc"
    assert resp.rate_limit.currently_available == 997
    assert resp.rate_limit.restore_rate is None
    assert GraphQLResponse({}).extensions == {}


def test_response_is_immutable():
    body = {"data": {"shop": {"name": "Acme"}}}
    resp = GraphQLResponse(body)
    with pytest.raises(dataclasses.FrozenInstanceError):
        resp.raw = {}
    with pytest.raises(TypeError):
        resp.raw["data"] = None
    body["data"] = None
    assert resp.get("shop.name") == "Acme"


def test_to_json_round_trips_body():
    body = {"data": {"shop": {"name": "Acme"}}}
    resp = GraphQLResponse(body)
    assert json.loads(resp.to_json()) == body
    assert str(resp) == resp.to_json()


def test_header_lookup_ignores_case():
    resp = GraphQLResponse({"data": {}}, headers={"X-Request-Id": "abc"})
    assert resp.headers.get("x-request-id") == "abc"
    assert resp.headers["X-REQUEST-ID"] == "abc"
    with pytest.raises(TypeError):
        resp.headers["X-Other"] = "1"


def test_nested_body_is_copied():
    body = {"data": {"shop": {"name": "Acme", "tags": ["a"]}}}
    resp = GraphQLResponse(body)
    body["data"]["shop"]["name"] = "Changed"
    body["data"]["shop"]["tags"].append("b")
    assert resp.get("shop.name") == "Acme"
    assert resp.get("shop.tags") == ["a"]
