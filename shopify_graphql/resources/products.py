"""Product queries and mutations."""
from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from ..client import ShopifyClient
from ..paginate import cursor_pages
from ..query import QueryBuilder
from ..response import GraphQLResponse

LIST_FIELDS = ("id", "title", "handle", "status", "createdAt", "updatedAt")
DETAIL_FIELDS = (
    "id",
    "title",
    "handle",
    "description",
    "status",
    "vendor",
    "productType",
    "tags",
    "createdAt",
    "updatedAt",
)
SEARCH_FIELDS = ("id", "title", "handle", "status", "vendor")
PAGE_INFO_FIELDS = ("hasNextPage", "hasPreviousPage", "startCursor", "endCursor")
USER_ERROR_FIELDS = ("field", "message")


def _with_defaults(defaults: Iterable[str], extra: Iterable[str]) -> list[str]:
    fields = list(defaults)
    fields.extend(f for f in extra if f not in fields)
    return fields


def _product_payload(builder: QueryBuilder) -> None:
    builder.field("product", ["id", "title", "handle", "status"])
    builder.field("userErrors", list(USER_ERROR_FIELDS))


class Products:
    """Thin helpers for the ``products`` connection and product mutations."""

    def __init__(self, client: ShopifyClient) -> None:
        self.client = client

    def list_query(self, fields: Iterable[str] = ()) -> QueryBuilder:
        node_fields = _with_defaults(LIST_FIELDS, fields)
        return (
            QueryBuilder.query("GetProducts")
            .variable("first", "Int!")
            .variable("after", "String")
            .field(
                "products(first: $first, after: $after)",
                lambda products: products.field(
                    "edges", lambda edges: edges.field("node", node_fields).field("cursor")
                ).field("pageInfo", list(PAGE_INFO_FIELDS)),
            )
        )

    def list(
        self, first: int = 10, after: str | None = None, fields: Iterable[str] = ()
    ) -> GraphQLResponse:
        variables: dict[str, Any] = {"first": first}
        if after:
            variables["after"] = after
        return self.client.query(self.list_query(fields), variables)

    def iter_all(self, fields: Iterable[str] = (), page_size: int = 250) -> Iterator[dict[str, Any]]:
        """Yield every product node, following cursors page by page."""
        yield from cursor_pages(
            self.client, self.list_query(fields), "products", page_size=page_size
        )

    def get(self, id: str, fields: Iterable[str] = ()) -> GraphQLResponse:
        query = (
            QueryBuilder.query("GetProduct")
            .variable("id", "ID!")
            .field(
                "product(id: $id)",
                lambda product: product.fields(_with_defaults(DETAIL_FIELDS, fields)),
            )
        )
        return self.client.query(query, {"id": id})

    def create(self, input: Mapping[str, Any]) -> GraphQLResponse:
        mutation = (
            QueryBuilder.mutation("ProductCreate")
            .variable("input", "ProductInput!")
            .field("productCreate(input: $input)", _product_payload)
        )
        return self.client.mutate(mutation, {"input": dict(input)})

    def update(self, id: str, input: Mapping[str, Any]) -> GraphQLResponse:
        mutation = (
            QueryBuilder.mutation("ProductUpdate")
            .variable("input", "ProductInput!")
            .field("productUpdate(input: $input)", _product_payload)
        )
        return self.client.mutate(mutation, {"input": {**input, "id": id}})

    def delete(self, id: str) -> GraphQLResponse:
        mutation = (
            QueryBuilder.mutation("ProductDelete")
            .variable("input", "ProductDeleteInput!")
            .field(
                "productDelete(input: $input)",
                lambda payload: payload.field("deletedProductId").field(
                    "userErrors", list(USER_ERROR_FIELDS)
                ),
            )
        )
        return self.client.mutate(mutation, {"input": {"id": id}})

    def search(self, query: str, first: int = 10, fields: Iterable[str] = ()) -> GraphQLResponse:
        node_fields = _with_defaults(SEARCH_FIELDS, fields)
        graphql_query = (
            QueryBuilder.query("SearchProducts")
            .variable("query", "String!")
            .variable("first", "Int!")
            .field(
                "products(first: $first, query: $query)",
                lambda products: products.field(
                    "edges", lambda edges: edges.field("node", node_fields)
                ),
            )
        )
        return self.client.query(graphql_query, {"query": query, "first": first})
