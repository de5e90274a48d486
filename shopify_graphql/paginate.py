"""Pagination helpers."""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from .client import Operation, ShopifyClient, execute
from .session import ShopifySession


def cursor_pages(
    session: Union[ShopifySession, ShopifyClient],
    query: Operation,
    connection_path: str,
    variables: Mapping[str, Any] | None = None,
    page_size: int = 250,
) -> Iterable[dict[str, Any]]:
    """
    Yield items from a cursor-based GraphQL connection, requesting additional
    pages until `pageInfo.hasNextPage` is false.

    The supplied `query` must accept `$first: Int!` and `$after: String`
    variables for pagination. `connection_path` is a dotted path inside the
    response's `data` to the connection object (e.g. `"products"`).

    Args:
        session: A `ShopifySession` or `ShopifyClient`.
        query: GraphQL document (or QueryBuilder) containing a connection field.
        connection_path: Dotted path from `data` to the connection.
        variables: Initial query variables (updated with pagination params). May be None.
        page_size: Items per page (default 250, Shopify max).

    Yields:
        dict: Each node from the connection, one at a time.

    Raises:
        GraphQLError: If a page comes back with GraphQL errors.
        ValueError: If `connection_path` is invalid or connection lacks
            `nodes`/`edges`, or if a page reports more results
            without an `endCursor`.

    Example:
        >>> query = '''
        ...   query($first: Int!, $after: String) {
        ...     products(first: $first, after: $after) {
        ...       pageInfo { hasNextPage endCursor }
        ...       nodes { id title }
        ...     }
        ...   }
        ... '''
        >>> for product in cursor_pages(session, query, "products"):
        ...     print(product["title"])
    """

    if isinstance(session, ShopifyClient):
        session = session.session
    vars_copy: dict[str, Any] = dict(variables or {})
    cursor: str | None = None
    first = vars_copy.get("first")
    vars_copy["first"] = first if (isinstance(first, int) and first > 0) else page_size
    while True:
        vars_copy["after"] = cursor
        resp = execute(session, query, vars_copy).raise_for_errors()
        conn = resp.get(connection_path)
        if not isinstance(conn, Mapping):
            raise ValueError(f"connection_path '{connection_path}' not found in response")
        if "nodes" in conn:
            items = conn["nodes"]
        elif "edges" in conn:
            items = [edge["node"] for edge in conn["edges"]]
        else:
            raise ValueError("Connection missing 'nodes' or 'edges'")
        for item in items:
            yield item
        page_info = conn.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            break
        cursor = page_info.get("endCursor")
        if not cursor:
            raise ValueError("pageInfo.hasNextPage is true but endCursor is missing")
