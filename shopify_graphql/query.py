"""Fluent builder for GraphQL query and mutation strings.

The builder only concatenates text. Field names, types and arguments are
never checked against a schema; mistakes surface as errors from Shopify.

Example:
    >>> q = (
    ...     QueryBuilder.query("Q")
    ...     .variable("first", "Int!", 10)
    ...     .field("shop", ["name"])
    ... )
    >>> q.build()
    'query Q($first: Int! = 10) { shop { name } }'
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence, Union

QUERY = "query"
MUTATION = "mutation"


@dataclass(frozen=True)
class Leaf:
    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class Nested:
    name: str
    children: tuple["FieldNode", ...]

    def render(self) -> str:
        return f"{self.name} {{ {' '.join(c.render() for c in self.children)} }}"


@dataclass(frozen=True)
class FragmentSpread:
    name: str

    def render(self) -> str:
        return f"...{self.name}"


FieldNode = Union[Leaf, Nested, FragmentSpread]
Subfields = Union[Sequence[str], Callable[["QueryBuilder"], Any], None]


@dataclass(frozen=True)
class Variable:
    name: str
    type: str
    default: Any = None

    def render(self) -> str:
        text = f"${self.name}: {self.type}"
        if self.default is not None:
            text += f" = {format_value(self.default)}"
        return text


@dataclass(frozen=True)
class Fragment:
    name: str
    type_condition: str
    fields: tuple[str, ...]

    def render(self) -> str:
        return f"fragment {self.name} on {self.type_condition} {{ {' '.join(self.fields)} }}"


def format_value(value: Any) -> str:
    """Render a Python value as a GraphQL literal.

    Strings get naive backslash escaping only; there is no handling of
    locale-specific number formats or non-ASCII escapes.
    """
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    return str(value)


class QueryBuilder:
    """Accumulates an operation's variables, selection and fragments."""

    def __init__(self, kind: str = QUERY, name: str = "") -> None:
        if kind not in (QUERY, MUTATION):
            raise ValueError(f"Unknown operation kind: {kind!r}")
        self.kind = kind
        self.name = name
        self.variables: list[Variable] = []
        self.selection: list[FieldNode] = []
        self.fragments: dict[str, Fragment] = {}

    @classmethod
    def query(cls, name: str = "") -> "QueryBuilder":
        return cls(QUERY, name)

    @classmethod
    def mutation(cls, name: str = "") -> "QueryBuilder":
        return cls(MUTATION, name)

    def variable(self, name: str, type_: str, default: Any = None) -> "QueryBuilder":
        """Declare ``$name: type_``, optionally with a default value.

        Duplicate names are not detected here.
        """
        self.variables.append(Variable(name, type_, default))
        return self

    def field(self, name: str, subfields: Subfields = None) -> "QueryBuilder":
        """Add a field to the selection.

        ``subfields`` may be omitted (leaf), a list of field names, or a
        callable that receives a fresh child builder and populates it. Only the
        child's fields are kept; variables or fragments declared on it are
        dropped, so declare those on the top-level builder.
        """
        if subfields is None:
            self.selection.append(Leaf(name))
        elif callable(subfields):
            child = QueryBuilder()
            subfields(child)
            self.selection.append(Nested(name, tuple(child.selection)))
        elif isinstance(subfields, str):
            self.selection.append(Nested(name, (Leaf(subfields),)))
        else:
            self.selection.append(Nested(name, tuple(Leaf(f) for f in subfields)))
        return self

    def fields(self, spec: Union[Mapping[Any, Any], Iterable[str]]) -> "QueryBuilder":
        """Add several fields at once.

        In a mapping, integer keys mark the value as a bare field name and
        string keys are passed to :meth:`field` with the value as subfields.
        A plain iterable is treated as a list of bare field names.
        """
        if isinstance(spec, Mapping):
            for key, value in spec.items():
                if isinstance(key, int):
                    self.field(value)
                else:
                    self.field(key, value)
        else:
            for name in spec:
                self.field(name)
        return self

    def fragment(self, name: str, type_condition: str, fields: Iterable[str]) -> "QueryBuilder":
        self.fragments[name] = Fragment(name, type_condition, tuple(fields))
        return self

    def use_fragment(self, name: str) -> "QueryBuilder":
        self.selection.append(FragmentSpread(name))
        return self

    def build(self) -> str:
        text = self.kind
        if self.name:
            text += f" {self.name}"
        if self.variables:
            text += "(" + ", ".join(v.render() for v in self.variables) + ")"
        text += " { " + " ".join(node.render() for node in self.selection) + " }"
        if self.fragments:
            text = " ".join(f.render() for f in self.fragments.values()) + " " + text
        return text

    def __str__(self) -> str:
        return self.build()
