"""Term model — RDF resources, literals and blank nodes.

A Term is a closed union of three frozen dataclasses:

  Resource  — a node identified by an absolute IRI
  Literal   — a lexical value with an optional language tag or datatype
  BlankNode — an anonymous node, identified only within one parse/merge unit

Dispatch over terms is done with ``match`` (or ``isinstance``) on these three
classes; nothing else is ever a Term. Conversion to and from rdflib's node
classes lives here too, so the rest of the package never touches rdflib terms.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Union

import rdflib


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XSD = "http://www.w3.org/2001/XMLSchema#"

RDF_TYPE = f"{RDF}type"
RDF_FIRST = f"{RDF}first"
RDF_REST = f"{RDF}rest"
RDF_NIL = f"{RDF}nil"
RDF_BAG = f"{RDF}Bag"
RDF_SEQ = f"{RDF}Seq"
RDF_ALT = f"{RDF}Alt"
RDF_MEMBER_PREFIX = f"{RDF}_"

CONTAINER_TYPES = frozenset({RDF_BAG, RDF_SEQ, RDF_ALT})

BLANK_NODE_PREFIX = "_:"


class TermKind(Enum):
    RESOURCE = "resource"
    LITERAL = "literal"
    BLANK_NODE = "blankNode"


# ---------------------------------------------------------------------------
# Terms
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Resource:
    """A node identified by an absolute IRI. Equal when the IRIs are equal."""
    uri: str

    @property
    def kind(self) -> TermKind:
        return TermKind.RESOURCE

    def raw_value(self) -> str:
        return self.uri

    def __str__(self) -> str:
        return f"<{self.uri}>"


@dataclass(frozen=True)
class Literal:
    """A literal value.

    ``language`` and ``datatype`` are mutually exclusive; a literal carrying
    both is rejected at construction. Equality is over the full
    (value, language, datatype) tuple.
    """
    value: str
    language: str | None = None
    datatype: str | None = None

    def __post_init__(self) -> None:
        if self.language and self.datatype:
            raise ValueError(
                f"Literal {self.value!r} cannot carry both language "
                f"{self.language!r} and datatype {self.datatype!r}"
            )

    @property
    def kind(self) -> TermKind:
        return TermKind.LITERAL

    def raw_value(self) -> str:
        return self.value

    def __str__(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        if self.language:
            return f'"{escaped}"@{self.language}'
        if self.datatype:
            return f'"{escaped}"^^<{self.datatype}>'
        return f'"{escaped}"'


@dataclass(frozen=True)
class BlankNode:
    """An anonymous node.

    Blank-node labels are only meaningful inside the graph they were parsed
    into. ``scope`` names that graph: two blank nodes are equal only when
    both the label and the scope match. A ``None`` scope means "the graph
    this node is handed to".
    """
    id: str
    scope: str | None = field(default=None)

    @property
    def kind(self) -> TermKind:
        return TermKind.BLANK_NODE

    def raw_value(self) -> str:
        return self.id

    def __str__(self) -> str:
        return f"{BLANK_NODE_PREFIX}{self.id}"


Term = Union[Resource, Literal, BlankNode]
Node = Union[Resource, BlankNode]


class Triple(NamedTuple):
    subject: Node
    predicate: Resource
    object: Term


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def subject_term(subject: str | Resource | BlankNode) -> Node:
    """Parse a subject identifier.

    Strings starting with ``_:`` name a blank node, anything else is an IRI.
    Terms are passed through untouched.
    """
    if isinstance(subject, (Resource, BlankNode)):
        return subject
    if isinstance(subject, Literal):
        raise TypeError(f"A literal cannot be a subject: {subject}")
    if subject.startswith(BLANK_NODE_PREFIX):
        return BlankNode(subject[len(BLANK_NODE_PREFIX):])
    return Resource(str(subject))


def subject_id(node: Node) -> str:
    """Render a subject term back to its identifier string."""
    if isinstance(node, BlankNode):
        return f"{BLANK_NODE_PREFIX}{node.id}"
    return node.uri


def local_name(iri: str) -> str:
    """Fragment after ``#``, else the last ``/`` segment, else the IRI itself."""
    if "#" in iri:
        return iri.rsplit("#", 1)[1]
    if "/" in iri:
        return iri.rsplit("/", 1)[1]
    return iri


def is_nil(term: Term) -> bool:
    return isinstance(term, Resource) and term.uri == RDF_NIL


def member_index(predicate: str) -> int | None:
    """Return ``n`` for an ``rdf:_n`` membership predicate, else None."""
    if not predicate.startswith(RDF_MEMBER_PREFIX):
        return None
    suffix = predicate[len(RDF_MEMBER_PREFIX):]
    if not suffix.isdigit():
        return None
    return int(suffix)


# ---------------------------------------------------------------------------
# rdflib conversion
# ---------------------------------------------------------------------------

def from_rdflib(node: rdflib.term.Node, scope: str | None = None) -> Term:
    """Convert an rdflib node to a Term. Blank nodes are tagged with ``scope``."""
    if isinstance(node, rdflib.URIRef):
        return Resource(str(node))
    if isinstance(node, rdflib.BNode):
        return BlankNode(str(node), scope)
    if isinstance(node, rdflib.Literal):
        datatype = str(node.datatype) if node.datatype is not None else None
        return Literal(str(node), language=node.language, datatype=datatype)
    raise TypeError(f"Unsupported rdflib node: {node!r}")


def to_rdflib(term: Term) -> rdflib.term.Identifier:
    """Convert a Term to the equivalent rdflib node (scope is dropped)."""
    match term:
        case Resource(uri=uri):
            return rdflib.URIRef(uri)
        case BlankNode(id=ident):
            return rdflib.BNode(ident)
        case Literal(value=value, language=language, datatype=datatype):
            return rdflib.Literal(
                value,
                lang=language,
                datatype=rdflib.URIRef(datatype) if datatype else None,
                normalize=False,
            )
    raise TypeError(f"Not a term: {term!r}")
