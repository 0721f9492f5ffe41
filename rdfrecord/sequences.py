"""Repeated values — RDF Lists, RDF Containers and multi-valued predicates.

A repeated field looks at the objects of its predicate:

- exactly one object that heads an rdf:first/rdf:rest chain (or is rdf:nil):
  the chain is walked to rdf:nil and each rdf:first becomes one element;
- exactly one object typed rdf:Bag, rdf:Seq or rdf:Alt: its rdf:_n members,
  always ordered by ascending n whatever the container type;
- anything else: every object is one element.

Elements are decoded by a callback supplied by the decoder, so lists of
records and lists of lists go back through the same per-kind rules.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from .errors import MalformedList
from .schema import ValueSpec
from .terms import (
    CONTAINER_TYPES,
    RDF_FIRST,
    RDF_REST,
    RDF_TYPE,
    Literal,
    Resource,
    Term,
    is_nil,
    member_index,
)

logger = logging.getLogger(__name__)

ElementDecoder = Callable[[Term, ValueSpec], Any]

_FIRST = Resource(RDF_FIRST)
_REST = Resource(RDF_REST)
_TYPE = Resource(RDF_TYPE)


class NodeShape(Enum):
    LIST = "list"
    CONTAINER = "container"
    SINGLE = "single"


def node_shape(graph, term: Term) -> NodeShape:
    """Classify an object as a list head, a typed container, or a plain value."""
    if isinstance(term, Literal):
        return NodeShape.SINGLE
    if is_nil(term):
        return NodeShape.LIST
    if graph.query(term, _FIRST, None) or graph.query(term, _REST, None):
        return NodeShape.LIST
    for triple in graph.query(term, _TYPE, None):
        if isinstance(triple.object, Resource) and triple.object.uri in CONTAINER_TYPES:
            return NodeShape.CONTAINER
    return NodeShape.SINGLE


def decode_repeated(
    graph,
    objects: list[Term],
    spec: ValueSpec,
    decode_element: ElementDecoder,
) -> list[Any]:
    """Decode the objects of a repeated field into a list."""
    element = spec.element
    if len(objects) == 1:
        shape = node_shape(graph, objects[0])
        if shape is NodeShape.LIST:
            return decode_list(graph, objects[0], element, decode_element)
        if shape is NodeShape.CONTAINER:
            return decode_container(graph, objects[0], element, decode_element)
    return [decode_element(obj, element) for obj in objects]


def list_items(graph, head: Term) -> list[Term]:
    """Walk an RDF List from ``head`` to rdf:nil and return its rdf:first objects."""
    items: list[Term] = []
    seen: set[Term] = set()
    node = head
    while not is_nil(node):
        if isinstance(node, Literal):
            raise MalformedList(str(node), "a literal cannot be a list node")
        if node in seen:
            raise MalformedList(str(node), "rdf:rest loops back into the list")
        seen.add(node)

        firsts = graph.query(node, _FIRST, None)
        rests = graph.query(node, _REST, None)
        if not firsts:
            raise MalformedList(str(node), "no rdf:first")
        if not rests:
            raise MalformedList(str(node), "no rdf:rest")
        if len(firsts) > 1 or len(rests) > 1:
            raise MalformedList(str(node), "more than one rdf:first or rdf:rest")

        items.append(firsts[0].object)
        node = rests[0].object

    logger.debug("Walked RDF list %s: %d items", head, len(items))
    return items


def decode_list(
    graph,
    head: Term,
    element: ValueSpec,
    decode_element: ElementDecoder,
) -> list[Any]:
    return [decode_element(item, element) for item in list_items(graph, head)]


def container_members(graph, node: Term) -> list[Term]:
    """Members of an RDF Container, ordered by the numeric suffix of rdf:_n.

    Bag and Alt are unordered by definition; they are sorted the same way so
    results are deterministic, and callers should compare them as sets.
    """
    members: list[tuple[int, Term]] = []
    for triple in graph.query(node, None, None):
        index = member_index(triple.predicate.uri)
        if index is not None:
            members.append((index, triple.object))
    members.sort(key=lambda member: member[0])
    logger.debug("Read RDF container %s: %d members", node, len(members))
    return [obj for _, obj in members]


def decode_container(
    graph,
    node: Term,
    element: ValueSpec,
    decode_element: ElementDecoder,
) -> list[Any]:
    return [decode_element(member, element) for member in container_members(graph, node)]
