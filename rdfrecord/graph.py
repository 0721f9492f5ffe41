"""Graph collaborator — the only I/O surface of the decoder.

The decoder needs one operation from a triple store:

    query(subject=None, predicate=None, object=None) -> list[Triple]

where None matches anything. Any object with that method is a Graph.
RdflibGraph adapts an rdflib.Graph to it; parsing Turtle and other formats
is rdflib's job.

Blank-node labels are only unique inside one parse. Loading several sources
into one graph therefore goes through merge_graphs(), which gives every
blank node of every source a fresh label before the triples are combined.
"""

from __future__ import annotations

import logging
from typing import IO, Protocol, runtime_checkable

import rdflib

from .errors import UnderlyingQueryError
from .terms import BlankNode, Resource, Term, Triple, from_rdflib, to_rdflib

logger = logging.getLogger(__name__)


@runtime_checkable
class Graph(Protocol):
    """Read-only triple source queried by the decoder."""

    def query(
        self,
        subject: Term | None = None,
        predicate: Resource | None = None,
        object: Term | None = None,
    ) -> list[Triple]:
        ...


# ---------------------------------------------------------------------------
# rdflib adapter
# ---------------------------------------------------------------------------

class RdflibGraph:
    """Graph over an rdflib.Graph.

    Results are sorted by their N-Triples form, so the same graph always
    answers a query in the same order. Blank nodes handed out carry this
    graph's ``scope``; blank nodes from another scope match nothing here.
    """

    def __init__(self, graph: rdflib.Graph | None = None, scope: str | None = None):
        self.graph = graph if graph is not None else rdflib.Graph()
        self.scope = scope if scope is not None else f"g-{hex(id(self))[2:]}"

    @classmethod
    def from_turtle(cls, text: str, base: str | None = None, scope: str | None = None) -> RdflibGraph:
        g = parse_lexical(rdflib.Graph(), data=text, format="turtle", publicID=base)
        return cls(g, scope=scope)

    def load(self, source: str | IO, format: str = "turtle", base: str | None = None) -> int:
        """Parse ``source`` and merge it in with fresh blank-node labels."""
        incoming = parse_lexical(rdflib.Graph(), source, format=format, publicID=base)
        before = len(self.graph)
        merge_into(self.graph, incoming)
        added = len(self.graph) - before
        logger.debug("Loaded %d triples from %s", added, base or source)
        return added

    def add(self, subject: Term, predicate: Resource, object: Term) -> None:
        self.graph.add((to_rdflib(subject), to_rdflib(predicate), to_rdflib(object)))

    def query(
        self,
        subject: Term | None = None,
        predicate: Resource | None = None,
        object: Term | None = None,
    ) -> list[Triple]:
        if self._foreign(subject) or self._foreign(object):
            return []
        pattern = (
            to_rdflib(subject) if subject is not None else None,
            to_rdflib(predicate) if predicate is not None else None,
            to_rdflib(object) if object is not None else None,
        )
        try:
            matches = sorted(self.graph.triples(pattern), key=_ntriples_key)
        except Exception as e:
            raise UnderlyingQueryError(f"query {pattern} failed: {e}") from e
        return [
            Triple(
                from_rdflib(s, self.scope),
                Resource(str(p)),
                from_rdflib(o, self.scope),
            )
            for s, p, o in matches
        ]

    def _foreign(self, term: Term | None) -> bool:
        return (
            isinstance(term, BlankNode)
            and term.scope is not None
            and term.scope != self.scope
        )

    def __len__(self) -> int:
        return len(self.graph)


def _ntriples_key(triple) -> tuple[str, ...]:
    return tuple(node.n3() for node in triple)


def parse_lexical(graph: rdflib.Graph, *args, **kwargs) -> rdflib.Graph:
    """graph.parse() with literal normalization off.

    rdflib normalizes typed literals while parsing, so "4_2"^^xsd:integer
    would come back as "42". The decoder checks lexical forms itself and
    needs them as written.
    """
    previous = rdflib.NORMALIZE_LITERALS
    rdflib.NORMALIZE_LITERALS = False
    try:
        graph.parse(*args, **kwargs)
    finally:
        rdflib.NORMALIZE_LITERALS = previous
    return graph


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

def merge_into(target: rdflib.Graph, source: rdflib.Graph) -> rdflib.Graph:
    """Add ``source``'s triples to ``target``, relabelling every blank node."""
    renamed: dict[rdflib.BNode, rdflib.BNode] = {}

    def rename(node):
        if isinstance(node, rdflib.BNode):
            if node not in renamed:
                renamed[node] = rdflib.BNode()
            return renamed[node]
        return node

    for s, p, o in source:
        target.add((rename(s), p, rename(o)))
    for prefix, namespace in source.namespaces():
        target.bind(prefix, namespace, override=False)
    return target


def merge_graphs(*graphs: rdflib.Graph) -> rdflib.Graph:
    """Combine graphs into a new one; blank nodes never collide across sources."""
    merged = rdflib.Graph()
    for g in graphs:
        merge_into(merged, g)
    return merged
