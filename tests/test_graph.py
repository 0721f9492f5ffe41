"""Tests for the rdflib graph adapter and the blank-node merge pass."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dataclasses import dataclass

import pytest
import rdflib
from rdflib import Namespace

from rdfrecord.decoder import Decoder
from rdfrecord.errors import UnderlyingQueryError
from rdfrecord.graph import Graph, RdflibGraph, merge_graphs, merge_into, parse_lexical
from rdfrecord.schema import rdf_field, rdf_id
from rdfrecord.terms import BlankNode, Literal, Resource


EX = Namespace("http://example.org/")

TURTLE = """
@prefix ex: <http://example.org/> .
ex:s ex:name "b", "a", "c" ; ex:owner _:x .
_:x ex:name "owner" .
"""


@dataclass
class Owner:
    id: str = rdf_id()
    name: str = rdf_field(EX.name, default="")


@dataclass
class Thing:
    id: str = rdf_id()
    owner: Owner | None = rdf_field(EX.owner, default=None)


def _parse(turtle: str) -> rdflib.Graph:
    g = rdflib.Graph()
    g.parse(data=turtle, format="turtle")
    return g


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------

class TestRdflibGraph:
    def test_is_a_graph(self):
        assert isinstance(RdflibGraph(), Graph)

    def test_query_patterns(self):
        g = RdflibGraph.from_turtle(TURTLE)
        assert len(g.query()) == 5
        assert len(g.query(Resource(str(EX.s)))) == 4
        assert len(g.query(None, Resource(str(EX.name)))) == 4
        assert len(g.query(None, None, Literal("a"))) == 1

    def test_results_are_sorted(self):
        g = RdflibGraph.from_turtle(TURTLE)
        names = [t.object.value for t in g.query(Resource(str(EX.s)), Resource(str(EX.name)))]
        assert names == ["a", "b", "c"]

    def test_blank_nodes_carry_scope(self):
        g = RdflibGraph.from_turtle(TURTLE, scope="one")
        owner = g.query(Resource(str(EX.s)), Resource(str(EX.owner)))[0].object
        assert isinstance(owner, BlankNode)
        assert owner.scope == "one"
        assert len(g.query(owner)) == 1

    def test_foreign_blank_node_matches_nothing(self):
        g = RdflibGraph.from_turtle(TURTLE, scope="one")
        owner = g.query(Resource(str(EX.s)), Resource(str(EX.owner)))[0].object
        foreign = BlankNode(owner.id, "two")
        assert g.query(foreign) == []

    def test_unscoped_blank_node_is_local(self):
        g = RdflibGraph.from_turtle(TURTLE)
        owner = g.query(Resource(str(EX.s)), Resource(str(EX.owner)))[0].object
        assert len(g.query(BlankNode(owner.id))) == 1

    def test_decode_through_blank_node(self):
        g = RdflibGraph.from_turtle(TURTLE)
        assert Decoder(g).decode(EX.s, Thing).owner.name == "owner"

    def test_add(self):
        g = RdflibGraph()
        g.add(Resource(str(EX.s)), Resource(str(EX.name)), Literal("x", language="en"))
        assert len(g) == 1
        assert Decoder(g).get_localized_text(EX.s, EX.name) == {"en": "x"}

    def test_store_failure_is_wrapped(self):
        class BrokenStore(rdflib.Graph):
            def triples(self, pattern):
                raise RuntimeError("disk on fire")

        g = RdflibGraph(BrokenStore())
        with pytest.raises(UnderlyingQueryError) as exc_info:
            g.query()
        assert isinstance(exc_info.value.__cause__, RuntimeError)


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

class TestMerge:
    A = '@prefix ex: <http://example.org/> . ex:a ex:owner _:b0 . _:b0 ex:name "from a" .'
    B = '@prefix ex: <http://example.org/> . ex:b ex:owner _:b0 . _:b0 ex:name "from b" .'

    def test_same_labels_do_not_collide(self):
        merged = RdflibGraph(merge_graphs(_parse(self.A), _parse(self.B)))
        decoder = Decoder(merged)
        assert decoder.decode(EX.a, Thing).owner.name == "from a"
        assert decoder.decode(EX.b, Thing).owner.name == "from b"

    def test_every_blank_node_is_renamed(self):
        source = _parse(self.A)
        target = merge_into(rdflib.Graph(), source)
        assert len(target) == len(source)
        old = {n for n in source.all_nodes() if isinstance(n, rdflib.BNode)}
        new = {n for n in target.all_nodes() if isinstance(n, rdflib.BNode)}
        assert len(new) == 1
        assert old.isdisjoint(new)

    def test_load_merges(self, tmp_path):
        path_a = tmp_path / "a.ttl"
        path_b = tmp_path / "b.ttl"
        path_a.write_text(self.A)
        path_b.write_text(self.B)

        g = RdflibGraph()
        assert g.load(str(path_a)) == 2
        assert g.load(str(path_b)) == 2
        assert len(g) == 4
        assert Decoder(g).decode(EX.b, Thing).owner.name == "from b"

    def test_load_resolves_relative_iris(self, tmp_path):
        path = tmp_path / "rel.ttl"
        path.write_text('<#me> <http://example.org/name> "me" .')
        g = RdflibGraph()
        g.load(str(path), base="http://example.org/doc")
        assert Decoder(g).get_string("http://example.org/doc#me", EX.name) == "me"


# ---------------------------------------------------------------------------
# Lexical forms
# ---------------------------------------------------------------------------

class TestLexicalForms:
    TYPED = """
    @prefix ex: <http://example.org/> .
    @prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
    ex:s ex:count "4_2"^^xsd:integer ; ex:padded "042"^^xsd:integer .
    """

    def _lexical(self, g: RdflibGraph, predicate: str) -> str:
        return g.query(Resource(str(EX.s)), Resource(str(EX[predicate])))[0].object.value

    def test_from_turtle_keeps_lexical_forms(self):
        g = RdflibGraph.from_turtle(self.TYPED)
        assert self._lexical(g, "count") == "4_2"
        assert self._lexical(g, "padded") == "042"

    def test_load_keeps_lexical_forms(self, tmp_path):
        path = tmp_path / "typed.ttl"
        path.write_text(self.TYPED)
        g = RdflibGraph()
        g.load(str(path))
        assert self._lexical(g, "padded") == "042"

    def test_query_by_unnormalized_literal(self):
        g = RdflibGraph.from_turtle(self.TYPED)
        padded = Literal("042", datatype="http://www.w3.org/2001/XMLSchema#integer")
        assert len(g.query(None, None, padded)) == 1

    def test_normalization_setting_is_restored(self):
        assert rdflib.NORMALIZE_LITERALS is True
        RdflibGraph.from_turtle(self.TYPED)
        assert rdflib.NORMALIZE_LITERALS is True
        with pytest.raises(Exception):
            parse_lexical(rdflib.Graph(), data="this is not turtle", format="turtle")
        assert rdflib.NORMALIZE_LITERALS is True
