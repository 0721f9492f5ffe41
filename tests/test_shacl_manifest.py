"""Tests for the SHACL test-suite case study.

Decodes manifests, shapes and reports from the bundled Turtle files, and runs
every test entry through pySHACL end to end.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from rdflib.namespace import RDF, SH

from rdfrecord.decoder import DecodeOptions, Decoder
from rdfrecord.errors import UnknownPredicates, WrongType
from rdfrecord.namespaces import SHT
from rdfrecord.terms import BlankNode, Resource

from case_studies.shacl_manifest.records import Manifest, PropertyShape, ValidationReport, ValidationResult
from case_studies.shacl_manifest.suite import BASE, EntryOutcome, load_suite, result_key


MIN_COUNT = "http://example.org/shacl/minCount-001.test#"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def suite():
    return load_suite()


def _by_id(records):
    return {r.id: r for r in records}


def _result(focus: str) -> ValidationResult:
    return ValidationResult(
        focus_node=Resource(MIN_COUNT + focus),
        result_path=Resource(MIN_COUNT + "name"),
        severity=Resource(str(SH.Violation)),
        source_constraint_component=Resource(str(SH.MinCountConstraintComponent)),
        source_shape=Resource(MIN_COUNT + "PersonShape-name"),
    )


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------

class TestManifests:
    def test_includes_are_followed(self, suite):
        assert suite.loaded == [
            BASE + "manifest.ttl",
            BASE + "datatype-001.ttl",
            BASE + "minCount-001.ttl",
        ]

    def test_root_manifest(self, suite):
        root = _by_id(suite.manifests())[BASE + "manifest.ttl"]
        assert root.label == {"en": "Core constraint tests", "fr": "Tests des contraintes de base"}
        assert [i.uri for i in root.includes] == [BASE + "datatype-001.ttl", BASE + "minCount-001.ttl"]
        assert root.entries == []

    def test_entries(self, suite):
        tests = _by_id(suite.tests())
        assert set(tests) == {BASE + "minCount-001", BASE + "datatype-001"}

        test = tests[BASE + "minCount-001"]
        assert test.type == Resource(str(SHT.Validate))
        assert test.status == Resource(str(SHT.approved))
        assert test.label == "Test of sh:minCount at property shape 001"
        assert test.action.data_graph == Resource(BASE + "minCount-001.ttl")
        assert test.action.shapes_graph == Resource(BASE + "minCount-001.ttl")

    def test_expected_reports(self, suite):
        tests = _by_id(suite.tests())

        failing = tests[BASE + "minCount-001"].result
        assert failing.conforms is False
        assert isinstance(failing.id, BlankNode)
        assert [result_key(r) for r in failing.results] == [result_key(_result("Bob"))]

        passing = tests[BASE + "datatype-001"].result
        assert passing.conforms is True
        assert passing.results == []

    def test_loading_twice_is_a_no_op(self, suite):
        before = len(suite.graph)
        suite.load(BASE + "minCount-001.ttl")
        assert len(suite.graph) == before


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

class TestShapes:
    def test_closed_shape_with_ignored_list(self, suite):
        shape = _by_id(suite.shapes())[MIN_COUNT + "PersonShape"]
        assert shape.closed is True
        assert shape.ignored_properties == [Resource(str(RDF.type))]
        assert shape.target_class == [Resource(MIN_COUNT + "Person")]
        assert shape.label.get_with_fallback("fr", "en") == "Forme de personne"
        assert shape.label.get_with_fallback("de", "en") == "Person shape"

    def test_named_property_shape(self, suite):
        shape = _by_id(suite.shapes())[MIN_COUNT + "PersonShape"]
        [prop] = shape.properties
        assert prop.id == Resource(MIN_COUNT + "PersonShape-name")
        assert prop.path == Resource(MIN_COUNT + "name")
        assert prop.name == {"en": "name"}
        assert prop.min_count == 1
        assert prop.max_count is None

    def test_blank_property_shapes(self, suite):
        shape = _by_id(suite.shapes())["http://example.org/shacl/datatype-001.test#RectangleShape"]
        assert len(shape.properties) == 2
        assert all(isinstance(p.id, BlankNode) for p in shape.properties)
        assert {p.datatype.uri for p in shape.properties} == {"http://www.w3.org/2001/XMLSchema#integer"}
        assert all(p.max_count == 1 for p in shape.properties)

    def test_typed_property_shape_is_rejected_strictly(self, suite):
        with pytest.raises(UnknownPredicates) as exc_info:
            Decoder(suite.graph, DecodeOptions(strict=True)).decode(MIN_COUNT + "PersonShape-name", PropertyShape)
        assert exc_info.value.predicates == [str(RDF.type)]

    def test_shape_is_not_a_manifest(self, suite):
        with pytest.raises(WrongType):
            Decoder(suite.graph).decode(MIN_COUNT + "PersonShape", Manifest)


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

class TestEntryOutcome:
    def test_matching_reports_pass(self, suite):
        test = _by_id(suite.tests())[BASE + "minCount-001"]
        outcome = EntryOutcome(test, test.result, ValidationReport(conforms=False, results=[_result("Bob")]))
        assert outcome.passed
        assert outcome.summary().startswith("PASS")

    def test_differences_are_listed(self, suite):
        test = _by_id(suite.tests())[BASE + "minCount-001"]
        actual = ValidationReport(conforms=False, results=[_result("Alice")])
        outcome = EntryOutcome(test, test.result, actual)
        assert not outcome.passed
        assert outcome.missing == [result_key(_result("Bob"))]
        assert outcome.unexpected == [result_key(_result("Alice"))]
        assert "unexpected:" in outcome.summary()

    def test_blank_nodes_compare_by_kind(self):
        a = ValidationResult(focus_node=BlankNode("x", "g1"))
        b = ValidationResult(focus_node=BlankNode("y", "g2"))
        assert result_key(a) == result_key(b)


class TestPyshacl:
    @pytest.mark.parametrize("test_id", ["minCount-001", "datatype-001"])
    def test_suite_entry_passes(self, suite, test_id):
        test = _by_id(suite.tests())[BASE + test_id]
        outcome = suite.run(test)
        assert outcome.passed, outcome.summary()

    def test_actual_report_is_decoded(self, suite):
        test = _by_id(suite.tests())[BASE + "minCount-001"]
        outcome = suite.run(test)
        [result] = outcome.actual.results
        assert result.focus_node == Resource(MIN_COUNT + "Bob")
        assert result.source_shape == Resource(MIN_COUNT + "PersonShape-name")
