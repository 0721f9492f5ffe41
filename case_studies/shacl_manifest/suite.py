"""SHACL test suite — loading manifests and running their entries.

Loading follows mf:include from the root manifest. Every file is parsed on
its own and merged into one graph with fresh blank-node labels, so the
anonymous action and report nodes of different files never collide.

Running a test validates the entry's data graph against its shapes graph
with pySHACL, decodes the report pySHACL produced into the same
ValidationReport record the expected result was decoded into, and compares
the two. Blank nodes only match other blank nodes: their labels are local to
the graph they came from.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

import rdflib
from rdflib.namespace import SH

from rdfrecord.decoder import DecodeOptions, Decoder
from rdfrecord.graph import RdflibGraph
from rdfrecord.namespaces import MF
from rdfrecord.terms import BlankNode, Term

from .records import Manifest, NodeShape, ValidationReport, ValidationResult, ValidationTest


BASE = "http://example.org/shacl/"
DATA_DIR = Path(__file__).parent / "data"


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

def _comparable(term: Term | None) -> str:
    if term is None:
        return ""
    if isinstance(term, BlankNode):
        return "_:"
    return str(term)


def result_key(result: ValidationResult) -> tuple[str, ...]:
    """The parts of a validation result that two reports must agree on."""
    return (
        _comparable(result.focus_node),
        _comparable(result.result_path),
        _comparable(result.severity),
        _comparable(result.source_constraint_component),
        _comparable(result.source_shape),
    )


@dataclass
class EntryOutcome:
    """Expected vs. actual report for one manifest entry."""
    test: ValidationTest
    expected: ValidationReport
    actual: ValidationReport
    missing: list[tuple[str, ...]] = field(default_factory=list)
    unexpected: list[tuple[str, ...]] = field(default_factory=list)

    def __post_init__(self) -> None:
        expected = Counter(result_key(r) for r in self.expected.results)
        actual = Counter(result_key(r) for r in self.actual.results)
        self.missing = list((expected - actual).elements())
        self.unexpected = list((actual - expected).elements())

    @property
    def passed(self) -> bool:
        return (
            self.expected.conforms == self.actual.conforms
            and not self.missing
            and not self.unexpected
        )

    def summary(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        lines = [
            f"{status}: {self.test.label or self.test.id}",
            f"  conforms: expected {self.expected.conforms}, got {self.actual.conforms}",
            f"  results:  expected {len(self.expected.results)}, got {len(self.actual.results)}",
        ]
        for key in self.missing:
            lines.append(f"  missing:    {' | '.join(key)}")
        for key in self.unexpected:
            lines.append(f"  unexpected: {' | '.join(key)}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Suite
# ---------------------------------------------------------------------------

class ShaclTestSuite:
    """A root manifest and every manifest it includes, in one graph."""

    def __init__(self, directory: Path = DATA_DIR, base: str = BASE):
        self.directory = Path(directory)
        self.base = base
        self.graph = RdflibGraph()
        self.loaded: list[str] = []

    def file_for(self, iri: str) -> Path:
        """Map a test-suite IRI to its file; fragments name nodes inside a file."""
        if not iri.startswith(self.base):
            raise ValueError(f"{iri} is outside the suite base {self.base}")
        relative = iri[len(self.base):].split("#", 1)[0]
        return self.directory / relative

    def load(self, iri: str) -> None:
        """Load ``iri`` and, transitively, every mf:include it declares."""
        if iri in self.loaded:
            return
        self.graph.load(str(self.file_for(iri)), base=iri)
        self.loaded.append(iri)

        manifest = Decoder(self.graph).decode(iri, Manifest)
        for include in manifest.includes:
            self.load(include.uri)

    def manifests(self) -> list[Manifest]:
        return Decoder(self.graph, DecodeOptions(strict=True)).decode_all(MF.Manifest, Manifest)

    def tests(self) -> list[ValidationTest]:
        return [test for manifest in self.manifests() for test in manifest.entries]

    def shapes(self) -> list[NodeShape]:
        return Decoder(self.graph).decode_all(SH.NodeShape, NodeShape)

    def graph_for(self, iri: str) -> rdflib.Graph:
        g = rdflib.Graph()
        g.parse(str(self.file_for(iri)), format="turtle", publicID=iri.split("#", 1)[0])
        return g

    def run(self, test: ValidationTest) -> EntryOutcome:
        """Validate the entry's data graph with pySHACL and compare reports."""
        from pyshacl import validate as pyshacl_validate

        if test.action is None or test.action.data_graph is None or test.result is None:
            raise ValueError(f"{test.id} is not a validation test")
        shapes_iri = test.action.shapes_graph or test.action.data_graph

        conforms, results_graph, _ = pyshacl_validate(
            self.graph_for(test.action.data_graph.uri),
            shacl_graph=self.graph_for(shapes_iri.uri),
            inference="none",
            abort_on_first=False,
        )
        reports = Decoder(RdflibGraph(results_graph)).decode_all(SH.ValidationReport, ValidationReport)
        actual = reports[0] if reports else ValidationReport(conforms=conforms)
        return EntryOutcome(test=test, expected=test.result, actual=actual)


def load_suite(root: str = BASE + "manifest.ttl", directory: Path = DATA_DIR) -> ShaclTestSuite:
    suite = ShaclTestSuite(directory)
    suite.load(root)
    return suite
