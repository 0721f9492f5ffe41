"""SHACL test-suite records — shapes, manifests and validation reports.

Case Study: the W3C SHACL test suite describes every test in Turtle. A
manifest lists its entries as an RDF List; each entry names a data graph and
a shapes graph and embeds the expected sh:ValidationReport. Shapes and
reports use language-tagged labels, RDF Lists (sh:ignoredProperties) and
multi-valued predicates (sh:property, sh:result).

None of these classes contain decoding logic. They are plain dataclasses
annotated with the predicates they are read from; rdfrecord does the rest.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from dataclasses import dataclass

from rdflib.namespace import RDF, RDFS, SH

from rdfrecord.localized import LocalizedString, LocalizedText
from rdfrecord.namespaces import MF, SHT
from rdfrecord.schema import rdf_field, rdf_id
from rdfrecord.terms import Node, Resource, Term


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

@dataclass
class PropertyShape:
    """sh:PropertyShape — constraints on the values reached by sh:path.

    Property shapes reached through sh:property are often untyped blank
    nodes, so the identity carries no rdf:type assertion.
    """
    id: Node | None = rdf_id(default=None)
    path: Term | None = rdf_field(SH.path, default=None)
    name: LocalizedText = rdf_field(SH.name, default_factory=LocalizedText)
    min_count: int | None = rdf_field(SH.minCount, default=None)
    max_count: int | None = rdf_field(SH.maxCount, default=None)
    datatype: Resource | None = rdf_field(SH.datatype, default=None)
    severity: Resource | None = rdf_field(SH.severity, default=None)
    message: LocalizedString | None = rdf_field(SH.message, default=None)
    deactivated: bool = rdf_field(SH.deactivated, default=False)


@dataclass
class NodeShape:
    """sh:NodeShape — targets plus the property shapes applied to them."""
    id: str = rdf_id(rdf_type=SH.NodeShape, default="")
    label: LocalizedText = rdf_field(RDFS.label, default_factory=LocalizedText)
    target_class: list[Resource] = rdf_field(SH.targetClass, default_factory=list)
    target_node: list[Term] = rdf_field(SH.targetNode, default_factory=list)
    target_subjects_of: list[Resource] = rdf_field(SH.targetSubjectsOf, default_factory=list)
    target_objects_of: list[Resource] = rdf_field(SH.targetObjectsOf, default_factory=list)
    properties: list[PropertyShape] = rdf_field(SH.property, default_factory=list)
    closed: bool = rdf_field(SH.closed, default=False)
    ignored_properties: list[Resource] = rdf_field(SH.ignoredProperties, default_factory=list)
    severity: Resource | None = rdf_field(SH.severity, default=None)
    message: LocalizedString | None = rdf_field(SH.message, default=None)
    deactivated: bool = rdf_field(SH.deactivated, default=False)


# ---------------------------------------------------------------------------
# Validation reports
# ---------------------------------------------------------------------------

@dataclass
class ValidationResult:
    id: Node | None = rdf_id(rdf_type=SH.ValidationResult, default=None)
    focus_node: Term | None = rdf_field(SH.focusNode, default=None)
    result_path: Term | None = rdf_field(SH.resultPath, default=None)
    severity: Resource | None = rdf_field(SH.resultSeverity, default=None)
    source_constraint_component: Resource | None = rdf_field(
        SH.sourceConstraintComponent, default=None
    )
    source_shape: Term | None = rdf_field(SH.sourceShape, default=None)
    value: Term | None = rdf_field(SH.value, default=None)
    message: LocalizedText = rdf_field(SH.resultMessage, default_factory=LocalizedText)


@dataclass
class ValidationReport:
    id: Node | None = rdf_id(rdf_type=SH.ValidationReport, default=None)
    conforms: bool = rdf_field(SH.conforms, default=False)
    results: list[ValidationResult] = rdf_field(SH.result, default_factory=list)


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------

@dataclass
class Action:
    """mf:action of a validation test: which graphs to validate."""
    id: str = rdf_id(default="")
    data_graph: Resource | None = rdf_field(SHT.dataGraph, default=None)
    shapes_graph: Resource | None = rdf_field(SHT.shapesGraph, default=None)


@dataclass
class ValidationTest:
    id: str = rdf_id(default="")
    type: Resource | None = rdf_field(RDF.type, default=None)
    label: str = rdf_field(RDFS.label, default="")
    status: Resource | None = rdf_field(MF.status, default=None)
    action: Action | None = rdf_field(MF.action, default=None)
    result: ValidationReport | None = rdf_field(MF.result, default=None)


@dataclass
class Manifest:
    id: str = rdf_id(rdf_type=MF.Manifest, default="")
    label: LocalizedText = rdf_field(RDFS.label, default_factory=LocalizedText)
    includes: list[Resource] = rdf_field(MF.include, default_factory=list)
    entries: list[ValidationTest] = rdf_field(MF.entries, default_factory=list)
