"""Decoder — hydrates annotated records from a triple graph.

Given a subject and a record type, the decoder:

  1. fetches every triple about the subject;
  2. hands all their objects to the record if it implements
     decode_rdf_values(), and stops there;
  3. otherwise fills the identity field with the subject id and, when the
     identity declares an rdf:type, checks it (MissingType / WrongType);
  4. decodes every mapped field from the objects of its predicate:
       scalar      first object, literal only, parsed from its lexical form
       reference   first object, kept as a term
       nested      first object, decoded recursively as a record
       repeated    RDF List, RDF Container, or every object (sequences.py)
       map         first object's own triples, keyed by predicate local name
       localized   language-tagged literals (localized.py)
     A field with no matching triple keeps its default;
  5. in strict mode, fails with UnknownPredicates listing every predicate of
     the subject that no field maps.

Any error aborts the whole decode; decode() never returns a partial record.
Nested decodes are guarded against reference cycles unless
DecodeOptions.detect_cycles is turned off.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar

from .errors import (
    CyclicReferenceError,
    DecodeError,
    MissingType,
    MissingValue,
    TypeMismatch,
    UnknownPredicates,
    WrongType,
)
from .graph import Graph
from .localized import LocalizedText, decode_multi, decode_single
from .schema import (
    FieldKind,
    FieldRule,
    IdentityRule,
    RawValuesDecodable,
    RecordSchema,
    ValueSpec,
    implements_raw_values,
    schema_for,
    zero_value,
)
from .sequences import decode_repeated
from .terms import (
    RDF_TYPE,
    Literal,
    Node,
    Resource,
    Term,
    Triple,
    local_name,
    subject_id,
    subject_term,
)
from .values import from_lexical

logger = logging.getLogger(__name__)

R = TypeVar("R")

_TYPE = Resource(RDF_TYPE)


@dataclass(frozen=True)
class DecodeOptions:
    """Decoder configuration.

    strict:        fail on predicates that no field of the record maps
    detect_cycles: raise CyclicReferenceError when a nested decode re-enters
                   a (subject, record type) pair already being decoded
    """
    strict: bool = False
    detect_cycles: bool = True


class Decoder:
    """Decodes records from one graph. Holds no state between calls."""

    def __init__(self, graph: Graph, options: DecodeOptions | None = None):
        self.graph = graph
        self.options = options or DecodeOptions()

    # -----------------------------------------------------------------------
    # Records
    # -----------------------------------------------------------------------

    def decode(self, subject: str | Node, record_type: type[R]) -> R:
        """Decode ``subject`` into a new instance of ``record_type``."""
        return _Session(self.graph, self.options).decode_record(subject_term(subject), record_type)

    def decode_into(self, subject: str | Node, target: R) -> R:
        """Decode ``subject`` into an existing record instance.

        Fields without a matching triple are left as they are. Nothing is
        assigned unless every field decodes.
        """
        node = subject_term(subject)
        session = _Session(self.graph, self.options)
        if isinstance(target, RawValuesDecodable):
            target.decode_rdf_values(session.raw_values(node))
            return target
        values = session.field_values(node, schema_for(type(target)))
        for name, value in values.items():
            setattr(target, name, value)
        return target

    def decode_all(self, rdf_type: str, record_type: type[R]) -> list[R]:
        """Decode every subject typed ``rdf_type``, in graph order."""
        subjects: list[Node] = []
        for triple in self.graph.query(None, _TYPE, Resource(str(rdf_type))):
            if triple.subject not in subjects:
                subjects.append(triple.subject)
        return [self.decode(s, record_type) for s in subjects]

    # -----------------------------------------------------------------------
    # Single values
    # -----------------------------------------------------------------------

    def values(self, subject: str | Node, predicate: str) -> list[Term]:
        triples = self.graph.query(subject_term(subject), Resource(str(predicate)), None)
        return [t.object for t in triples]

    def value(self, subject: str | Node, predicate: str) -> Term:
        values = self.values(subject, predicate)
        if not values:
            raise MissingValue(str(subject), str(predicate))
        return values[0]

    def get_string(self, subject: str | Node, predicate: str) -> str:
        return self.value(subject, predicate).raw_value()

    def get_int(self, subject: str | Node, predicate: str) -> int:
        return from_lexical(self.get_string(subject, predicate), int)

    def get_float(self, subject: str | Node, predicate: str) -> float:
        return from_lexical(self.get_string(subject, predicate), float)

    def get_bool(self, subject: str | Node, predicate: str) -> bool:
        return from_lexical(self.get_string(subject, predicate), bool)

    def get_localized_text(self, subject: str | Node, predicate: str) -> LocalizedText:
        return decode_multi(self.values(subject, predicate))


def decode(graph: Graph, subject: str | Node, record_type: type[R], *, strict: bool = False) -> R:
    """Decode one record with a throwaway Decoder."""
    return Decoder(graph, DecodeOptions(strict=strict)).decode(subject, record_type)


# ---------------------------------------------------------------------------
# One decode call
# ---------------------------------------------------------------------------

class _Session:
    """State of a single top-level decode: the records currently in progress."""

    def __init__(self, graph: Graph, options: DecodeOptions):
        self.graph = graph
        self.options = options
        self.active: set[tuple[str, type]] = set()

    def raw_values(self, node: Node) -> list[Term]:
        return [t.object for t in self.graph.query(node, None, None)]

    def decode_record(self, node: Node, record_type: type[R]) -> R:
        if implements_raw_values(record_type):
            record = record_type()
            record.decode_rdf_values(self.raw_values(node))
            return record

        schema = schema_for(record_type)
        values = self.field_values(node, schema)
        for rule in schema.fields:
            if rule.name not in values and not rule.has_default:
                values[rule.name] = zero_value(rule.spec)
        return record_type(**values)

    def field_values(self, node: Node, schema: RecordSchema) -> dict[str, Any]:
        """Decoded values of the identity and every matched field."""
        subject = subject_id(node)
        key = (subject, schema.record_type)
        if self.options.detect_cycles:
            if key in self.active:
                logger.debug("Cycle: %s re-entered as %s", subject, schema.record_type.__name__)
                raise CyclicReferenceError(subject, schema.record_type)
            self.active.add(key)
        try:
            return self._field_values(node, subject, schema)
        finally:
            self.active.discard(key)

    def _field_values(self, node: Node, subject: str, schema: RecordSchema) -> dict[str, Any]:
        values: dict[str, Any] = {}
        try:
            triples = self.graph.query(node, None, None)
            logger.debug(
                "Decoding %s as %s (%d triples)", subject, schema.record_type.__name__, len(triples)
            )
            if schema.identity is not None:
                values[schema.identity.name] = self._identity(node, subject, schema.identity, triples)
        except DecodeError as e:
            e.annotate(subject)
            raise

        for rule in schema.fields:
            objects = [t.object for t in triples if t.predicate.uri == rule.predicate]
            if not objects:
                continue
            try:
                values[rule.name] = self._decode_field(rule, objects)
            except DecodeError as e:
                e.annotate(subject, rule.name)
                raise

        if self.options.strict:
            try:
                self._check_unknown_predicates(subject, schema, triples)
            except DecodeError as e:
                e.annotate(subject)
                raise
        return values

    # -----------------------------------------------------------------------
    # Identity and type assertion
    # -----------------------------------------------------------------------

    def _identity(self, node: Node, subject: str, rule: IdentityRule, triples: list[Triple]) -> Any:
        if rule.rdf_type is not None:
            self._check_type(subject, rule.rdf_type, triples)
        if rule.as_string:
            return subject
        if not isinstance(node, rule.term_types):
            raise TypeMismatch(f"identity {rule.name} cannot hold {node}")
        return node

    def _check_type(self, subject: str, expected: str, triples: list[Triple]) -> None:
        types = [t.object for t in triples if t.predicate.uri == RDF_TYPE]
        if not types:
            raise MissingType(subject, expected)
        for t in types:
            if isinstance(t, Resource) and t.uri == expected:
                return
        raise WrongType(subject, expected, [t.raw_value() for t in types])

    def _check_unknown_predicates(self, subject: str, schema: RecordSchema, triples: list[Triple]) -> None:
        known = set(schema.predicates)
        if schema.identity is not None and schema.identity.rdf_type is not None:
            known.add(RDF_TYPE)
        unknown: list[str] = []
        for t in triples:
            if t.predicate.uri not in known and t.predicate.uri not in unknown:
                unknown.append(t.predicate.uri)
        if unknown:
            raise UnknownPredicates(subject, unknown)

    # -----------------------------------------------------------------------
    # Fields
    # -----------------------------------------------------------------------

    def _decode_field(self, rule: FieldRule, objects: list[Term]) -> Any:
        spec = rule.spec
        match spec.kind:
            case FieldKind.REPEATED:
                return decode_repeated(self.graph, objects, spec, self.decode_value)
            case FieldKind.LOCALIZED_MULTI:
                text = decode_multi(objects)
                return dict(text) if spec.plain else text
            case FieldKind.LOCALIZED_SINGLE:
                string = decode_single(objects, rule.name)
                return string.value if spec.plain else string
        return self.decode_value(objects[0], spec)

    def decode_value(self, term: Term, spec: ValueSpec) -> Any:
        """Decode one object according to ``spec``; used for fields and list items."""
        match spec.kind:
            case FieldKind.SCALAR:
                if not isinstance(term, Literal):
                    raise TypeMismatch(f"cannot decode {term} into a {spec.describe()} field")
                return from_lexical(term.value, spec.target)

            case FieldKind.REFERENCE:
                if not isinstance(term, spec.target):
                    raise TypeMismatch(f"cannot decode {term} into a {spec.describe()} field")
                return term

            case FieldKind.NESTED:
                if isinstance(term, Literal):
                    raise TypeMismatch(f"cannot decode literal {term} into record {spec.describe()}")
                return self.decode_record(term, spec.target)

            case FieldKind.REPEATED:
                return decode_repeated(self.graph, [term], spec, self.decode_value)

            case FieldKind.MAP:
                if isinstance(term, Literal):
                    raise TypeMismatch(f"cannot decode literal {term} into a map field")
                return {
                    local_name(t.predicate.uri): t.object.raw_value()
                    for t in self.graph.query(term, None, None)
                }

            case FieldKind.LOCALIZED_SINGLE:
                string = decode_single([term], spec.describe())
                return string.value if spec.plain else string

            case FieldKind.LOCALIZED_MULTI:
                text = decode_multi([term])
                return dict(text) if spec.plain else text

        raise TypeMismatch(f"no decoder for {spec.kind.value} values")
