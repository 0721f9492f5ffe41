"""Schema introspection — from annotated dataclasses to decode rules.

A record is a plain dataclass whose fields carry RDF metadata:

    @dataclass
    class Person:
        id: str = rdf_id(rdf_type=FOAF.Person)
        name: str = rdf_field(FOAF.name)
        age: int = rdf_field(FOAF.age)
        knows: list[Resource] = rdf_field(FOAF.knows)
        label: LocalizedText = rdf_field(RDFS.label)

schema_for() turns the class into a RecordSchema: the identity rule (with
its optional rdf:type assertion) and an ordered tuple of FieldRules, one per
mapped predicate. The decode kind of each field comes from its annotation:

  str / int / float / bool / datetime / date   SCALAR
  Resource / BlankNode / Literal / Term        REFERENCE
  another record type                          NESTED
  list[X]                                      REPEATED (X analysed recursively)
  dict[str, str]                               MAP
  LocalizedString                              LOCALIZED_SINGLE
  LocalizedText                                LOCALIZED_MULTI

``X | None`` is unwrapped. ``localized=True`` additionally turns ``str`` into
a single-locale field and ``dict[str, str]`` into a multi-locale field.

Building a schema never touches a graph, and the result is cached per type.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

from .errors import UnsupportedFieldKind
from .localized import LocalizedString, LocalizedText
from .terms import BlankNode, Literal, Resource, Term


ID_MARKER = "@id"

_PREDICATE_KEY = "rdf"
_LOCALIZED_KEY = "rdf_localized"
_TYPE_KEY = "rdf_type"

SCALAR_TYPES = (str, int, float, bool, datetime, date)
TERM_TYPES = (Resource, BlankNode, Literal)


# ---------------------------------------------------------------------------
# Raw-values hook
# ---------------------------------------------------------------------------

@runtime_checkable
class RawValuesDecodable(Protocol):
    """A record that decodes itself from the objects of its subject's triples.

    When a target implements this, the decoder skips all field-driven logic:
    it collects the object of every triple about the subject and hands them
    over. Types used with Decoder.decode() must be constructible without
    arguments.
    """

    def decode_rdf_values(self, values: list[Term]) -> None:
        ...


def implements_raw_values(record_type: type) -> bool:
    return callable(getattr(record_type, "decode_rdf_values", None))


# ---------------------------------------------------------------------------
# Field annotations
# ---------------------------------------------------------------------------

def rdf_field(
    predicate: str,
    *,
    localized: bool = False,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field decoded from ``predicate``."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[_PREDICATE_KEY] = _iri(predicate, "predicate")
    metadata[_LOCALIZED_KEY] = localized
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=metadata, **kwargs
    )


def rdf_id(
    rdf_type: str | None = None,
    *,
    default: Any = dataclasses.MISSING,
    **kwargs: Any,
) -> Any:
    """Declare the identity field, optionally asserting the subject's rdf:type."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[_PREDICATE_KEY] = ID_MARKER
    metadata[_TYPE_KEY] = _iri(rdf_type, "rdf_type") if rdf_type is not None else None
    return dataclasses.field(default=default, metadata=metadata, **kwargs)


def _iri(value: Any, role: str) -> str:
    """An IRI given as a str or URIRef. Anything else, such as a Namespace
    attribute that resolved to a str method, is rejected."""
    if not isinstance(value, str):
        raise UnsupportedFieldKind(
            type(value).__name__, f"{role} must be an IRI string, got {value!r}"
        )
    return str(value)


# ---------------------------------------------------------------------------
# Schema types
# ---------------------------------------------------------------------------

class FieldKind(Enum):
    SCALAR = "scalar"
    REFERENCE = "reference"
    NESTED = "nested"
    REPEATED = "repeated"
    MAP = "map"
    LOCALIZED_SINGLE = "localized-single"
    LOCALIZED_MULTI = "localized-multi"


@dataclass(frozen=True)
class ValueSpec:
    """How one value is decoded.

    ``target`` is the scalar type, the record type, or the tuple of accepted
    term classes, depending on ``kind``. ``element`` describes list items.
    ``plain`` marks localized fields declared as str / dict[str, str].
    """
    kind: FieldKind
    target: Any = None
    element: ValueSpec | None = None
    optional: bool = False
    plain: bool = False

    def describe(self) -> str:
        if self.kind is FieldKind.REPEATED and self.element is not None:
            return f"list[{self.element.describe()}]"
        if isinstance(self.target, tuple):
            return " | ".join(t.__name__ for t in self.target)
        if isinstance(self.target, type):
            return self.target.__name__
        return self.kind.value


@dataclass(frozen=True)
class FieldRule:
    name: str
    predicate: str
    spec: ValueSpec
    has_default: bool = False


@dataclass(frozen=True)
class IdentityRule:
    name: str
    rdf_type: str | None = None
    as_string: bool = True
    term_types: tuple[type, ...] = ()


@dataclass(frozen=True)
class RecordSchema:
    record_type: type
    identity: IdentityRule | None
    fields: tuple[FieldRule, ...]

    @property
    def predicates(self) -> frozenset[str]:
        return frozenset(rule.predicate for rule in self.fields)

    def rule_for(self, predicate: str) -> FieldRule | None:
        for rule in self.fields:
            if rule.predicate == predicate:
                return rule
        return None


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------

@lru_cache(maxsize=None)
def schema_for(record_type: type) -> RecordSchema:
    """Build (once) the decode schema of a dataclass record type."""
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise UnsupportedFieldKind(
            getattr(record_type, "__name__", repr(record_type)),
            "records must be dataclasses or implement decode_rdf_values",
        )

    hints = typing.get_type_hints(record_type)
    identity: IdentityRule | None = None
    rules: list[FieldRule] = []

    for f in dataclasses.fields(record_type):
        predicate = f.metadata.get(_PREDICATE_KEY)
        if predicate is None:
            continue
        annotation = hints.get(f.name, f.type)
        context = f"{record_type.__name__}.{f.name}"
        has_default = (
            f.default is not dataclasses.MISSING
            or f.default_factory is not dataclasses.MISSING
        )

        if predicate == ID_MARKER:
            if identity is not None:
                raise UnsupportedFieldKind("@id", f"{context}: a record has one identity field")
            identity = _identity_rule(f.name, annotation, f.metadata.get(_TYPE_KEY), context)
            continue

        localized = bool(f.metadata.get(_LOCALIZED_KEY, False))
        spec = value_spec(annotation, localized=localized, context=context)
        rules.append(FieldRule(
            name=f.name,
            predicate=predicate,
            spec=spec,
            has_default=has_default,
        ))

    return RecordSchema(record_type=record_type, identity=identity, fields=tuple(rules))


def value_spec(annotation: Any, localized: bool = False, context: str = "") -> ValueSpec:
    """Derive the ValueSpec for a field annotation."""
    inner, optional = _unwrap_optional(annotation)
    spec = _value_spec(inner, localized, context)
    if optional:
        spec = dataclasses.replace(spec, optional=True)
    return spec


def _value_spec(annotation: Any, localized: bool, context: str) -> ValueSpec:
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin in (typing.Union, types.UnionType):
        if all(arg in TERM_TYPES for arg in args):
            return ValueSpec(FieldKind.REFERENCE, tuple(args))
        raise UnsupportedFieldKind(_name(annotation), context)

    if annotation is LocalizedString:
        return ValueSpec(FieldKind.LOCALIZED_SINGLE, LocalizedString)
    if annotation is LocalizedText:
        return ValueSpec(FieldKind.LOCALIZED_MULTI, LocalizedText)

    if localized:
        if annotation is str:
            return ValueSpec(FieldKind.LOCALIZED_SINGLE, str, plain=True)
        if origin is dict and args == (str, str):
            return ValueSpec(FieldKind.LOCALIZED_MULTI, dict, plain=True)
        raise UnsupportedFieldKind(_name(annotation), f"{context}: cannot be localized")

    if annotation in TERM_TYPES:
        return ValueSpec(FieldKind.REFERENCE, (annotation,))
    if annotation in SCALAR_TYPES:
        return ValueSpec(FieldKind.SCALAR, annotation)

    if origin is list:
        if len(args) != 1:
            raise UnsupportedFieldKind(_name(annotation), f"{context}: list needs an element type")
        return ValueSpec(FieldKind.REPEATED, list, element=value_spec(args[0], context=context))

    if origin is dict:
        if args == (str, str):
            return ValueSpec(FieldKind.MAP, dict)
        raise UnsupportedFieldKind(_name(annotation), f"{context}: only dict[str, str] is supported")

    if isinstance(annotation, type) and (
        dataclasses.is_dataclass(annotation) or implements_raw_values(annotation)
    ):
        return ValueSpec(FieldKind.NESTED, annotation)

    raise UnsupportedFieldKind(_name(annotation), context)


def _identity_rule(
    name: str,
    annotation: Any,
    rdf_type: str | None,
    context: str,
) -> IdentityRule:
    inner, _ = _unwrap_optional(annotation)
    if inner is str:
        return IdentityRule(name, rdf_type, as_string=True)

    if inner in TERM_TYPES:
        term_types: tuple[type, ...] = (inner,)
    elif typing.get_origin(inner) in (typing.Union, types.UnionType):
        term_types = typing.get_args(inner)
    else:
        term_types = ()
    if not term_types or Literal in term_types or not all(t in TERM_TYPES for t in term_types):
        raise UnsupportedFieldKind(_name(annotation), f"{context}: identity must be str or a node type")
    return IdentityRule(name, rdf_type, as_string=False, term_types=term_types)


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    if typing.get_origin(annotation) not in (typing.Union, types.UnionType):
        return annotation, False
    args = typing.get_args(annotation)
    if type(None) not in args:
        return annotation, False
    rest = tuple(arg for arg in args if arg is not type(None))
    if len(rest) == 1:
        return rest[0], True
    return typing.Union[rest], True


def _name(annotation: Any) -> str:
    return getattr(annotation, "__name__", None) or repr(annotation)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

_SCALAR_ZERO = {str: "", int: 0, float: 0.0, bool: False}


def zero_value(spec: ValueSpec) -> Any:
    """The value a field takes when no triple matches and it has no default."""
    if spec.optional:
        return None
    match spec.kind:
        case FieldKind.SCALAR:
            return _SCALAR_ZERO.get(spec.target)
        case FieldKind.REPEATED:
            return []
        case FieldKind.MAP:
            return {}
        case FieldKind.LOCALIZED_MULTI:
            return {} if spec.plain else LocalizedText()
        case FieldKind.LOCALIZED_SINGLE:
            return "" if spec.plain else None
    return None
