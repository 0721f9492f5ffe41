"""Decode errors.

Every failure aborts the enclosing decode. As an error propagates out of
nested decodes, each level records the subject it was decoding and the field
that led there. A failure that belongs to no field (rdf:type, strict mode,
the graph query) records just its subject, so the path ends where the
decode failed:

    _:b1 does not have expected rdf:type <http://www.w3.org/ns/shacl#ValidationResult> (found: ...)
      at http://example.org/manifest .entries
      at _:b0 .result
      at _:b1

The only soft outcomes (no error) are a field with no matching triple and a
non-literal object under a multi-locale field.
"""

from __future__ import annotations

from collections.abc import Sequence


class DecodeError(Exception):
    """Base class for every error raised while decoding a record."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.path: list[tuple[str, str | None]] = []

    def annotate(self, subject: str, field: str | None = None) -> DecodeError:
        """Record one decode level; outermost levels are appended last."""
        self.path.append((subject, field))
        return self

    def decode_path(self) -> list[tuple[str, str | None]]:
        """The decode path from the root subject down to the failure."""
        return list(reversed(self.path))

    def __str__(self) -> str:
        if not self.path:
            return self.message
        lines = [self.message]
        for subject, field in self.decode_path():
            lines.append(f"  at {subject}" + (f" .{field}" if field else ""))
        return "\n".join(lines)


class MissingType(DecodeError):
    """The subject has no rdf:type triple but the record asserts one."""

    def __init__(self, subject: str, expected: str) -> None:
        super().__init__(f"{subject} has no rdf:type, expected <{expected}>")
        self.subject = subject
        self.expected = expected


class WrongType(DecodeError):
    """The subject has rdf:type triples, none of them the asserted type."""

    def __init__(self, subject: str, expected: str, found_types: Sequence[str]) -> None:
        found = ", ".join(found_types)
        super().__init__(
            f"{subject} does not have expected rdf:type <{expected}> (found: {found})"
        )
        self.subject = subject
        self.expected = expected
        self.found_types = list(found_types)


class ConversionError(DecodeError, ValueError):
    """A literal's lexical form does not parse as the field's scalar type."""

    def __init__(self, lexical: str, target_kind: str) -> None:
        super().__init__(f"cannot convert {lexical!r} to {target_kind}")
        self.lexical = lexical
        self.target_kind = target_kind


class TypeMismatch(DecodeError):
    """A term of the wrong kind was found for a field (e.g. IRI into str)."""

    def __init__(self, context: str) -> None:
        super().__init__(f"type mismatch: {context}")
        self.context = context


class MalformedList(DecodeError):
    """A list node is not a well-formed rdf:first/rdf:rest cell."""

    def __init__(self, node: str, reason: str) -> None:
        super().__init__(f"invalid RDF list at {node}: {reason}")
        self.node = node
        self.reason = reason


class UnsupportedFieldKind(DecodeError, TypeError):
    """A field annotation the decoder has no decode kind for."""

    def __init__(self, kind: str, context: str = "") -> None:
        suffix = f" ({context})" if context else ""
        super().__init__(f"unsupported field kind: {kind}{suffix}")
        self.kind = kind


class UnknownPredicates(DecodeError):
    """Strict mode: the subject carries predicates the record does not map."""

    def __init__(self, subject: str, predicates: Sequence[str]) -> None:
        listed = ", ".join(f"<{p}>" for p in predicates)
        super().__init__(f"unknown predicates for subject {subject}: {listed}")
        self.subject = subject
        self.predicates = list(predicates)


class CyclicReferenceError(DecodeError):
    """A nested decode re-entered a (subject, record type) still in progress."""

    def __init__(self, subject: str, record_type: type) -> None:
        super().__init__(
            f"cyclic reference: {subject} is already being decoded "
            f"as {record_type.__name__}"
        )
        self.subject = subject
        self.record_type = record_type


class MissingValue(DecodeError, LookupError):
    """A single-value getter found no triple for (subject, predicate)."""

    def __init__(self, subject: str, predicate: str) -> None:
        super().__init__(f"no value found for {subject} <{predicate}>")
        self.subject = subject
        self.predicate = predicate


class UnderlyingQueryError(DecodeError):
    """The graph collaborator failed to answer a query."""
