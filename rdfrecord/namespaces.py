"""Namespaces — prefixes for the vocabularies records are usually declared in.

rdflib's NamespaceManager does the actual prefix bookkeeping; this module only
supplies the default prefix table and IRI expansion/compaction helpers that
tolerate absolute IRIs and unknown namespaces.
"""

from __future__ import annotations

import rdflib
from rdflib import Namespace
from rdflib.namespace import DC, DCTERMS, FOAF, OWL, RDF, RDFS, SH, SKOS, XSD, NamespaceManager

MF = Namespace("http://www.w3.org/2001/sw/DataAccess/tests/test-manifest#")
SHT = Namespace("http://www.w3.org/ns/shacl-test#")

COMMON_PREFIXES: dict[str, Namespace] = {
    "rdf": RDF,
    "rdfs": RDFS,
    "xsd": XSD,
    "owl": OWL,
    "sh": SH,
    "dc": DC,
    "dcterms": DCTERMS,
    "foaf": FOAF,
    "skos": SKOS,
    "mf": MF,
    "sht": SHT,
}


def common_namespaces(extra: dict[str, str] | None = None) -> NamespaceManager:
    """A NamespaceManager holding COMMON_PREFIXES plus ``extra``."""
    manager = rdflib.Graph(bind_namespaces="none").namespace_manager
    for prefix, namespace in COMMON_PREFIXES.items():
        manager.bind(prefix, namespace, override=True)
    for prefix, namespace in (extra or {}).items():
        manager.bind(prefix, Namespace(namespace), override=True)
    return manager


def expand_qname(qname: str, namespaces: NamespaceManager | None = None) -> str:
    """Expand ``prefix:local``. Absolute IRIs and plain names pass through.

    Raises ValueError for an unknown prefix.
    """
    if "://" in qname or ":" not in qname:
        return qname
    manager = namespaces or common_namespaces()
    return str(manager.expand_curie(qname))


def compact_uri(uri: str, namespaces: NamespaceManager | None = None) -> str:
    """Compact ``uri`` to ``prefix:local`` when a bound namespace covers it."""
    manager = namespaces or common_namespaces()
    best: tuple[str, str] | None = None
    for prefix, namespace in manager.namespaces():
        base = str(namespace)
        if not prefix or not uri.startswith(base) or len(uri) == len(base):
            continue
        if best is None or len(base) > len(best[1]):
            best = (prefix, base)
    if best is None:
        return uri
    prefix, base = best
    return f"{prefix}:{uri[len(base):]}"
