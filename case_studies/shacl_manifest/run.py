"""SHACL Test Suite — End-to-end rdfrecord demonstration.

Case Study: a miniature copy of the W3C SHACL test suite.

Shows the decoder working on real-world RDF shapes:

  STEP 1 — Manifests
    The root manifest and every mf:include are loaded into one graph and
    decoded strictly: every predicate on a manifest, test entry, action or
    expected report must be mapped by a record field.

  STEP 2 — Shapes
    Node shapes are decoded with their labels (LocalizedText), closed-world
    settings (sh:ignoredProperties as an RDF List) and nested property shapes.

  STEP 3 — Execution
    Each test's data graph is validated with pySHACL, the report pySHACL
    produces is decoded into the same record as the expected report, and the
    two are compared.

  STEP 4 — Decode errors
    A shape decoded as the wrong record type fails with WrongType, and the
    error names the subject it failed on. A typed property shape decoded
    strictly fails with UnknownPredicates, since PropertyShape maps no rdf:type.

Run with:  python -m case_studies.shacl_manifest.run
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

import logging

from rdfrecord.decoder import DecodeOptions, Decoder
from rdfrecord.errors import DecodeError
from rdfrecord.namespaces import common_namespaces, compact_uri

from .records import Manifest, PropertyShape
from .suite import BASE, ShaclTestSuite, load_suite


NAMESPACES = common_namespaces({
    "mc": "http://example.org/shacl/minCount-001.test#",
    "dt": "http://example.org/shacl/datatype-001.test#",
    "suite": BASE,
})


def print_header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def short(term) -> str:
    if term is None:
        return "-"
    return compact_uri(str(term.raw_value()), NAMESPACES)


def show_manifests(suite: ShaclTestSuite) -> None:
    print_header("STEP 1: Manifests (strict decode)")
    print(f"\n  Loaded {len(suite.loaded)} files, {len(suite.graph)} triples")
    for manifest in suite.manifests():
        label = manifest.label.get_with_fallback("en", "") or "(no label)"
        print(f"\n  {short_id(manifest.id)}  {label}")
        if "fr" in manifest.label:
            print(f"    fr: {manifest.label['fr']}")
        for include in manifest.includes:
            print(f"    include  {short(include)}")
        for test in manifest.entries:
            print(f"    entry    {short_id(test.id)}  [{short(test.status)}]")
            print(f"             {test.label}")


def short_id(iri: str) -> str:
    return compact_uri(iri, NAMESPACES)


def show_shapes(suite: ShaclTestSuite) -> None:
    print_header("STEP 2: Shapes")
    for shape in suite.shapes():
        print(f"\n  {short_id(shape.id)}  {shape.label.get_with_fallback('fr', 'en')}")
        print(f"    targets:  {', '.join(short(t) for t in shape.target_class)}")
        if shape.closed:
            ignored = ", ".join(short(p) for p in shape.ignored_properties)
            print(f"    closed, ignoring: {ignored or '-'}")
        for prop in shape.properties:
            counts = f"[{prop.min_count if prop.min_count is not None else 0}..{prop.max_count if prop.max_count is not None else '*'}]"
            datatype = f" {short(prop.datatype)}" if prop.datatype else ""
            print(f"    property  {short(prop.path)} {counts}{datatype}")


def run_tests(suite: ShaclTestSuite) -> int:
    print_header("STEP 3: Execution (pySHACL)")
    failures = 0
    for test in suite.tests():
        outcome = suite.run(test)
        print()
        for line in outcome.summary().split("\n"):
            print(f"  {line}")
        if not outcome.passed:
            failures += 1
    return failures


def show_decode_error(suite: ShaclTestSuite) -> None:
    print_header("STEP 4: Decode errors")
    shape = suite.shapes()[0]
    try:
        Decoder(suite.graph).decode(shape.id, Manifest)
    except DecodeError as e:
        print(f"\n  Decoding {short_id(shape.id)} as a Manifest:")
        for line in str(e).split("\n"):
            print(f"    {line}")

    # PropertyShape maps no rdf:type, so a typed property shape is rejected
    # in strict mode.
    prop = shape.properties[0]
    try:
        Decoder(suite.graph, DecodeOptions(strict=True)).decode(prop.id, PropertyShape)
        print(f"\n  Strict decode of {short(prop.id)} as a PropertyShape: ok")
    except DecodeError as e:
        print(f"\n  Strict decode of {short(prop.id)} as a PropertyShape:")
        print(f"    {e}")


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("  rdfrecord — Case Study")
    print("  SHACL Test Suite")
    print("=" * 60)

    suite = load_suite()
    show_manifests(suite)
    show_shapes(suite)
    failures = run_tests(suite)
    show_decode_error(suite)

    print(f"\n{'=' * 60}")
    print(f"  Case Study Complete: {failures} failing test(s)")
    print(f"{'=' * 60}")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
