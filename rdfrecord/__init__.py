"""rdfrecord — decode RDF graphs into annotated Python records.

Records are dataclasses whose fields name the predicates they are read from.
SHACL shapes, test-manifest entries and validation reports are all ordinary
records of this kind; the decoder hydrates them from any triple source.

The package is layered leaves first:

  terms       Resource / Literal / BlankNode, Triple, rdflib conversion
  errors      DecodeError and its subclasses, with the decode path
  values      strict lexical-form parsing for scalar fields
  localized   LocalizedString / LocalizedText from language-tagged literals
  schema      rdf_field() / rdf_id() annotations and the cached field table
  sequences   RDF Lists, RDF Containers, multi-valued predicates
  graph       the Graph query protocol and the rdflib adapter
  decoder     the decode engine: dispatch, recursion, strict mode, rdf:type
  namespaces  common prefixes, QName expansion and IRI compaction

Serialized RDF is parsed by rdflib (RdflibGraph.from_turtle / load); the
decoder itself only ever calls Graph.query().
"""
