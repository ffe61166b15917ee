"""Namespace prefixes injected into queries sent to the trusted endpoint."""

from __future__ import annotations

from rdflib import Namespace
from rdflib.namespace import DCAT, DCTERMS, FOAF, OWL, RDF, RDFS, SKOS, XSD

# OntoPiA (Italian public administration ontologies)
CLV = Namespace("https://w3id.org/italia/onto/CLV/")
CPV = Namespace("https://w3id.org/italia/onto/CPV/")
L0 = Namespace("https://w3id.org/italia/onto/l0/")
SM = Namespace("https://w3id.org/italia/onto/SM/")

DCATAPIT = Namespace("http://dati.gov.it/onto/dcatapit#")

STANDARD_PREFIXES: dict[str, str] = {
    "rdf": str(RDF),
    "rdfs": str(RDFS),
    "owl": str(OWL),
    "skos": str(SKOS),
    "dct": str(DCTERMS),
    "xsd": str(XSD),
    "dcat": str(DCAT),
    "foaf": str(FOAF),
    "clv": str(CLV),
    "cpv": str(CPV),
    "l0": str(L0),
    "sm": str(SM),
}


def prefix_block(prefixes: dict[str, str] | None = None) -> str:
    """Render ``PREFIX`` declarations, one per line."""
    prefixes = STANDARD_PREFIXES if prefixes is None else prefixes
    return "\n".join(f"PREFIX {name}: <{uri}>" for name, uri in prefixes.items())


PREFIX_BLOCK = prefix_block()
