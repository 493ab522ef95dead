"""
Concept extraction: text plus sections in, ConceptGraph out.
"""

from .base import ConceptExtractor, check_graph, empty_graph, safe_extract
from .lexical import LexicalConceptExtractor
from .library import (
    CROSS_DOMAIN_CONCEPTS,
    ConceptDefinition,
    build_library,
    load_custom_concepts,
)

__all__ = [
    "ConceptExtractor",
    "LexicalConceptExtractor",
    "ConceptDefinition",
    "CROSS_DOMAIN_CONCEPTS",
    "build_library",
    "check_graph",
    "empty_graph",
    "load_custom_concepts",
    "safe_extract",
]
