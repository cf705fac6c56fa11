"""
docschema - document model compiler

Compiles one declarative description of the document model (families,
sections and typed fields per document kind) into a GraphQL wire schema,
per-kind structural validators and a documentation index.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
