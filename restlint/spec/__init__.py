"""API description parsing and data structures."""

from restlint.spec.schemas import (
    ApiDocument,
    MediaTypeSpec,
    Operation,
    Parameter,
    PathItem,
    ResponseSpec,
)
from restlint.spec.parser import DocumentParser

__all__ = [
    "ApiDocument",
    "DocumentParser",
    "MediaTypeSpec",
    "Operation",
    "Parameter",
    "PathItem",
    "ResponseSpec",
]
