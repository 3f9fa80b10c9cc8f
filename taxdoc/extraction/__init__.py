"""Field extraction from recognised document text."""

from .parser import EmployerData, ParsedData, parse_ocr_result
from .registry import (
    DocumentMatcher,
    DocumentType,
    MatcherRegistry,
    build_matcher,
    default_registry,
    load_registry,
)

__all__ = [
    "DocumentMatcher",
    "DocumentType",
    "EmployerData",
    "MatcherRegistry",
    "ParsedData",
    "build_matcher",
    "default_registry",
    "load_registry",
    "parse_ocr_result",
]
