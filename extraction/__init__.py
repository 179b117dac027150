"""
Layer 1: Extraction Engine

Tree-sitter-based C++ declaration front end and class/method extractor.
Parses a public interface header and copies out its eligible classes.
"""

from extraction.models import DroppedItem, RawArg, RawClass, RawMethod
from extraction.declarations import (
    Accessibility,
    Availability,
    Declaration,
    DeclKind,
    SessionClosedError,
    TypeExpr,
    TypeKind,
)
from extraction.parser import (
    DeclarationTreeError,
    ParseSession,
    ParseSessionError,
    count_error_nodes,
    create_parser,
    neutralize_macros,
    parse_bytes,
)
from extraction.extractor import (
    ExtractionStats,
    extract_class,
    extract_classes,
)

__all__ = [
    # Data models
    "DroppedItem",
    "RawArg",
    "RawClass",
    "RawMethod",
    "ExtractionStats",
    # Declaration tree
    "Accessibility",
    "Availability",
    "Declaration",
    "DeclKind",
    "SessionClosedError",
    "TypeExpr",
    "TypeKind",
    # Low-level parsing
    "DeclarationTreeError",
    "ParseSession",
    "ParseSessionError",
    "count_error_nodes",
    "create_parser",
    "neutralize_macros",
    "parse_bytes",
    # Extraction
    "extract_class",
    "extract_classes",
]
