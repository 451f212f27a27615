"""Corpus indexing, resolution, validation and queries."""

from .loader import CorpusIndex, build_index
from .parser import format_code, parse_code
from .query import decode_to_content, decode_to_path, list_codes, list_sections, search
from .resolver import ALL, BEST, resolve
from .rules import ValidationReport, ValidationRules, validate

__all__ = [
    "ALL",
    "BEST",
    "CorpusIndex",
    "ValidationReport",
    "ValidationRules",
    "build_index",
    "decode_to_content",
    "decode_to_path",
    "format_code",
    "list_codes",
    "list_sections",
    "parse_code",
    "resolve",
    "search",
    "validate",
]
