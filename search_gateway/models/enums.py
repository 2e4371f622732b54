from enum import Enum


class DocumentKind(str, Enum):
    PROPERTY = "property"
    MANAGEMENT = "management"


class AnalyzerKind(str, Enum):
    """How a document field is analysed when indexed."""

    PARTIAL_TEXT = "partial_text"  # edge-ngram, prefix matching
    FULL_TEXT = "full_text"  # stemmed
    STANDARD_ENGLISH = "standard_english"
    KEYWORD = "keyword"  # exact value, not analysed
    NUMERIC = "numeric"
