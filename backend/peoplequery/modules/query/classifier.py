"""Keyword-based routing of questions to the database, the documents, or both."""

from typing import Sequence

from .schemas import QueryType

STRUCTURED_KEYWORDS = ("show", "list", "count", "average", "sum", "total", "how many")
DOCUMENT_KEYWORDS = ("document", "contract", "policy", "file", "pdf", "what does", "explain")


class QueryClassifier:
    """Labels a question ``structured``, ``unstructured`` or ``hybrid``.

    Keywords match as case-insensitive substrings. Both kinds of keyword
    present means ``hybrid``; only document keywords means
    ``unstructured``; anything else, including no keyword at all, is
    ``structured`` because the database path is always available.
    """

    def __init__(
        self,
        structured_keywords: Sequence[str] = STRUCTURED_KEYWORDS,
        document_keywords: Sequence[str] = DOCUMENT_KEYWORDS,
    ):
        self.structured_keywords = tuple(keyword.lower() for keyword in structured_keywords)
        self.document_keywords = tuple(keyword.lower() for keyword in document_keywords)

    def classify(self, question: str) -> QueryType:
        text = question.lower()
        wants_rows = any(keyword in text for keyword in self.structured_keywords)
        wants_documents = any(keyword in text for keyword in self.document_keywords)

        if wants_rows and wants_documents:
            return QueryType.HYBRID
        if wants_documents:
            return QueryType.UNSTRUCTURED
        return QueryType.STRUCTURED
