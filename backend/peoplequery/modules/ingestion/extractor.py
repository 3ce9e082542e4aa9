"""Plain-text extraction from uploaded files."""

from typing import Protocol

from .schemas import SourceFile


class Extractor(Protocol):
    """Turns an uploaded file into plain text."""

    def extract(self, source: SourceFile) -> str: ...


class PlainTextExtractor:
    """Decodes the upload as UTF-8 text.

    Undecodable bytes are replaced rather than rejected and NUL characters
    are dropped, since neither PostgreSQL text columns nor the embedding
    endpoint accept them.
    """

    def __init__(self, encoding: str = "utf-8-sig"):
        self.encoding = encoding

    def extract(self, source: SourceFile) -> str:
        return source.content.decode(self.encoding, errors="replace").replace("\x00", "")
