"""Overlapping fixed-size text windows, sized per source format."""

from typing import List

CHUNK_OVERLAP = 100

PDF_CHUNK_SIZE = 1000
WORD_CHUNK_SIZE = 800
TEXT_CHUNK_SIZE = 500
DEFAULT_CHUNK_SIZE = 750


def chunk_size_for(source_format: str) -> int:
    """Return the window size for a MIME type or format name.

    Matching is by substring so ``application/pdf`` and ``pdf`` both select
    the PDF size, and Word MIME types (``application/msword``,
    ``...wordprocessingml.document``) select the word-processor size.
    """
    fmt = (source_format or "").lower()
    if "pdf" in fmt:
        return PDF_CHUNK_SIZE
    if "word" in fmt:
        return WORD_CHUNK_SIZE
    if "text" in fmt:
        return TEXT_CHUNK_SIZE
    return DEFAULT_CHUNK_SIZE


class Chunker:
    """Splits text into windows of at most ``chunk_size_for(format)`` characters.

    Consecutive windows share ``overlap`` characters. The last window always
    ends at the end of the text, so the windows cover the input completely.
    """

    def __init__(self, overlap: int = CHUNK_OVERLAP):
        if overlap < 0:
            raise ValueError("Overlap cannot be negative")
        self.overlap = overlap

    def chunk(self, text: str, source_format: str) -> List[str]:
        """Split ``text`` into overlapping windows.

        Args:
            text: Extracted document text
            source_format: MIME type or format name of the source file

        Returns:
            Windows in document order; empty when ``text`` is empty

        Raises:
            ValueError: If the overlap is not smaller than the window size
        """
        if not text:
            return []

        size = chunk_size_for(source_format)
        if self.overlap >= size:
            raise ValueError(f"Overlap {self.overlap} must be smaller than chunk size {size}")

        chunks = []
        start = 0
        length = len(text)
        while start < length:
            end = min(start + size, length)
            chunks.append(text[start:end])
            if end == length:
                break
            start = end - self.overlap

        return chunks
