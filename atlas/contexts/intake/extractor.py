"""
PDF text extraction for uploaded resumes and compiled output.

Main functions:
    extract_text: Text, page count and metadata from PDF bytes.
    clean_text: Whitespace and line-ending normalization (idempotent).
    ensure_sufficient_content: Rejects text too short to be a real resume.
"""

import io
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pdfplumber
from dotenv import load_dotenv
from PyPDF2 import PdfReader

from atlas.contexts.intake.logger import _log_debug, _log_warning
from atlas.exceptions import ExtractionError, InsufficientContentError
from atlas.utils.pdf_processing import looks_like_pdf

load_dotenv()

MIN_CONTENT_LENGTH = int(os.getenv("MIN_CONTENT_LENGTH", "100"))

# Glyphs pdfminer cannot map to unicode come through as "(cid:123)"
_CID_PATTERN = re.compile(r"\(cid:\d+\)")

# Document info keys surfaced in ExtractionResult.metadata
_METADATA_KEYS = {
    "Title": "title",
    "Author": "author",
    "Subject": "subject",
    "Keywords": "keywords",
    "Creator": "creator",
    "Producer": "producer",
    "CreationDate": "creation_date",
}


@dataclass
class ExtractionResult:
    """
    Text pulled out of a PDF.

    Attributes:
        text: Page texts joined with newlines (uncleaned)
        page_count: Number of pages in the document
        metadata: Document info (title, author, producer, ...) when present
    """

    text: str
    page_count: int
    metadata: Dict[str, str] = field(default_factory=dict)


def _decode_run(raw: str) -> str:
    """
    Best-effort cleanup of a text run that may contain undecodable glyphs.

    Drops unmapped-glyph markers, replacement characters and lone surrogates
    instead of failing the whole extraction.
    """
    text = _CID_PATTERN.sub("", raw)
    text = text.replace("\ufffd", "")
    return text.encode("utf-8", errors="ignore").decode("utf-8")


def _fallback_page_text(data: bytes, page_index: int) -> str:
    """Second-chance extraction of a single page through PyPDF2."""
    try:
        reader = PdfReader(io.BytesIO(data))
        return _decode_run(reader.pages[page_index].extract_text() or "")
    except Exception as e:
        _log_warning(f"Page {page_index + 1}: fallback extraction failed ({e})")
        return ""


def _read_metadata(raw_metadata: Optional[dict]) -> Dict[str, str]:
    metadata = {}
    for key, name in _METADATA_KEYS.items():
        value = (raw_metadata or {}).get(key)
        if value is None:
            continue
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="ignore")
        metadata[name] = _decode_run(str(value))
    return metadata


def extract_text(data: bytes) -> ExtractionResult:
    """
    Extract plain text, page count and metadata from PDF bytes.

    Pages are concatenated in order with a newline at each page boundary.
    A page whose text cannot be decoded is retried through PyPDF2 and, failing
    that, contributes an empty string rather than aborting the extraction.

    Args:
        data: Raw PDF file content

    Returns:
        ExtractionResult

    Raises:
        ExtractionError: If the bytes are not a parseable PDF
    """
    if not data:
        raise ExtractionError("the file is empty")
    if not looks_like_pdf(data):
        raise ExtractionError("the file is not a valid PDF", details=f"header: {data[:16]!r}")

    try:
        pdf = pdfplumber.open(io.BytesIO(data))
    except Exception as e:
        raise ExtractionError("the file is not a valid PDF", details=repr(e)) from e

    page_texts: List[str] = []
    with pdf:
        try:
            pages = pdf.pages
        except Exception as e:
            raise ExtractionError("the PDF page tree is corrupt", details=repr(e)) from e

        if not pages:
            raise ExtractionError("the PDF has no pages")

        for index, page in enumerate(pages):
            try:
                page_texts.append(_decode_run(page.extract_text() or ""))
            except Exception as e:
                _log_warning(f"Page {index + 1}: text could not be decoded ({e}), retrying")
                page_texts.append(_fallback_page_text(data, index))

        metadata = _read_metadata(pdf.metadata)

    text = "\n".join(page_texts)
    _log_debug(f"Extracted {len(text)} characters from {len(page_texts)} page(s)")

    return ExtractionResult(text=text, page_count=len(page_texts), metadata=metadata)


def clean_text(text: str) -> str:
    """
    Normalize extracted text.

    - Converts CRLF/CR line endings to LF
    - Collapses runs of horizontal whitespace to a single space
    - Drops whitespace at line starts/ends
    - Collapses 3+ consecutive newlines to one blank line
    - Trims the result

    The function is idempotent: clean_text(clean_text(s)) == clean_text(s).

    Example:
        >>> clean_text("Jane  Doe\\r\\n\\r\\n\\r\\n\\tEngineer ")
        'Jane Doe\\n\\nEngineer'
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[^\S\n]+", " ", text)
    text = re.sub(r" ?\n ?", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def ensure_sufficient_content(text: str, min_length: int = MIN_CONTENT_LENGTH) -> str:
    """
    Reject cleaned text shorter than min_length characters.

    Text exactly min_length long is accepted.

    Raises:
        InsufficientContentError: If len(text) < min_length
    """
    if len(text) < min_length:
        raise InsufficientContentError(length=len(text), minimum=min_length)
    return text
