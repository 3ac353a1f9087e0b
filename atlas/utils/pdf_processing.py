"""
PDF processing utilities.

Helper functions:
    page_count: Quick page count without full extraction.
    looks_like_pdf: Cheap magic-number check before handing bytes to a parser.
"""

import io
from pathlib import Path
from typing import Optional, Union

from PyPDF2 import PdfReader

PDF_MAGIC = b"%PDF-"


def page_count(pdf: Union[Path, bytes]) -> Optional[int]:
    """Get page count from a PDF path or PDF bytes, or None if unreadable."""
    try:
        source = io.BytesIO(pdf) if isinstance(pdf, (bytes, bytearray)) else str(pdf)
        reader = PdfReader(source)
        return len(reader.pages)
    except Exception:
        return None


def looks_like_pdf(data: bytes) -> bool:
    """True if the bytes start with the PDF header (leading whitespace tolerated)."""
    return data.lstrip()[: len(PDF_MAGIC)] == PDF_MAGIC
