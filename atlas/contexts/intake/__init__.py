"""
Intake Context

Responsibilities:
- Extracts text and metadata from uploaded and compiled PDFs
- Normalizes extracted text
- Rejects uploads with too little text (scanned images)

Owns: PDF text extraction
Never: Interprets resume content
"""

from atlas.contexts.intake.extractor import (
    MIN_CONTENT_LENGTH,
    ExtractionResult,
    clean_text,
    ensure_sufficient_content,
    extract_text,
)

__all__ = [
    "MIN_CONTENT_LENGTH",
    "ExtractionResult",
    "clean_text",
    "ensure_sufficient_content",
    "extract_text",
]
