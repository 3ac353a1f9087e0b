"""
Rendering Context

Responsibilities:
- Validates LaTeX sources before compilation
- Compiles LaTeX to PDF in an isolated, per-call scratch directory
- Handles LaTeX errors and provides diagnostic information

Owns: LaTeX compilation, PDF generation
Never: Modifies template content
"""

from atlas.contexts.rendering.compiler import (
    LATEX_EXTENSIONS,
    MIN_PDF_BYTES,
    CompilationResult,
    ValidationResult,
    compile_latex,
    validate_latex_files,
)
from atlas.contexts.templating.filler import LatexFile

__all__ = [
    "LATEX_EXTENSIONS",
    "MIN_PDF_BYTES",
    "CompilationResult",
    "LatexFile",
    "ValidationResult",
    "compile_latex",
    "validate_latex_files",
]
