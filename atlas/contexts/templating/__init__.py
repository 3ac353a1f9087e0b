"""
Templating Context

Responsibilities:
- Manages the structured resume representation (ResumeData) and its validation
- Escapes free text for LaTeX
- Fills the bundled LaTeX templates (professional, modern) with resume data

Owns: Resume structure representation, LaTeX template system, escaping
Never: Compiles LaTeX, makes content decisions
"""

from atlas.contexts.templating.escaping import escape_latex
from atlas.contexts.templating.filler import (
    TEMPLATE_SPECS,
    LatexFile,
    TemplateId,
    TemplateSpec,
    fill_template,
    main_file_for,
    resolve_template_id,
)
from atlas.contexts.templating.resume_data_structure import (
    Contact,
    Education,
    Experience,
    Project,
    ResumeData,
    Skills,
)

__all__ = [
    # Escaping
    "escape_latex",
    # Template filling
    "TEMPLATE_SPECS",
    "LatexFile",
    "TemplateId",
    "TemplateSpec",
    "fill_template",
    "main_file_for",
    "resolve_template_id",
    # Data structure classes
    "Contact",
    "Education",
    "Experience",
    "Project",
    "ResumeData",
    "Skills",
]
