"""
ATLAS - ATS-Targeted LaTeX Assembly System

Turns an uploaded PDF resume into a company-tailored, ATS-scored LaTeX resume.

Architecture:
- Intake Context: PDF text extraction and cleanup
- Targeting Context: Company research and LLM content generation/scoring
- Templating Context: Resume data model, escaping and LaTeX template filling
- Rendering Context: Isolated LaTeX compilation to PDF
- Optimization Context: The extract -> research -> generate -> compile -> score loop
"""

__version__ = "0.1.0"
