"""
Targeting Context

Responsibilities:
- Researches the target company (web search, website, job postings)
- Generates, scores and improves resume content for a company and role

Owns: Research profiles, ATS assessments, generation prompts
Never: Renders or compiles documents
"""

from atlas.contexts.targeting.generation import (
    ContentGenerator,
    Decoded,
    LLMContentGenerator,
    decode_ats_result,
    decode_resume_data,
)
from atlas.contexts.targeting.research import CompanyResearcher, extract_page_text
from atlas.contexts.targeting.targeting_data_structures import ATSResult, ResearchProfile

__all__ = [
    # Data structures
    "ATSResult",
    "ResearchProfile",
    # Research
    "CompanyResearcher",
    "extract_page_text",
    # Generation
    "ContentGenerator",
    "Decoded",
    "LLMContentGenerator",
    "decode_ats_result",
    "decode_resume_data",
]
