"""
Prompt templates for the generation, scoring, improvement and research calls.

Every prompt asks for a bare JSON object; replies are still decoded defensively
(see atlas.utils.llm.parse_json_object_reply).
"""

import json
from typing import Any, Dict, List, Optional

from atlas.contexts.targeting.targeting_data_structures import ATSResult, ResearchProfile
from atlas.contexts.templating.resume_data_structure import ResumeData

# Long inputs are cut before they reach the model
MAX_RESUME_CHARS = 12000
MAX_SOURCE_CHARS = 3000

# =============================================================================
# PROMPT TEMPLATES
# =============================================================================

GENERATION_SYSTEM_PROMPT = """\
You are an expert resume optimization specialist. You extract resume content and
optimize it for Applicant Tracking Systems (ATS). You never fabricate information
and you never write LaTeX. You answer with a single JSON object and nothing else."""

SCORING_SYSTEM_PROMPT = """\
You are an ATS (Applicant Tracking System) scoring expert. You score resumes
strictly and consistently. You answer with a single JSON object and nothing else."""

RESEARCH_SYSTEM_PROMPT = """\
You are a company research analyst. Extract and synthesize company information
from web search results. You answer with a single JSON object and nothing else."""

_RESUME_SHAPE = """\
{
  "contact": {
    "name": "Full Name",
    "email": "email@example.com",
    "phone": "555-1234",
    "location": "City, State",
    "linkedin": "https://linkedin.com/in/username or null",
    "github": "https://github.com/username or null",
    "portfolio": "https://portfolio.example or null"
  },
  "summary": "3-4 sentence professional summary",
  "experience": [
    {
      "company": "Company Name",
      "position": "Job Title",
      "location": "City, State",
      "duration": "Jan 2020 - Present",
      "achievements": ["Quantified achievement", "..."]
    }
  ],
  "skills": {
    "technical": ["Skill", "..."],
    "tools": ["Tool", "..."],
    "languages": ["Language", "..."]
  },
  "education": [
    {
      "degree": "Bachelor of Science",
      "field": "Computer Science",
      "institution": "University Name",
      "location": "City, State",
      "year": "2020",
      "gpa": "3.8 or null"
    }
  ],
  "projects": [
    {
      "name": "Project Name",
      "description": "One-line description",
      "technologies": "React, Node.js, AWS",
      "link": "https://... or null",
      "achievements": ["Specific impact", "..."]
    }
  ]
}"""

_GENERATION_PROMPT_TEMPLATE = """\
Extract and optimize the following resume for ATS screening.

ORIGINAL RESUME TEXT:
{resume_text}

TARGET COMPANY: {company}
TARGET ROLE: {role}

COMPANY RESEARCH:
{research}

INSTRUCTIONS:
1. Extract ALL information from the original resume
2. Optimize the wording for the target company and role
3. Use keywords from the company's tech stack where they truthfully apply
4. Quantify achievements with metrics when the original supports it
5. Tailor the professional summary to {company}
6. Keep all dates, company names and other facts accurate
7. DO NOT fabricate information; use empty strings or empty lists for anything missing
8. DO NOT write LaTeX

Return ONLY a JSON object with this exact structure:
{shape}"""

_SCORING_PROMPT_TEMPLATE = """\
Score this resume for the given role and company.

RESUME TEXT:
{resume_text}

TARGET COMPANY: {company}
TARGET ROLE: {role}
COMPANY TECH STACK: {tech_stack}
KEY REQUIREMENTS: {requirements}

SCORING CRITERIA (total 0-100):
1. Keyword matching (30 points): how well the resume matches the company's tech stack and requirements
2. Quantified achievements (25 points): achievements backed by metrics and numbers
3. Relevance (20 points): experience relevant to the target role
4. Formatting (15 points): well-structured and ATS-friendly
5. Impact (10 points): clear demonstration of impact and value

Return ONLY a JSON object:
{{
  "score": 85,
  "feedback": ["Specific observation", "..."],
  "improvements": ["Specific, actionable suggestion", "..."]
}}"""

_IMPROVEMENT_PROMPT_TEMPLATE = """\
Improve this resume based on ATS feedback.

CURRENT RESUME DATA:
{resume_json}

CURRENT ATS SCORE: {score}/100

ATS FEEDBACK:
{feedback}

IMPROVEMENTS NEEDED:
{improvements}

TARGET COMPANY: {company}
TARGET ROLE: {role}
COMPANY TECH STACK: {tech_stack}

INSTRUCTIONS:
1. Address ALL feedback points
2. Implement ALL improvement suggestions that can be applied truthfully
3. Add relevant keywords from the company's tech stack
4. Strengthen quantified achievements
5. Improve relevance to the target role
6. Maintain factual accuracy; DO NOT fabricate information
7. Return the complete resume, not a diff

Return ONLY a JSON object with the SAME structure as the input:
{shape}"""

_RESEARCH_PROMPT_TEMPLATE = """\
Analyze the following information about {company} and create a structured company
profile for a {role} position.

COMPANY NAME: {company}
TARGET ROLE: {role}

USER PROVIDED DETAILS:
{hints}

WEB SEARCH RESULTS:
{search_results}

WEBSITE CONTENT:
{website}

JOB POSTINGS:
{job_postings}

Return ONLY a JSON object with this exact structure:
{{
  "name": "Official company name",
  "website": "Company website URL",
  "description": "Concise 2-3 sentence company description",
  "industry": "Primary industry/sector",
  "techStack": ["Technology", "..."],
  "culture": "Company culture and values (2-3 sentences)",
  "recentNews": ["Recent news or achievement", "..."],
  "jobRequirements": ["Key requirement or skill", "..."],
  "rawData": "Summary of all gathered information"
}}

Extract REAL information from the sources. If information is missing, use empty
strings or empty lists."""

# =============================================================================
# PROMPT BUILDERS
# =============================================================================


def _bullets(items: List[str], empty: str = "None") -> str:
    return "\n".join(f"- {item}" for item in items) if items else empty


def _csv(items, empty: str = "Unknown") -> str:
    return ", ".join(items) if items else empty


def _research_block(profile: ResearchProfile) -> str:
    lines = [
        f"- Description: {profile.description or 'Unknown'}",
        f"- Industry: {profile.industry or 'Unknown'}",
        f"- Tech Stack: {_csv(profile.tech_stack)}",
    ]
    if profile.culture:
        lines.append(f"- Culture: {profile.culture}")
    if profile.job_requirements:
        lines.append(f"- Job Requirements: {_csv(profile.job_requirements)}")
    return "\n".join(lines)


def build_generation_prompt(resume_text: str, profile: ResearchProfile, role: str) -> str:
    return _GENERATION_PROMPT_TEMPLATE.format(
        resume_text=resume_text[:MAX_RESUME_CHARS],
        company=profile.name,
        role=role,
        research=_research_block(profile),
        shape=_RESUME_SHAPE,
    )


def build_scoring_prompt(resume_text: str, profile: ResearchProfile, role: str) -> str:
    return _SCORING_PROMPT_TEMPLATE.format(
        resume_text=resume_text[:MAX_RESUME_CHARS],
        company=profile.name,
        role=role,
        tech_stack=_csv(profile.tech_stack),
        requirements=_csv(profile.job_requirements, empty="Not specified"),
    )


def build_improvement_prompt(
    resume_data: ResumeData, ats_result: ATSResult, profile: ResearchProfile, role: str
) -> str:
    return _IMPROVEMENT_PROMPT_TEMPLATE.format(
        resume_json=json.dumps(resume_data.to_dict(), indent=2, ensure_ascii=False),
        score=ats_result.score,
        feedback=_bullets(ats_result.feedback),
        improvements=_bullets(ats_result.improvements),
        company=profile.name,
        role=role,
        tech_stack=_csv(profile.tech_stack),
        shape=_RESUME_SHAPE,
    )


def build_research_prompt(
    company: str,
    role: str,
    hints: Optional[str],
    search_results: List[Dict[str, Any]],
    website_text: str,
    job_postings: List[Dict[str, Any]],
) -> str:
    return _RESEARCH_PROMPT_TEMPLATE.format(
        company=company,
        role=role,
        hints=hints or "None provided",
        search_results=json.dumps(search_results, indent=2) if search_results else "None",
        website=website_text[:MAX_SOURCE_CHARS] or "None",
        job_postings=json.dumps(job_postings, indent=2) if job_postings else "None",
    )
