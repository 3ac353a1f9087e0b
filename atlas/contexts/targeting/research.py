"""
Company research for targeting.

Gathers web search results, company website text and job postings, then asks
the LLM to synthesize a ResearchProfile. Research is best-effort enrichment:
CompanyResearcher.research() never raises, it degrades to a minimal profile.
"""

import os
import re
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup
from dotenv import load_dotenv

from atlas.contexts.targeting.logger import _log_debug, _log_info, _log_success, _log_warning
from atlas.contexts.targeting.prompts import RESEARCH_SYSTEM_PROMPT, build_research_prompt
from atlas.contexts.targeting.targeting_data_structures import ResearchProfile
from atlas.utils.llm import LLMProvider, parse_json_object_reply

load_dotenv()

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
SEARCH_TIMEOUT_S = 10
SCRAPE_TIMEOUT_S = 8
SEARCH_RESULTS_PER_QUERY = 5
MAX_WEBSITE_CHARS = 3000
JOB_BOARDS = ("linkedin.com", "indeed.com", "glassdoor.com")

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# Elements that never carry company description text
_NOISE_TAGS = ["script", "style", "nav", "footer", "iframe", "noscript"]


def extract_page_text(html: str, max_chars: int = MAX_WEBSITE_CHARS) -> str:
    """
    Extract readable text from an HTML page.

    Prefers <main>, then <article>, then <body>. Whitespace is collapsed and
    the result is cut to max_chars.
    """
    soup = BeautifulSoup(html, "html.parser")

    for element in soup(_NOISE_TAGS):
        element.decompose()

    container = soup.find("main") or soup.find("article") or soup.body or soup
    text = re.sub(r"\s+", " ", container.get_text(" ")).strip()
    return text[:max_chars]


class CompanyResearcher:
    """
    Builds a ResearchProfile for a company and role.

    Web search uses the Google Custom Search JSON API and is skipped when
    GOOGLE_API_KEY / GOOGLE_SEARCH_ENGINE_ID are not configured. Synthesis is
    skipped when no LLM provider is given.
    """

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        session: Optional[requests.Session] = None,
        api_key: Optional[str] = None,
        engine_id: Optional[str] = None,
    ):
        self.provider = provider
        self.session = session or requests.Session()
        self.api_key = api_key if api_key is not None else os.getenv("GOOGLE_API_KEY")
        self.engine_id = engine_id if engine_id is not None else os.getenv("GOOGLE_SEARCH_ENGINE_ID")

    @property
    def search_enabled(self) -> bool:
        return bool(self.api_key and self.engine_id)

    def research(self, company: str, role: str, hints: Optional[str] = None) -> ResearchProfile:
        """
        Research a company for a role. Never raises.

        Args:
            company: Company name
            role: Target role
            hints: Optional details supplied by the user

        Returns:
            Synthesized ResearchProfile, or a minimal one if anything fails
        """
        _log_info(f"Researching {company} for {role} position")
        try:
            search_results = self.search(f"{company} {role} job requirements tech stack culture")
            website = self.find_company_website(company)
            website_text = self.scrape_website(website) if website else ""
            job_postings = self.search_job_postings(company, role)

            profile = self.synthesize(
                company, role, hints, search_results, website_text, job_postings
            )
        except Exception as e:
            _log_warning(f"Research for {company} failed, using minimal profile: {e}")
            return self.minimal_profile(company, role, hints)

        if profile is None:
            return self.minimal_profile(company, role, hints)

        _log_success(
            f"Research for {company}: {len(profile.tech_stack)} technologies, "
            f"{len(profile.job_requirements)} requirements"
        )
        return profile

    @staticmethod
    def minimal_profile(company: str, role: str, hints: Optional[str] = None) -> ResearchProfile:
        return ResearchProfile(
            name=company,
            description=hints or f"{company} - {role} position",
            raw_data=hints or "",
        )

    def search(self, query: str) -> List[Dict[str, str]]:
        """Run one web search; returns [] when search is not configured or fails."""
        if not self.search_enabled:
            _log_debug("Web search not configured, skipping")
            return []

        try:
            response = self.session.get(
                GOOGLE_SEARCH_URL,
                params={
                    "key": self.api_key,
                    "cx": self.engine_id,
                    "q": query,
                    "num": SEARCH_RESULTS_PER_QUERY,
                },
                timeout=SEARCH_TIMEOUT_S,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 403:
                _log_warning("Custom Search API rejected the request (403); is it enabled?")
            else:
                _log_warning(f"Web search failed: {e}")
            return []
        except requests.exceptions.RequestException as e:
            _log_warning(f"Web search failed: {e}")
            return []

        items = response.json().get("items") or []
        return [
            {
                "title": item.get("title", ""),
                "snippet": item.get("snippet", ""),
                "link": item.get("link", ""),
            }
            for item in items
        ]

    def find_company_website(self, company: str) -> Optional[str]:
        results = self.search(f"{company} official website")
        if not results:
            return None
        return results[0]["link"] or None

    def scrape_website(self, url: str) -> str:
        """Fetch a page and return its readable text (first MAX_WEBSITE_CHARS chars)."""
        try:
            response = self.session.get(
                url, headers={"User-Agent": USER_AGENT}, timeout=SCRAPE_TIMEOUT_S
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            _log_warning(f"Could not fetch {url}: {e}")
            return ""

        text = extract_page_text(response.text)
        _log_debug(f"Scraped {len(text)} chars from {url}")
        return text

    def search_job_postings(self, company: str, role: str) -> List[Dict[str, str]]:
        sites = " OR ".join(f"site:{board}" for board in JOB_BOARDS)
        return self.search(f"{company} {role} job description requirements {sites}")

    def synthesize(
        self,
        company: str,
        role: str,
        hints: Optional[str],
        search_results: List[Dict[str, Any]],
        website_text: str,
        job_postings: List[Dict[str, Any]],
    ) -> Optional[ResearchProfile]:
        """
        Ask the LLM to merge the gathered sources into a ResearchProfile.

        Returns:
            ResearchProfile, or None when there is no provider or the reply is unusable
        """
        if self.provider is None:
            _log_debug("No LLM provider configured, skipping research synthesis")
            return None

        prompt = build_research_prompt(
            company, role, hints, search_results, website_text, job_postings
        )
        response = self.provider.generate(RESEARCH_SYSTEM_PROMPT, prompt, max_tokens=3000)

        parsed = parse_json_object_reply(response.content)
        if not parsed.ok:
            _log_warning(f"Research synthesis reply unusable: {parsed.error}")
            return None

        return ResearchProfile.from_dict(parsed.payload, fallback_name=company)
