"""Unit tests for company research (no network: the HTTP session is faked)."""

import json

import pytest
import requests

from atlas.contexts.targeting.research import CompanyResearcher, extract_page_text
from atlas.utils.llm import LLMResponse

COMPANY_HTML = """
<html>
  <head><style>body { color: red; }</style><script>track();</script></head>
  <body>
    <nav>Home | Careers | Blog</nav>
    <main>
      <h1>Acme Logistics</h1>
      <p>We build   real-time routing software.</p>
    </main>
    <footer>Copyright Acme</footer>
  </body>
</html>
"""


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Answers search API calls with canned items and page fetches with COMPANY_HTML."""

    def __init__(self, search_status=200):
        self.search_status = search_status
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params))
        if params is not None:
            items = [
                {
                    "title": "Acme Logistics - Official Site",
                    "snippet": "Routing software",
                    "link": "https://acme.example",
                }
            ]
            return FakeResponse(status_code=self.search_status, payload={"items": items})
        return FakeResponse(text=COMPANY_HTML)


class FakeProvider:
    name = "fake/model"

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate(self, system_prompt, user_prompt, max_tokens=2048):
        self.prompts.append(user_prompt)
        if self.error:
            raise self.error
        return LLMResponse(content=self.reply, model="model", input_tokens=1, output_tokens=1)


SYNTHESIS_REPLY = json.dumps(
    {
        "name": "Acme Logistics",
        "website": "https://acme.example",
        "description": "Routing software for freight carriers.",
        "industry": "Logistics",
        "techStack": ["Python", "Kafka", ""],
        "culture": "Remote-first",
        "recentNews": [],
        "jobRequirements": ["Streaming experience"],
        "rawData": "...",
    }
)


@pytest.mark.unit
def test_extract_page_text():
    text = extract_page_text(COMPANY_HTML)

    assert text == "Acme Logistics We build real-time routing software."


@pytest.mark.unit
def test_extract_page_text_is_bounded():
    html = "<body><p>" + "word " * 2000 + "</p></body>"
    assert len(extract_page_text(html, max_chars=100)) == 100


@pytest.mark.unit
def test_research_without_search_or_provider():
    session = FakeSession()
    researcher = CompanyResearcher(provider=None, session=session, api_key="", engine_id="")

    profile = researcher.research("Acme", "Data Engineer", hints="Series B, Berlin office")

    assert profile.name == "Acme"
    assert profile.description == "Series B, Berlin office"
    assert profile.tech_stack == ()
    # Search is not configured, so the website is never fetched either
    assert session.calls == []


@pytest.mark.unit
def test_research_synthesizes_profile():
    session = FakeSession()
    provider = FakeProvider(reply="Profile:\n" + SYNTHESIS_REPLY)
    researcher = CompanyResearcher(provider=provider, session=session, api_key="k", engine_id="e")

    profile = researcher.research("Acme", "Data Engineer")

    assert profile.name == "Acme Logistics"
    assert profile.tech_stack == ("Python", "Kafka")
    assert profile.job_requirements == ("Streaming experience",)
    assert "real-time routing software" in provider.prompts[0]
    assert any(params is None for _, params in session.calls)


@pytest.mark.unit
@pytest.mark.parametrize(
    "provider",
    [
        FakeProvider(reply="I could not find anything useful."),
        FakeProvider(error=RuntimeError("model exploded")),
    ],
)
def test_research_degrades_to_minimal_profile(provider):
    researcher = CompanyResearcher(
        provider=provider, session=FakeSession(), api_key="k", engine_id="e"
    )

    profile = researcher.research("Acme", "Data Engineer")

    assert profile.name == "Acme"
    assert profile.description == "Acme - Data Engineer position"


@pytest.mark.unit
def test_search_rejected_by_api_returns_nothing():
    researcher = CompanyResearcher(
        session=FakeSession(search_status=403), api_key="k", engine_id="e"
    )

    assert researcher.search("Acme") == []
    assert researcher.find_company_website("Acme") is None
