"""
LLM access for the targeting context.

Every vendor sits behind LLMProvider.generate(), which applies a per-request
timeout, retries transient failures with exponential backoff, and converts
whatever the SDK finally raises into LLMServiceError. Replies are free-form
text; parse_json_object_reply() recovers the JSON object inside them.
"""

import json
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from dotenv import load_dotenv
from loguru import logger

from atlas.exceptions import LLMServiceError
from atlas.utils.text_processing import find_balanced_span

load_dotenv()

# Total attempts per generate() call, and the first backoff delay in seconds
MAX_RETRIES = 5
BASE_DELAY = 1.0
LLM_TIMEOUT_S = float(os.getenv("LLM_TIMEOUT_S", "90"))

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


@dataclass
class LLMResponse:
    """Text of one completion plus the token usage the vendor reported."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int


class LLMProvider(ABC):
    """
    Base class for vendor adapters.

    An adapter names itself with `provider_key`, calls select_model() from its
    constructor and implements _request(). Its constructor also fills in:
        _transient_errors: SDK exceptions worth retrying (rate limits, timeouts)
        _fatal_errors: SDK exceptions reported as LLMServiceError
        _busy_message: Wording for the retry warning
    """

    provider_key: str
    _busy_message: str = "LLM request failed"
    _transient_errors: tuple = ()
    _fatal_errors: tuple = ()

    name: str
    model: str

    def select_model(self, model: str) -> None:
        self.model = model
        self.name = f"{self.provider_key}/{model}"

    @abstractmethod
    def _request(self, system_prompt: str, user_prompt: str, max_tokens: int) -> LLMResponse:
        """One API round trip, no retries."""

    def _request_with_backoff(
        self, system_prompt: str, user_prompt: str, max_tokens: int
    ) -> LLMResponse:
        attempt = 1
        while True:
            try:
                return self._request(system_prompt, user_prompt, max_tokens)
            except self._transient_errors:
                if attempt >= MAX_RETRIES:
                    raise
                wait = BASE_DELAY * 2 ** (attempt - 1)
                logger.warning(
                    f"{self._busy_message} ({self.name}), attempt {attempt}/{MAX_RETRIES}; "
                    f"waiting {wait:.1f}s"
                )
                time.sleep(wait)
                attempt += 1

    def generate(self, system_prompt: str, user_prompt: str, max_tokens: int = 2048) -> LLMResponse:
        """
        Complete a prompt, retrying transient failures.

        Raises:
            LLMServiceError: If the request still fails once retries are spent,
                or fails with a non-transient SDK error
        """
        try:
            response = self._request_with_backoff(system_prompt, user_prompt, max_tokens)
        except self._transient_errors + self._fatal_errors as e:
            raise LLMServiceError(self.name, str(e)) from e

        logger.debug(
            f"{self.name}: {response.input_tokens} tokens in, {response.output_tokens} out"
        )
        return response


class AnthropicProvider(LLMProvider):
    provider_key = "anthropic"
    _busy_message = "Anthropic API overloaded"

    def __init__(self, model: str = "claude-sonnet-4-20250514"):
        # SDK imported on first use so other providers do not pay for it
        import anthropic

        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self.client = anthropic.Anthropic(api_key=api_key, timeout=LLM_TIMEOUT_S)
        self._transient_errors = (
            anthropic.RateLimitError,
            anthropic.APITimeoutError,
            anthropic.APIConnectionError,
            anthropic.InternalServerError,
        )
        self._fatal_errors = (anthropic.APIError,)
        self.select_model(model)

    def _request(self, system_prompt: str, user_prompt: str, max_tokens: int) -> LLMResponse:
        reply = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        text = "".join(block.text for block in reply.content if hasattr(block, "text"))
        return LLMResponse(
            content=text,
            model=self.model,
            input_tokens=reply.usage.input_tokens,
            output_tokens=reply.usage.output_tokens,
        )


class OpenAIProvider(LLMProvider):
    """Chat Completions adapter; also the base for OpenAI-compatible gateways."""

    provider_key = "openai"
    _busy_message = "OpenAI rate limit hit"

    def __init__(self, model: str = "gpt-4o", api_key_env: str = "OPENAI_API_KEY", **client_kwargs):
        import openai

        api_key = os.getenv(api_key_env)
        if not api_key:
            raise ValueError(f"{api_key_env} environment variable not set")

        self.client = openai.OpenAI(api_key=api_key, timeout=LLM_TIMEOUT_S, **client_kwargs)
        self._transient_errors = (
            openai.RateLimitError,
            openai.APITimeoutError,
            openai.APIConnectionError,
            openai.InternalServerError,
        )
        self._fatal_errors = (openai.APIError,)
        self.select_model(model)

    def _request(self, system_prompt: str, user_prompt: str, max_tokens: int) -> LLMResponse:
        completion = self.client.chat.completions.create(
            model=self.model,
            max_tokens=max_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        usage = completion.usage
        return LLMResponse(
            content=completion.choices[0].message.content or "",
            model=self.model,
            input_tokens=getattr(usage, "prompt_tokens", 0),
            output_tokens=getattr(usage, "completion_tokens", 0),
        )


class OpenRouterProvider(OpenAIProvider):
    provider_key = "openrouter"
    _busy_message = "OpenRouter rate limit hit"

    def __init__(self, model: str = "openai/gpt-oss-120b:free"):
        super().__init__(
            model=model,
            api_key_env="OPENROUTER_API_KEY",
            base_url=OPENROUTER_BASE_URL,
            default_headers={
                "HTTP-Referer": os.getenv("APP_URL", "http://localhost:3000"),
                "X-Title": "ATLAS - ATS Resume Optimizer",
            },
        )


PROVIDERS = {
    cls.provider_key: cls for cls in (OpenRouterProvider, OpenAIProvider, AnthropicProvider)
}


def get_provider(provider_name: Optional[str] = None, model: Optional[str] = None) -> LLMProvider:
    """
    Build the configured provider.

    Args:
        provider_name: Key in PROVIDERS (default: LLM_PROVIDER env var, then "openrouter")
        model: Model name (default: LLM_MODEL env var, then the provider's own default)

    Raises:
        ValueError: Unknown provider, or its API key is not set
    """
    key = (provider_name or os.getenv("LLM_PROVIDER") or "openrouter").lower()
    if key not in PROVIDERS:
        raise ValueError(f"Unknown provider: {key}. Use one of {sorted(PROVIDERS)}")

    model = model or os.getenv("LLM_MODEL")
    return PROVIDERS[key](model=model) if model else PROVIDERS[key]()


@dataclass
class ParsedReply:
    """
    Outcome of pulling a JSON object out of a free-form LLM reply.

    Exactly one of payload / error is set.
    """

    payload: Optional[dict] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_json_object_reply(text: str) -> ParsedReply:
    """
    Parse the JSON object embedded in an LLM reply.

    The first balanced {...} span is parsed. The whole reply is parsed as JSON
    only when no such span exists at all.

    Args:
        text: Raw LLM reply (may include prose or markdown code fences)

    Returns:
        ParsedReply with the decoded dict, or the reason decoding failed
    """
    text = (text or "").strip()
    if not text:
        return ParsedReply(error="Reply was empty")

    span = find_balanced_span(text)
    candidate = text[span[0] : span[1]] if span else text

    try:
        result: Any = json.loads(candidate)
    except json.JSONDecodeError as e:
        where = "embedded JSON object" if span else "reply"
        return ParsedReply(
            error=f"Could not parse {where} as JSON ({e.msg} at line {e.lineno}, column {e.colno})"
        )

    if not isinstance(result, dict):
        return ParsedReply(error=f"Expected a JSON object, got {type(result).__name__}")

    return ParsedReply(payload=result)
