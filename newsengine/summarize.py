# newsengine/summarize.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import anthropic
import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .cache import ArticleCache
from .config import FALLBACK_CATEGORY, FALLBACK_SUMMARY_CHARS
from .errors import CacheUnavailableError, SummarizerError, SummaryNotStoredError
from .keywords import extract_keywords
from .logging_setup import get_logger
from .schema import ArticlePayload
from .text_extraction import fetch_and_extract

logger = get_logger("newsengine.summarize")

SYS_PROMPT = (
    "You are a concise news summarizer. Summarize the article in 2-3 sentences of plain, "
    "non-jargon English. Avoid hype; stick to facts present in the text. "
    "Respond with valid JSON only, using exactly these keys: "
    '"summary" (string, 2-3 sentences), "keywords" (array of 3-5 short strings), '
    '"category" (one of Technology, Business, Politics, Health, Sports, Entertainment, General).'
)

MAX_PROMPT_CHARS = 6000
MAX_OUTPUT_TOKENS = 300
TEMPERATURE = 0.2


class SummaryRecord(BaseModel):
    """Shape the model must return; anything else triggers the fallback."""
    model_config = ConfigDict(strict=True, str_strip_whitespace=True, extra="ignore")

    summary: str = Field(min_length=1)
    keywords: List[str] = Field(min_length=3, max_length=5)
    category: str = Field(min_length=1)


@dataclass
class SummaryResult:
    summary: str
    keywords: Optional[List[str]] = None
    category: Optional[str] = None
    cached: bool = False
    provider: str = "fallback"  # cache | openai | anthropic | google | fallback
    extra: dict = field(default_factory=dict)

    @property
    def degraded(self) -> bool:
        return self.provider == "fallback"

    def as_response(self) -> dict:
        out = {"summary": self.summary, "cached": self.cached}
        if self.keywords is not None:
            out["keywords"] = self.keywords
        if self.category is not None:
            out["category"] = self.category
        return out


def _source_text(article: ArticlePayload) -> str:
    return (article.content or "").strip() or (article.description or "").strip() or (article.title or "").strip()


def fallback_summary(article: ArticlePayload) -> SummaryResult:
    """Deterministic local summary. Never raises."""
    text = _source_text(article)
    summary = text[:FALLBACK_SUMMARY_CHARS] + "..." if text else "Summary unavailable."
    keywords = extract_keywords(f"{article.title or ''} {text}", top_n=5)
    return SummaryResult(summary=summary, keywords=keywords, category=FALLBACK_CATEGORY,
                         cached=False, provider="fallback")


def _user_prompt(article: ArticlePayload) -> str:
    return f"""
TITLE: {article.title}
SOURCE: {article.source or ''}
URL: {article.url or ''}
DESCRIPTION: {article.description or ''}
ARTICLE:
{_source_text(article)[:MAX_PROMPT_CHARS]}
""".strip()


def _json_body(text: str) -> str:
    # some models wrap JSON in a ```json fence
    body = text.strip()
    if body.startswith("```"):
        body = body.split("\n", 1)[1] if "\n" in body else ""
        body = body.rsplit("```", 1)[0]
    return body.strip()


# ---- Model backends (one attempt each, no retries) ----

class ModelBackend:
    name = "model"
    errors: tuple = ()

    def complete(self, system: str, user: str) -> Optional[str]:
        raise NotImplementedError

    def close(self) -> None:
        close = getattr(getattr(self, "client", None), "close", None)
        if close is not None:
            close()


class OpenAIBackend(ModelBackend):
    name = "openai"
    errors = (OpenAIError,)

    def __init__(self, client: OpenAI, model: str = "gpt-4o-mini"):
        self.client = client
        self.model = model

    def complete(self, system: str, user: str) -> Optional[str]:
        resp = self.client.chat.completions.create(
            model=self.model,
            temperature=TEMPERATURE,
            max_tokens=MAX_OUTPUT_TOKENS,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
        return resp.choices[0].message.content if resp.choices else None


class AnthropicBackend(ModelBackend):
    name = "anthropic"
    errors = (anthropic.APIError,)

    def __init__(self, client: anthropic.Anthropic, model: str = "claude-3-5-haiku-latest"):
        self.client = client
        self.model = model

    def complete(self, system: str, user: str) -> Optional[str]:
        resp = self.client.messages.create(
            model=self.model,
            max_tokens=MAX_OUTPUT_TOKENS,
            temperature=TEMPERATURE,
            system=system,
            messages=[{"role": "user", "content": user}],
        )
        return "".join(b.text for b in resp.content if getattr(b, "type", None) == "text")


class GeminiBackend(ModelBackend):
    name = "google"
    errors = (genai_errors.APIError, httpx.HTTPError)

    def __init__(self, client: genai.Client, model: str = "gemini-2.0-flash"):
        self.client = client
        self.model = model

    def complete(self, system: str, user: str) -> Optional[str]:
        resp = self.client.models.generate_content(
            model=self.model,
            contents=user,
            config=genai_types.GenerateContentConfig(
                system_instruction=system,
                temperature=TEMPERATURE,
                max_output_tokens=MAX_OUTPUT_TOKENS,
                response_mime_type="application/json",
            ),
        )
        return resp.text


def backends_from_settings(settings) -> List[ModelBackend]:
    """Configured providers in preference order: OpenAI, Anthropic, Google."""
    timeout = settings.summary_timeout
    backends: List[ModelBackend] = []
    if settings.openai_api_key:
        backends.append(OpenAIBackend(
            OpenAI(api_key=settings.openai_api_key, timeout=timeout, max_retries=0),
            model=settings.openai_model,
        ))
    if settings.anthropic_api_key:
        backends.append(AnthropicBackend(
            anthropic.Anthropic(api_key=settings.anthropic_api_key, timeout=timeout, max_retries=0),
            model=settings.anthropic_model,
        ))
    if settings.google_api_key:
        backends.append(GeminiBackend(
            genai.Client(api_key=settings.google_api_key,
                         http_options=genai_types.HttpOptions(timeout=int(timeout * 1000))),
            model=settings.google_model,
        ))
    return backends


class Summarizer:
    """
    Provider chain with a strict response schema.

    Each backend gets a single attempt; the first valid record wins. With no
    backends (no API keys configured), or when all of them fail, the local
    fallback is returned. ``client`` is a shortcut for a lone OpenAI backend.
    """

    def __init__(self, client: Optional[OpenAI] = None, model: str = "gpt-4o-mini",
                 page_timeout: float = 10.0, backends: Optional[Sequence[ModelBackend]] = None):
        if backends is None:
            backends = [OpenAIBackend(client, model)] if client is not None else []
        self.backends = list(backends)
        self.page_timeout = page_timeout

    @classmethod
    def from_settings(cls, settings) -> "Summarizer":
        return cls(backends=backends_from_settings(settings), page_timeout=settings.source_timeout)

    def close(self) -> None:
        for backend in self.backends:
            backend.close()

    def _ensure_content(self, article: ArticlePayload) -> ArticlePayload:
        """If the payload has no content but has a URL, fetch & extract the page text."""
        if (article.content or "").strip() or not article.url:
            return article
        body, title_guess = fetch_and_extract(article.url, timeout=self.page_timeout)
        update = {}
        if body:
            update["content"] = body
        if title_guess and not article.title:
            update["title"] = title_guess
        return article.model_copy(update=update) if update else article

    def _call(self, backend: ModelBackend, article: ArticlePayload) -> SummaryRecord:
        content = backend.complete(SYS_PROMPT, _user_prompt(article))
        if not content:
            raise SummarizerError("empty completion")
        return SummaryRecord.model_validate_json(_json_body(content))

    def generate(self, article: ArticlePayload) -> SummaryResult:
        """Fresh summary for an article: first provider that answers, fallback otherwise."""
        try:
            article = self._ensure_content(article)
        except Exception:
            logger.exception("PAGE_TEXT_UNAVAILABLE", extra={"url": article.url})

        for backend in self.backends:
            try:
                record = self._call(backend, article)
            except backend.errors + (ValidationError, SummarizerError) as e:
                logger.warning("SUMMARY_PROVIDER_FAILED",
                               extra={"provider": backend.name, "reason": type(e).__name__, "url": article.url})
                continue
            return SummaryResult(summary=record.summary, keywords=record.keywords,
                                 category=record.category, cached=False, provider=backend.name)

        reason = "all_providers_failed" if self.backends else "no_provider"
        logger.info("SUMMARY_FALLBACK", extra={"reason": reason, "url": article.url})
        return fallback_summary(article)


class SummarizationPipeline:
    """Cache-first wrapper: stored summaries short-circuit the model call."""

    def __init__(self, cache: ArticleCache, summarizer: Summarizer):
        self.cache = cache
        self.summarizer = summarizer

    def summarize(self, article_id: str, article: ArticlePayload) -> SummaryResult:
        """
        Raises CacheUnavailableError only for storage failures; summarizer
        failures always come back as a fallback result. A storage failure
        after a successful model call raises SummaryNotStoredError carrying
        the model result.
        """
        row = self.cache.get(article_id)
        if row is not None and row.ai_summary:
            logger.info("SUMMARY_CACHE_HIT", extra={"article_id": article_id})
            return SummaryResult(summary=row.ai_summary, category=row.category,
                                 cached=True, provider="cache")

        result = self.summarizer.generate(article)
        if not result.degraded:
            try:
                stored = self.cache.set_summary(article_id, result.summary, result.category)
            except CacheUnavailableError as e:
                raise SummaryNotStoredError(result) from e
            result.extra["stored"] = stored
        return result
