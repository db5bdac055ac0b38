# newsengine/text_extraction.py
from __future__ import annotations
from typing import Tuple, Optional

import httpx
import trafilatura
from trafilatura.metadata import extract_metadata
from bs4 import BeautifulSoup

from .logging_setup import get_logger

logger = get_logger("newsengine.text_extraction")

USER_AGENT = "NewsEngineBot/1.0 (+https://example.com)"


def html_to_text(html: str) -> str:
    """Strip markup from a feed snippet (RSS descriptions are often HTML)."""
    if not html or "<" not in html:
        return (html or "").strip()
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return " ".join(soup.stripped_strings)


def extract_main_text(html: str) -> Tuple[str, Optional[str]]:
    """
    Returns (main_text, title_guess). trafilatura first, BeautifulSoup when it
    finds nothing.
    """
    text = trafilatura.extract(html, include_comments=False, favor_recall=True) or ""
    title = None
    md = extract_metadata(html)
    if md is not None and md.title:
        title = md.title
    if text:
        return text, title

    soup = BeautifulSoup(html, "html.parser")
    if title is None and soup.title and soup.title.string:
        title = soup.title.string.strip()
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return " ".join(soup.stripped_strings), title


def fetch_and_extract(url: str, timeout: float = 10.0) -> Tuple[str, Optional[str]]:
    """
    Fetch a URL once (no retries) and return its main text. Network failures
    give ("", None); callers treat missing text as "nothing to summarize".
    """
    headers = {"User-Agent": USER_AGENT}
    try:
        with httpx.Client(follow_redirects=True, timeout=timeout) as client:
            r = client.get(url, headers=headers)
            r.raise_for_status()
            html = r.text
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("FETCH_HTML_FAILED", extra={"url": url, "error": type(e).__name__})
        return "", None

    try:
        return extract_main_text(html)
    except Exception:
        logger.exception("EXTRACT_FAILED", extra={"url": url})
        return "", None
