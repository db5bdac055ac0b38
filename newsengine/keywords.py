# newsengine/keywords.py
"""Local text heuristics: tokenizing, keyword frequency, rule-based category and tags."""
from collections import Counter
from typing import Iterable, List, Set
import re

_STOP = set("""
a an and the of for to in on with by as at from about via into over under toward against between among
is are be was were been being this that those these it its their his her our your they we you i
he she them him us me my mine who whom which what when where why how than then there here
new more less very most least not no yes will would can could should may might must shall
has have had having do does did done just also only even still yet so but or if because while
after before during since until up down out off again further once all any both each few other
some such own same too s t said says say one two three year years day days week time
""".split())

_WORD = re.compile(r"[a-z0-9][a-z0-9'-]*")

# Ordered: the first matching category wins.
CATEGORY_RULES = [
    ("Technology", ("technology", "tech", "software", "artificial intelligence", "startup", "app ")),
    ("Business", ("business", "economy", "finance", "market", "stocks", "company")),
    ("Politics", ("politics", "government", "election", "policy", "minister", "council")),
    ("Health", ("health", "medical", "hospital", "disease", "covid", "vaccine")),
    ("Sports", ("sports", "match", "tournament", "player", "league", "cricket", "football")),
    ("Entertainment", ("entertainment", "movie", "film", "music", "celebrity", "festival")),
]


def tokenize(text: str) -> List[str]:
    words = _WORD.findall((text or "").lower())
    return [w.strip("'-") for w in words
            if len(w) >= 3 and not w.isdigit() and w.strip("'-") not in _STOP]


def keyword_counts(texts: Iterable[str]) -> Counter:
    counts: Counter = Counter()
    for text in texts:
        counts.update(tokenize(text))
    return counts


def extract_keywords(text: str, top_n: int = 5) -> List[str]:
    """Top-N non-stopword tokens by frequency (ties keep first appearance)."""
    return [w for w, _ in keyword_counts([text]).most_common(top_n)]


def keyword_set(*texts: str) -> Set[str]:
    out: Set[str] = set()
    for text in texts:
        out.update(tokenize(text))
    return out


def classify_category(title: str, content: str = "", default: str = "General") -> str:
    text = f" {title or ''} {content or ''} ".lower()
    for category, needles in CATEGORY_RULES:
        if any(n in text for n in needles):
            return category
    return default


# Editorial labels, matched as whole words (hyphenated forms included).
TAG_TERMS = (
    "breaking", "urgent", "exclusive", "analysis", "opinion", "investigation",
    "local", "national", "international", "breaking-news", "trending",
)
_TAG_PATTERNS = [(tag, re.compile(rf"(?<![a-z0-9-]){re.escape(tag)}(?![a-z0-9-])")) for tag in TAG_TERMS]


def extract_tags(title: str, content: str = "") -> List[str]:
    """Tags found in an article, in TAG_TERMS order."""
    text = f"{title or ''} {content or ''}".lower()
    return [tag for tag, pattern in _TAG_PATTERNS if pattern.search(text)]
