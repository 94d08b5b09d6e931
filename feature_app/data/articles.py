"""
Article feed projection and rendering for the carousel.

Articles are consumed read-only; rendering produces a complete HTML fragment
so the carousel window is always fully replaced.
"""

import html
import re
from typing import Any
from urllib.parse import urlparse

from .models import Article
from .parsers import to_number_or_none

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
WHITESPACE = re.compile(r"\s+")
SENTENCE_ENDS = ("。", "!", "…", ".")


def is_article_payload(raw: Any) -> bool:
    """An array, an object with an `articles` array, or any other object."""
    return isinstance(raw, (list, dict))


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def format_date(value: Any) -> str:
    """Keep a YYYY-MM-DD date when present, otherwise the first 10 characters."""
    text = _text(value)
    if not text:
        return ""
    match = DATE_PATTERN.search(text)
    return match.group(0) if match else text[:10]


def source_domain(url: str) -> str:
    """Hostname of an article URL without a leading www., empty when invalid."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return ""
    if not hostname:
        return ""
    return hostname[4:] if hostname.startswith("www.") else hostname


def summarize(text: str, max_chars: int = 240, min_cut: int = 80) -> str:
    """
    Collapse whitespace and shorten text to max_chars.

    Cuts at the last sentence end found past min_cut characters, otherwise
    truncates and appends an ellipsis.
    """
    if not text:
        return ""
    collapsed = WHITESPACE.sub(" ", str(text)).strip()
    if len(collapsed) <= max_chars:
        return collapsed

    cut = collapsed[:max_chars]
    last_end = -1
    for marker in SENTENCE_ENDS:
        last_end = cut.rfind(marker)
        if last_end > -1:
            break
    if last_end > min_cut:
        return cut[:last_end + 1]
    return cut.strip() + "…"


def article_from_mapping(item: dict[str, Any]) -> Article:
    """Project one raw article object."""
    return Article(
        title=_text(item.get("title") or item.get("headline")) or "Untitled",
        url=_text(item.get("url")) or "#",
        date=format_date(item.get("date")),
        score=to_number_or_none(item.get("score")),
        lede=_text(item.get("headline") or item.get("summary")),
        body=_text(item.get("text")),
    )


def project_articles(raw: Any) -> tuple[Article, ...]:
    """Project an article feed; non-object items are skipped."""
    if isinstance(raw, list):
        items = raw
    elif isinstance(raw, dict) and isinstance(raw.get("articles"), list):
        items = raw["articles"]
    elif isinstance(raw, dict):
        items = list(raw.values())
    else:
        items = []

    return tuple(article_from_mapping(item) for item in items if isinstance(item, dict))


def render_article_html(article: Article, lede_max: int = 400, body_max: int = 1500,
                        min_cut: int = 80) -> str:
    """Render one article as the carousel's complete content fragment."""
    url = html.escape(article.url, quote=True)
    title = html.escape(article.title)
    domain = source_domain(article.url)
    score = f"{article.score:.2f}" if article.score is not None else ""

    meta_lines = []
    if article.date:
        meta_lines.append(f"🕒 {html.escape(article.date)}<br />")
    if domain:
        meta_lines.append(f"🌐 {html.escape(domain)}<br />")
    if score:
        meta_lines.append(f"🧠 AI Score: {score}")

    parts = [
        '<article class="article-card">',
        f'<h4 class="art-title"><a href="{url}" target="_blank" rel="noopener">{title}</a></h4>',
        f'<div class="art-meta">{"".join(meta_lines)}</div>',
    ]
    if article.lede:
        lede = html.escape(summarize(article.lede, lede_max, min_cut))
        parts.append(f'<div class="art-lede"><strong>📌 Summary:</strong> {lede}</div>')
    parts.append(f'<div class="art-body">{html.escape(summarize(article.body, body_max, min_cut))}</div>')
    parts.append("</article>")
    return "".join(parts)


def render_placeholder_html(message: str) -> str:
    """Empty/error placeholder shown instead of an article."""
    return f'<article class="article-card"><p class="placeholder">{html.escape(message)}</p></article>'
