from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

WS_RE = re.compile(r"\s+")
HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none", re.IGNORECASE)
SKIPPED_TAGS = ["script", "style", "template", "noscript"]


def _is_hidden(tag: Tag) -> bool:
    if tag.has_attr("hidden"):
        return True
    if tag.get("aria-hidden") == "true":
        return True
    return bool(HIDDEN_STYLE_RE.search(tag.get("style") or ""))


def extract_text(html: Optional[str]) -> str:
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all(SKIPPED_TAGS):
        tag.decompose()
    # rich text carries gallery metadata in hidden blocks
    for tag in soup.find_all(_is_hidden):
        if not tag.decomposed:
            tag.decompose()
    text = soup.get_text(" ")
    return WS_RE.sub(" ", text).strip()


def description(summary: Optional[str], html: Optional[str], max_chars: int = 200) -> str:
    text = (summary or "").strip() or extract_text(html)
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars].rsplit(" ", 1)[0]
    return cut.rstrip(",.;:") + "…"
