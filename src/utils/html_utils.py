"""HTML helper utilities shared by the BeautifulSoup based parsers."""

from __future__ import annotations

import html as _html
import re
from typing import Iterable

TAG_RE = re.compile(r"<[^>]+>")
BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
DOUBLE_BR_RE = re.compile(r"<br\s*/?>\s*<br\s*/?>", re.IGNORECASE)
NBSP_RE = re.compile(r"&nbsp;?|\xa0")
WS_RE = re.compile(r"\s+")


def strip_tags(html: str) -> str:
    return TAG_RE.sub("", html)


def clean_cell(text: str) -> str:
    text = strip_tags(text)
    text = NBSP_RE.sub(" ", text)
    text = _html.unescape(text)
    text = WS_RE.sub(" ", text).strip()
    return text


def split_br_lines(inner_html: str) -> list[str]:
    """Split markup on <br> tags into cleaned, non-empty text lines."""
    lines = (clean_cell(part) for part in BR_RE.split(inner_html))
    return [line for line in lines if line]


def before_double_br(inner_html: str) -> str:
    return DOUBLE_BR_RE.split(inner_html, maxsplit=1)[0]


def dedupe(seq: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for item in seq:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out
