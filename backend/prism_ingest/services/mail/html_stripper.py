"""
HTML to plain text for email bodies.

Best-effort only: tokenized with BeautifulSoup so malformed markup and
entities are handled, but layout is not rendered.
"""
import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")
_DROP_TAGS = ("script", "style", "head", "title", "noscript")


def html_to_text(html: str) -> str:
    """Strip tags and decode entities, collapsing whitespace to single spaces."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_DROP_TAGS):
        tag.decompose()
    text = soup.get_text(separator=" ")
    return _WHITESPACE.sub(" ", text.replace("\xa0", " ")).strip()
