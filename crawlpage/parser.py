import logging
from typing import Optional, Union

from bs4 import BeautifulSoup

from .config import HTML_PARSER

logger = logging.getLogger(__name__)

# http-equiv spellings honoured for meta refresh
_REFRESH_VARIANTS = ["refresh", "Refresh", "REFRESH"]


def parse_document(body: Union[str, bytes], url: str = "") -> Optional[BeautifulSoup]:
    """
    Parse a raw response body into a navigable tree.
    Attributes such as rel/class are kept as plain strings so substring
    checks behave the same way on every tag. Returns None if parsing fails.
    """
    try:
        return BeautifulSoup(body, HTML_PARSER, multi_valued_attributes=None)
    except Exception as exc:
        logger.warning("HTML parse failed for %s: %s", url or "<unknown>", exc)
        return None


def find_base_href(soup: BeautifulSoup) -> Optional[str]:
    """href of <head><base>, or None if the document doesn't declare one."""
    tag = soup.select_one("head > base[href]")
    if tag is None:
        return None
    return tag.get("href") or None


def is_noindex_nofollow(soup: BeautifulSoup) -> bool:
    """True when a robots meta tag asks for both noindex and nofollow."""
    for tag in soup.find_all("meta", attrs={"name": "robots"}):
        content = tag.get("content") or ""
        if "noindex" in content and "nofollow" in content:
            return True
    return False


def followable_hrefs(soup: BeautifulSoup) -> list[str]:
    """Raw href values of every anchor not marked rel="nofollow"."""
    hrefs = []
    for a in soup.find_all("a", href=True):
        rel = a.get("rel") or ""
        if "nofollow" in rel:
            continue
        href = a.get("href")
        if href:
            hrefs.append(href)
    return hrefs


def find_meta_refresh(soup: BeautifulSoup) -> Optional[str]:
    """content attribute of the first <meta http-equiv="refresh">."""
    tag = soup.find("meta", attrs={"http-equiv": _REFRESH_VARIANTS})
    if tag is None:
        return None
    content = tag.get("content")
    return content if isinstance(content, str) else None


def meta_refresh_target(content: str) -> Optional[str]:
    """
    Pull the target out of a refresh directive like "0;URL=http://foo.com".
    The whole directive is lower-cased first, so the target comes back
    lower-cased too.
    """
    parts = content.lower().split(";url=", 1)
    if len(parts) != 2:
        return None
    return parts[1]
