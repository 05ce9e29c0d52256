import re
from typing import Collection, Optional
from urllib.parse import quote, unquote, urljoin, urlsplit, urlunsplit

# trailing "#anchor" made only of word characters and hyphens
_TRAILING_FRAGMENT_RE = re.compile(r"#[a-zA-Z0-9_-]*\Z")

# reserved characters kept as-is when re-encoding a decoded link
_SAFE_CHARS = ";/?:@&=+$,[]!*'()"


class URLResolutionError(ValueError):
    """Raised when a link cannot be turned into an absolute URL."""


def strip_fragment(link: str) -> str:
    """Drop a trailing '#anchor'. Other '#' characters are left untouched."""
    return _TRAILING_FRAGMENT_RE.sub("", link)


def normalize_encoding(link: str) -> str:
    """
    Decode then re-encode percent escapes so already-escaped links coming
    out of sloppy HTML don't end up double-encoded.
    """
    try:
        decoded = unquote(link, errors="strict")
    except UnicodeDecodeError as exc:
        raise URLResolutionError(f"invalid percent-encoding in {link!r}") from exc
    return quote(decoded, safe=_SAFE_CHARS)


def resolve(link: Optional[str], relative_to: str) -> Optional[str]:
    """
    Turn *link* into an absolute URL relative to *relative_to*.
    Returns None for an empty link; raises URLResolutionError if the link
    is malformed or the merge doesn't produce an absolute URL.
    """
    if not link:
        return None

    relative = normalize_encoding(strip_fragment(str(link)))

    try:
        merged = urlsplit(urljoin(relative_to, relative))
    except ValueError as exc:
        raise URLResolutionError(f"cannot merge {relative!r} into {relative_to!r}: {exc}") from exc

    if not merged.scheme:
        raise URLResolutionError(f"{relative!r} did not resolve to an absolute URL")

    if not merged.path:
        merged = merged._replace(path="/")

    return urlunsplit(merged)


def host_of(url: str) -> Optional[str]:
    """Hostname of *url* as normalized by urllib, or None if it can't be parsed."""
    try:
        return urlsplit(str(url)).hostname
    except ValueError:
        return None


def is_absolute(url: str) -> bool:
    try:
        parts = urlsplit(str(url))
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def in_domain(url: str, host: Optional[str], domain_aliases: Collection[str] = ()) -> bool:
    """
    True if *url* lives on *host*, on one of *domain_aliases*, or on the
    "www." variant of *host*.
    """
    candidate = host_of(url)
    return (
        candidate == host
        or candidate in domain_aliases
        or candidate == f"www.{host}"
    )
