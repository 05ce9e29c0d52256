import json
import logging
import re
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Optional, Union

from bs4 import BeautifulSoup

from . import parser
from .config import HTML_CONTENT_TYPES, NOT_FOUND_CODE, REDIRECT_CODES, SUCCESS_CODES
from .serialization import (
    decode_headers,
    dumps,
    encode_headers,
    normalize_headers,
    prune_blank,
    to_int,
)
from .urls import URLResolutionError, host_of, in_domain, is_absolute, resolve

logger = logging.getLogger(__name__)

_HTML_RE = re.compile(r"(%s)\b" % "|".join(re.escape(t) for t in HTML_CONTENT_TYPES))

# marks a lazily computed field that hasn't been computed yet
_UNSET = object()


@dataclass
class Page:
    url: str
    code: Optional[int] = None
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: Optional[Union[str, bytes]] = field(default=None, repr=False)
    error: Any = None                   # whatever the fetch layer caught
    depth: int = 0                      # not necessarily the shortest path from the seed
    referer: Optional[str] = None
    redirect_to: Optional[str] = None
    response_time: Optional[int] = None  # milliseconds
    aliases: list[str] = field(default_factory=list)
    domain_aliases: list[str] = field(default_factory=list)
    success_codes: Optional[set[int]] = None
    user_data: Optional[SimpleNamespace] = field(default_factory=SimpleNamespace)
    storable: bool = True

    _fetched: Optional[bool] = field(default=None, init=False, repr=False, compare=False)

    # lazily computed, see document / base / links
    _document: Any = field(default=_UNSET, init=False, repr=False, compare=False)
    _base: Any = field(default=_UNSET, init=False, repr=False, compare=False)
    _links: Optional[list[str]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        if not is_absolute(self.url):
            raise ValueError(f"page url must be absolute, got {self.url!r}")
        object.__setattr__(self, "url", str(self.url))
        self.headers = normalize_headers(self.headers)
        if isinstance(self.aliases, str):
            self.aliases = [self.aliases]
        self.aliases = [a for a in (self.aliases or []) if a is not None]
        self.domain_aliases = list(self.domain_aliases or [])
        self.depth = self.depth or 0
        self._fetched = self.code is not None
        # a Location header is relative to the requested url, not to any <base> in the body
        self.redirect_to = resolve(self.redirect_to, self.url)

    def __setattr__(self, name, value):
        if name == "url" and "url" in self.__dict__:
            raise AttributeError("url is read-only once the page is built")
        super().__setattr__(name, value)

    # --- response metadata ---

    @property
    def fetched(self) -> Optional[bool]:
        """Whether a status code was known when the page was built."""
        return self._fetched

    @property
    def content_type(self) -> str:
        return self.headers["content-type"][0]

    @property
    def is_html(self) -> bool:
        return bool(_HTML_RE.match(self.content_type or ""))

    @property
    def host(self) -> Optional[str]:
        return host_of(self.url)

    @property
    def is_redirect(self) -> bool:
        return self.code in REDIRECT_CODES

    @property
    def is_not_found(self) -> bool:
        return self.code == NOT_FOUND_CODE

    @property
    def is_successful_response(self) -> bool:
        """success_codes overrides the default 2xx range when set."""
        if self.success_codes is not None:
            return self.code in self.success_codes
        return self.code in SUCCESS_CODES

    # --- document, base, links ---

    @property
    def document(self) -> Optional[BeautifulSoup]:
        """Parsed body, only for HTML responses. None once discarded."""
        if self._document is _UNSET:
            if self.body is not None and self.is_html:
                self._document = parser.parse_document(self.body, url=self.url)
            else:
                self._document = None
        return self._document

    @property
    def base(self) -> str:
        """
        URL relative links are resolved against: the document's
        <head><base href> when it declares one, otherwise the page url.
        """
        if self._base is _UNSET:
            self._base = self._find_base()
        return self._base or self.url

    def _find_base(self) -> Optional[str]:
        soup = self.document
        if soup is None:
            return None
        href = parser.find_base_href(soup)
        if not href:
            return None
        try:
            return resolve(href, self.url)
        except URLResolutionError as exc:
            logger.warning("Ignoring <base href=%r> on %s: %s", href, self.url, exc)
            return None

    @property
    def links(self) -> list[str]:
        """Distinct in-domain URLs to follow from this page, sorted."""
        if self._links is None:
            self._links = self._collect_links()
        return list(self._links)

    def _collect_links(self) -> list[str]:
        soup = self.document
        if soup is None:
            return []

        if parser.is_noindex_nofollow(soup):
            logger.debug("Robots meta forbids following links on %s", self.url)
            return []

        found = set()
        for href in parser.followable_hrefs(soup):
            try:
                absolute = self.to_absolute(href)
            except URLResolutionError as exc:
                logger.debug("Skipping link %r on %s: %s", href, self.url, exc)
                continue
            if absolute and self.in_domain(absolute):
                found.add(absolute)

        redirect = self.extract_meta_redirect()
        if redirect:
            found.add(redirect)

        return sorted(found)

    def discard_links(self) -> None:
        """Drop the links; they will not be recomputed."""
        self._links = []

    def discard_document(self) -> None:
        """Free the parsed document and body, keeping the links found in them."""
        # both caches read the document, fill them before it goes away
        self.links
        self.base
        self._document = None
        self.body = None

    # --- url helpers ---

    def to_absolute(self, link: Optional[str]) -> Optional[str]:
        if not link:
            return None
        return resolve(link, self.base)

    def in_domain(self, url: str) -> bool:
        return in_domain(url, self.host, self.domain_aliases)

    def extract_meta_redirect(self) -> Optional[str]:
        """
        Target of a <meta http-equiv="refresh" content="0;URL=..."> tag,
        if the document has one pointing inside this site.
        """
        soup = self.document
        if soup is None:
            return None

        content = parser.find_meta_refresh(soup)
        if content is None:
            return None

        target = parser.meta_refresh_target(content)
        if not target:
            return None

        if not self.in_domain(target):
            logger.debug("Not following cross-domain meta refresh %s -> %s", self.url, target)
            return None

        try:
            return self.to_absolute(target)
        except URLResolutionError as exc:
            logger.debug("Bad meta refresh target %r on %s: %s", target, self.url, exc)
            return None

    # --- serialization ---

    def to_dict(self) -> dict:
        """Canonical map of the page. Computes links as a side effect."""
        return {
            "url": self.url,
            "headers": encode_headers(self.headers),
            "body": self.body,
            "links": self.links,
            "code": self.code,
            "depth": self.depth,
            "referer": "" if self.referer is None else str(self.referer),
            "redirect_to": "" if self.redirect_to is None else str(self.redirect_to),
            "response_time": self.response_time,
            "fetched": self._fetched,
            "user_data": {} if self.user_data is None else dict(vars(self.user_data)),
        }

    def to_json(self) -> str:
        """
        JSON text of the canonical map with empty values dropped. Empty and
        missing values can't be told apart afterwards.
        """
        data = prune_blank(self.to_dict())
        if not self.content_type:
            data.pop("headers", None)
        return dumps(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Page":
        """
        Rebuild a page from its canonical map. Missing or malformed numbers
        come back as 0; a missing user_data key leaves user_data as None.
        """
        page = cls(url=data["url"])
        page.headers = decode_headers(data.get("headers"))
        page.body = data.get("body")
        page._links = [str(link) for link in data.get("links") or []]
        page.code = to_int(data.get("code"))
        page.depth = to_int(data.get("depth"))
        page.referer = data.get("referer")
        redirect_to = data.get("redirect_to")
        page.redirect_to = str(redirect_to) if redirect_to else None
        page.response_time = to_int(data.get("response_time"))
        page._fetched = data.get("fetched")
        user_data = data.get("user_data")
        page.user_data = SimpleNamespace(**user_data) if user_data is not None else None
        return page

    @classmethod
    def from_json(cls, text: str) -> "Page":
        return cls.from_dict(json.loads(text))
