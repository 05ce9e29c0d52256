import logging
from typing import Any, Iterable, Optional

import requests

from .models import Page
from .urls import URLResolutionError

logger = logging.getLogger(__name__)


def _elapsed_ms(response: requests.Response) -> Optional[int]:
    elapsed = getattr(response, "elapsed", None)
    if elapsed is None:
        return None
    return round(elapsed.total_seconds() * 1000)


def page_from_response(
    response: requests.Response,
    depth: int = 0,
    referer: Optional[str] = None,
    domain_aliases: Optional[Iterable[str]] = None,
    success_codes: Optional[set[int]] = None,
) -> Page:
    """
    Build a Page from a finished requests.Response.

    URLs visited on the way (response.history) become aliases of the page.
    For redirect responses the Location header becomes redirect_to; a
    Location that can't be resolved is logged and dropped.
    """
    headers = {name.lower(): [value] for name, value in response.headers.items()}
    aliases = [r.url for r in response.history if r.url and r.url != response.url]

    params: dict[str, Any] = dict(
        url=response.url,
        code=response.status_code,
        headers=headers,
        body=response.content,
        depth=depth,
        referer=referer,
        response_time=_elapsed_ms(response),
        aliases=aliases,
        domain_aliases=list(domain_aliases or []),
        success_codes=success_codes,
    )

    location = response.headers.get("location") if response.is_redirect else None
    try:
        return Page(redirect_to=location, **params)
    except URLResolutionError as exc:
        logger.warning("Bad Location header on %s: %s", response.url, exc)
        return Page(**params)


def page_from_error(
    url: str,
    error: Any,
    depth: int = 0,
    referer: Optional[str] = None,
    response_time: Optional[int] = None,
) -> Page:
    """Page for a fetch that never produced a response. fetched is False."""
    logger.info("Recording failed fetch for %s: %s", url, error)
    return Page(url=url, error=error, depth=depth, referer=referer, response_time=response_time)
