from .models import Page
from .response import page_from_error, page_from_response
from .urls import URLResolutionError, in_domain, resolve

__all__ = ["Page", "page_from_response", "page_from_error", "URLResolutionError", "in_domain", "resolve"]
