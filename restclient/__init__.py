"""
Thin async REST client over httpx.
"""
from .client import DEFAULT_HEADERS, RestClient, simple_fetch
from .codec import FormData, parse_body, resolve_response
from .config import Config
from .exceptions import ConfigurationError, HTTPError, RestClientError
from .headers import get_header, merge_headers
from .log import configure_logging

__version__ = "1.0.0"

__all__ = [
    "RestClient",
    "simple_fetch",
    "DEFAULT_HEADERS",
    "HTTPError",
    "ConfigurationError",
    "RestClientError",
    "FormData",
    "parse_body",
    "resolve_response",
    "get_header",
    "merge_headers",
    "Config",
    "configure_logging",
]
