"""
Errors raised by the REST client.

Transport failures (httpx.TransportError) and JSON decoding failures
(json.JSONDecodeError) are not wrapped and propagate as they are raised.
"""
from http import HTTPStatus
from typing import Any, Optional


def status_text(code: int) -> str:
    """Return the standard reason phrase for a status code, or '' if unknown."""
    try:
        return HTTPStatus(int(code)).phrase
    except ValueError:
        return ""


class RestClientError(Exception):
    """Base class for errors raised by restclient itself."""


class ConfigurationError(RestClientError, ValueError):
    """Missing or invalid construction or call arguments."""


class HTTPError(RestClientError):
    """The server answered with a non-success status code."""

    def __init__(self, code: int, message: Optional[str] = None, response: Any = None):
        """Build an error for a failed response.

        Args:
            code: HTTP status code
            message: Error message. Falls back to the reason phrase of `code`.
            response: Decoded response body. Defaults to an empty dict.
        """
        if not message:
            message = status_text(code)

        super().__init__(message)

        self._code = int(code)
        self._response = response if response is not None else {}

    @property
    def code(self) -> int:
        return self._code

    @property
    def status_text(self) -> str:
        """Reason phrase derived from the status code."""
        return status_text(self._code)

    @property
    def response(self) -> Any:
        return self._response

    @property
    def message(self) -> str:
        return self.args[0] if self.args else ""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self._code}, message={self.message!r})"
