"""
Content-type driven (de)serialization of request and response bodies.

Outgoing bodies are encoded from the request Content-Type header; incoming
bodies are decoded from the response Content-Type header, or a forced type.
"""
import json
from typing import Any, Iterator, List, Mapping, Optional, Tuple, Union

import httpx
import structlog

from .headers import get_header

logger = structlog.get_logger(__name__)


class FormData:
    """Ordered multipart/form-data fields, the wire form of a multipart body."""

    def __init__(self, fields: Optional[Mapping[str, Any]] = None):
        self._fields: List[Tuple[str, Any]] = []
        if fields:
            for key, value in fields.items():
                self.append(key, value)

    def append(self, name: str, value: Any) -> None:
        self._fields.append((str(name), value))

    @property
    def fields(self) -> List[Tuple[str, Any]]:
        return list(self._fields)

    def to_files(self) -> List[Tuple[str, Any]]:
        """Return the fields in the shape httpx takes for a multipart `files=` body.

        Bytes and file-like values become file parts, anything else a
        plain form field.
        """
        files = []
        for name, value in self._fields:
            if isinstance(value, (bytes, bytearray)) or hasattr(value, 'read'):
                files.append((name, (name, value)))
            elif isinstance(value, tuple):
                files.append((name, value))
            else:
                files.append((name, (None, _form_value(value))))
        return files

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FormData) and self._fields == other._fields

    def __repr__(self) -> str:
        return f"FormData({self._fields!r})"


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    return str(value)


def parse_body(body: Any, headers: Mapping[str, Any]) -> Union[str, FormData, Any]:
    """Encode a request body according to the Content-Type header.

    text/* -> str, application/json -> JSON text, multipart/form-data ->
    FormData. Falsy bodies, other content types and a missing Content-Type
    are passed through unchanged.
    """
    if not body:
        return body

    content_type = (get_header(headers, 'content-type') or '').lower()

    if content_type.startswith('text/'):
        return f"{body}"
    elif content_type.startswith('application/json'):
        return json.dumps(body)
    elif content_type.startswith('multipart/form-data'):
        return FormData(body)

    return body


async def resolve_response(
    response: httpx.Response,
    force_type: Optional[str] = None,
    resolve_streams: bool = False
) -> Any:
    """Decode a response body according to its content type.

    Args:
        response: Response, possibly still streaming
        force_type: Content type to use instead of the response header
        resolve_streams: For binary content, read the whole body into bytes
                         instead of returning the open response

    Returns:
        str for text/*, the parsed value for application/json, bytes or the
        unconsumed response for anything else.

    Raises:
        json.JSONDecodeError: JSON content type with a malformed body
    """
    content_type = (force_type or get_header(response.headers, 'content-type') or '').lower()

    if content_type.startswith('text/'):
        await response.aread()
        return response.text
    elif content_type.startswith('application/json'):
        await response.aread()
        return response.json()

    if resolve_streams:
        return await response.aread()

    logger.debug("response_stream_returned",
                 status_code=response.status_code,
                 content_type=content_type)
    return response
