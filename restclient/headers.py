"""
Header helpers: case-insensitive lookup and left-to-right merging.
"""
import re
from typing import Any, Dict, Mapping, Optional

# Keys that don't start with a letter or digit are never real header names
_HEADER_NAME = re.compile(r'^[a-z0-9]', re.IGNORECASE)


def get_header(headers: Mapping[str, Any], name: str) -> Optional[Any]:
    """Return the value of header `name`, matched case-insensitively.

    When several keys differ only in case, the first one in iteration
    order wins. Returns None if the header is absent.
    """
    if not headers:
        return None

    lname = name.lower()
    for key in headers.keys():
        if not isinstance(key, str) or not _HEADER_NAME.match(key):
            continue
        if key.lower() == lname:
            return headers[key]
    return None


def _fold(name: Any) -> Any:
    return name.lower() if isinstance(name, str) else name


def merge_headers(*sources: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge header mappings, later sources overriding earlier ones key by key.

    Names compare case-insensitively; an override keeps the spelling of the
    source that set it.
    """
    merged: Dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            for existing in [k for k in merged if _fold(k) == _fold(key)]:
                del merged[existing]
            merged[key] = value
    return merged
