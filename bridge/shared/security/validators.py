"""
Field normalizers for common identifier types.

These normalize values; they do not validate them. ``is_valid_uuid`` is the
only yes/no check.
"""

import re
from typing import Any

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from bridge.shared.security.sanitization import sanitize_string

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

_http_url = TypeAdapter(AnyHttpUrl)


def sanitize_email(value: Any) -> Any:
    """Trim, lowercase and drop angle brackets. Syntax is not checked."""
    if not isinstance(value, str):
        return value
    return value.strip().lower().replace("<", "").replace(">", "")


def sanitize_url(value: Any) -> Any:
    """Return the canonical form of an http(s) URL, or the escaped text.

    Anything that fails to parse, or uses another scheme, is escaped with
    ``sanitize_string`` and its colons encoded, so the result cannot be
    read back as a URL with a scheme.
    """
    if not isinstance(value, str):
        return value
    try:
        return str(_http_url.validate_python(value))
    except ValidationError:
        return sanitize_string(value).replace(":", "&#x3A;")


def is_valid_uuid(value: Any) -> bool:
    """Match the 8-4-4-4-12 hex layout, any version or variant."""
    return isinstance(value, str) and UUID_PATTERN.fullmatch(value) is not None
