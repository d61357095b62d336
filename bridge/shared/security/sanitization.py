"""
Sanitization engine.

Pure functions that make attacker-controlled strings and JSON-like values
safe for HTML and query sinks. Every function returns a new value and
leaves its argument untouched.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Union

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

JsonValue = Union[None, bool, int, float, str, list["JsonValue"], dict[str, "JsonValue"]]

DEFAULT_MAX_DEPTH = 32

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        '"': "&quot;",
        "'": "&#x27;",
        "<": "&lt;",
        ">": "&gt;",
        "/": "&#x2F;",
        "\\": "&#x5C;",
        "`": "&#96;",
    }
)


class SanitizationError(ValueError):
    """Raised when a value cannot be made safe and must be rejected."""


class SanitizationDepthError(SanitizationError):
    """Raised when a value nests deeper than the allowed maximum."""

    def __init__(self, max_depth: int) -> None:
        super().__init__(f"Value nests deeper than {max_depth} levels")
        self.max_depth = max_depth


def sanitize_string(value: Any) -> Any:
    """Trim a string and escape HTML metacharacters.

    Non-string input is returned unchanged. Not idempotent: ``"&"`` becomes
    ``"&amp;"`` and then ``"&amp;amp;"``, so a value must be sanitized once.
    """
    if not isinstance(value, str):
        return value
    return value.strip().translate(_ESCAPE_TABLE)


# --- JSON values ---


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _empty_like(value: Any) -> dict | list:
    return {} if isinstance(value, Mapping) else []


def sanitize_object(value: JsonValue, max_depth: int = DEFAULT_MAX_DEPTH) -> JsonValue:
    """Return a deep copy of a JSON-like value with every string escaped.

    Mappings keep their keys and key order, lists and tuples become lists,
    other scalars pass through. The walk is iterative; a value nesting more
    than ``max_depth`` containers (self-referential values included) is
    rejected.

    Raises:
        SanitizationDepthError: If the nesting exceeds ``max_depth``.
    """
    if not _is_container(value):
        return sanitize_string(value)

    root = _empty_like(value)
    stack: list[tuple[Any, dict | list, int]] = [(value, root, 1)]
    while stack:
        source, target, depth = stack.pop()
        if depth > max_depth:
            raise SanitizationDepthError(max_depth)

        items = source.items() if isinstance(source, Mapping) else enumerate(source)
        for key, child in items:
            if _is_container(child):
                clean = _empty_like(child)
                stack.append((child, clean, depth + 1))
            else:
                clean = sanitize_string(child)

            if isinstance(target, dict):
                target[key] = clean
            else:
                target.append(clean)
    return root


# --- HTML ---

# Disallowed tags whose content is dropped along with the tag.
_DROP_CONTENT_TAGS = frozenset(
    {
        "script", "style", "template", "iframe", "noscript", "noembed",
        "noframes", "object", "embed", "svg", "math", "title", "xmp",
        "textarea", "select", "head",
    }
)
_URI_ATTRIBUTES = frozenset({"href", "src", "action", "formaction", "xlink:href"})
_SAFE_URI_SCHEMES = ("http:", "https:", "mailto:", "tel:")


@dataclass(frozen=True)
class SanitizationPolicy:
    """Allow-list applied by ``sanitize_html``."""

    allowed_tags: frozenset[str] = field(
        default_factory=lambda: frozenset(
            {"b", "i", "em", "strong", "a", "p", "br", "span"}
        )
    )
    allowed_attributes: frozenset[str] = field(
        default_factory=lambda: frozenset({"href", "target", "rel", "class", "id"})
    )
    allow_data_attributes: bool = False

    def merged(self, **overrides: Any) -> "SanitizationPolicy":
        """Return a copy with ``overrides`` applied over this policy."""
        for name in ("allowed_tags", "allowed_attributes"):
            if name in overrides:
                overrides[name] = frozenset(tag.lower() for tag in overrides[name])
        return replace(self, **overrides)


DEFAULT_HTML_POLICY = SanitizationPolicy()


def _is_safe_uri(value: str) -> bool:
    compact = "".join(ch for ch in value if not ch.isspace() and ch.isprintable())
    compact = compact.lower()
    scheme_end = compact.find(":")
    if scheme_end == -1:
        return True
    # A colon after a path, query or fragment delimiter is not a scheme.
    if any(delim in compact[:scheme_end] for delim in "/?#"):
        return True
    return compact.startswith(_SAFE_URI_SCHEMES)


def _allowed_attribute(name: str, value: Any, policy: SanitizationPolicy) -> bool:
    if name.startswith("data-"):
        return policy.allow_data_attributes
    if name not in policy.allowed_attributes:
        return False
    if name in _URI_ATTRIBUTES:
        text = " ".join(value) if isinstance(value, list) else str(value)
        return _is_safe_uri(text)
    return True


def sanitize_html(value: Any, **overrides: Any) -> Any:
    """Rebuild an HTML fragment keeping only allow-listed tags and attributes.

    Args:
        value: The HTML fragment. Non-string input is returned unchanged.
        **overrides: ``SanitizationPolicy`` fields merged over the defaults.

    Returns:
        The cleaned fragment. Text inside removed tags is kept, except for
        tags such as ``script`` or ``style`` whose content is removed too.
    """
    if not isinstance(value, str):
        return value
    policy = DEFAULT_HTML_POLICY.merged(**overrides) if overrides else DEFAULT_HTML_POLICY

    soup = BeautifulSoup(value, "html.parser")
    for node in list(soup.descendants):
        if isinstance(node, PreformattedString):
            node.extract()

    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        if tag.name not in policy.allowed_tags:
            if tag.name in _DROP_CONTENT_TAGS:
                tag.decompose()
            else:
                tag.unwrap()
            continue
        tag.attrs = {
            name: attr
            for name, attr in tag.attrs.items()
            if _allowed_attribute(name.lower(), attr, policy)
        }
    return str(soup)
