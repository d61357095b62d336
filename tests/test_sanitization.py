"""
Tests for the sanitization engine.

Pure functions only; no application required.
"""

import copy

import pytest

from bridge.shared.security.sanitization import (
    DEFAULT_HTML_POLICY,
    SanitizationDepthError,
    SanitizationError,
    sanitize_html,
    sanitize_object,
    sanitize_string,
)


class TestSanitizeString:
    """Tests for sanitize_string."""

    def test_script_tag_loses_angle_brackets(self) -> None:
        """No literal < or > survives."""
        result = sanitize_string("<script>alert(1)</script>")
        assert "<" not in result
        assert ">" not in result
        assert result == "&lt;script&gt;alert(1)&lt;&#x2F;script&gt;"

    def test_trims_then_escapes(self) -> None:
        """Surrounding whitespace is removed before escaping."""
        assert sanitize_string('  "a" & \'b\'  ') == "&quot;a&quot; &amp; &#x27;b&#x27;"

    def test_escapes_backslash_and_backtick(self) -> None:
        """Backslash and backtick are escaped as well."""
        assert sanitize_string("a\\b`c") == "a&#x5C;b&#96;c"

    def test_not_idempotent(self) -> None:
        """Sanitizing twice escapes the entities produced the first time."""
        once = sanitize_string("&")
        twice = sanitize_string(once)
        assert once == "&amp;"
        assert twice == "&amp;amp;"
        assert once != twice

    @pytest.mark.parametrize("value", [None, 42, 3.5, True, ["<b>"], {"a": "<b>"}])
    def test_non_strings_unchanged(self, value) -> None:
        """Non-string input is returned as-is."""
        assert sanitize_string(value) is value


class TestSanitizeObject:
    """Tests for sanitize_object."""

    def test_nested_shape_preserved(self) -> None:
        """Every string leaf is escaped, every other leaf kept."""
        result = sanitize_object({"a": [1, "<b>", {"c": "<i>"}]})
        assert result == {"a": [1, "&lt;b&gt;", {"c": "&lt;i&gt;"}]}

    def test_does_not_mutate_argument(self) -> None:
        """The input is deep-equal to its snapshot afterwards."""
        original = {"title": " <h1>Dev</h1> ", "tags": ["<x>", {"y": "'"}], "n": 3}
        snapshot = copy.deepcopy(original)
        result = sanitize_object(original)
        assert original == snapshot
        assert result is not original
        assert result["tags"] is not original["tags"]

    def test_key_order_preserved(self) -> None:
        """Mapping keys keep their insertion order."""
        result = sanitize_object({"z": "1", "a": "2", "m": {"q": "3", "b": "4"}})
        assert list(result) == ["z", "a", "m"]
        assert list(result["m"]) == ["q", "b"]

    def test_keys_are_not_escaped(self) -> None:
        """Only values are escaped."""
        assert sanitize_object({"<k>": "v"}) == {"<k>": "v"}

    def test_scalars_pass_through(self) -> None:
        """None, booleans and numbers are left alone."""
        payload = {"a": None, "b": False, "c": 0, "d": 1.25}
        assert sanitize_object(payload) == payload

    def test_top_level_values(self) -> None:
        """Top-level scalars, strings and lists are handled."""
        assert sanitize_object(7) == 7
        assert sanitize_object("<p>") == "&lt;p&gt;"
        assert sanitize_object(["<p>", ("<q>",)]) == ["&lt;p&gt;", ["&lt;q&gt;"]]

    def test_depth_within_limit(self) -> None:
        """Nesting up to the limit is accepted."""
        value = {"a": {"b": {"c": "<d>"}}}
        assert sanitize_object(value, max_depth=3) == {"a": {"b": {"c": "&lt;d&gt;"}}}

    def test_depth_over_limit_rejected(self) -> None:
        """Nesting past the limit fails closed."""
        value = {"a": {"b": {"c": {"d": "e"}}}}
        with pytest.raises(SanitizationDepthError):
            sanitize_object(value, max_depth=3)

    def test_very_deep_input_does_not_exhaust_stack(self) -> None:
        """Deep input is rejected without recursion errors."""
        value: list = []
        for _ in range(100_000):
            value = [value]
        with pytest.raises(SanitizationError):
            sanitize_object(value)

    def test_self_reference_rejected(self) -> None:
        """A value containing itself is rejected rather than looping."""
        value: dict = {"name": "x"}
        value["self"] = value
        with pytest.raises(SanitizationDepthError):
            sanitize_object(value)


class TestSanitizeHtml:
    """Tests for sanitize_html."""

    def test_allowed_markup_kept(self) -> None:
        """Allow-listed tags and attributes survive."""
        html = '<p class="lead">Hi <b>there</b> <a href="https://x.io" rel="nofollow">x</a></p>'
        assert sanitize_html(html) == html

    def test_script_removed_with_content(self) -> None:
        """Script tags and their bodies are dropped."""
        assert sanitize_html("<p>ok</p><script>alert(1)</script>") == "<p>ok</p>"

    def test_disallowed_tag_unwrapped(self) -> None:
        """Other disallowed tags are removed but their text kept."""
        assert sanitize_html("<div><b>bold</b> text</div>") == "<b>bold</b> text"

    def test_event_handlers_dropped(self) -> None:
        """Attributes not on the allow-list are removed."""
        assert sanitize_html('<b onclick="steal()">x</b>') == "<b>x</b>"

    def test_data_attributes_dropped(self) -> None:
        """data-* attributes are refused by default."""
        assert sanitize_html('<span data-id="1" id="s">x</span>') == '<span id="s">x</span>'

    def test_data_attributes_allowed_by_override(self) -> None:
        """The policy override can allow data-* attributes."""
        result = sanitize_html('<span data-id="1">x</span>', allow_data_attributes=True)
        assert result == '<span data-id="1">x</span>'

    def test_javascript_href_dropped(self) -> None:
        """Links with script schemes lose their href."""
        assert sanitize_html('<a href="javascript:alert(1)">x</a>') == "<a>x</a>"
        assert sanitize_html('<a href=" JaVa\tScRiPt:alert(1)">x</a>') == "<a>x</a>"

    def test_relative_href_kept(self) -> None:
        """Relative links are safe."""
        assert sanitize_html('<a href="/jobs?id=1:2">x</a>') == '<a href="/jobs?id=1:2">x</a>'

    def test_comments_removed(self) -> None:
        """HTML comments are stripped."""
        assert sanitize_html("<b>a</b><!-- secret -->") == "<b>a</b>"

    def test_override_merges_over_defaults(self) -> None:
        """Overrides replace only the fields given."""
        assert sanitize_html("<ul><li>a</li></ul>", allowed_tags=["ul", "li"]) == (
            "<ul><li>a</li></ul>"
        )
        assert sanitize_html("<b>a</b>", allowed_tags=["ul"]) == "a"
        assert DEFAULT_HTML_POLICY.allowed_tags == frozenset(
            {"b", "i", "em", "strong", "a", "p", "br", "span"}
        )

    def test_non_string_unchanged(self) -> None:
        """Non-string input is returned as-is."""
        assert sanitize_html(None) is None
