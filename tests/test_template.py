"""Tests for format spec expansion."""

import pytest

from rkteval.lib.errors import InvalidTokenError, MissingKeyError
from rkteval.lib.template import Marker, Placeholder, expand, parse_format


# =============================================================================
# expand
# =============================================================================


class TestExpand:
    def test_literal_string_returned_unchanged(self):
        """A plain string spec ignores params entirely."""
        assert expand("racket -u ${{ src-file }}", {}) == "racket -u ${{ src-file }}"
        assert expand("(+ 1 2)", {"x": 1}) == "(+ 1 2)"

    def test_spec_without_placeholders_is_independent_of_params(self):
        """Specs with only literals and markers expand the same for any params."""
        spec = ["(display ", Marker.QUOTE, "hi", Marker.QUOTE, ")", Marker.NEWLINE]
        assert expand(spec, {}) == expand(spec, {"a": 1, "b": [1, 2]})
        assert expand(spec, {}) == '(display "hi")\n'

    def test_markers(self):
        """Markers expand to newline, double quote and apostrophe."""
        spec = [Marker.NEWLINE, Marker.QUOTE, Marker.APOSTROPHE]
        assert expand(spec, {}) == "\n\"'"

    def test_placeholder_substitution(self):
        """Placeholders take their value from params."""
        spec = [Placeholder("command"), " -u ", Placeholder("src-file")]
        params = {"command": "racket", "src-file": "/tmp/a.rkt"}
        assert expand(spec, params) == "racket -u /tmp/a.rkt"

    def test_list_values_render_as_racket_lists(self):
        """List values keep a readable literal syntax."""
        spec = ["(apply + '", Placeholder("xs"), ")"]
        assert expand(spec, {"xs": [1, 2, 3]}) == "(apply + '(1 2 3))"

    def test_nested_list_with_strings(self):
        """Strings inside lists are written as string literals."""
        spec = [Placeholder("rows")]
        assert expand(spec, {"rows": [["a", 1], ["b", 2]]}) == '(("a" 1) ("b" 2))'

    def test_scalar_values(self):
        """Numbers and booleans render as Racket literals."""
        spec = [Placeholder("n"), " ", Placeholder("flag")]
        assert expand(spec, {"n": 42, "flag": False}) == "42 #f"

    def test_missing_placeholder_raises(self):
        """A placeholder missing from params raises MissingKeyError."""
        spec = ["racket -u ", Placeholder("src-file")]
        with pytest.raises(MissingKeyError) as excinfo:
            expand(spec, {"lang": "racket"})

        assert excinfo.value.name == "src-file"
        assert excinfo.value.params == {"lang": "racket"}
        assert "src-file" in str(excinfo.value)

    def test_missing_placeholder_after_literals_raises(self):
        """Failure happens even when earlier tokens already expanded."""
        spec = ["a", Marker.NEWLINE, Placeholder("x"), Placeholder("missing")]
        with pytest.raises(MissingKeyError):
            expand(spec, {"x": 1})

    def test_invalid_token_raises(self):
        """Anything that is not a token raises InvalidTokenError."""
        with pytest.raises(InvalidTokenError) as excinfo:
            expand(["ok", 42], {})
        assert excinfo.value.token == 42

    def test_empty_spec(self):
        """An empty token sequence expands to an empty string."""
        assert expand([], {}) == ""

    def test_non_sequence_spec_raises(self):
        """A spec that is neither text nor a token sequence is rejected."""
        with pytest.raises(InvalidTokenError) as excinfo:
            expand(5, {})
        assert excinfo.value.token == 5

    def test_mapping_spec_raises(self):
        with pytest.raises(InvalidTokenError):
            expand({"a": 1}, {"a": 1})


# =============================================================================
# parse_format
# =============================================================================


class TestParseFormat:
    def test_plain_text(self):
        """Text without placeholders is one literal token."""
        assert parse_format("racket -u foo.rkt") == ["racket -u foo.rkt"]

    def test_placeholders(self):
        """${{ name }} becomes a Placeholder."""
        tokens = parse_format("racket -u ${{ src-file }} > ${{out-file}}")
        assert tokens == [
            "racket -u ",
            Placeholder("src-file"),
            " > ",
            Placeholder("out-file"),
        ]

    def test_marker_names(self):
        """ln, quot and apos become markers."""
        tokens = parse_format("${{ quot }}x${{ quot }}${{ ln }}${{ apos }}")
        assert tokens == [Marker.QUOTE, "x", Marker.QUOTE, Marker.NEWLINE, Marker.APOSTROPHE]

    def test_parsed_spec_expands(self):
        """Parsed specs expand like hand-built ones."""
        tokens = parse_format("(define n ${{ n }})")
        assert expand(tokens, {"n": 3}) == "(define n 3)"

    def test_racket_dollar_text_untouched(self):
        """Bare $ and braces that are not ${{ }} stay literal."""
        assert parse_format("echo $HOME {x}") == ["echo $HOME {x}"]
