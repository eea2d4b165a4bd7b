"""Tests for variable bindings and program assembly."""

import pytest

from rkteval.lib.assembler import assemble
from rkteval.lib.bindings import bind, bind_value, supports_bindings
from rkteval.lib.config import EngineConfig
from rkteval.lib.datum import write_datum
from rkteval.lib.errors import (
    DIALECT_BINDING_UNSUPPORTED,
    MissingParameterError,
    UnsupportedResultTypeError,
)
from rkteval.lib.template import Placeholder


# =============================================================================
# Datum Tests
# =============================================================================


class TestWriteDatum:
    def test_scalars(self):
        assert write_datum(1) == "1"
        assert write_datum(2.5) == "2.5"
        assert write_datum(True) == "#t"
        assert write_datum(None) == "()"

    def test_string_escapes(self):
        """Quotes, backslashes and newlines are escaped."""
        assert write_datum('say "hi"\n') == '"say \\"hi\\"\\n"'
        assert write_datum("a\\b") == '"a\\\\b"'

    def test_infinities(self):
        assert write_datum(float("inf")) == "+inf.0"
        assert write_datum(float("-inf")) == "-inf.0"

    def test_mapping_is_alist(self):
        assert write_datum({"a": 1}) == '(("a" . 1))'


# =============================================================================
# Binding Tests
# =============================================================================


class TestBind:
    def test_empty_bindings(self):
        """No fragment when nothing is bound."""
        assert bind({}) == ""

    def test_scalar_and_list(self):
        """Names are bound at once with define-values, lists quoted."""
        fragment = bind({"x": 1, "y": [2, 3]})
        assert fragment == "(define-values (x y) (values 1 '(2 3)))"

    def test_order_preserved(self):
        """Bindings follow insertion order."""
        fragment = bind({"b": 1, "a": 2, "c": 3})
        assert fragment.startswith("(define-values (b a c)")
        assert fragment.endswith("(values 1 2 3))")

    def test_string_values(self):
        assert bind({"name": "world"}) == '(define-values (name) (values "world"))'

    def test_table_value(self):
        """Nested lists become quoted lists of lists."""
        assert bind_value([[1, 2], [3, 4]]) == "'((1 2) (3 4))"

    def test_hline_rows(self):
        """hline rows in input tables are written as the hline_to token."""
        value = [["a", "b"], "hline", [1, 2]]
        assert bind_value(value) == "'((\"a\" \"b\") null (1 2))"
        assert bind_value(value, hline_to="()") == "'((\"a\" \"b\") () (1 2))"

    def test_none_value(self):
        assert bind_value(None) == "'()"


class TestSupportsBindings:
    def test_allow_list(self):
        assert supports_bindings("racket")
        assert supports_bindings("racket/base")
        assert not supports_bindings("typed/racket")

    def test_custom_list(self):
        assert supports_bindings("typed/racket", ["typed/racket"])


# =============================================================================
# Assembly Tests
# =============================================================================


class TestAssemble:
    def test_output_mode_layout(self):
        """Lang line, then the body untouched."""
        assembly = assemble(
            '(displayln "hi")', {"lang": "racket", "result-type": "output"}
        )
        assert assembly.source == '#lang racket\n(displayln "hi")'
        assert assembly.diagnostics == []

    def test_value_mode_wraps_body(self):
        """In value mode the body is wrapped in the value printer."""
        assembly = assemble("(+ 1 2)", {"lang": "racket", "result-type": "value"})
        lines = assembly.source.split("\n")

        assert lines[0] == "#lang racket"
        assert "(let ([result (let () (+ 1 2)" in assembly.source
        assert lines[-1].endswith("(write result)))")
        assert "write-json" in lines[-1]

    def test_custom_value_printer(self):
        """The value printer is a format spec with a body placeholder."""
        config = EngineConfig(value_printer="(write (let () ${{ body }}))")
        assembly = assemble(
            "(+ 1 2)", {"lang": "racket", "result-type": "value"}, config
        )
        assert assembly.source == "#lang racket\n(write (let () (+ 1 2)))"

    def test_typed_dialect_value_mode_uses_plain_write(self):
        """typed/racket values are printed with write, no dynamic-require."""
        assembly = assemble(
            "(+ 1 2)", {"lang": "typed/racket", "result-type": "value"}
        )
        assert "dynamic-require" not in assembly.source
        assert assembly.source == "#lang typed/racket\n(write (let () (+ 1 2)\n))"

    def test_per_dialect_value_printer(self):
        """value_printers entries win over the defaults for their dialect."""
        config = EngineConfig(
            value_printers={"typed/racket": "(displayln ${{ body }})"}
        )
        assembly = assemble(
            "(+ 1 2)", {"lang": "typed/racket", "result-type": "value"}, config
        )
        assert assembly.source == "#lang typed/racket\n(displayln (+ 1 2))"

        racket = assemble("(+ 1 2)", {"lang": "racket", "result-type": "value"}, config)
        assert "write-json" in racket.source

    def test_full_order(self):
        """Lang, prologue, bindings, body, epilogue."""
        params = {
            "lang": "racket/base",
            "result-type": "output",
            "prologue": "(require racket/list)",
            "epilogue": "(flush-output)",
            "vars": {"x": 1},
        }
        assembly = assemble("(displayln x)", params)
        assert assembly.source.split("\n") == [
            "#lang racket/base",
            "(require racket/list)",
            "(define-values (x) (values 1))",
            "(displayln x)",
            "(flush-output)",
        ]

    def test_prologue_is_expanded(self):
        """Prologue and epilogue expand against the block's params."""
        params = {
            "lang": "racket",
            "result-type": "output",
            "prologue": ["(define limit ", Placeholder("limit"), ")"],
            "limit": 10,
        }
        assembly = assemble("(displayln limit)", params)
        assert "(define limit 10)" in assembly.source

    def test_bindings_appear_once(self):
        """Every name is defined exactly once, in order."""
        params = {
            "lang": "racket",
            "result-type": "output",
            "vars": {"x": 1, "y": [2, 3]},
        }
        source = assemble("(displayln (cons x y))", params).source
        assert source.count("define-values") == 1
        assert "(define-values (x y) (values 1 '(2 3)))" in source

    def test_no_bindings_no_fragment(self):
        source = assemble("1", {"lang": "racket", "result-type": "output", "vars": {}}).source
        assert "define-values" not in source

    def test_unsupported_dialect_skips_bindings(self):
        """Bindings for other dialects are skipped with a diagnostic."""
        params = {
            "lang": "typed/racket",
            "result-type": "output",
            "vars": {"x": 1},
        }
        assembly = assemble("(displayln 1)", params)

        assert assembly.source == "#lang typed/racket\n(displayln 1)"
        assert len(assembly.diagnostics) == 1
        assert assembly.diagnostics[0].code == DIALECT_BINDING_UNSUPPORTED
        assert "typed/racket" in assembly.diagnostics[0].message

    def test_missing_lang_raises(self):
        with pytest.raises(MissingParameterError):
            assemble("1", {"result-type": "value"})

    def test_bad_result_type_raises(self):
        with pytest.raises(UnsupportedResultTypeError):
            assemble("1", {"lang": "racket", "result-type": "table"})

    def test_missing_result_type_raises(self):
        with pytest.raises(UnsupportedResultTypeError):
            assemble("1", {"lang": "racket"})

    def test_hline_to_param(self):
        """hline-to in params overrides the configured token."""
        params = {
            "lang": "racket",
            "result-type": "output",
            "vars": {"t": [[1], "hline", [2]]},
            "hline-to": "'sep",
        }
        assert "'((1) 'sep (2))" in assemble("t", params).source
