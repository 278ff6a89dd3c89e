from __future__ import annotations

import unittest

from rulegen_lang import (
    BindingScope,
    ResultCompiler,
    SchemaError,
    UnresolvedTypeError,
    parse_result,
    parse_term,
)

from tests.generator_runner import schema_for


def _compile(text: str, bound=("x", "y"), arch: str = "generic"):
    scope = BindingScope("f:1")
    for name in bound:
        scope.declare(name, name)
    return ResultCompiler(schema_for(arch), scope, "f:1").compile_value(parse_result(text, "f:1"))


class ResultCompilerTests(unittest.TestCase):
    def test_top_level_node_is_reset_in_place(self) -> None:
        self.assertEqual(
            _compile("(ADDQ x y)", arch="AMD64"),
            ["v.reset(Op.AMD64ADDQ)", "v.add_arg(x)", "v.add_arg(y)"],
        )

    def test_type_override_and_auxint(self) -> None:
        self.assertEqual(
            _compile("(Const64 <x.type> [y.aux_int + 1])"),
            ["v.reset(Op.Const64)", "v.type = x.type", "v.aux_int = y.aux_int + 1"],
        )

    def test_nested_nodes_are_allocated_with_default_type(self) -> None:
        lines = _compile("(SETL (CMPQ x y))", arch="AMD64")
        self.assertEqual(
            lines,
            [
                "v.reset(Op.AMD64SETL)",
                "_v0 = b.new_value0(v.line, Op.AMD64CMPQ, TypeFlags)",
                "_v0.add_arg(x)",
                "_v0.add_arg(y)",
                "v.add_arg(_v0)",
            ],
        )

    def test_frontend_types(self) -> None:
        lines = _compile("(Not (Eq64 x y))")
        self.assertIn("_v0 = b.new_value0(v.line, Op.Eq64, config.fe.type_bool())", lines)

    def test_untyped_nested_node_is_an_error(self) -> None:
        with self.assertRaises(UnresolvedTypeError):
            _compile("(Neg64 (Add64 x y))")

    def test_bare_variable_becomes_copy(self) -> None:
        self.assertEqual(
            _compile("x"), ["v.reset(Op.Copy)", "v.type = x.type", "v.add_arg(x)"]
        )

    def test_redirect_allocates_in_other_block(self) -> None:
        lines = _compile("@x.block (Arg <v.type> {y})")
        self.assertEqual(
            lines,
            [
                "b = x.block",
                "_v0 = b.new_value0(v.line, Op.Arg, v.type)",
                "_v0.aux = y",
                "v.reset(Op.Copy)",
                "v.add_arg(_v0)",
            ],
        )

    def test_unbound_qualifier_names_are_emitted_as_written(self) -> None:
        self.assertEqual(
            _compile("(Const64 <TypeFlags> [limit])"),
            ["v.reset(Op.Const64)", "v.type = TypeFlags", "v.aux_int = limit"],
        )

    def test_temporaries_do_not_clash_with_rule_variables(self) -> None:
        lines = _compile("(Add64 (Const64 <v0.type> [c]) v0)", bound=("v0", "c"))
        self.assertIn("_v0 = b.new_value0(v.line, Op.Const64, v0.type)", lines)
        self.assertEqual(lines[-1], "v.add_arg(v0)")

    def test_unbound_variable_is_an_error(self) -> None:
        with self.assertRaises(SchemaError):
            _compile("(Neg64 z)")

    def test_arity_is_checked(self) -> None:
        with self.assertRaises(SchemaError):
            _compile("(Neg64 x y)")

    def test_control_value(self) -> None:
        scope = BindingScope("f:1")
        scope.declare("cond", "b.control")
        compiler = ResultCompiler(schema_for("AMD64"), scope, "f:1", line="b.line")
        lines, expr = compiler.compile_control(parse_term("(TESTB cond cond)", "f:1"))
        self.assertEqual(expr, "_v0")
        self.assertEqual(lines[0], "_v0 = b.new_value0(b.line, Op.AMD64TESTB, TypeFlags)")


if __name__ == "__main__":
    unittest.main(verbosity=2)
