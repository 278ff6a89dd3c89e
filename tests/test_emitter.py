from __future__ import annotations

import os
import tempfile
import unittest

from rulegen_lang import (
    EmitError,
    FileSink,
    GeneratedUnit,
    GeneratorOptions,
    MemorySink,
    RuleGenerator,
    RulegenError,
    assemble,
    generate_rules,
    unit_path,
    validate,
)
from rulegen_lang.emitter import emit, header, indent

from tests.generator_runner import RUNTIME, schema_for


class EmitterTests(unittest.TestCase):
    def test_header(self) -> None:
        lines = header(GeneratorOptions(arch="AMD64", runtime_module="ssa"))
        self.assertEqual(lines[0], "# autogenerated from AMD64.rules: do not edit!")
        self.assertEqual(lines[1], "# generated with: rulegen AMD64.rules")
        self.assertIn("import math", lines)
        self.assertEqual(
            lines[-1],
            "from ssa import BRANCH_UNKNOWN, BlockKind, Op, TypeFlags, TypeInt128, TypeMem, TypeVoid",
        )

    def test_assemble_separates_sections(self) -> None:
        source = assemble(GeneratorOptions(), [["def f():", "    pass"], [], ["X = 1"]])
        self.assertIn("\n\n\ndef f():\n    pass\n\n\nX = 1\n", source)

    def test_indent_keeps_blank_lines_empty(self) -> None:
        self.assertEqual(indent(["a", "", "b"]), ["    a", "", "    b"])

    def test_validate_reports_bad_line(self) -> None:
        with self.assertRaises(EmitError) as ctx:
            validate("x = 1\ndef (:\n", "rewrite_x.py")
        self.assertIn("rewrite_x.py:2", str(ctx.exception))
        validate("x = 1\n", "rewrite_x.py")

    def test_unit_path_defaults_to_parent_of_rules_dir(self) -> None:
        path = unit_path(os.path.join("ssa", "gen", "AMD64.rules"), "AMD64")
        self.assertEqual(path, os.path.join(os.path.abspath("ssa"), "rewrite_amd64.py"))
        self.assertEqual(unit_path("AMD64.rules", "AMD64", "out"), os.path.join("out", "rewrite_amd64.py"))

    def test_emit_requires_path(self) -> None:
        with self.assertRaises(EmitError):
            emit(GeneratedUnit("generic", "x = 1\n"), MemorySink())

    def test_file_sink_creates_directories(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "deep", "rewrite_generic.py")
            FileSink().write(path, "x = 1\n")
            with open(path, encoding="utf-8") as f:
                self.assertEqual(f.read(), "x = 1\n")


class GenerateRulesTests(unittest.TestCase):
    def test_generate_rules_writes_next_to_rules_dir(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            gen = os.path.join(td, "gen")
            os.makedirs(gen)
            rules = os.path.join(gen, "generic.rules")
            with open(rules, "w") as f:
                f.write("(Not (Not x)) -> x\n")
            unit = generate_rules(rules, runtime_module=RUNTIME)
            self.assertEqual(unit.path, os.path.join(td, "rewrite_generic.py"))
            self.assertTrue(os.path.isfile(unit.path))
            with open(unit.path, encoding="utf-8") as f:
                self.assertEqual(f.read(), unit.source)

    def test_memory_sink_and_out_dir(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rules = os.path.join(td, "AMD64.rules")
            with open(rules, "w") as f:
                f.write("(Neg64 x) -> (NEGQ x)\n")
            sink = MemorySink()
            unit = generate_rules(rules, out_dir="build", sink=sink)
            self.assertEqual(list(sink.files), [os.path.join("build", "rewrite_amd64.py")])
            self.assertIn("Op.AMD64NEGQ", unit.source)

    def test_missing_rules_file(self) -> None:
        generator = RuleGenerator(schema_for("generic"), sink=MemorySink())
        with self.assertRaises(RulegenError):
            generator.generate_file(os.path.join("no", "such", "generic.rules"))

    def test_nothing_is_written_on_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rules = os.path.join(td, "generic.rules")
            with open(rules, "w") as f:
                f.write("(Frob x) -> x\n")
            sink = MemorySink()
            with self.assertRaises(RulegenError):
                generate_rules(rules, sink=sink)
            self.assertEqual(sink.files, {})


if __name__ == "__main__":
    unittest.main(verbosity=2)
