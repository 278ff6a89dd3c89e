from __future__ import annotations

import io
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

# The CLI script is imported directly to exercise main().
import rulegen

from tests.generator_runner import RULES, RUNTIME


class EntrypointTests(unittest.TestCase):
    def test_main_generates_every_rules_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            buf = io.StringIO()
            argv = [
                "rulegen.py",
                "--runtime",
                RUNTIME,
                "--out-dir",
                td,
                str(RULES / "generic.rules"),
                str(RULES / "AMD64.rules"),
            ]
            with patch.object(sys, "argv", argv), redirect_stdout(buf):
                rulegen.main()

            out = buf.getvalue()
            self.assertIn("[+]", out)
            for name in ("rewrite_generic.py", "rewrite_amd64.py"):
                path = os.path.join(td, name)
                self.assertIn(path, out)
                with open(path, encoding="utf-8") as f:
                    self.assertTrue(f.readline().startswith("# autogenerated from"))

    def test_log_flag_reaches_generated_code(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rules = os.path.join(td, "generic.rules")
            with open(rules, "w") as f:
                f.write("(Not (Not x)) -> x\n")
            with redirect_stdout(io.StringIO()):
                rulegen.main(["--log", "--out-dir", td, rules])
            with open(os.path.join(td, "rewrite_generic.py"), encoding="utf-8") as f:
                self.assertIn("print('rewrite generic.rules:1')", f.read())

    def test_errors_exit_with_status_one(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rules = os.path.join(td, "generic.rules")
            with open(rules, "w") as f:
                f.write("\n(Add64 x) -> x\n")
            err = io.StringIO()
            with redirect_stderr(err), self.assertRaises(SystemExit) as ctx:
                rulegen.main(["--out-dir", td, rules])
            self.assertEqual(ctx.exception.code, 1)
            self.assertIn("rulegen: ", err.getvalue())
            self.assertIn("generic.rules:2", err.getvalue())
            self.assertFalse(os.path.exists(os.path.join(td, "rewrite_generic.py")))

    def test_unknown_architecture(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rules = os.path.join(td, "MIPS.rules")
            with open(rules, "w") as f:
                f.write("(Add64 x y) -> x\n")
            with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
                rulegen.main(["--out-dir", td, rules])

    def test_public_api_is_reexported(self) -> None:
        for name in ("RuleGenerator", "RulegenError", "GeneratorOptions", "Schema", "generate_rules"):
            self.assertTrue(hasattr(rulegen, name))


if __name__ == "__main__":
    unittest.main(verbosity=2)
