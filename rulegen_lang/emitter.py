import ast
import os
from typing import Iterable, List, Optional

from .exceptions import EmitError
from .interfaces import OutputSink
from .models import GeneratedUnit, GeneratorOptions, RuleParts

RUNTIME_NAMES = (
    "BRANCH_UNKNOWN",
    "BlockKind",
    "Op",
    "TypeFlags",
    "TypeInt128",
    "TypeMem",
    "TypeVoid",
)


def indent(lines: Iterable[str], spaces: int = 4) -> List[str]:
    return [" " * spaces + line if line else "" for line in lines]


def rule_comments(parts: RuleParts) -> List[str]:
    return [
        f"# match: {parts.match}",
        f"# cond: {parts.cond}".rstrip(),
        f"# result: {parts.result}",
    ]


def log_line(options: GeneratorOptions, loc: str) -> List[str]:
    if not options.log:
        return []
    return [f"print({f'rewrite {loc}'!r})"]


def header(options: GeneratorOptions) -> List[str]:
    return [
        f"# autogenerated from {options.rules_name}: do not edit!",
        f"# generated with: rulegen {options.rules_name}",
        "",
        "import math",
        "",
        f"from {options.runtime_module} import {', '.join(RUNTIME_NAMES)}",
    ]


def assemble(options: GeneratorOptions, sections: Iterable[List[str]]) -> str:
    """Joins the header and the top-level definitions into one module."""
    lines = header(options)
    for section in sections:
        if not section:
            continue
        lines.extend(["", ""])
        lines.extend(section)
    return "\n".join(lines) + "\n"


def validate(source: str, filename: str) -> None:
    try:
        ast.parse(source, filename=filename)
    except SyntaxError as e:
        bad = (e.text or "").strip()
        raise EmitError(f"{filename}:{e.lineno}: generated code is malformed: {e.msg}: {bad}") from None
    except ValueError as e:
        # Null bytes are a ValueError on older interpreters.
        raise EmitError(f"{filename}: generated code is malformed: {e}") from None


def unit_path(rules_path: str, arch: str, out_dir: Optional[str] = None) -> str:
    """Generated units land in the parent of the rules directory by default."""
    if out_dir is None:
        rules_dir = os.path.dirname(os.path.abspath(rules_path))
        out_dir = os.path.dirname(rules_dir)
    return os.path.join(out_dir, f"rewrite_{arch.lower()}.py")


def emit(unit: GeneratedUnit, sink: OutputSink) -> GeneratedUnit:
    if unit.path is None:
        raise EmitError(f"no output path for {unit.arch}")
    sink.write(unit.path, unit.source)
    return unit
