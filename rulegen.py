"""Rulegen entrypoint module exposing the public API and CLI."""

import argparse
import sys

from rulegen_lang import (
    RuleGenerator,
    RulegenError,
    GeneratorOptions,
    Schema,
    generate_rules,
)

__all__ = [
    "RuleGenerator",
    "RulegenError",
    "GeneratorOptions",
    "Schema",
    "generate_rules",
    "main",
]


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Compile SSA rewrite rules into Python rewrite modules"
    )
    parser.add_argument("rules", nargs="+", help="Rule files; the file stem names the architecture")
    parser.add_argument(
        "--log",
        action="store_true",
        help="Generate code that prints every rule application; for debugging only",
    )
    parser.add_argument(
        "--descriptors", default=None, help="Directory holding generic.toml and <arch>.toml"
    )
    parser.add_argument(
        "--runtime", default="ssa", help="Module the generated code imports Op, BlockKind, ... from"
    )
    parser.add_argument(
        "--out-dir", default=None, help="Output directory (default: parent of the rules directory)"
    )
    args = parser.parse_args(argv)

    for path in args.rules:
        try:
            unit = generate_rules(
                path,
                descriptors=args.descriptors,
                log=args.log,
                runtime_module=args.runtime,
                out_dir=args.out_dir,
            )
        except RulegenError as e:
            sys.stderr.write(f"rulegen: {e}\n")
            sys.stderr.flush()
            sys.exit(1)
        print(f"[+] {path} -> {unit.path}")


if __name__ == "__main__":
    main()
