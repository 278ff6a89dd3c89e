import os
from typing import Iterable, Optional

from .block_rules import BlockRuleSynthesizer
from .emitter import assemble, emit, unit_path, validate
from .exceptions import RulegenError
from .interfaces import FileSink, OutputSink
from .models import GeneratedUnit, GeneratorOptions
from .reader import read_rules
from .schema import Schema
from .value_rules import ValueRuleSynthesizer, group_rules


def arch_of(rules_path: str) -> str:
    return os.path.splitext(os.path.basename(rules_path))[0]


class RuleGenerator:
    """Compiles one rules file into one Python rewrite module.

    Generation is pure: the same rules and schema always produce the same
    source text.
    """

    def __init__(
        self,
        schema: Schema,
        options: Optional[GeneratorOptions] = None,
        sink: Optional[OutputSink] = None,
    ):
        self.schema = schema
        self.options = options if options is not None else GeneratorOptions(arch=schema.arch)
        self.sink = sink if sink is not None else FileSink()

    def generate_source(self, lines: Iterable[str]) -> str:
        rules = read_rules(lines, self.options.rules_name)
        values, blocks = group_rules(rules, self.schema)
        sections = ValueRuleSynthesizer(self.schema, self.options).generate(values)
        sections += BlockRuleSynthesizer(self.schema, self.options).generate(blocks)
        source = assemble(self.options, sections)
        validate(source, f"rewrite_{self.options.arch.lower()}.py")
        return source

    def generate_text(self, text: str) -> str:
        return self.generate_source(text.splitlines())

    def generate_file(self, rules_path: str, out_dir: Optional[str] = None) -> GeneratedUnit:
        try:
            with open(rules_path, "r", encoding="utf-8") as f:
                source = self.generate_source(f)
        except OSError as e:
            raise RulegenError(f"can't read rule file: {e}") from e
        unit = GeneratedUnit(
            self.options.arch, source, unit_path(rules_path, self.options.arch, out_dir)
        )
        return emit(unit, self.sink)


def generate_rules(
    rules_path: str,
    descriptors: Optional[str] = None,
    log: bool = False,
    runtime_module: str = "ssa",
    out_dir: Optional[str] = None,
    sink: Optional[OutputSink] = None,
) -> GeneratedUnit:
    arch = arch_of(rules_path)
    options = GeneratorOptions(
        arch=arch,
        log=log,
        runtime_module=runtime_module,
        source_name=os.path.basename(rules_path),
    )
    schema = Schema.load(arch, descriptors)
    return RuleGenerator(schema, options, sink).generate_file(rules_path, out_dir)
