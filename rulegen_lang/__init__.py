from .grammar import SEXPR_GRAMMAR
from .exceptions import (
    RulegenError,
    RuleSyntaxError,
    SchemaError,
    DeadRuleError,
    SuccessorError,
    UnresolvedTypeError,
    EmitError,
)
from .interfaces import OutputSink, FileSink, MemorySink
from .models import (
    GeneratorOptions,
    Rule,
    RuleParts,
    Variable,
    Wildcard,
    Code,
    Operation,
    ResultRule,
    GeneratedUnit,
)
from .types import TypeCanon
from .schema import OpDescriptor, BlockDescriptor, Kind, Resolution, Schema
from .scope import BindingScope
from .reader import read_rules, parse_rule
from .sexpr import parse_term, parse_pattern, parse_result
from .matcher import PatternCompiler, MatchCode
from .builder import ResultCompiler, MutateInPlace, AllocateNew
from .value_rules import ValueRuleSynthesizer, group_rules
from .block_rules import BlockRuleSynthesizer
from .emitter import assemble, validate, unit_path
from .generator import RuleGenerator, generate_rules, arch_of

__all__ = [
    "SEXPR_GRAMMAR",
    "RulegenError",
    "RuleSyntaxError",
    "SchemaError",
    "DeadRuleError",
    "SuccessorError",
    "UnresolvedTypeError",
    "EmitError",
    "OutputSink",
    "FileSink",
    "MemorySink",
    "GeneratorOptions",
    "Rule",
    "RuleParts",
    "Variable",
    "Wildcard",
    "Code",
    "Operation",
    "ResultRule",
    "GeneratedUnit",
    "TypeCanon",
    "OpDescriptor",
    "BlockDescriptor",
    "Kind",
    "Resolution",
    "Schema",
    "BindingScope",
    "read_rules",
    "parse_rule",
    "parse_term",
    "parse_pattern",
    "parse_result",
    "PatternCompiler",
    "MatchCode",
    "ResultCompiler",
    "MutateInPlace",
    "AllocateNew",
    "ValueRuleSynthesizer",
    "group_rules",
    "BlockRuleSynthesizer",
    "assemble",
    "validate",
    "unit_path",
    "RuleGenerator",
    "generate_rules",
    "arch_of",
]
