from typing import Dict, List, Tuple

from .builder import ResultCompiler
from .emitter import indent, log_line, rule_comments
from .exceptions import DeadRuleError, RuleSyntaxError
from .matcher import PatternCompiler, break_if
from .models import GeneratorOptions, Rule
from .reader import leading_opcode, parse_rule
from .schema import Schema
from .scope import BindingScope
from .sexpr import parse_pattern, parse_result

RuleGroups = Dict[str, List[Rule]]


def group_rules(rules: List[Rule], schema: Schema) -> Tuple[RuleGroups, RuleGroups]:
    """Split rules into value and block groups keyed by leading opcode, in file order."""
    values: RuleGroups = {}
    blocks: RuleGroups = {}
    for rule in rules:
        op = leading_opcode(rule)
        target = blocks if schema.is_block(op) else values
        target.setdefault(op, []).append(rule)
    return values, blocks


class ValueRuleSynthesizer:
    def __init__(self, schema: Schema, options: GeneratorOptions):
        self.schema = schema
        self.options = options

    def function_name(self, symbol: str) -> str:
        return f"rewrite_value_{self.options.arch}_Op{symbol}"

    def generate(self, groups: RuleGroups) -> List[List[str]]:
        sections = []
        table = []
        for op in sorted(groups):
            rules = groups[op]
            found = self.schema.op(op, rules[0].loc)
            name = self.function_name(found.symbol)
            sections.append(self._procedure(name, op, rules))
            table.append(f"{found.expr}: {name},")
        sections.append(["_VALUE_REWRITES = {"] + indent(table) + ["}"])
        sections.append(
            [
                f"def rewrite_value_{self.options.arch}(v, config):",
                "    rewrite = _VALUE_REWRITES.get(v.op)",
                "    if rewrite is None:",
                "        return False",
                "    return rewrite(v, config)",
            ]
        )
        return sections

    def _procedure(self, name: str, op: str, rules: List[Rule]) -> List[str]:
        body = ["b = v.block"]
        can_fail = False
        for i, rule in enumerate(rules):
            parts = parse_rule(rule)
            pattern = parse_pattern(parts.match, rule.loc)
            if pattern.opcode != op:
                raise RuleSyntaxError(f"{rule.loc}: rule grouped under {op} starts with {pattern.opcode}")
            result = parse_result(parts.result, rule.loc)

            scope = BindingScope(rule.loc)
            match = PatternCompiler(self.schema, scope, rule.loc).compile(pattern)
            can_fail = match.can_fail
            loop = list(match.lines)
            if parts.cond:
                loop.extend(break_if(f"not ({parts.cond})"))
                can_fail = True
            if not can_fail and i != len(rules) - 1:
                raise DeadRuleError(
                    f"{rule.loc}: unconditional rule {parts.match} is followed by other rules"
                )
            loop.extend(ResultCompiler(self.schema, scope, rule.loc).compile_value(result))
            loop.extend(log_line(self.options, rule.loc))
            loop.append("return True")

            body.extend(rule_comments(parts))
            body.append("while True:")
            body.extend(indent(loop))
        if can_fail:
            body.append("return False")
        return [f"def {name}(v, config):"] + indent(body)
