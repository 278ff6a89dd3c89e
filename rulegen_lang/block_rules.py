from typing import List, Optional

from .builder import ResultCompiler
from .emitter import indent, log_line, rule_comments
from .exceptions import DeadRuleError, RuleSyntaxError, SuccessorError
from .matcher import PatternCompiler, break_if
from .models import GeneratorOptions, Operation, Rule, Variable, Wildcard
from .reader import parse_rule
from .schema import Schema
from .scope import BLOCK_IMPLICIT, BindingScope
from .sexpr import parse_pattern, parse_result
from .value_rules import RuleGroups

NIL = "nil"


class BlockRuleSynthesizer:
    """Emits control-flow rewrites, one procedure per block kind.

    A block pattern is `(Kind control succ*)`: the control value is matched
    like a value pattern, successors are bound by position. The result must
    reuse the matched successor names; names it leaves out are dropped and
    their predecessor lists are updated.
    """

    def __init__(self, schema: Schema, options: GeneratorOptions):
        self.schema = schema
        self.options = options

    def function_name(self, symbol: str) -> str:
        return f"rewrite_block_{self.options.arch}_Block{symbol}"

    def generate(self, groups: RuleGroups) -> List[List[str]]:
        sections = []
        table = []
        for kind in sorted(groups):
            rules = groups[kind]
            found = self.schema.block(kind, rules[0].loc)
            name = self.function_name(found.symbol)
            sections.append(self._procedure(name, rules))
            table.append(f"{found.expr}: {name},")
        sections.append(["_BLOCK_REWRITES = {"] + indent(table) + ["}"])
        sections.append(
            [
                f"def rewrite_block_{self.options.arch}(b):",
                "    rewrite = _BLOCK_REWRITES.get(b.kind)",
                "    if rewrite is None:",
                "        return False",
                "    return rewrite(b)",
            ]
        )
        return sections

    def _procedure(self, name: str, rules: List[Rule]) -> List[str]:
        body = ["config = b.func.config"]
        can_fail = False
        for i, rule in enumerate(rules):
            parts = parse_rule(rule)
            pattern = _block_shape(parse_pattern(parts.match, rule.loc), rule.loc)
            scope = BindingScope(rule.loc, BLOCK_IMPLICIT)

            loop, can_fail = self._match_control(pattern.args[0], scope, rule.loc)
            old = []
            for j, succ in enumerate(pattern.args[1:]):
                if isinstance(succ, Operation):
                    raise RuleSyntaxError(f"{rule.loc}: successor {succ} must be a name")
                if isinstance(succ, Wildcard):
                    old.append(None)
                    continue
                if succ.name in old:
                    raise SuccessorError(f"can't have a repeat successor name {succ.name} in {rule}")
                old.append(succ.name)
                scope.declare(succ.name, f"b.succs[{j}]")
                loop.append(f"{succ.name} = b.succs[{j}]")

            if parts.cond:
                loop.extend(break_if(f"not ({parts.cond})"))
                can_fail = True
            if not can_fail and i != len(rules) - 1:
                raise DeadRuleError(
                    f"{rule.loc}: unconditional rule {parts.match} is followed by other rules"
                )

            loop.extend(self._result(rule, parts.result, old, scope))
            loop.extend(log_line(self.options, rule.loc))
            loop.append("return True")

            body.extend(rule_comments(parts))
            body.append("while True:")
            body.extend(indent(loop))
        if can_fail:
            body.append("return False")
        return [f"def {name}(b):"] + indent(body)

    def _match_control(self, control, scope: BindingScope, loc: str):
        if isinstance(control, Wildcard) or control == Variable(NIL):
            return [], False
        if isinstance(control, Variable):
            scope.declare(control.name, "b.control")
            return [f"{control.name} = b.control"], False
        target = control.name or "_control"
        if control.name:
            scope.declare(control.name, "b.control")
        code = PatternCompiler(self.schema, scope, loc).compile(control, target, top=False)
        return [f"{target} = b.control"] + code.lines, code.can_fail

    def _result(self, rule: Rule, text: str, old: List[Optional[str]], scope: BindingScope) -> List[str]:
        result = parse_result(text, rule.loc)
        if result.block is not None or not isinstance(result.root, Operation):
            raise RuleSyntaxError(f"{rule.loc}: block result must be (Kind control succ*)")
        shape = _block_shape(result.root, rule.loc)
        found = self.schema.block(shape.opcode, rule.loc)

        new = []
        for succ in shape.args[1:]:
            if not isinstance(succ, Variable):
                raise SuccessorError(f"invalid successor {succ} in {rule}")
            if succ.name not in old or succ.name in new:
                raise SuccessorError(f"unknown successor {succ.name} in {rule}")
            new.append(succ.name)

        lines = []
        for j, succ in enumerate(old):
            if succ is None or succ not in new:
                lines.append(f"b.func.remove_predecessor(b, {succ or f'b.succs[{j}]'})")

        lines.append(f"b.kind = {found.expr}")
        control = shape.args[0]
        if control == Variable(NIL):
            lines.append("b.set_control(None)")
        else:
            builder = ResultCompiler(self.schema, scope, rule.loc, line="b.line")
            control_lines, expr = builder.compile_control(control)
            lines.extend(control_lines)
            lines.append(f"b.set_control({expr})")

        if len(new) < len(old):
            lines.append(f"del b.succs[{len(new)}:]")
        for j, succ in enumerate(new):
            lines.append(f"b.succs[{j}] = {succ}")

        if len(new) != len(old) or len(new) != 2:
            lines.append("b.likely = BRANCH_UNKNOWN")
        elif new == [old[1], old[0]]:
            lines.append("b.likely *= -1")
        elif new != old:
            lines.append("b.likely = BRANCH_UNKNOWN")
        return lines


def _block_shape(node: Operation, loc: str) -> Operation:
    if node.type is not None or node.auxint is not None or node.aux is not None:
        raise RuleSyntaxError(f"{loc}: block {node.opcode} cannot have type or aux qualifiers")
    if not node.args:
        raise RuleSyntaxError(f"{loc}: block {node.opcode} needs a control value or nil")
    return node
