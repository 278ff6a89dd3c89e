import re
from dataclasses import dataclass, field
from typing import List

from .exceptions import SchemaError
from .models import Code, Operation, Variable, Wildcard
from .schema import Schema
from .scope import RESERVED, BindingScope
from .types import TypeCanon

_SIMPLE = re.compile(r"^-?[\w.]+$")


def wrap(code: str) -> str:
    return code if _SIMPLE.match(code) else f"({code})"


def break_if(cond: str) -> List[str]:
    return [f"if {cond}:", "    break"]


@dataclass
class MatchCode:
    lines: List[str] = field(default_factory=list)
    can_fail: bool = False


class PatternCompiler:
    """Emits the matching and binding statements for one rule's pattern.

    The emitted statements run inside a `while True:` loop; every failed
    test leaves it with `break`.
    """

    def __init__(self, schema: Schema, scope: BindingScope, loc: str):
        self.schema = schema
        self.scope = scope
        self.loc = loc

    def compile(self, node: Operation, target: str = "v", top: bool = True) -> MatchCode:
        code = MatchCode()
        code.can_fail = self._match(node, target, top, code.lines)
        return code

    def _match(self, node: Operation, target: str, top: bool, lines: List[str]) -> bool:
        found = self.schema.op(node.opcode, self.loc)
        desc = found.descriptor
        can_fail = False

        # The top-level op is already known from dispatch.
        if not top:
            lines.extend(break_if(f"{target}.op != {found.expr}"))
            can_fail = True

        if node.type is not None:
            can_fail |= self._constrain(node.type, f"{target}.type", lines)
        if node.auxint is not None:
            if not TypeCanon.allows_auxint(desc.aux):
                raise SchemaError(f"{self.loc}: op {desc.name} {desc.aux} can't have auxint")
            can_fail |= self._constrain(node.auxint, f"{target}.aux_int", lines)
        if node.aux is not None:
            if not TypeCanon.allows_aux(desc.aux):
                raise SchemaError(f"{self.loc}: op {desc.name} {desc.aux} can't have aux")
            can_fail |= self._constrain(node.aux, f"{target}.aux", lines)

        if desc.variadic:
            lines.extend(break_if(f"len({target}.args) != {len(node.args)}"))
            can_fail = True
        elif desc.arity != len(node.args):
            raise SchemaError(
                f"{self.loc}: op {desc.name} should have {desc.arity} args, has {len(node.args)}"
            )

        for i, arg in enumerate(node.args):
            accessor = f"{target}.args[{i}]"
            if isinstance(arg, Wildcard):
                continue
            if isinstance(arg, Variable):
                if arg.name in self.scope:
                    # Identity, not value equality: matching relies on CSE
                    # having run first.
                    lines.extend(break_if(f"{arg.name} is not {accessor}"))
                    can_fail = True
                else:
                    self.scope.declare(arg.name, accessor)
                    lines.append(f"{arg.name} = {accessor}")
                continue
            argname = arg.name or f"_{target.lstrip('_')}_{i}"
            lines.append(f"{argname} = {accessor}")
            if arg.name:
                self.scope.declare(arg.name, accessor)
            if self._match(arg, argname, False, lines):
                can_fail = True
        return can_fail

    def _constrain(self, qual, accessor: str, lines: List[str]) -> bool:
        if isinstance(qual, Code):
            lines.extend(break_if(f"{accessor} != {wrap(qual.text)}"))
            return True
        # Already bound, implicit or runtime names are compared, not bound.
        if self.scope.is_bound(qual.name) or qual.name in RESERVED:
            lines.extend(break_if(f"{accessor} != {qual.name}"))
            return True
        self.scope.declare(qual.name, accessor)
        lines.append(f"{qual.name} = {accessor}")
        return False
