from dataclasses import dataclass
from typing import List, Tuple, Union

from .exceptions import SchemaError, UnresolvedTypeError
from .models import Code, Operation, ResultRule, Variable
from .schema import Schema
from .scope import BindingScope
from .types import TypeCanon


@dataclass(frozen=True)
class MutateInPlace:
    target: str = "v"


@dataclass(frozen=True)
class AllocateNew:
    owner: str = "b"


Mode = Union[MutateInPlace, AllocateNew]


class ResultCompiler:
    """Emits the statements that build a rule's replacement.

    The top-level node of a value rule is reset in place so that existing
    references to it stay valid; every other node is allocated fresh in the
    current (possibly redirected) block.
    """

    def __init__(self, schema: Schema, scope: BindingScope, loc: str, line: str = "v.line"):
        self.schema = schema
        self.scope = scope
        self.loc = loc
        self.line = line
        self._alloc = 0

    def compile_value(self, result: ResultRule) -> List[str]:
        lines: List[str] = []
        root = result.root
        if result.block is not None:
            lines.append(f"b = {result.block}")
        if isinstance(root, Variable):
            # Moving an existing value between blocks is unsafe in general
            # (phis in particular), so alias it through a copy.
            name = self.scope.get(root.name)
            lines.append("v.reset(Op.Copy)")
            lines.append(f"v.type = {name}.type")
            lines.append(f"v.add_arg({name})")
            return lines
        if result.block is None:
            self._build(root, MutateInPlace(), lines)
            return lines
        new = self._build(root, AllocateNew(), lines)
        lines.append("v.reset(Op.Copy)")
        lines.append(f"v.add_arg({new})")
        return lines

    def compile_control(self, node: Union[Variable, Operation]) -> Tuple[List[str], str]:
        if isinstance(node, Variable):
            return [], self.scope.get(node.name)
        lines: List[str] = []
        return lines, self._build(node, AllocateNew(), lines)

    def _build(self, node: Operation, mode: Mode, lines: List[str]) -> str:
        found = self.schema.op(node.opcode, self.loc)
        desc = found.descriptor
        if not desc.variadic and desc.arity != len(node.args):
            raise SchemaError(
                f"{self.loc}: op {desc.name} should have {desc.arity} args, has {len(node.args)}"
            )

        if node.type is not None:
            type_expr = self._qualifier(node.type)
        else:
            type_expr = TypeCanon.type_expr(self.schema.default_type(node.opcode))

        if isinstance(mode, MutateInPlace):
            target = mode.target
            lines.append(f"{target}.reset({found.expr})")
            if node.type is not None:
                lines.append(f"{target}.type = {type_expr}")
        else:
            if type_expr is None:
                raise UnresolvedTypeError(
                    f"{self.loc}: sub-expression {node} (op={node.opcode}) must have a type"
                )
            target = f"_v{self._alloc}"
            self._alloc += 1
            lines.append(
                f"{target} = {mode.owner}.new_value0({self.line}, {found.expr}, {type_expr})"
            )

        if node.auxint is not None:
            if not TypeCanon.allows_auxint(desc.aux):
                raise SchemaError(f"{self.loc}: op {desc.name} {desc.aux} can't have auxint")
            lines.append(f"{target}.aux_int = {self._qualifier(node.auxint)}")
        if node.aux is not None:
            if not TypeCanon.allows_aux(desc.aux):
                raise SchemaError(f"{self.loc}: op {desc.name} {desc.aux} can't have aux")
            lines.append(f"{target}.aux = {self._qualifier(node.aux)}")

        for arg in node.args:
            if isinstance(arg, Variable):
                arg_expr = self.scope.get(arg.name)
            else:
                arg_expr = self._build(arg, AllocateNew(), lines)
            lines.append(f"{target}.add_arg({arg_expr})")
        return target

    def _qualifier(self, qual: Union[Variable, Code]) -> str:
        # Qualifier bodies are host code; an unbound name is emitted as written.
        return qual.text if isinstance(qual, Code) else qual.name
