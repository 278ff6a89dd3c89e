from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput, VisitError

from .exceptions import RuleSyntaxError
from .grammar import SEXPR_GRAMMAR
from .models import Code, Operation, ResultRule, Term, Variable, Wildcard
from .types import TypeCanon

_PARSER = None


def get_parser() -> Lark:
    """Lazily construct and cache the s-expression parser."""
    global _PARSER
    if _PARSER is None:
        _PARSER = Lark(SEXPR_GRAMMAR, parser="lalr")
    return _PARSER


@dataclass(frozen=True)
class _Qual:
    kind: str
    value: Union[Variable, Code]


class SexprBuilder(Transformer):
    """Builds the typed rule tree out of the lark parse tree."""

    def __init__(self, loc: str):
        super().__init__()
        self.loc = loc

    def start(self, items):
        return items[0]

    def bare(self, items):
        return self.atom(items)

    def sexpr(self, items):
        opcode = str(items[0])
        quals = {"type": None, "auxint": None, "aux": None}
        args = []
        for item in items[1:]:
            if isinstance(item, _Qual):
                if quals[item.kind] is not None:
                    raise RuleSyntaxError(
                        f"{self.loc}: op {opcode} has more than one {item.kind} qualifier"
                    )
                quals[item.kind] = item.value
            else:
                args.append(item)
        return Operation(opcode, args=args, **quals)

    def named(self, items):
        name, node = items
        return replace(node, name=str(name))

    def type_qual(self, items):
        return _Qual("type", self._content(items[0]))

    def auxint_qual(self, items):
        return _Qual("auxint", self._content(items[0]))

    def aux_qual(self, items):
        return _Qual("aux", self._content(items[0]))

    def atom(self, items):
        name = str(items[0])
        if name == "_":
            return Wildcard()
        if not TypeCanon.is_variable(name):
            raise RuleSyntaxError(f"{self.loc}: {name} cannot be used as a variable")
        return Variable(name)

    def _content(self, token) -> Union[Variable, Code]:
        text = str(token)[1:-1].strip()
        if not text:
            raise RuleSyntaxError(f"{self.loc}: empty qualifier {token}")
        if TypeCanon.is_variable(text):
            return Variable(text)
        return Code(text)


def parse_term(text: str, loc: str) -> Term:
    try:
        tree = get_parser().parse(text)
        return SexprBuilder(loc).transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, RuleSyntaxError):
            raise e.orig_exc from None
        raise
    except UnexpectedInput as e:
        raise RuleSyntaxError(
            f"{loc}: cannot parse {text!r} at column {getattr(e, 'column', '?')}"
        ) from None


def parse_pattern(text: str, loc: str) -> Operation:
    node = parse_term(text, loc)
    if not isinstance(node, Operation):
        raise RuleSyntaxError(f"{loc}: pattern must be an s-expression: {text}")
    return node


def split_redirect(text: str, loc: str) -> Tuple[Optional[str], str]:
    if not text.startswith("@"):
        return None, text
    parts = text[1:].split(None, 1)
    if len(parts) != 2 or not parts[0]:
        raise RuleSyntaxError(f"{loc}: block redirect without a result: {text}")
    return parts[0], parts[1].strip()


def parse_result(text: str, loc: str) -> ResultRule:
    block, text = split_redirect(text, loc)
    node = parse_term(text, loc)
    _check_result(node, loc)
    return ResultRule(node, block)


def _check_result(node: Term, loc: str) -> None:
    if isinstance(node, Wildcard):
        raise RuleSyntaxError(f"{loc}: _ is not allowed in a result")
    if isinstance(node, Operation):
        if node.name is not None:
            raise RuleSyntaxError(
                f"{loc}: named subexpression {node.name} is not allowed in a result"
            )
        for arg in node.args:
            _check_result(arg, loc)
