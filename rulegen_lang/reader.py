from typing import Iterable, List

from .exceptions import RuleSyntaxError
from .models import Rule, RuleParts

ARROW = "->"
AND = "&&"

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {v: k for k, v in _OPENERS.items()}


def unbalanced(text: str) -> bool:
    for opener, closer in _OPENERS.items():
        if text.count(opener) != text.count(closer):
            return True
    return False


def read_rules(lines: Iterable[str], name: str) -> List[Rule]:
    """Split rule-file lines into complete rules.

    Comments run from `//` to the end of the line. The strip is not string
    aware, so a `//` inside a quoted literal also starts a comment.
    """
    rules: List[Rule] = []
    rule = ""
    lineno = 0
    start_lineno = 0
    arrow_lineno = 0
    for lineno, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if "//" in line:
            line = line[: line.index("//")]
        rule = f"{rule} {line.strip()}".strip()
        if not rule:
            continue
        if not start_lineno:
            start_lineno = lineno
        if ARROW not in rule:
            continue
        if not arrow_lineno:
            arrow_lineno = lineno
        if rule.endswith(ARROW) or unbalanced(rule):
            continue
        rules.append(Rule(rule, f"{name}:{arrow_lineno}"))
        rule = ""
        start_lineno = arrow_lineno = 0
    if rule:
        what = "unbalanced rule" if unbalanced(rule) else "incomplete rule"
        raise RuleSyntaxError(
            f"{name}:{start_lineno}: {what} at end of input (line {lineno}): {rule}"
        )
    return rules


def _top_level(text: str, token: str) -> List[int]:
    found: List[int] = []
    stack: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in _OPENERS:
            stack.append(ch)
        elif ch in _CLOSERS:
            if stack and stack[-1] == _CLOSERS[ch]:
                stack.pop()
        elif not stack and text.startswith(token, i):
            found.append(i)
            i += len(token)
            continue
        i += 1
    return found


def parse_rule(rule: Rule) -> RuleParts:
    arrows = _top_level(rule.text, ARROW)
    if not arrows:
        raise RuleSyntaxError(f"no arrow in {rule}")
    if len(arrows) > 1:
        raise RuleSyntaxError(f"more than one arrow in {rule}")
    match = rule.text[: arrows[0]].strip()
    result = rule.text[arrows[0] + len(ARROW) :].strip()
    cond = ""
    ands = _top_level(match, AND)
    if ands:
        cond = match[ands[0] + len(AND) :].strip()
        match = match[: ands[0]].strip()
    if not match or not result:
        raise RuleSyntaxError(f"empty side in {rule}")
    return RuleParts(match, cond, result)


def leading_opcode(rule: Rule) -> str:
    text = rule.text
    if not text.startswith("("):
        raise RuleSyntaxError(f"{rule.loc}: rule must start with '(': {text}")
    head = text[1:].lstrip()
    end = 0
    while end < len(head) and (head[end].isalnum() or head[end] == "_"):
        end += 1
    if end == 0:
        raise RuleSyntaxError(f"{rule.loc}: missing opcode: {text}")
    return head[:end]
