from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass
class GeneratorOptions:
    arch: str = "generic"
    log: bool = False
    runtime_module: str = "ssa"
    source_name: Optional[str] = None

    @property
    def rules_name(self) -> str:
        return self.source_name or f"{self.arch}.rules"


@dataclass(frozen=True)
class Rule:
    text: str
    loc: str

    def __str__(self) -> str:
        return f"rule {self.text!r} at {self.loc}"


@dataclass(frozen=True)
class RuleParts:
    match: str
    cond: str
    result: str


@dataclass(frozen=True)
class Variable:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Wildcard:
    def __str__(self) -> str:
        return "_"


@dataclass(frozen=True)
class Code:
    text: str

    def __str__(self) -> str:
        return self.text


Qualifier = Union[Variable, Code]


@dataclass(frozen=True)
class Operation:
    opcode: str
    type: Optional[Qualifier] = None
    auxint: Optional[Qualifier] = None
    aux: Optional[Qualifier] = None
    args: List["Term"] = field(default_factory=list)
    name: Optional[str] = None

    def __str__(self) -> str:
        parts = [self.opcode]
        if self.type is not None:
            parts.append(f"<{self.type}>")
        if self.auxint is not None:
            parts.append(f"[{self.auxint}]")
        if self.aux is not None:
            parts.append(f"{{{self.aux}}}")
        parts.extend(str(arg) for arg in self.args)
        text = "(" + " ".join(parts) + ")"
        return f"{self.name}:{text}" if self.name else text


Term = Union[Variable, Wildcard, Operation]


@dataclass(frozen=True)
class ResultRule:
    root: Union[Variable, Operation]
    block: Optional[str] = None


@dataclass
class GeneratedUnit:
    arch: str
    source: str
    path: Optional[str] = None
