from typing import Dict, Iterable

from .emitter import RUNTIME_NAMES
from .exceptions import SchemaError

IMPLICIT = ("v", "b", "config")
BLOCK_IMPLICIT = ("b", "config")

# Module-level names every generated unit imports.
RESERVED = frozenset(RUNTIME_NAMES) | {"math"}


class BindingScope:
    """Variables bound while matching one rule.

    Each name maps to the accessor expression that produced it. Generated
    code keeps every binding in a local of the same name, so results refer
    to the name itself. Names starting with `_` belong to the generator's
    own temporaries and cannot be bound by a rule.
    """

    def __init__(self, loc: str, implicit: Iterable[str] = IMPLICIT):
        self.loc = loc
        self.builtins: Dict[str, str] = {name: name for name in implicit}
        self.bindings: Dict[str, str] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.bindings

    def declare(self, name: str, accessor: str) -> None:
        if name in self.builtins:
            raise SchemaError(f"{self.loc}: variable {name} shadows an implicit name")
        if name in RESERVED:
            raise SchemaError(f"{self.loc}: variable {name} shadows a runtime name")
        if name.startswith("_"):
            raise SchemaError(f"{self.loc}: variable {name} uses the reserved _ prefix")
        if name in self.bindings:
            raise SchemaError(f"{self.loc}: variable {name} is bound twice")
        self.bindings[name] = accessor

    def accessor(self, name: str) -> str:
        return self.bindings[name]

    def is_bound(self, name: str) -> bool:
        return name in self.bindings or name in self.builtins

    def get(self, name: str) -> str:
        if self.is_bound(name):
            return name
        raise SchemaError(f"{self.loc}: unbound variable {name} in result")
