import os
import tomllib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union

from .exceptions import SchemaError
from .types import TypeCanon

GENERIC = "generic"


@dataclass(frozen=True)
class OpDescriptor:
    name: str
    arity: Optional[int] = 0
    aux: str = "None"
    type: Optional[str] = None

    @property
    def variadic(self) -> bool:
        return self.arity is None


@dataclass(frozen=True)
class BlockDescriptor:
    name: str


class Kind(Enum):
    OPERATION = "operation"
    BLOCK = "block"


@dataclass(frozen=True)
class Resolution:
    kind: Kind
    descriptor: Union[OpDescriptor, BlockDescriptor]
    symbol: str

    @property
    def expr(self) -> str:
        namespace = "Op" if self.kind is Kind.OPERATION else "BlockKind"
        return f"{namespace}.{self.symbol}"


class Schema:
    """Read-only registry of the generic and architecture descriptor pools.

    Architecture descriptors take precedence over generic ones with the same
    name. Symbols keep the generic spelling whenever the generic pool knows
    the name, and are prefixed with the architecture name otherwise.
    """

    def __init__(
        self,
        arch: str = GENERIC,
        generic_ops: Iterable[OpDescriptor] = (),
        arch_ops: Iterable[OpDescriptor] = (),
        generic_blocks: Iterable[BlockDescriptor] = (),
        arch_blocks: Iterable[BlockDescriptor] = (),
    ):
        self.arch = arch
        self._generic_ops: Dict[str, OpDescriptor] = {op.name: op for op in generic_ops}
        self._arch_ops: Dict[str, OpDescriptor] = {op.name: op for op in arch_ops}
        self._generic_blocks: Dict[str, BlockDescriptor] = {
            blk.name: blk for blk in generic_blocks
        }
        self._arch_blocks: Dict[str, BlockDescriptor] = {
            blk.name: blk for blk in arch_blocks
        }

    def _symbol(self, name: str, generic_pool: Dict[str, Any]) -> str:
        if name in generic_pool or self.arch == GENERIC:
            return name
        return f"{self.arch}{name}"

    def resolve(self, name: str) -> Optional[Resolution]:
        blk = self._arch_blocks.get(name) or self._generic_blocks.get(name)
        if blk is not None:
            return Resolution(Kind.BLOCK, blk, self._symbol(name, self._generic_blocks))
        op = self._arch_ops.get(name) or self._generic_ops.get(name)
        if op is not None:
            return Resolution(Kind.OPERATION, op, self._symbol(name, self._generic_ops))
        return None

    def is_block(self, name: str) -> bool:
        found = self.resolve(name)
        return found is not None and found.kind is Kind.BLOCK

    def op(self, name: str, loc: str) -> Resolution:
        found = self.resolve(name)
        if found is None:
            raise SchemaError(f"{loc}: unknown op {name}")
        if found.kind is not Kind.OPERATION:
            raise SchemaError(f"{loc}: {name} is a block kind, not an op")
        return found

    def block(self, name: str, loc: str) -> Resolution:
        found = self.resolve(name)
        if found is None or found.kind is not Kind.BLOCK:
            raise SchemaError(f"{loc}: unknown block kind {name}")
        return found

    def default_type(self, name: str) -> Optional[str]:
        for pool in (self._arch_ops, self._generic_ops):
            op = pool.get(name)
            if op is not None and op.type:
                return op.type
        return None

    @classmethod
    def load(cls, arch: str, directory: Optional[str] = None) -> "Schema":
        directory = directory or default_descriptor_dir()
        generic = _read_pool(os.path.join(directory, f"{GENERIC}.toml"))
        if arch == GENERIC:
            return cls(arch, generic["ops"], (), generic["blocks"], ())
        pool = _read_pool(os.path.join(directory, f"{arch}.toml"))
        return cls(arch, generic["ops"], pool["ops"], generic["blocks"], pool["blocks"])


def default_descriptor_dir() -> str:
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "descriptors")


def _read_pool(path: str) -> Dict[str, list]:
    if not os.path.isfile(path):
        raise SchemaError(f"{path}: descriptor file not found")
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise SchemaError(f"{path}: {e}") from e
    ops = [_op_from_table(path, entry) for entry in data.get("ops", [])]
    blocks = []
    for entry in data.get("blocks", []):
        name = entry.get("name") if isinstance(entry, dict) else None
        if not isinstance(name, str) or not name:
            raise SchemaError(f"{path}: block entry without a name")
        blocks.append(BlockDescriptor(name))
    return {"ops": ops, "blocks": blocks}


def _op_from_table(path: str, entry: Any) -> OpDescriptor:
    name = entry.get("name") if isinstance(entry, dict) else None
    if not isinstance(name, str) or not name:
        raise SchemaError(f"{path}: op entry without a name")
    args = entry.get("args", 0)
    if not isinstance(args, int) or args < -1:
        raise SchemaError(f"{path}: op {name} has invalid args {args!r}")
    aux = entry.get("aux", "None")
    if aux not in TypeCanon.ALL:
        raise SchemaError(f"{path}: op {name} has unknown aux kind {aux!r}")
    typ = entry.get("type") or None
    return OpDescriptor(name, None if args == -1 else args, aux, typ)
