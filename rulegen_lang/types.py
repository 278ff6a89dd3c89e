import keyword
import re
from typing import Optional


class TypeCanon:
    AUXINT = {
        "Bool",
        "Int8",
        "Int16",
        "Int32",
        "Int64",
        "Int128",
        "Float32",
        "Float64",
        "SymOff",
        "SymValAndOff",
        "SymInt32",
    }
    AUX = {"String", "Sym", "SymOff", "SymValAndOff", "SymInt32"}
    ALL = AUXINT | AUX | {"None"}
    # Types the runtime exposes as module constants rather than frontend calls.
    RUNTIME = {"Flags", "Mem", "Void", "Int128"}

    _re_ident = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")
    _re_words = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

    @classmethod
    def allows_auxint(cls, aux_kind: str) -> bool:
        return aux_kind in cls.AUXINT

    @classmethod
    def allows_aux(cls, aux_kind: str) -> bool:
        return aux_kind in cls.AUX

    @classmethod
    def is_variable(cls, text: str) -> bool:
        """Report whether text is a plain identifier usable as a binding."""
        return bool(cls._re_ident.match(text)) and not keyword.iskeyword(text)

    @classmethod
    def type_expr(cls, type_name: Optional[str]) -> Optional[str]:
        if not type_name:
            return None
        if type_name in cls.RUNTIME:
            return f"Type{type_name}"
        return f"config.fe.type_{cls._re_words.sub('_', type_name).lower()}()"
