"""
The assembled API model.

An ``Api`` is built once per run and only read afterwards; its ``str()`` is
the human-readable rendering printed by the inspection command.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from apimodel.types import RetType, Type


@dataclass(frozen=True)
class Arg:
    """A method argument."""

    name: str
    arg_type: Type

    def __str__(self) -> str:
        return f"{self.arg_type} {self.name}"


@dataclass(frozen=True)
class Method:
    """A bridged method.

    Attributes:
        is_static: Whether the method is a static member.
        name: Method name as declared.
        mangled_name: Name unique among the class's methods; equals ``name``
            unless a mangle rule applied.
        args: Arguments in declaration order.
        ret_type: Mapped return type.
    """

    is_static: bool
    name: str
    mangled_name: str
    args: Tuple[Arg, ...]
    ret_type: RetType

    def __str__(self) -> str:
        prefix = "static " if self.is_static else ""
        args = ", ".join(str(arg) for arg in self.args)
        line = f"{prefix}{self.name}({args}) -> {self.ret_type}"
        if self.mangled_name != self.name:
            line += f" {{{self.mangled_name}}}"
        return line


@dataclass(frozen=True)
class Class:
    """A bridged class with its methods in declaration order."""

    name: str
    methods: Tuple[Method, ...] = ()

    def __str__(self) -> str:
        lines = [f"class {self.name}"]
        lines.extend(f"  {method}" for method in self.methods)
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class Api:
    """Ordered classes of the bridged interface."""

    classes: Tuple[Class, ...] = ()

    def __iter__(self) -> Iterator[Class]:
        return iter(self.classes)

    def __len__(self) -> int:
        return len(self.classes)

    def __str__(self) -> str:
        return "".join(f"{cls}\n" for cls in self.classes)

    def find_class(self, name: str) -> Optional[Class]:
        for cls in self.classes:
            if cls.name == name:
                return cls
        return None

    @property
    def method_count(self) -> int:
        return sum(len(cls.methods) for cls in self.classes)

    def to_dict(self) -> Dict[str, int]:
        return {"classes": len(self.classes), "methods": self.method_count}
