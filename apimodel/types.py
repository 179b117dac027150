"""
Closed type intermediate representation.

``Type`` is a union over ``Prim`` members and the four structural variants
``ClassType``, ``Ref``, ``Ptr`` and ``Arr``; ``RetType`` is ``Direct`` or
``Maybe``. Every value is immutable and hashable, so two mappings of the same
foreign type compare equal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Prim(Enum):
    """Primitive payload types."""

    VOID = "void"
    BOOL = "bool"
    CHAR = "char"
    CONST_CHAR = "const char"
    INT = "int"
    UINT = "uint"
    LONG = "long"
    ULONG = "ulong"
    U8 = "u8"
    I8 = "i8"
    U16 = "u16"
    I16 = "i16"
    U32 = "u32"
    I32 = "i32"
    U64 = "u64"
    I64 = "i64"
    F64 = "f64"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ClassType:
    """An opaque reference to a modeled (or specially recognised) class."""

    name: str

    def __str__(self) -> str:
        return f"class {self.name}"


@dataclass(frozen=True)
class Ref:
    """A managed handle to a value (``Local<T>``)."""

    inner: "Type"

    def __str__(self) -> str:
        return f"&{self.inner}"


@dataclass(frozen=True)
class Ptr:
    """A raw pointer."""

    inner: "Type"

    def __str__(self) -> str:
        return f"*{self.inner}"


@dataclass(frozen=True)
class Arr:
    """An unsized array."""

    inner: "Type"

    def __str__(self) -> str:
        return f"[{self.inner}]"


Type = Union[Prim, ClassType, Ref, Ptr, Arr]


@dataclass(frozen=True)
class Direct:
    """The call always yields a value."""

    type: Type

    def __str__(self) -> str:
        return str(self.type)


@dataclass(frozen=True)
class Maybe:
    """The call may produce no value (e.g. with an exception pending)."""

    type: Type

    def __str__(self) -> str:
        return f"maybe {self.type}"


RetType = Union[Direct, Maybe]


def is_class_ref(typ: Type, class_name: str) -> bool:
    """Whether ``typ`` is ``Ref(ClassType(class_name))``."""
    return (
        isinstance(typ, Ref)
        and isinstance(typ.inner, ClassType)
        and typ.inner.name == class_name
    )
