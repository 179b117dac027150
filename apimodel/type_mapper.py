"""
Mapping of foreign type expressions into the closed ``Type`` IR.

Mapping dispatches over the locally owned ``TypeKind``; a kind without an
entry is a mapping failure, raised as ``TypeMappingError`` and handled by the
caller for the one method being built.
"""

import logging
from typing import Dict

from apimodel.tables import (
    FALLIBLE_HANDLE_TEMPLATE,
    FALLIBLE_TEMPLATE,
    HANDLE_TEMPLATE,
    TYPEDEF_WHITELIST,
    UNEXPOSED_CLASS_NAMES,
)
from apimodel.types import Arr, ClassType, Direct, Maybe, Prim, Ptr, Ref, RetType, Type
from extraction.config import DEFAULT_NAMESPACE
from extraction.declarations import TypeExpr, TypeKind

logger = logging.getLogger(__name__)

_KIND_TABLE: Dict[TypeKind, Prim] = {
    TypeKind.VOID: Prim.VOID,
    TypeKind.BOOL: Prim.BOOL,
    TypeKind.INT: Prim.INT,
    TypeKind.UINT: Prim.UINT,
    TypeKind.LONG: Prim.LONG,
    TypeKind.ULONG: Prim.ULONG,
    TypeKind.LONG_LONG: Prim.I64,
    TypeKind.ULONG_LONG: Prim.U64,
    TypeKind.DOUBLE: Prim.F64,
}


class TypeMappingError(ValueError):
    """Raised when a type expression has no ``Type`` counterpart."""

    def __init__(self, message: str, display_name: str, kind: TypeKind):
        super().__init__(f"{message}: {display_name!r} of kind {kind.name}")
        self.display_name = display_name
        self.kind = kind


class TypeMapper:
    """Maps type expressions of one target namespace.

    Args:
        namespace: Target namespace whose qualification is stripped from
            class names.
    """

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace
        self._prefix = f"{namespace}::"

    def strip_namespace(self, display_name: str) -> str:
        """Drop const qualification and every target-namespace qualifier."""
        name = display_name
        if name.startswith("const "):
            name = name[len("const "):]
        return name.replace(self._prefix, "")

    def map_type(self, typ: TypeExpr) -> Type:
        """Map an argument or payload type.

        Raises:
            TypeMappingError: If the type is unsupported.
        """
        kind = typ.kind

        if kind in (TypeKind.CHAR_S, TypeKind.SCHAR):
            return Prim.CONST_CHAR if typ.is_const else Prim.CHAR

        if kind in _KIND_TABLE:
            return _KIND_TABLE[kind]

        if kind == TypeKind.POINTER:
            if typ.pointee is None:
                raise TypeMappingError("Pointer without pointee", typ.display_name, kind)
            return Ptr(self.map_type(typ.pointee))

        if kind == TypeKind.INCOMPLETE_ARRAY:
            if typ.element is None:
                raise TypeMappingError("Array without element type", typ.display_name, kind)
            return Arr(self.map_type(typ.element))

        if kind == TypeKind.RECORD:
            name = self.strip_namespace(typ.display_name)
            if "::" in name:
                raise TypeMappingError("No support for nested type", typ.display_name, kind)
            return ClassType(name)

        if kind == TypeKind.TYPEDEF:
            prim = TYPEDEF_WHITELIST.get(typ.display_name)
            if prim is None:
                raise TypeMappingError("Unmapped typedef", typ.display_name, kind)
            return prim

        if kind == TypeKind.UNEXPOSED:
            return self._map_unexposed(typ)

        raise TypeMappingError(
            "Unmapped type (in kind dispatch table)", typ.display_name, kind
        )

    def _map_unexposed(self, typ: TypeExpr) -> Type:
        name = self.strip_namespace(typ.display_name)
        if name.startswith(f"{HANDLE_TEMPLATE}<"):
            return Ref(self._map_first_argument(typ))
        if name in UNEXPOSED_CLASS_NAMES:
            return ClassType(name)
        raise TypeMappingError(
            "Unmapped type (in unexposed exception table)", typ.display_name, typ.kind
        )

    def _map_first_argument(self, typ: TypeExpr) -> Type:
        argument = typ.first_template_arg()
        if argument is None:
            raise TypeMappingError("Template without arguments", typ.display_name, typ.kind)
        return self.map_type(argument)

    def map_return_type(self, typ: TypeExpr) -> RetType:
        """Map a return type, detecting the fallible-result wrappers.

        ``MaybeLocal<T>`` becomes ``Maybe(Ref(T))``, ``Maybe<T>`` becomes
        ``Maybe(T)``; anything else is ``Direct``.

        Raises:
            TypeMappingError: If the type (or its payload) is unsupported.
        """
        if typ.kind == TypeKind.UNEXPOSED:
            name = self.strip_namespace(typ.display_name)
            if name.startswith(f"{FALLIBLE_HANDLE_TEMPLATE}<"):
                return Maybe(Ref(self._map_first_argument(typ)))
            if name.startswith(f"{FALLIBLE_TEMPLATE}<"):
                return Maybe(self._map_first_argument(typ))
        return Direct(self.map_type(typ))
