"""Shared C rendering for the three emitters."""

from dataclasses import dataclass
from typing import Dict, List

from apimodel.api import Arg, Class, Method
from apimodel.tables import MAYBE_PRIMITIVES
from apimodel.types import Arr, ClassType, Direct, Maybe, Prim, Ptr, Ref, RetType, Type
from extraction.config import DEFAULT_NAMESPACE

BANNER = "// AUTO-GENERATED - DO NOT EDIT"

DEFAULT_CONTEXT_TYPE = "GlueContext"
DEFAULT_DECLARATIONS_HEADER = "glue-decl-generated.h"
DEFAULT_PROTOTYPES_HEADER = "glue-generated.h"
DEFAULT_IMPLEMENTATION_FILE = "glue-generated.cc"
DEFAULT_GLUE_HEADER = "glue.h"

PRIM_C_TYPES: Dict[Prim, str] = {
    Prim.VOID: "void",
    Prim.BOOL: "bool",
    Prim.CHAR: "char",
    Prim.CONST_CHAR: "const char",
    Prim.INT: "int",
    Prim.UINT: "unsigned int",
    Prim.LONG: "long",
    Prim.ULONG: "unsigned long",
    Prim.U8: "uint8_t",
    Prim.I8: "int8_t",
    Prim.U16: "uint16_t",
    Prim.I16: "int16_t",
    Prim.U32: "uint32_t",
    Prim.I32: "int32_t",
    Prim.U64: "uint64_t",
    Prim.I64: "int64_t",
    Prim.F64: "double",
}


@dataclass(frozen=True)
class EmitOptions:
    """Names shared by the generated artifacts.

    Attributes:
        namespace: Target namespace; prefixes every C symbol.
        context_type: C type of the execution-context parameter.
        declarations_header: File name the C-ABI header includes.
        glue_header: Hand-written header the implementation includes; it
            declares the context type, the Maybe structs and the
            wrap/unwrap helpers.
    """

    namespace: str = DEFAULT_NAMESPACE
    context_type: str = DEFAULT_CONTEXT_TYPE
    declarations_header: str = DEFAULT_DECLARATIONS_HEADER
    glue_header: str = DEFAULT_GLUE_HEADER


def pointer_alias(class_name: str) -> str:
    return f"{class_name}Ptr"


def ref_alias(class_name: str) -> str:
    return f"{class_name}Ref"


def symbol_name(options: EmitOptions, class_name: str, suffix: str) -> str:
    return f"{options.namespace}_{class_name}_{suffix}"


def maybe_suffix(prim: Prim) -> str:
    """Suffix of the Maybe result struct for a primitive payload.

    Raises:
        ValueError: If the primitive has no Maybe struct.
    """
    try:
        return MAYBE_PRIMITIVES[prim]
    except KeyError:
        raise ValueError(f"No Maybe result struct for {prim}") from None


def c_type(typ: Type) -> str:
    """Render a non-array ``Type`` as a C type.

    Raises:
        ValueError: For by-value classes and arrays, which have no C
            spelling outside a parameter.
    """
    if isinstance(typ, Prim):
        return PRIM_C_TYPES[typ]
    if isinstance(typ, Ref) and isinstance(typ.inner, ClassType):
        return ref_alias(typ.inner.name)
    if isinstance(typ, Ptr):
        if isinstance(typ.inner, ClassType):
            return pointer_alias(typ.inner.name)
        return f"{c_type(typ.inner)} *"
    raise ValueError(f"Type {typ} has no C spelling")


def c_declaration(typ: Type, name: str) -> str:
    """Render ``typ name``, using ``T name[]`` for arrays."""
    if isinstance(typ, Arr):
        return f"{c_declaration(typ.inner, name)}[]"
    rendered = c_type(typ)
    if rendered.endswith("*"):
        return f"{rendered}{name}"
    return f"{rendered} {name}"


def c_return_type(ret: RetType) -> str:
    """Render a return type; handle and pointer Maybes are nullable pointers."""
    if isinstance(ret, Maybe) and isinstance(ret.type, Prim):
        return f"Maybe{maybe_suffix(ret.type)}"
    return c_type(ret.type)


def unwrap_function(ret: RetType) -> str:
    """Name of the glue helper converting a native result to its C form."""
    if isinstance(ret, Maybe) and isinstance(ret.type, Prim):
        return f"unwrap_maybe_{maybe_suffix(ret.type).lower()}"
    return "unwrap"


def is_void(ret: RetType) -> bool:
    return isinstance(ret, Direct) and ret.type is Prim.VOID


def method_parameters(options: EmitOptions, cls: Class, method: Method) -> List[str]:
    params = [f"{options.context_type} c"]
    if not method.is_static:
        params.append(f"{ref_alias(cls.name)} self")
    params.extend(c_declaration(arg.arg_type, arg.name) for arg in method.args)
    return params


def method_signature(options: EmitOptions, cls: Class, method: Method) -> str:
    """Full C signature of a generated method function, without ``;``."""
    params = ", ".join(method_parameters(options, cls, method))
    name = symbol_name(options, cls.name, method.mangled_name)
    return f"{c_return_type(method.ret_type)} {name}({params})"


def clone_ref_signature(options: EmitOptions, cls: Class) -> str:
    ref = ref_alias(cls.name)
    name = symbol_name(options, cls.name, "CloneRef")
    return f"{ref} {name}({options.context_type} c, {ref} self)"


def destroy_ref_signature(options: EmitOptions, cls: Class) -> str:
    return f"void {symbol_name(options, cls.name, 'DestroyRef')}({ref_alias(cls.name)} self)"


def destroy_ptr_signature(options: EmitOptions, cls: Class) -> str:
    return f"void {symbol_name(options, cls.name, 'DestroyPtr')}({pointer_alias(cls.name)} self)"


def wrapped_argument(arg: Arg) -> str:
    return f"wrap(c.isolate, {arg.name})"
