"""
Canonical special-case tables for the bridged interface.

This is the only place the exclusion lists, mangle rules and name exceptions
are defined; the extractor, mapper, assembly step and emitters all read them
from here.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from apimodel.types import Prim


def method_key(class_name: str, method_name: str) -> str:
    """Key of a method in ``EXCLUDED_METHODS``."""
    return f"{class_name}::{method_name}"


# Classes that need hand-written glue
EXCLUDED_CLASSES: FrozenSet[str] = frozenset({
    # Part of the execution context itself
    "Isolate",
    # Stack-local scopes
    "HandleScope",
    "EscapableHandleScope",
    "SealHandleScope",
    "TryCatch",
    # Passed around by value
    "ScriptOrigin",
    "PersistentHandleVisitor",
    "EmbedderHeapTracer",
    "ValueSerializer",
    "ValueDeserializer",
    "ExtensionConfiguration",
    "Module",
    "SnapshotCreator",
    # Prerequisites for creating an isolate
    "Platform",
    "Task",
    "IdleTask",
})

_EXCLUDED_METHOD_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("Script", "Compile"),
    ("Message", "GetScriptOrigin"),
    ("String", "WriteUtf8"),
    ("Object", "SetAlignedPointerInInternalFields"),
    ("Object", "CallAsFunction"),
    ("Object", "CallAsConstructor"),
    ("Object", "NewInstance"),
    ("Object", "Call"),
    ("Function", "New"),
    ("Function", "GetScriptOrigin"),
    ("Function", "NewInstance"),
    ("Function", "Call"),
    ("Template", "SetNativeDataProperty"),
    ("Template", "SetLazyDataProperty"),
    ("FunctionTemplate", "New"),
    ("FunctionTemplate", "NewWithCache"),
    ("ObjectTemplate", "SetAccessor"),
    ("ObjectTemplate", "SetNamedPropertyHandler"),
    ("ObjectTemplate", "SetIndexedPropertyHandler"),
    ("ObjectTemplate", "SetCallAsFunctionHandler"),
    ("ObjectTemplate", "SetAccessCheckCallback"),
    ("ObjectTemplate", "SetAccessCheckCallbackAndHandler"),
    ("Value", "IsFloat32x4"),
    ("V8", "CreateSnapshotDataBlob"),
    ("V8", "WarmUpSnapshotDataBlob"),
    # Called before any context exists
    ("V8", "Initialize"),
    ("V8", "Dispose"),
    ("V8", "InitializePlatform"),
    ("V8", "ShutdownPlatform"),
)

EXCLUDED_METHODS: FrozenSet[str] = frozenset(
    method_key(class_name, method_name)
    for class_name, method_name in _EXCLUDED_METHOD_PAIRS
)


@dataclass(frozen=True)
class MethodMangle:
    """Rename ``name`` to ``mangle`` when some argument is named ``unique_arg``."""

    name: str
    unique_arg: str
    mangle: str


# Order matters: the first matching row wins.
METHOD_MANGLES: Tuple[MethodMangle, ...] = (
    MethodMangle("Set", "index", "Set_Index"),
    MethodMangle("Set", "key", "Set_Key"),
    MethodMangle("CreateDataProperty", "index", "CreateDataProperty_Index"),
    MethodMangle("CreateDataProperty", "key", "CreateDataProperty_Key"),
    MethodMangle("Get", "index", "Get_Index"),
    MethodMangle("Get", "key", "Get_Key"),
    MethodMangle("Has", "index", "Has_Index"),
    MethodMangle("Has", "key", "Has_Key"),
    MethodMangle("Delete", "index", "Delete_Index"),
    MethodMangle("Delete", "key", "Delete_Key"),
    MethodMangle("HasOwnProperty", "index", "HasOwnProperty_Index"),
    MethodMangle("HasOwnProperty", "key", "HasOwnProperty_Key"),
    MethodMangle("GetPropertyNames", "mode", "GetPropertyNames_Filter"),
    MethodMangle("GetOwnPropertyNames", "filter", "GetOwnPropertyNames_Filter"),
    MethodMangle("InitializeExternalStartupData", "natives_blob", "InitializeExternalStartupData_Blobs"),
    MethodMangle("InitializeExternalStartupData", "directory_path", "InitializeExternalStartupData_Directory"),
    MethodMangle("New", "shared_array_buffer", "New_Shared"),
    MethodMangle("New", "array_buffer", "New_Owned"),
    MethodMangle("New", "mode", "New_Mode"),
    MethodMangle("Set", "isolate", "Set_Raw"),
)

# Template names recognised by the type mapper
HANDLE_TEMPLATE = "Local"
FALLIBLE_HANDLE_TEMPLATE = "MaybeLocal"
FALLIBLE_TEMPLATE = "Maybe"

# Names the front end reports as unexposed although they are plain classes
UNEXPOSED_CLASS_NAMES: FrozenSet[str] = frozenset({
    "Isolate",
    "ObjectTemplate",
    "Value",
})

# Fixed-width integer typedefs; const-qualified spellings map identically
_FIXED_WIDTH_TYPEDEFS: Dict[str, Prim] = {
    "uint8_t": Prim.U8,
    "int8_t": Prim.I8,
    "uint16_t": Prim.U16,
    "int16_t": Prim.I16,
    "uint32_t": Prim.U32,
    "int32_t": Prim.I32,
    "uint64_t": Prim.U64,
    "int64_t": Prim.I64,
}

TYPEDEF_WHITELIST: Dict[str, Prim] = {
    **_FIXED_WIDTH_TYPEDEFS,
    **{f"const {name}": prim for name, prim in _FIXED_WIDTH_TYPEDEFS.items()},
}

# Class whose handle arguments enter an execution-context scope
CONTEXT_CLASS = "Context"

# Classes bridged only as raw pointers by the hand-written glue
HAND_WRITTEN_POINTER_CLASSES: FrozenSet[str] = frozenset({
    "Isolate",
    "Platform",
    "Task",
    "IdleTask",
})

# Identifiers declared by every generated function body
RESERVED_ARG_NAMES: FrozenSet[str] = frozenset({
    "c",
    "self",
    "result",
    "try_catch",
    "handle_scope",
    "isolate_scope",
    "context_scope",
})

# Primitive payloads with a dedicated Maybe result struct, keyed to the
# struct/unwrap suffix
MAYBE_PRIMITIVES: Dict[Prim, str] = {
    Prim.BOOL: "Bool",
    Prim.INT: "Int",
    Prim.UINT: "UInt",
    Prim.LONG: "Long",
    Prim.ULONG: "ULong",
    Prim.U32: "U32",
    Prim.I32: "I32",
    Prim.U64: "U64",
    Prim.I64: "I64",
    Prim.F64: "F64",
}
