"""
C++-implementation emitter.

Every generated body enters an isolate scope, a handle scope and an
exception-catch scope, enters the context scope when the method takes a
context handle, performs the call, records any pending exception in the
execution context, and converts the result back to its C form.
"""

from typing import List, Optional

from apimodel.api import Api, Class, Method
from apimodel.tables import CONTEXT_CLASS
from apimodel.types import is_class_ref
from emitters.common import (
    BANNER,
    EmitOptions,
    clone_ref_signature,
    destroy_ptr_signature,
    destroy_ref_signature,
    is_void,
    method_signature,
    unwrap_function,
    wrapped_argument,
)

INDENT = "  "


def context_argument(method: Method) -> Optional[str]:
    """Name of the argument holding the execution context, if any."""
    for arg in method.args:
        if is_class_ref(arg.arg_type, CONTEXT_CLASS):
            return arg.name
    return None


def method_body(cls: Class, method: Method, options: EmitOptions = EmitOptions()) -> List[str]:
    """Lines of one generated method definition."""
    ns = options.namespace
    lines = [
        f"{method_signature(options, cls, method)} {{",
        f"{INDENT}{ns}::Isolate::Scope isolate_scope(c.isolate);",
        f"{INDENT}{ns}::HandleScope handle_scope(c.isolate);",
        f"{INDENT}{ns}::TryCatch try_catch(c.isolate);",
    ]
    context = context_argument(method)
    if context is not None:
        lines.append(
            f"{INDENT}{ns}::Context::Scope context_scope(wrap(c.isolate, {context}));"
        )

    if method.is_static:
        receiver = f"{ns}::{cls.name}::"
    else:
        receiver = "wrap(c.isolate, self)->"
    call = f"{receiver}{method.name}({', '.join(wrapped_argument(arg) for arg in method.args)})"

    if is_void(method.ret_type):
        lines.append(f"{INDENT}{call};")
        lines.append(f"{INDENT}handle_exception(c, try_catch);")
    else:
        lines.append(f"{INDENT}auto result = {call};")
        lines.append(f"{INDENT}handle_exception(c, try_catch);")
        lines.append(f"{INDENT}return {unwrap_function(method.ret_type)}(c.isolate, result);")
    lines.append("}")
    return lines


def class_boilerplate(cls: Class, options: EmitOptions = EmitOptions()) -> List[str]:
    """Clone and destroy definitions of one class."""
    ns = options.namespace
    return [
        f"{clone_ref_signature(options, cls)} {{",
        f"{INDENT}return new {ns}::Persistent<{ns}::{cls.name}>(c.isolate, *self);",
        "}",
        "",
        f"{destroy_ref_signature(options, cls)} {{",
        f"{INDENT}self->Reset();",
        f"{INDENT}delete self;",
        "}",
        "",
        f"{destroy_ptr_signature(options, cls)} {{",
        f"{INDENT}delete self;",
        "}",
    ]


def emit_cc_impl(api: Api, options: EmitOptions = EmitOptions()) -> str:
    """Render the C++ implementation file."""
    lines: List[str] = [
        BANNER,
        f'#include "{options.glue_header}"',
        "",
        'extern "C" {',
    ]
    for cls in api.classes:
        for method in cls.methods:
            lines.append("")
            lines.extend(method_body(cls, method, options))
        lines.append("")
        lines.extend(class_boilerplate(cls, options))
    lines.extend(["", '} /* extern "C" */', ""])
    return "\n".join(lines)
