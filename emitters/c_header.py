"""C-ABI-header emitter: one prototype per method plus per-class boilerplate."""

from typing import List

from apimodel.api import Api, Class
from emitters.common import (
    BANNER,
    EmitOptions,
    clone_ref_signature,
    destroy_ptr_signature,
    destroy_ref_signature,
    method_signature,
)


def class_prototypes(cls: Class, options: EmitOptions = EmitOptions()) -> List[str]:
    """Prototype lines for one class, methods first."""
    lines = [f"{method_signature(options, cls, method)};" for method in cls.methods]
    lines.append(f"{clone_ref_signature(options, cls)};")
    lines.append(f"{destroy_ref_signature(options, cls)};")
    lines.append(f"{destroy_ptr_signature(options, cls)};")
    return lines


def emit_c_header(api: Api, options: EmitOptions = EmitOptions()) -> str:
    """Render the C-ABI prototype header.

    The context type and the Maybe result structs are declared by the
    hand-written glue header, which must be included first.
    """
    lines: List[str] = [
        BANNER,
        "#pragma once",
        "",
        f'#include "{options.declarations_header}"',
        "",
        "#if defined __cplusplus",
        'extern "C" {',
        "#endif /* defined __cplusplus */",
    ]
    for cls in api.classes:
        lines.append("")
        lines.extend(class_prototypes(cls, options))
    lines.extend([
        "",
        "#if defined __cplusplus",
        '} /* extern "C" */',
        "#endif /* defined __cplusplus */",
        "",
    ])
    return "\n".join(lines)
