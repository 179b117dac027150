"""Declaration-header emitter: opaque pointer/reference aliases per class."""

from typing import List

from apimodel.api import Api
from emitters.common import BANNER, EmitOptions, pointer_alias, ref_alias


def emit_declaration_header(api: Api, options: EmitOptions = EmitOptions()) -> str:
    """Render the opaque-handle declaration header.

    Each class gets a pointer alias and a reference alias, spelled as the
    engine's C++ types under ``__cplusplus`` and as distinct incomplete
    structs for C consumers.
    """
    ns = options.namespace
    lines: List[str] = [BANNER, "#pragma once"]
    for cls in api.classes:
        lines.extend([
            "",
            "#if defined __cplusplus",
            f"typedef {ns}::{cls.name} *{pointer_alias(cls.name)};",
            f"typedef {ns}::Persistent<{ns}::{cls.name}> *{ref_alias(cls.name)};",
            "#else",
            f"typedef struct _{cls.name} *{pointer_alias(cls.name)};",
            f"typedef struct _{cls.name}Ref *{ref_alias(cls.name)};",
            "#endif /* defined __cplusplus */",
        ])
    lines.append("")
    return "\n".join(lines)
