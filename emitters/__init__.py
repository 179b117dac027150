"""
Layer 3: Emitters

Pure ``Api -> text`` renderers for the declaration header, the C-ABI header
and the C++ implementation.
"""

from emitters.common import EmitOptions
from emitters.decl_header import emit_declaration_header
from emitters.c_header import emit_c_header
from emitters.cc_impl import emit_cc_impl

__all__ = [
    "EmitOptions",
    "emit_declaration_header",
    "emit_c_header",
    "emit_cc_impl",
]
