"""
Configuration constants for the C++ declaration front end.

Defines the tree-sitter node type strings used to derive declaration kinds,
plus the default macro lists neutralised before parsing.
"""

from typing import Dict, Set, Tuple

# Default target namespace of the engine's public interface
DEFAULT_NAMESPACE: str = "v8"

# Namespace definition node type
NAMESPACE_NODE: str = "namespace_definition"

# Template wrapper node type
TEMPLATE_WRAPPER: str = "template_declaration"

# Declaration node type (classes/structs can be wrapped in this)
DECLARATION_NODE: str = "declaration"

# Include directive node type
INCLUDE_NODE: str = "preproc_include"

# Record specifiers and the declaration kind each one introduces
RECORD_SPECIFIERS: Dict[str, str] = {
    "class_specifier": "class",
    "struct_specifier": "struct",
    "union_specifier": "union",
}

ENUM_SPECIFIER: str = "enum_specifier"

# Wrapper types that should be treated as transparent (extern "C++" { ... })
TRANSPARENT_WRAPPERS: Set[str] = {
    "linkage_specification",
}

# Preprocessor directives whose first branch we traverse
PREPROCESSOR_CONTAINERS: Set[str] = {
    "preproc_ifdef",
    "preproc_ifndef",
    "preproc_if",
}

# Node types that can hold a class member function
MEMBER_FUNCTION_NODES: Set[str] = {
    "field_declaration",
    "declaration",
    "function_definition",
    "inline_method_definition",
}

ACCESS_SPECIFIER_NODE: str = "access_specifier"
BASE_CLASS_CLAUSE: str = "base_class_clause"

# Declarator wrappers, outermost first in the tree
POINTER_DECLARATORS: Set[str] = {
    "pointer_declarator",
    "abstract_pointer_declarator",
    "pointer_field_declarator",
}
REFERENCE_DECLARATORS: Set[str] = {
    "reference_declarator",
    "abstract_reference_declarator",
}
ARRAY_DECLARATORS: Set[str] = {
    "array_declarator",
    "abstract_array_declarator",
}
FUNCTION_DECLARATORS: Set[str] = {
    "function_declarator",
    "abstract_function_declarator",
}
PARENTHESIZED_DECLARATORS: Set[str] = {
    "parenthesized_declarator",
    "abstract_parenthesized_declarator",
}
ATTRIBUTED_DECLARATORS: Set[str] = {
    "attributed_declarator",
}

# Parameter list entries
PARAMETER_NODES: Set[str] = {
    "parameter_declaration",
    "optional_parameter_declaration",
}
# C-style ellipsis (an anonymous token in the grammar) and parameter packs;
# either one turns the parameter into a nameless variadic entry
VARIADIC_PARAMETER_NODES: Set[str] = {
    "...",
    "variadic_parameter_declaration",
}

# Terminal name nodes inside declarators
NAME_NODES: Set[str] = {
    "identifier",
    "field_identifier",
    "type_identifier",
}

# Attribute nodes scanned for `deprecated`
ATTRIBUTE_NODES: Set[str] = {
    "attribute_declaration",
    "attribute_specifier",
}

DELETE_CLAUSE: str = "delete_method_clause"

# Nodes never descended into while building the symbol table
OPAQUE_BODIES: Set[str] = {
    "compound_statement",
    "parameter_list",
    "template_argument_list",
    "initializer_list",
}

# Primitive spellings of fixed-width / size typedefs the grammar reports
# as `primitive_type`
TYPEDEF_PRIMITIVES: Set[str] = {
    "int8_t", "uint8_t",
    "int16_t", "uint16_t",
    "int32_t", "uint32_t",
    "int64_t", "uint64_t",
    "size_t", "ssize_t", "ptrdiff_t", "intptr_t", "uintptr_t",
}

# `sized_type_specifier` spellings keyed by their sorted keyword tuple,
# `int` and `signed` already folded away where they are redundant
SIZED_TYPE_KINDS: Dict[Tuple[str, ...], str] = {
    ("unsigned",): "UINT",
    ("signed",): "INT",
    ("char", "signed"): "SCHAR",
    ("char", "unsigned"): "UCHAR",
    ("short",): "SHORT",
    ("short", "unsigned"): "USHORT",
    ("long",): "LONG",
    ("long", "unsigned"): "ULONG",
    ("long", "long"): "LONG_LONG",
    ("long", "long", "unsigned"): "ULONG_LONG",
    ("double", "long"): "LONG_DOUBLE",
}

# Object-like macros erased before parsing (export/inline decorations the
# grammar cannot see through)
DEFAULT_STRIPPED_MACROS: Tuple[str, ...] = (
    "V8_EXPORT",
    "V8_EXPORT_PRIVATE",
    "V8_INLINE",
    "V8_NOINLINE",
    "V8_WARN_UNUSED_RESULT",
    "V8_NODISCARD",
)

# Function-like macros rewritten into a `[[deprecated]]` attribute
DEFAULT_DEPRECATION_MACROS: Tuple[str, ...] = (
    "V8_DEPRECATED",
    "V8_DEPRECATE_SOON",
)

# Header file extensions accepted as the session's main input
HEADER_EXTENSIONS: Set[str] = {
    ".h",
    ".hh",
    ".hpp",
    ".hxx",
}
