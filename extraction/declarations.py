"""
Navigable declaration tree over tree-sitter C++ syntax.

A syntax tree carries no semantic kinds, so this module derives the ones the
extraction pipeline queries: declaration kinds, member accessibility,
availability, static-ness, argument lists and type expressions. The kinds are
locally owned enumerations mirroring only what the pipeline understands.

Type expressions are copied out of the tree into immutable ``TypeExpr``
values; ``Declaration`` objects stay bound to their parse session and refuse
queries once it is closed.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from tree_sitter import Node

from extraction.config import (
    ACCESS_SPECIFIER_NODE,
    ARRAY_DECLARATORS,
    ATTRIBUTE_NODES,
    ATTRIBUTED_DECLARATORS,
    BASE_CLASS_CLAUSE,
    DECLARATION_NODE,
    DELETE_CLAUSE,
    ENUM_SPECIFIER,
    FUNCTION_DECLARATORS,
    INCLUDE_NODE,
    MEMBER_FUNCTION_NODES,
    NAME_NODES,
    NAMESPACE_NODE,
    OPAQUE_BODIES,
    PARAMETER_NODES,
    PARENTHESIZED_DECLARATORS,
    POINTER_DECLARATORS,
    PREPROCESSOR_CONTAINERS,
    RECORD_SPECIFIERS,
    REFERENCE_DECLARATORS,
    SIZED_TYPE_KINDS,
    TEMPLATE_WRAPPER,
    TRANSPARENT_WRAPPERS,
    TYPEDEF_PRIMITIVES,
    VARIADIC_PARAMETER_NODES,
)

logger = logging.getLogger(__name__)

_SPACE_RE = re.compile(r"\s+")
_PUNCT_RE = re.compile(r"\s*(::|<|>|,|\*|&)\s*")
_DELETED_RE = re.compile(r"=\s*delete\s*;?\s*$")


class SessionClosedError(RuntimeError):
    """Raised when a declaration is queried after its session was closed."""


class DeclKind(Enum):
    """Declaration kinds the extraction pipeline distinguishes."""

    TRANSLATION_UNIT = auto()
    NAMESPACE = auto()
    CLASS_DECL = auto()
    STRUCT_DECL = auto()
    UNION_DECL = auto()
    CLASS_TEMPLATE = auto()
    FUNCTION_TEMPLATE = auto()
    FUNCTION_DECL = auto()
    METHOD = auto()
    CONSTRUCTOR = auto()
    DESTRUCTOR = auto()
    CONVERSION_FUNCTION = auto()
    FIELD_DECL = auto()
    PARM_DECL = auto()
    BASE_SPECIFIER = auto()
    ACCESS_SPECIFIER = auto()
    ENUM_DECL = auto()
    TYPEDEF_DECL = auto()


class Accessibility(Enum):
    PUBLIC = auto()
    PROTECTED = auto()
    PRIVATE = auto()


class Availability(Enum):
    AVAILABLE = auto()
    DEPRECATED = auto()
    NOT_AVAILABLE = auto()


class TypeKind(Enum):
    """Type expression kinds, modelled on a compiler front end's type kinds."""

    VOID = auto()
    BOOL = auto()
    CHAR_S = auto()
    SCHAR = auto()
    UCHAR = auto()
    SHORT = auto()
    USHORT = auto()
    INT = auto()
    UINT = auto()
    LONG = auto()
    ULONG = auto()
    LONG_LONG = auto()
    ULONG_LONG = auto()
    FLOAT = auto()
    DOUBLE = auto()
    LONG_DOUBLE = auto()
    POINTER = auto()
    LVALUE_REFERENCE = auto()
    RVALUE_REFERENCE = auto()
    CONSTANT_ARRAY = auto()
    INCOMPLETE_ARRAY = auto()
    FUNCTION_PROTO = auto()
    RECORD = auto()
    ENUM = auto()
    TYPEDEF = auto()
    UNEXPOSED = auto()
    OTHER = auto()
    INVALID = auto()


_PRIMITIVE_KINDS: Dict[str, TypeKind] = {
    "void": TypeKind.VOID,
    "bool": TypeKind.BOOL,
    "char": TypeKind.CHAR_S,
    "int": TypeKind.INT,
    "float": TypeKind.FLOAT,
    "double": TypeKind.DOUBLE,
}

_RECORD_KINDS: Dict[str, DeclKind] = {
    "class": DeclKind.CLASS_DECL,
    "struct": DeclKind.STRUCT_DECL,
    "union": DeclKind.UNION_DECL,
}

_CALLABLE_KINDS = frozenset({
    DeclKind.METHOD,
    DeclKind.CONSTRUCTOR,
    DeclKind.DESTRUCTOR,
    DeclKind.CONVERSION_FUNCTION,
    DeclKind.FUNCTION_DECL,
})


@dataclass(frozen=True)
class TypeExpr:
    """A type expression copied out of the declaration tree.

    Attributes:
        kind: The structural kind of the type.
        display_name: Human-readable spelling, namespace-qualified where the
            name was resolved (e.g. ``v8::Value``, ``Local<v8::String>``).
        is_const: Whether the type itself is const-qualified.
        pointee: Target of a pointer/reference, or result of a function type.
        element: Element type of an array.
        template_args: Template arguments of an unexposed instantiation.
    """

    kind: TypeKind
    display_name: str
    is_const: bool = False
    pointee: Optional["TypeExpr"] = None
    element: Optional["TypeExpr"] = None
    template_args: Tuple["TypeExpr", ...] = ()

    def first_template_arg(self) -> Optional["TypeExpr"]:
        return self.template_args[0] if self.template_args else None


def node_text(node: Optional[Node]) -> str:
    """Decode a node's source text."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def normalize_spelling(text: str) -> str:
    """Collapse whitespace in a type or name spelling.

    Example:
        >>> normalize_spelling("v8 :: Local < v8::Value >")
        'v8::Local<v8::Value>'
    """
    collapsed = _SPACE_RE.sub(" ", text).strip()

    def _join(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token == ",":
            return ", "
        if token in ("*", "&"):
            return f" {token}"
        return token

    return _PUNCT_RE.sub(_join, collapsed).strip()


def _const(display: str, is_const: bool) -> str:
    return f"const {display}" if is_const else display


def _same_node(a: Optional[Node], b: Optional[Node]) -> bool:
    if a is None or b is None:
        return False
    return (a.type, a.start_byte, a.end_byte) == (b.type, b.start_byte, b.end_byte)


class SymbolTable:
    """Fully qualified names of the records, enums and typedefs in a session."""

    def __init__(self) -> None:
        self._kinds: Dict[str, TypeKind] = {}

    def __len__(self) -> int:
        return len(self._kinds)

    def __contains__(self, qualified_name: str) -> bool:
        return qualified_name in self._kinds

    def add(self, qualified_name: str, kind: TypeKind) -> None:
        # A definition never downgrades an earlier record to a typedef.
        self._kinds.setdefault(qualified_name, kind)

    def lookup(
        self, spelled: str, scope: Sequence[str]
    ) -> Optional[Tuple[str, TypeKind]]:
        """Resolve a spelled name from the innermost enclosing scope outwards.

        Args:
            spelled: The name as written, possibly partially qualified.
            scope: Enclosing namespace/class names, outermost first.

        Returns:
            ``(qualified_name, kind)`` or None when the name is unknown.
        """
        spelled = spelled.lstrip(":")
        for depth in range(len(scope), -1, -1):
            candidate = "::".join(list(scope[:depth]) + [spelled])
            kind = self._kinds.get(candidate)
            if kind is not None:
                return candidate, kind
        return None


def _terminal_name(declarator: Optional[Node]) -> Optional[str]:
    node = declarator
    while node is not None:
        if node.type in NAME_NODES or node.type == "primitive_type":
            return node_text(node)
        node = inner_declarator(node)
    return None


def collect_symbols(container: Node, table: SymbolTable, scope: Tuple[str, ...] = ()) -> None:
    """Record every named record, enum and typedef below ``container``.

    Args:
        container: A translation unit or any scope body node.
        table: The table to populate.
        scope: Qualification of ``container``, outermost first.
    """
    for child in container.named_children:
        kind = child.type
        if kind == NAMESPACE_NODE:
            name_node = child.child_by_field_name("name")
            parts = tuple(p for p in node_text(name_node).split("::") if p)
            body = child.child_by_field_name("body")
            if body is not None:
                collect_symbols(body, table, scope + parts)
        elif kind in RECORD_SPECIFIERS:
            name_node = child.child_by_field_name("name")
            body = child.child_by_field_name("body")
            if name_node is not None and name_node.type == "type_identifier":
                name = node_text(name_node)
                table.add("::".join(scope + (name,)), TypeKind.RECORD)
                if body is not None:
                    collect_symbols(body, table, scope + (name,))
            elif body is not None:
                collect_symbols(body, table, scope)
        elif kind == ENUM_SPECIFIER:
            name_node = child.child_by_field_name("name")
            if name_node is not None:
                table.add("::".join(scope + (node_text(name_node),)), TypeKind.ENUM)
        elif kind == "type_definition":
            for declarator in child.children_by_field_name("declarator"):
                name = _terminal_name(declarator)
                if name:
                    table.add("::".join(scope + (name,)), TypeKind.TYPEDEF)
            collect_symbols(child, table, scope)
        elif kind == "alias_declaration":
            name_node = child.child_by_field_name("name")
            if name_node is not None:
                table.add("::".join(scope + (node_text(name_node),)), TypeKind.TYPEDEF)
        elif kind in OPAQUE_BODIES:
            continue
        else:
            collect_symbols(child, table, scope)


def inner_declarator(node: Node) -> Optional[Node]:
    """Return the declarator nested inside a declarator wrapper, if any."""
    nested = node.child_by_field_name("declarator")
    if nested is not None:
        return nested
    size = node.child_by_field_name("size")
    for child in node.named_children:
        if child.type in ("type_qualifier", "comment") or child.type in ATTRIBUTE_NODES:
            continue
        if child.type in ("ms_pointer_modifier", "ms_based_modifier"):
            continue
        if _same_node(child, size):
            continue
        if node.type in NAME_NODES:
            return None
        return child
    return None


def _has_deprecated_attribute(node: Node) -> bool:
    for child in node.children:
        if child.type in ATTRIBUTE_NODES and b"deprecated" in (child.text or b""):
            return True
    return False


class Declaration:
    """One node of the declaration tree.

    Declarations are created by a parse session (for the root) or by their
    parent's ``children()``; they are never constructed by callers.
    """

    def __init__(
        self,
        session,
        kind: DeclKind,
        node: Optional[Node] = None,
        file_key: Optional[str] = None,
        scope: Tuple[str, ...] = (),
        namespaces: Tuple[str, ...] = (),
        access: Optional[Accessibility] = None,
    ) -> None:
        self._session = session
        self._kind = kind
        self._node = node
        self._file_key = file_key
        self._scope = scope
        self._namespaces = namespaces
        self._access = access

    def __repr__(self) -> str:
        return f"Declaration({self._kind.name}, {self._node.type if self._node else '<root>'})"

    # ------------------------------------------------------------------
    # Basic queries
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._session.closed:
            raise SessionClosedError(
                "Declaration queried after its parse session was closed"
            )

    @property
    def kind(self) -> DeclKind:
        self._ensure_open()
        return self._kind

    @property
    def accessibility(self) -> Optional[Accessibility]:
        self._ensure_open()
        return self._access

    @property
    def name(self) -> Optional[str]:
        """The declaration's simple name, or None when it has none."""
        self._ensure_open()
        node = self._node
        if node is None:
            return None
        if self._kind == DeclKind.NAMESPACE:
            name_node = node.child_by_field_name("name")
            return node_text(name_node) or None
        if self._kind in (
            DeclKind.CLASS_DECL,
            DeclKind.STRUCT_DECL,
            DeclKind.UNION_DECL,
            DeclKind.ENUM_DECL,
        ):
            name_node = node.child_by_field_name("name")
            return node_text(name_node) or None
        if self._kind in _CALLABLE_KINDS:
            return self._callable_name()
        if self._kind == DeclKind.PARM_DECL:
            if node.type in VARIADIC_PARAMETER_NODES:
                return None
            _, terminal = self._apply_declarator(
                TypeExpr(TypeKind.INVALID, ""),
                node.child_by_field_name("declarator"),
                stop_at_function=False,
            )
            if terminal is not None and terminal.type in NAME_NODES:
                return node_text(terminal)
            return None
        if self._kind in (DeclKind.BASE_SPECIFIER, DeclKind.ACCESS_SPECIFIER):
            return normalize_spelling(node_text(node)).rstrip(":").strip() or None
        return None

    @property
    def display_name(self) -> str:
        """A readable rendering, ``Name(arg types)`` for callables."""
        self._ensure_open()
        name = self.name or "(unnamed)"
        if self._kind in _CALLABLE_KINDS:
            arguments = self.arguments() or []
            rendered = ", ".join(arg.type.display_name for arg in arguments)
            return f"{name}({rendered})"
        return name

    @property
    def availability(self) -> Availability:
        self._ensure_open()
        node = self._node
        if node is None:
            return Availability.AVAILABLE
        if any(child.type == DELETE_CLAUSE for child in node.children):
            return Availability.NOT_AVAILABLE
        if self._kind in _CALLABLE_KINDS and _DELETED_RE.search(node_text(node)):
            return Availability.NOT_AVAILABLE
        if _has_deprecated_attribute(node):
            return Availability.DEPRECATED
        declarator = node.child_by_field_name("declarator")
        while declarator is not None:
            if _has_deprecated_attribute(declarator):
                return Availability.DEPRECATED
            declarator = inner_declarator(declarator)
        return Availability.AVAILABLE

    @property
    def is_static_method(self) -> bool:
        self._ensure_open()
        if self._kind != DeclKind.METHOD or self._node is None:
            return False
        return any(
            child.type == "storage_class_specifier" and node_text(child) == "static"
            for child in self._node.children
        )

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def children(self) -> List["Declaration"]:
        """Child declarations in source order."""
        self._ensure_open()
        if self._kind == DeclKind.TRANSLATION_UNIT:
            main_key = self._session.main_key
            visited: Set[str] = {main_key}
            return list(self._file_items(main_key, visited))
        if self._kind == DeclKind.NAMESPACE:
            body = self._node.child_by_field_name("body")
            if body is None:
                return []
            name = self.name
            parts = tuple(p for p in (name or "").split("::") if p)
            return list(
                self._scope_items(
                    body,
                    self._file_key,
                    None,
                    self._scope + parts,
                    self._namespaces + parts,
                )
            )
        if self._kind in (DeclKind.CLASS_DECL, DeclKind.STRUCT_DECL, DeclKind.UNION_DECL):
            return self._record_children()
        if self._kind in _CALLABLE_KINDS:
            return self.arguments() or []
        return []

    def _file_items(self, file_key: str, visited: Set[str]) -> Iterator["Declaration"]:
        tree = self._session.tree_for(file_key)
        yield from self._scope_items(tree.root_node, file_key, visited, (), ())

    def _scope_items(
        self,
        container: Node,
        file_key: Optional[str],
        visited: Optional[Set[str]],
        scope: Tuple[str, ...],
        namespaces: Tuple[str, ...],
    ) -> Iterator["Declaration"]:
        for child in container.named_children:
            kind = child.type
            if kind == INCLUDE_NODE:
                if visited is None or file_key is None:
                    continue
                target = self._session.include_target(file_key, child)
                if target is not None and target not in visited:
                    visited.add(target)
                    yield from self._file_items(target, visited)
            elif kind in PREPROCESSOR_CONTAINERS:
                yield from self._scope_items(child, file_key, visited, scope, namespaces)
            elif kind in TRANSPARENT_WRAPPERS:
                body = child.child_by_field_name("body")
                if body is not None:
                    yield from self._scope_items(body, file_key, visited, scope, namespaces)
            elif kind == NAMESPACE_NODE:
                yield self._child(DeclKind.NAMESPACE, child, file_key, scope, namespaces)
            elif kind in RECORD_SPECIFIERS:
                yield self._record(child, file_key, scope, namespaces)
            elif kind == DECLARATION_NODE:
                type_node = child.child_by_field_name("type")
                if type_node is not None and type_node.type in RECORD_SPECIFIERS:
                    yield self._record(type_node, file_key, scope, namespaces)
                elif child.child_by_field_name("declarator") is not None:
                    yield self._child(DeclKind.FUNCTION_DECL, child, file_key, scope, namespaces)
            elif kind == TEMPLATE_WRAPPER:
                yield self._child(self._template_kind(child), child, file_key, scope, namespaces)
            elif kind == "function_definition":
                text = node_text(child).lstrip()
                if text.startswith("class ") or text.startswith("struct "):
                    logger.warning(
                        "Class-like definition at line %d parsed as a function; "
                        "an export macro is probably missing from the strip list",
                        child.start_point[0] + 1,
                    )
                yield self._child(DeclKind.FUNCTION_DECL, child, file_key, scope, namespaces)
            elif kind == ENUM_SPECIFIER:
                yield self._child(DeclKind.ENUM_DECL, child, file_key, scope, namespaces)
            elif kind in ("type_definition", "alias_declaration"):
                yield self._child(DeclKind.TYPEDEF_DECL, child, file_key, scope, namespaces)

    def _child(
        self,
        kind: DeclKind,
        node: Node,
        file_key: Optional[str],
        scope: Tuple[str, ...],
        namespaces: Tuple[str, ...],
        access: Optional[Accessibility] = None,
    ) -> "Declaration":
        return Declaration(
            self._session,
            kind,
            node=node,
            file_key=file_key,
            scope=scope,
            namespaces=namespaces,
            access=access,
        )

    def _record(
        self,
        node: Node,
        file_key: Optional[str],
        scope: Tuple[str, ...],
        namespaces: Tuple[str, ...],
        access: Optional[Accessibility] = None,
    ) -> "Declaration":
        return self._child(
            _RECORD_KINDS[RECORD_SPECIFIERS[node.type]],
            node,
            file_key,
            scope,
            namespaces,
            access,
        )

    @staticmethod
    def _template_kind(node: Node) -> DeclKind:
        for child in node.named_children:
            if child.type in RECORD_SPECIFIERS:
                return DeclKind.CLASS_TEMPLATE
            if child.type == DECLARATION_NODE:
                type_node = child.child_by_field_name("type")
                if type_node is not None and type_node.type in RECORD_SPECIFIERS:
                    return DeclKind.CLASS_TEMPLATE
        return DeclKind.FUNCTION_TEMPLATE

    def _record_children(self) -> List["Declaration"]:
        node = self._node
        body = node.child_by_field_name("body")
        if body is None:
            return []
        name = self.name or ""
        member_scope = self._scope + ((name,) if name else ())
        children: List[Declaration] = []
        for child in node.named_children:
            if child.type != BASE_CLASS_CLAUSE:
                continue
            for base in child.named_children:
                if base.type in ("access_specifier", "virtual", "comment"):
                    continue
                children.append(
                    self._child(
                        DeclKind.BASE_SPECIFIER, base, self._file_key, self._scope, self._namespaces
                    )
                )
        default = (
            Accessibility.PRIVATE if self._kind == DeclKind.CLASS_DECL else Accessibility.PUBLIC
        )
        self._walk_members(body, [default], member_scope, children)
        return children

    def _walk_members(
        self,
        container: Node,
        access: List[Accessibility],
        member_scope: Tuple[str, ...],
        out: List["Declaration"],
    ) -> None:
        for child in container.named_children:
            kind = child.type
            if kind == ACCESS_SPECIFIER_NODE:
                access[0] = _parse_access(node_text(child), access[0])
                out.append(
                    self._child(
                        DeclKind.ACCESS_SPECIFIER,
                        child,
                        self._file_key,
                        member_scope,
                        self._namespaces,
                        access[0],
                    )
                )
            elif kind in PREPROCESSOR_CONTAINERS:
                self._walk_members(child, access, member_scope, out)
            elif kind == TEMPLATE_WRAPPER:
                out.append(
                    self._child(
                        self._template_kind(child),
                        child,
                        self._file_key,
                        member_scope,
                        self._namespaces,
                        access[0],
                    )
                )
            elif kind in MEMBER_FUNCTION_NODES:
                type_node = child.child_by_field_name("type")
                if (
                    type_node is not None
                    and type_node.type in RECORD_SPECIFIERS
                    and child.child_by_field_name("declarator") is None
                ):
                    out.append(
                        self._record(
                            type_node, self._file_key, member_scope, self._namespaces, access[0]
                        )
                    )
                    continue
                out.append(
                    self._child(
                        _member_kind(child),
                        child,
                        self._file_key,
                        member_scope,
                        self._namespaces,
                        access[0],
                    )
                )
            elif kind.startswith("operator_cast"):
                out.append(
                    self._child(
                        DeclKind.CONVERSION_FUNCTION,
                        child,
                        self._file_key,
                        member_scope,
                        self._namespaces,
                        access[0],
                    )
                )
            elif kind in RECORD_SPECIFIERS:
                out.append(
                    self._record(child, self._file_key, member_scope, self._namespaces, access[0])
                )
            elif kind == ENUM_SPECIFIER:
                out.append(
                    self._child(
                        DeclKind.ENUM_DECL,
                        child,
                        self._file_key,
                        member_scope,
                        self._namespaces,
                        access[0],
                    )
                )
            elif kind in ("type_definition", "alias_declaration"):
                out.append(
                    self._child(
                        DeclKind.TYPEDEF_DECL,
                        child,
                        self._file_key,
                        member_scope,
                        self._namespaces,
                        access[0],
                    )
                )

    # ------------------------------------------------------------------
    # Callables
    # ------------------------------------------------------------------

    def _function_declarator(self) -> Optional[Node]:
        node = self._node
        if node is None:
            return None
        if node.type == TEMPLATE_WRAPPER:
            return None
        declarator = node.child_by_field_name("declarator")
        _, terminal = self._apply_declarator(
            TypeExpr(TypeKind.INVALID, ""), declarator, stop_at_function=True
        )
        if terminal is not None and terminal.type in FUNCTION_DECLARATORS:
            return terminal
        return None

    def _callable_name(self) -> Optional[str]:
        function = self._function_declarator()
        if function is None:
            return None
        name_node = function.child_by_field_name("declarator")
        if name_node is None:
            return None
        if name_node.type in ("field_identifier", "identifier", "destructor_name"):
            return node_text(name_node)
        if name_node.type in ("operator_name", "operator_cast"):
            return _SPACE_RE.sub(" ", node_text(name_node)).strip()
        # template-ids and qualified names are not simple member names
        return None

    def arguments(self) -> Optional[List["Declaration"]]:
        """Ordered parameter declarations, or None for non-callables."""
        self._ensure_open()
        if self._kind not in _CALLABLE_KINDS:
            return None
        function = self._function_declarator()
        if function is None:
            return None
        parameters = function.child_by_field_name("parameters")
        if parameters is None:
            return []
        entries = [
            child
            for child in parameters.children
            if child.type in PARAMETER_NODES or child.type in VARIADIC_PARAMETER_NODES
        ]
        if (
            len(entries) == 1
            and entries[0].type == "parameter_declaration"
            and entries[0].child_by_field_name("declarator") is None
            and node_text(entries[0].child_by_field_name("type")) == "void"
        ):
            return []
        return [
            self._child(DeclKind.PARM_DECL, entry, self._file_key, self._scope, self._namespaces)
            for entry in entries
        ]

    @property
    def result_type(self) -> Optional[TypeExpr]:
        """Return type of a callable declaration."""
        self._ensure_open()
        if self._kind not in _CALLABLE_KINDS:
            return None
        node = self._node
        base = self._base_type(node)
        result, terminal = self._apply_declarator(
            base, node.child_by_field_name("declarator"), stop_at_function=True
        )
        if terminal is None or terminal.type not in FUNCTION_DECLARATORS:
            return None
        return result

    @property
    def type(self) -> Optional[TypeExpr]:
        """Type of a parameter declaration."""
        self._ensure_open()
        if self._kind != DeclKind.PARM_DECL:
            return None
        node = self._node
        if node.type in VARIADIC_PARAMETER_NODES:
            return TypeExpr(TypeKind.INVALID, "...")
        base = self._base_type(node)
        result, _ = self._apply_declarator(
            base, node.child_by_field_name("declarator"), stop_at_function=False
        )
        return result

    # ------------------------------------------------------------------
    # Type expressions
    # ------------------------------------------------------------------

    def _base_type(self, holder: Node) -> TypeExpr:
        type_node = holder.child_by_field_name("type")
        is_const = any(
            child.type == "type_qualifier" and node_text(child) == "const"
            for child in holder.children
        )
        if type_node is None:
            return TypeExpr(TypeKind.INVALID, "", is_const)
        return self._type_from_specifier(type_node, is_const)

    def _type_from_specifier(self, node: Node, is_const: bool) -> TypeExpr:
        kind = node.type
        text = normalize_spelling(node_text(node))

        if kind == "primitive_type":
            if text in _PRIMITIVE_KINDS:
                return TypeExpr(_PRIMITIVE_KINDS[text], _const(text, is_const), is_const)
            if text in TYPEDEF_PRIMITIVES:
                return TypeExpr(TypeKind.TYPEDEF, _const(text, is_const), is_const)
            return TypeExpr(TypeKind.OTHER, _const(text, is_const), is_const)

        if kind == "sized_type_specifier":
            tokens = text.split()
            if "const" in tokens:
                is_const = True
            tokens = [t for t in tokens if t not in ("const", "volatile")]
            spelled = " ".join(tokens)
            if "int" in tokens and len(tokens) > 1:
                tokens.remove("int")
            if "signed" in tokens and len(tokens) > 1 and "char" not in tokens:
                tokens.remove("signed")
            kind_name = SIZED_TYPE_KINDS.get(tuple(sorted(tokens)))
            type_kind = TypeKind[kind_name] if kind_name else TypeKind.OTHER
            return TypeExpr(type_kind, _const(spelled, is_const), is_const)

        if kind in ("type_identifier", "namespace_identifier", "identifier"):
            return self._resolve_named(text, is_const)

        if kind == "qualified_identifier":
            template = _innermost_template(node)
            if template is not None:
                prefix = normalize_spelling(
                    node.text[: template.start_byte - node.start_byte].decode(
                        "utf-8", errors="replace"
                    )
                )
                return self._template_type(template, prefix, is_const)
            return self._resolve_named(text, is_const)

        if kind == "template_type":
            return self._template_type(node, "", is_const)

        if kind in RECORD_SPECIFIERS or kind == ENUM_SPECIFIER:
            name_node = node.child_by_field_name("name")
            if name_node is not None and node.child_by_field_name("body") is None:
                return self._resolve_named(normalize_spelling(node_text(name_node)), is_const)

        return TypeExpr(TypeKind.OTHER, _const(text, is_const), is_const)

    def _resolve_named(self, spelled: str, is_const: bool) -> TypeExpr:
        spelled = spelled.lstrip(":")
        bare = spelled.rsplit("::", 1)[-1]
        if spelled in TYPEDEF_PRIMITIVES or (
            spelled.startswith("std::") and bare in TYPEDEF_PRIMITIVES
        ):
            return TypeExpr(TypeKind.TYPEDEF, _const(bare, is_const), is_const)
        resolved = self._session.symbols.lookup(spelled, self._scope)
        if resolved is not None:
            qualified, kind = resolved
            return TypeExpr(kind, _const(qualified, is_const), is_const)
        if "::" in spelled or not self._namespaces:
            qualified = spelled
        else:
            qualified = "::".join(self._namespaces + (spelled,))
        return TypeExpr(TypeKind.UNEXPOSED, _const(qualified, is_const), is_const)

    def _template_type(self, node: Node, prefix: str, is_const: bool) -> TypeExpr:
        name_node = node.child_by_field_name("name")
        arguments_node = node.child_by_field_name("arguments")
        arguments: Tuple[TypeExpr, ...] = ()
        if arguments_node is not None:
            arguments = tuple(
                self._template_argument(argument)
                for argument in arguments_node.named_children
                if argument.type != "comment"
            )
        rendered = ", ".join(argument.display_name for argument in arguments)
        display = f"{prefix}{normalize_spelling(node_text(name_node))}<{rendered}>"
        return TypeExpr(
            TypeKind.UNEXPOSED,
            _const(display, is_const),
            is_const,
            template_args=arguments,
        )

    def _template_argument(self, node: Node) -> TypeExpr:
        if node.type == "type_descriptor":
            base = self._base_type(node)
            result, _ = self._apply_declarator(
                base, node.child_by_field_name("declarator"), stop_at_function=False
            )
            return result
        if node.type in ("identifier", "type_identifier", "qualified_identifier", "template_type"):
            return self._type_from_specifier(node, False)
        return TypeExpr(TypeKind.OTHER, normalize_spelling(node_text(node)))

    def _apply_declarator(
        self,
        base: TypeExpr,
        declarator: Optional[Node],
        stop_at_function: bool,
    ) -> Tuple[TypeExpr, Optional[Node]]:
        """Wrap ``base`` in the type constructors named by a declarator chain.

        Declarators are applied outermost first, which yields C's inside-out
        reading (``int *a[]`` is an array of pointers).

        Args:
            base: The type named by the declaration's type specifier.
            declarator: Outermost declarator node, or None.
            stop_at_function: Stop at the first function declarator instead
                of folding it into a function type.

        Returns:
            ``(type, terminal)`` where terminal is the node the walk stopped at
            (a name, a function declarator, or None for abstract declarators).
        """
        current = base
        node = declarator
        while node is not None:
            kind = node.type
            if kind in POINTER_DECLARATORS:
                current = TypeExpr(TypeKind.POINTER, f"{current.display_name} *", pointee=current)
                node = inner_declarator(node)
            elif kind in REFERENCE_DECLARATORS:
                rvalue = node_text(node).lstrip().startswith("&&")
                current = TypeExpr(
                    TypeKind.RVALUE_REFERENCE if rvalue else TypeKind.LVALUE_REFERENCE,
                    f"{current.display_name} {'&&' if rvalue else '&'}",
                    pointee=current,
                )
                node = inner_declarator(node)
            elif kind in ARRAY_DECLARATORS:
                size = node.child_by_field_name("size")
                if size is None:
                    current = TypeExpr(
                        TypeKind.INCOMPLETE_ARRAY, f"{current.display_name} []", element=current
                    )
                else:
                    current = TypeExpr(
                        TypeKind.CONSTANT_ARRAY,
                        f"{current.display_name} [{node_text(size)}]",
                        element=current,
                    )
                node = inner_declarator(node)
            elif kind in PARENTHESIZED_DECLARATORS or kind in ATTRIBUTED_DECLARATORS:
                node = inner_declarator(node)
            elif kind in FUNCTION_DECLARATORS:
                if stop_at_function:
                    return current, node
                parameters = normalize_spelling(
                    node_text(node.child_by_field_name("parameters"))
                )
                current = TypeExpr(
                    TypeKind.FUNCTION_PROTO,
                    f"{current.display_name} {parameters}",
                    pointee=current,
                )
                node = node.child_by_field_name("declarator")
            else:
                return current, node
        return current, None


def _innermost_template(node: Node) -> Optional[Node]:
    current: Optional[Node] = node
    while current is not None and current.type == "qualified_identifier":
        current = current.child_by_field_name("name")
    if current is not None and current.type == "template_type":
        return current
    return None


def _parse_access(text: str, current: Accessibility) -> Accessibility:
    keyword = text.replace(":", "").strip()
    try:
        return Accessibility[keyword.upper()]
    except KeyError:
        return current


def _member_kind(node: Node) -> DeclKind:
    declarator = node.child_by_field_name("declarator")
    if declarator is None:
        return DeclKind.FIELD_DECL

    terminal: Optional[Node] = declarator
    while terminal is not None and terminal.type not in FUNCTION_DECLARATORS:
        if terminal.type in NAME_NODES or terminal.type in ("operator_name", "destructor_name"):
            return DeclKind.FIELD_DECL
        terminal = inner_declarator(terminal)
    if terminal is None:
        return DeclKind.FIELD_DECL

    name_node = terminal.child_by_field_name("declarator")
    name_type = name_node.type if name_node is not None else ""
    if name_type == "destructor_name":
        return DeclKind.DESTRUCTOR
    if name_type == "operator_cast":
        return DeclKind.CONVERSION_FUNCTION
    if node.child_by_field_name("type") is None:
        if node_text(name_node).startswith("operator"):
            return DeclKind.CONVERSION_FUNCTION
        return DeclKind.CONSTRUCTOR
    return DeclKind.METHOD
