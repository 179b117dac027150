"""
Tree-sitter parser initialization and the scoped parse session.

This module provides functions to initialize the C++ parser, neutralise the
engine's decoration macros before parsing, and the ``ParseSession`` that
parses a public header together with the headers it includes and exposes the
result as a navigable declaration tree.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import tree_sitter_cpp as tscpp
from tree_sitter import Language, Node, Parser, Tree

from extraction.config import (
    DEFAULT_DEPRECATION_MACROS,
    DEFAULT_STRIPPED_MACROS,
    HEADER_EXTENSIONS,
    INCLUDE_NODE,
    PREPROCESSOR_CONTAINERS,
    TRANSPARENT_WRAPPERS,
)
from extraction.declarations import (
    Declaration,
    DeclKind,
    SessionClosedError,
    SymbolTable,
    collect_symbols,
    node_text,
)

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constant
CPP_LANGUAGE = Language(tscpp.language())

MEMORY_SOURCE_NAME = "<memory>"


class ParseSessionError(RuntimeError):
    """Raised when a parse session cannot be established."""


class DeclarationTreeError(RuntimeError):
    """Raised when the root declaration tree cannot be traversed."""


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for C++.

    Returns:
        A Parser instance configured with the C++ language.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"namespace v8 { class Value; }")
    """
    parser = Parser(CPP_LANGUAGE)
    logger.debug("Created tree-sitter C++ parser")
    return parser


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and MISSING nodes in a parsed tree."""
    if not tree.root_node.has_error:
        return 0
    count = 0
    stack: List[Node] = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count


def parse_bytes(source: bytes, parser: Optional[Parser] = None) -> Tree:
    """Parse raw bytes of C++ source code.

    Args:
        source: UTF-8 encoded bytes of C++ source code.
        parser: Parser to reuse; a fresh one is created when omitted.

    Returns:
        A Tree object representing the parsed syntax tree.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"class Foo {};")
        >>> tree.root_node.type
        'translation_unit'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    tree = (parser or create_parser()).parse(source)
    logger.debug(f"Parsed {len(source)} bytes of C++ code")
    return tree


# ---------------------------------------------------------------------------
# Macro neutralisation
# ---------------------------------------------------------------------------

def _split_directives(text: str) -> Iterator[Tuple[bool, str]]:
    """Yield ``(is_directive, chunk)`` pieces covering ``text`` in order.

    A directive spans its ``#`` line plus any backslash-continued lines.
    """
    chunk: List[str] = []
    in_directive = False
    for line in text.splitlines(keepends=True):
        starts_directive = line.lstrip().startswith("#")
        if in_directive or starts_directive:
            if not in_directive and chunk:
                yield False, "".join(chunk)
                chunk = []
            in_directive = True
            chunk.append(line)
            if not line.rstrip("\r\n").endswith("\\"):
                yield True, "".join(chunk)
                chunk = []
                in_directive = False
        else:
            chunk.append(line)
    if chunk:
        yield in_directive, "".join(chunk)


def _matching_paren(text: str, open_index: int) -> Tuple[int, Optional[int]]:
    """Find the ``)`` closing ``text[open_index]``.

    Returns:
        ``(close_index, first_top_level_comma)``; close_index is -1 when the
        parentheses are unbalanced.
    """
    depth = 0
    comma: Optional[int] = None
    quote: Optional[str] = None
    index = open_index
    while index < len(text):
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index, comma
        elif char == "," and depth == 1 and comma is None:
            comma = index
        index += 1
    return -1, comma


def _rewrite_deprecations(text: str, pattern: "re.Pattern[str]") -> str:
    position = 0
    while True:
        match = pattern.search(text, position)
        if match is None:
            return text
        open_index = match.end() - 1
        close_index, comma = _matching_paren(text, open_index)
        if close_index < 0:
            logger.debug("Unbalanced deprecation macro at offset %d", match.start())
            return text
        if comma is not None:
            declaration = text[comma + 1:close_index].strip()
            replacement = f"[[deprecated]] {declaration}"
        else:
            replacement = "[[deprecated]]"
        text = text[:match.start()] + replacement + text[close_index + 1:]
        # rescan the wrapped declaration for nested macros
        position = match.start() + len("[[deprecated]]")


def neutralize_macros(
    text: str,
    strip_macros: Sequence[str] = DEFAULT_STRIPPED_MACROS,
    deprecation_macros: Sequence[str] = DEFAULT_DEPRECATION_MACROS,
) -> str:
    """Erase decoration macros and rewrite deprecation macros.

    Preprocessor directives are left untouched so macro definitions survive.

    Args:
        text: Header source text.
        strip_macros: Object-like macros to erase.
        deprecation_macros: Function-like macros to turn into
            ``[[deprecated]]``, in either ``M("msg") decl`` or
            ``M("msg", decl)`` form.

    Returns:
        The rewritten source text.

    Example:
        >>> neutralize_macros('class V8_EXPORT Foo {};')
        'class  Foo {};'
    """
    strip_re = (
        re.compile(r"\b(?:" + "|".join(map(re.escape, strip_macros)) + r")\b")
        if strip_macros else None
    )
    deprecation_re = (
        re.compile(r"\b(?:" + "|".join(map(re.escape, deprecation_macros)) + r")\s*\(")
        if deprecation_macros else None
    )

    pieces: List[str] = []
    for is_directive, chunk in _split_directives(text):
        if not is_directive:
            if strip_re is not None:
                chunk = strip_re.sub("", chunk)
            if deprecation_re is not None:
                chunk = _rewrite_deprecations(chunk, deprecation_re)
        pieces.append(chunk)
    return "".join(pieces)


def resolve_include(
    spelled: str,
    angled: bool,
    including_dir: Optional[str],
    include_dirs: Sequence[str],
) -> Optional[str]:
    """Resolve an include directive to an existing file path.

    Quoted includes are tried relative to the including file first, then
    against the include directories; angled includes only against the
    include directories.
    """
    candidates: List[str] = []
    if not angled and including_dir:
        candidates.append(os.path.join(including_dir, spelled))
    candidates.extend(os.path.join(directory, spelled) for directory in include_dirs)
    for candidate in candidates:
        if os.path.isfile(candidate):
            return os.path.realpath(candidate)
    return None


def _include_nodes(container: Node) -> Iterator[Node]:
    for child in container.named_children:
        if child.type == INCLUDE_NODE:
            yield child
        elif child.type in PREPROCESSOR_CONTAINERS:
            yield from _include_nodes(child)
        elif child.type in TRANSPARENT_WRAPPERS:
            body = child.child_by_field_name("body")
            if body is not None:
                yield from _include_nodes(body)


@dataclass
class ParsedFile:
    """One parsed file of a session."""

    path: str
    tree: Tree
    error_count: int


class ParseSession:
    """Scoped parse of a public header and the headers it includes.

    All declaration-tree queries must happen while the session is open; the
    session is a context manager and ``Declaration`` objects refuse queries
    after ``close()``.

    Example:
        >>> with ParseSession("include/v8.h", ["include"]) as session:
        ...     classes = extract_classes(session.root, "v8")
    """

    def __init__(
        self,
        header_path: str,
        include_dirs: Sequence[str] = (),
        strip_macros: Sequence[str] = DEFAULT_STRIPPED_MACROS,
        deprecation_macros: Sequence[str] = DEFAULT_DEPRECATION_MACROS,
        source: Optional[bytes] = None,
    ):
        self.header_path = header_path
        self.include_dirs: List[str] = list(include_dirs)
        self.strip_macros = tuple(strip_macros)
        self.deprecation_macros = tuple(deprecation_macros)
        self._source = source
        self._parser: Optional[Parser] = None
        self._files: Dict[str, ParsedFile] = {}
        self._include_targets: Dict[Tuple[str, int], Optional[str]] = {}
        self._symbols = SymbolTable()
        self._main_key: Optional[str] = None
        self._open = False

    @classmethod
    def from_bytes(
        cls,
        source: bytes,
        include_dirs: Sequence[str] = (),
        strip_macros: Sequence[str] = DEFAULT_STRIPPED_MACROS,
        deprecation_macros: Sequence[str] = DEFAULT_DEPRECATION_MACROS,
    ) -> "ParseSession":
        """Build a session over in-memory header text."""
        return cls(
            MEMORY_SOURCE_NAME,
            include_dirs=include_dirs,
            strip_macros=strip_macros,
            deprecation_macros=deprecation_macros,
            source=source,
        )

    def __enter__(self) -> "ParseSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> "ParseSession":
        """Parse the main header and its resolvable includes.

        Raises:
            ParseSessionError: If the parser cannot be created or the main
                header cannot be read.
            DeclarationTreeError: If the main header does not yield a
                translation unit.
        """
        if self._open:
            return self
        try:
            self._parser = create_parser()
        except Exception as e:
            raise ParseSessionError(f"Cannot create C++ parser: {e}") from e

        if self._source is None:
            extension = os.path.splitext(self.header_path)[1].lower()
            if extension not in HEADER_EXTENSIONS:
                logger.warning(
                    f"Main input {self.header_path} does not look like a header"
                )
            try:
                with open(self.header_path, "rb") as f:
                    source = f.read()
            except OSError as e:
                raise ParseSessionError(
                    f"Cannot read header {self.header_path}: {e}"
                ) from e
            main_key = os.path.realpath(self.header_path)
        else:
            source = self._source
            main_key = MEMORY_SOURCE_NAME

        tree = self._parse_source(main_key, source)
        root = tree.root_node if tree is not None else None
        if root is None or root.type != "translation_unit":
            raise DeclarationTreeError(
                f"Header {self.header_path} did not produce a translation unit"
            )

        self._main_key = main_key
        self._open = True
        self._discover_includes(main_key)

        for parsed in self._files.values():
            collect_symbols(parsed.tree.root_node, self._symbols)

        logger.info(
            f"Opened parse session for {self.header_path}: "
            f"{len(self._files)} file(s), {len(self._symbols)} type name(s)"
        )
        return self

    def close(self) -> None:
        """Release the parsed trees; declarations become unusable."""
        if not self._open:
            return
        self._open = False
        self._files.clear()
        self._include_targets.clear()
        self._symbols = SymbolTable()
        self._parser = None
        logger.debug(f"Closed parse session for {self.header_path}")

    @property
    def closed(self) -> bool:
        return not self._open

    # ------------------------------------------------------------------
    # Queries used by the declaration tree
    # ------------------------------------------------------------------

    @property
    def root(self) -> Declaration:
        """The translation unit declaration."""
        self._ensure_open()
        return Declaration(self, DeclKind.TRANSLATION_UNIT, file_key=self._main_key)

    @property
    def main_key(self) -> str:
        self._ensure_open()
        return self._main_key

    @property
    def symbols(self) -> SymbolTable:
        self._ensure_open()
        return self._symbols

    @property
    def files(self) -> List[str]:
        """Paths of the parsed files, in parse order."""
        self._ensure_open()
        return [parsed.path for parsed in self._files.values()]

    @property
    def error_count(self) -> int:
        """Syntax error nodes across all parsed files."""
        return sum(parsed.error_count for parsed in self._files.values())

    def tree_for(self, file_key: str) -> Tree:
        self._ensure_open()
        return self._files[file_key].tree

    def include_target(self, file_key: str, node: Node) -> Optional[str]:
        self._ensure_open()
        return self._include_targets.get((file_key, node.start_byte))

    def _ensure_open(self) -> None:
        if not self._open:
            raise SessionClosedError(f"Parse session for {self.header_path} is closed")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _parse_source(self, file_key: str, source: bytes) -> Optional[Tree]:
        text = source.decode("utf-8", errors="replace")
        text = neutralize_macros(text, self.strip_macros, self.deprecation_macros)
        tree = parse_bytes(text.encode("utf-8"), self._parser)
        errors = count_error_nodes(tree)
        if errors:
            logger.warning(f"File {file_key} contains {errors} syntax error node(s)")
        self._files[file_key] = ParsedFile(path=file_key, tree=tree, error_count=errors)
        return tree

    def _discover_includes(self, file_key: str) -> None:
        tree = self._files[file_key].tree
        including_dir = (
            os.path.dirname(file_key) if file_key != MEMORY_SOURCE_NAME else None
        )
        for node in _include_nodes(tree.root_node):
            path_node = node.child_by_field_name("path")
            if path_node is None:
                continue
            raw = node_text(path_node).strip()
            angled = raw.startswith("<")
            spelled = raw.strip('<>"')
            target = resolve_include(spelled, angled, including_dir, self.include_dirs)
            self._include_targets[(file_key, node.start_byte)] = target
            if target is None:
                logger.debug(f"Skipping unresolved include {raw} in {file_key}")
                continue
            if target in self._files:
                continue
            try:
                with open(target, "rb") as f:
                    source = f.read()
            except OSError as e:
                logger.warning(f"Cannot read included header {target}: {e}")
                self._include_targets[(file_key, node.start_byte)] = None
                continue
            self._parse_source(target, source)
            self._discover_includes(target)
