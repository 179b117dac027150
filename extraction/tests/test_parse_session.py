"""
Unit tests for the parse session.

Tests parser creation, session lifecycle, include splicing and syntax error
accounting.
"""

import os
import tempfile
import unittest
from pathlib import Path

from extraction.declarations import DeclKind, SessionClosedError
from extraction.parser import (
    DeclarationTreeError,
    ParseSession,
    ParseSessionError,
    count_error_nodes,
    create_parser,
    parse_bytes,
    resolve_include,
)


def _class_names(session):
    names = []
    for child in session.root.children():
        if child.kind == DeclKind.NAMESPACE:
            names.extend(
                c.name for c in child.children() if c.kind == DeclKind.CLASS_DECL
            )
    return names


class TestParserBasics(unittest.TestCase):
    """Test parser creation and byte parsing."""

    def test_create_parser(self):
        parser = create_parser()
        self.assertIsNotNone(parser.language)

    def test_parse_bytes_rejects_text(self):
        with self.assertRaises(TypeError):
            parse_bytes("class Foo {};")

    def test_clean_source_has_no_error_nodes(self):
        tree = parse_bytes(b"namespace v8 { class Value { public: bool IsTrue() const; }; }")
        self.assertEqual(tree.root_node.type, "translation_unit")
        self.assertEqual(count_error_nodes(tree), 0)

    def test_broken_source_counts_error_nodes(self):
        tree = parse_bytes(b"class { int x( ; }}} )")
        self.assertGreater(count_error_nodes(tree), 0)


class TestSessionLifecycle(unittest.TestCase):
    """Test opening, querying and closing a session."""

    def test_context_manager_opens_and_closes(self):
        session = ParseSession.from_bytes(b"namespace v8 { class Value { public: void F(); }; }")
        with session as s:
            self.assertFalse(s.closed)
            self.assertEqual(s.root.kind, DeclKind.TRANSLATION_UNIT)
        self.assertTrue(session.closed)

    def test_declarations_unusable_after_close(self):
        session = ParseSession.from_bytes(b"namespace v8 { class Value { public: void F(); }; }")
        with session:
            namespace = session.root.children()[0]
        with self.assertRaises(SessionClosedError):
            namespace.name
        with self.assertRaises(SessionClosedError):
            namespace.children()
        with self.assertRaises(SessionClosedError):
            session.root

    def test_close_is_idempotent(self):
        session = ParseSession.from_bytes(b"").open()
        session.close()
        session.close()
        self.assertTrue(session.closed)

    def test_missing_header_raises(self):
        with self.assertRaises(ParseSessionError):
            ParseSession("/nonexistent/path/v8.h").open()

    def test_error_exception_types_are_distinct(self):
        self.assertFalse(issubclass(ParseSessionError, DeclarationTreeError))
        self.assertFalse(issubclass(DeclarationTreeError, ParseSessionError))

    def test_syntax_errors_do_not_fail_the_session(self):
        source = b"namespace v8 { class Value { public: void F(; }; class Good { public: void G(); }; }"
        with ParseSession.from_bytes(source) as session:
            self.assertGreater(session.error_count, 0)
            self.assertEqual(session.root.kind, DeclKind.TRANSLATION_UNIT)


class TestIncludeSplicing(unittest.TestCase):
    """Test that included headers are spliced in at their first inclusion."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.include_dir = self.root / "include"
        (self.include_dir / "sub").mkdir(parents=True)

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, relative, text):
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_declaration_order_follows_inclusion_point(self):
        self._write("include/v8-first.h", "namespace v8 { class First { public: void A(); }; }\n")
        self._write("include/v8-second.h", "namespace v8 { class Second { public: void B(); }; }\n")
        main = self._write(
            "include/v8.h",
            '#include "v8-first.h"\n'
            "namespace v8 { class Middle { public: void M(); }; }\n"
            '#include "v8-second.h"\n',
        )
        with ParseSession(main, [str(self.include_dir)]) as session:
            self.assertEqual(_class_names(session), ["First", "Middle", "Second"])
            self.assertEqual(len(session.files), 3)

    def test_header_included_twice_is_spliced_once(self):
        self._write("include/v8-shared.h", "namespace v8 { class Shared { public: void S(); }; }\n")
        self._write("include/v8-a.h", '#include "v8-shared.h"\n')
        main = self._write(
            "include/v8.h",
            '#include "v8-a.h"\n#include "v8-shared.h"\n'
            "namespace v8 { class Last { public: void L(); }; }\n",
        )
        with ParseSession(main, [str(self.include_dir)]) as session:
            self.assertEqual(_class_names(session), ["Shared", "Last"])
            self.assertEqual(len(session.files), 3)

    def test_includes_inside_guards_are_followed(self):
        self._write("include/v8-inner.h", "namespace v8 { class Inner { public: void I(); }; }\n")
        main = self._write(
            "include/v8.h",
            "#ifndef INCLUDE_V8_H_\n#define INCLUDE_V8_H_\n"
            '#include "v8-inner.h"\n'
            "#endif\n",
        )
        with ParseSession(main, [str(self.include_dir)]) as session:
            self.assertEqual(_class_names(session), ["Inner"])

    def test_unresolved_include_is_skipped(self):
        main = self._write(
            "include/v8.h",
            "#include <cstdint>\nnamespace v8 { class Only { public: void O(); }; }\n",
        )
        with ParseSession(main, [str(self.include_dir)]) as session:
            self.assertEqual(_class_names(session), ["Only"])
            self.assertEqual(len(session.files), 1)

    def test_angled_include_uses_include_dirs_only(self):
        self._write("include/sub/local.h", "namespace v8 { class Local2 {}; }\n")
        including_dir = str(self.include_dir / "sub")
        self.assertIsNone(resolve_include("local.h", True, including_dir, []))
        self.assertEqual(
            resolve_include("local.h", False, including_dir, []),
            os.path.realpath(str(self.include_dir / "sub" / "local.h")),
        )
        self.assertEqual(
            resolve_include("sub/local.h", True, None, [str(self.include_dir)]),
            os.path.realpath(str(self.include_dir / "sub" / "local.h")),
        )

    def test_quoted_include_prefers_including_directory(self):
        self._write("include/sub/dup.h", "")
        self._write("include/dup.h", "")
        found = resolve_include(
            "dup.h", False, str(self.include_dir / "sub"), [str(self.include_dir)]
        )
        self.assertEqual(found, os.path.realpath(str(self.include_dir / "sub" / "dup.h")))


if __name__ == "__main__":
    unittest.main()
