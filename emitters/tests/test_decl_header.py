"""Tests for the opaque declaration header."""

import unittest

from apimodel.api import Api, Class
from emitters.common import EmitOptions
from emitters.decl_header import emit_declaration_header


class TestDeclarationHeader(unittest.TestCase):
    def test_empty_api(self) -> None:
        text = emit_declaration_header(Api())
        self.assertEqual(text, "// AUTO-GENERATED - DO NOT EDIT\n#pragma once\n")

    def test_aliases_per_class(self) -> None:
        text = emit_declaration_header(Api(classes=(Class("Value"),)))
        self.assertEqual(
            text,
            "// AUTO-GENERATED - DO NOT EDIT\n"
            "#pragma once\n"
            "\n"
            "#if defined __cplusplus\n"
            "typedef v8::Value *ValuePtr;\n"
            "typedef v8::Persistent<v8::Value> *ValueRef;\n"
            "#else\n"
            "typedef struct _Value *ValuePtr;\n"
            "typedef struct _ValueRef *ValueRef;\n"
            "#endif /* defined __cplusplus */\n",
        )

    def test_class_order_and_namespace(self) -> None:
        api = Api(classes=(Class("Object"), Class("Array")))
        text = emit_declaration_header(api, EmitOptions(namespace="js"))
        self.assertLess(text.index("ObjectPtr"), text.index("ArrayPtr"))
        self.assertIn("typedef js::Persistent<js::Array> *ArrayRef;", text)


if __name__ == "__main__":
    unittest.main()
