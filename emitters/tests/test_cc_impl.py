"""Tests for the C++ implementation emitter."""

import unittest

from apimodel.api import Api, Arg, Class, Method
from apimodel.types import ClassType, Direct, Maybe, Prim, Ptr, Ref
from emitters.cc_impl import class_boilerplate, context_argument, emit_cc_impl, method_body

CONTEXT = Ref(ClassType("Context"))


def method(name, args=(), ret=Direct(Prim.VOID), is_static=False, mangled=None) -> Method:
    return Method(
        is_static=is_static,
        name=name,
        mangled_name=mangled or name,
        args=tuple(Arg(arg_name, typ) for arg_name, typ in args),
        ret_type=ret,
    )


class TestMethodBody(unittest.TestCase):
    def test_context_method_with_maybe_bool(self) -> None:
        cls = Class("Object")
        m = method(
            "Set",
            [("context", CONTEXT), ("index", Prim.U32), ("value", Ref(ClassType("Value")))],
            Maybe(Prim.BOOL),
            mangled="Set_Index",
        )
        self.assertEqual(
            method_body(cls, m),
            [
                "MaybeBool v8_Object_Set_Index(GlueContext c, ObjectRef self, "
                "ContextRef context, uint32_t index, ValueRef value) {",
                "  v8::Isolate::Scope isolate_scope(c.isolate);",
                "  v8::HandleScope handle_scope(c.isolate);",
                "  v8::TryCatch try_catch(c.isolate);",
                "  v8::Context::Scope context_scope(wrap(c.isolate, context));",
                "  auto result = wrap(c.isolate, self)->Set(wrap(c.isolate, context), "
                "wrap(c.isolate, index), wrap(c.isolate, value));",
                "  handle_exception(c, try_catch);",
                "  return unwrap_maybe_bool(c.isolate, result);",
                "}",
            ],
        )

    def test_void_method_has_no_return(self) -> None:
        lines = method_body(Class("Value"), method("Clear"))
        self.assertIn("  wrap(c.isolate, self)->Clear();", lines)
        self.assertFalse(any("return" in line for line in lines))
        self.assertFalse(any("context_scope" in line for line in lines))

    def test_static_call(self) -> None:
        m = method(
            "New",
            [("isolate", Ptr(ClassType("Isolate")))],
            Direct(Ref(ClassType("Object"))),
            is_static=True,
        )
        lines = method_body(Class("Object"), m)
        self.assertEqual(lines[0], "ObjectRef v8_Object_New(GlueContext c, IsolatePtr isolate) {")
        self.assertIn("  auto result = v8::Object::New(wrap(c.isolate, isolate));", lines)
        self.assertIn("  return unwrap(c.isolate, result);", lines)

    def test_context_argument(self) -> None:
        self.assertEqual(context_argument(method("F", [("ctx", CONTEXT)])), "ctx")
        self.assertIsNone(context_argument(method("F", [("n", Prim.INT)])))


class TestImplementationFile(unittest.TestCase):
    def test_boilerplate(self) -> None:
        self.assertEqual(
            class_boilerplate(Class("Value")),
            [
                "ValueRef v8_Value_CloneRef(GlueContext c, ValueRef self) {",
                "  return new v8::Persistent<v8::Value>(c.isolate, *self);",
                "}",
                "",
                "void v8_Value_DestroyRef(ValueRef self) {",
                "  self->Reset();",
                "  delete self;",
                "}",
                "",
                "void v8_Value_DestroyPtr(ValuePtr self) {",
                "  delete self;",
                "}",
            ],
        )

    def test_file_frame(self) -> None:
        text = emit_cc_impl(Api(classes=(Class("Value", (method("Clear"),)),)))
        lines = text.splitlines()
        self.assertEqual(lines[0], "// AUTO-GENERATED - DO NOT EDIT")
        self.assertEqual(lines[1], '#include "glue.h"')
        self.assertEqual(lines[3], 'extern "C" {')
        self.assertEqual(lines[-1], '} /* extern "C" */')
        self.assertLess(
            lines.index("void v8_Value_Clear(GlueContext c, ValueRef self) {"),
            lines.index("ValueRef v8_Value_CloneRef(GlueContext c, ValueRef self) {"),
        )


if __name__ == "__main__":
    unittest.main()
