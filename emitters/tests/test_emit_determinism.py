"""End-to-end emission from header text, and output determinism."""

import unittest

from apimodel.assembly import assemble_api
from emitters import EmitOptions, emit_c_header, emit_cc_impl, emit_declaration_header
from extraction.extractor import extract_classes
from extraction.parser import ParseSession

SOURCE = b"""
namespace v8 {
class Isolate;
class V8_EXPORT Context {
 public:
  Local<Object> Global();
};
class V8_EXPORT Object {
 public:
  V8_WARN_UNUSED_RESULT Maybe<bool> Set(Local<Context> context, uint32_t index,
                                        Local<Value> value);
  V8_WARN_UNUSED_RESULT Maybe<bool> Set(Local<Context> context, Local<Value> key,
                                        Local<Value> value);
  static Local<Object> New(Isolate* isolate);
};
class V8_EXPORT TryCatch {
 public:
  bool HasCaught() const;
  bool CanContinue() const;
  bool HasTerminated() const;
  Local<Value> ReThrow();
  Local<Value> Exception() const;
  Local<Value> StackTrace(Local<Context> context) const;
  void Reset();
  void SetVerbose(bool value);
  bool IsVerbose() const;
  void SetCaptureMessage(bool value);
};
class V8_EXPORT Value {
 public:
  bool IsObject() const;
  void Scale(float factor);
  void Format(const char* fmt, ...);
  bool IsNumber() const;
};
}
"""


def _render():
    with ParseSession.from_bytes(SOURCE) as session:
        raw_classes = extract_classes(session.root, "v8")
    api = assemble_api(raw_classes, "v8")
    options = EmitOptions()
    return api, (
        emit_declaration_header(api, options),
        emit_c_header(api, options),
        emit_cc_impl(api, options),
    )


class TestEmitDeterminism(unittest.TestCase):
    def test_same_input_same_bytes(self) -> None:
        _, first = _render()
        _, second = _render()
        self.assertEqual(first, second)

    def test_overloads_get_distinct_symbols(self) -> None:
        api, (_, prototypes, impl) = _render()
        self.assertEqual(
            [m.mangled_name for m in api.find_class("Object").methods],
            ["Set_Index", "Set_Key", "New"],
        )
        self.assertIn(
            "MaybeBool v8_Object_Set_Index(GlueContext c, ObjectRef self, "
            "ContextRef context, uint32_t index, ValueRef value);",
            prototypes,
        )
        self.assertIn("ObjectRef v8_Object_New(GlueContext c, IsolatePtr isolate);", prototypes)
        self.assertIn("  v8::Context::Scope context_scope(wrap(c.isolate, context));", impl)

    def test_every_class_has_aliases_and_boilerplate(self) -> None:
        api, (decls, prototypes, impl) = _render()
        for cls in api.classes:
            self.assertIn(f"*{cls.name}Ptr;", decls)
            self.assertIn(f"*{cls.name}Ref;", decls)
            self.assertIn(f"v8_{cls.name}_CloneRef", prototypes)
            self.assertIn(f"v8_{cls.name}_DestroyPtr", impl)

    def test_excluded_class_leaves_no_trace(self) -> None:
        _, texts = _render()
        for text in texts:
            self.assertNotIn("v8_TryCatch_", text)
            self.assertNotIn("TryCatchPtr", text)
            self.assertNotIn("TryCatchRef", text)
            self.assertNotIn("HasCaught", text)
            self.assertNotIn("SetCaptureMessage", text)

    def test_dropped_methods_absent_and_siblings_kept(self) -> None:
        api, (decls, prototypes, impl) = _render()
        self.assertEqual(
            [m.name for m in api.find_class("Value").methods], ["IsObject", "IsNumber"]
        )
        for text in (decls, prototypes, impl):
            self.assertNotIn("Scale", text)
            self.assertNotIn("Format", text)
        self.assertIn("typedef v8::Value *ValuePtr;", decls)
        for text in (prototypes, impl):
            self.assertIn("bool v8_Value_IsObject(GlueContext c, ValueRef self)", text)
            self.assertIn("bool v8_Value_IsNumber(GlueContext c, ValueRef self)", text)


if __name__ == "__main__":
    unittest.main()
