"""
Unit tests for extractor.py

Tests class selection, method filtering and the per-method drop policy.
"""

import unittest

from extraction.declarations import TypeKind
from extraction.extractor import ExtractionStats, extract_classes
from extraction.parser import ParseSession

SOURCE = b"""
namespace other {
class Foreign {
 public:
  void Method();
};
}

namespace v8 {
class Context;
class Isolate {
 public:
  void Enter();
};
struct Config {
  int Size();
};
class V8_EXPORT Value {
 public:
  bool IsString() const;
  V8_WARN_UNUSED_RESULT MaybeLocal<String> ToString(Local<Context> context) const;
  static Local<Value> Cast(Value* value);
  bool operator==(const Value& that) const;
  V8_DEPRECATED("gone") bool IsOld() const;
  void Hidden() = delete;
  void Format(const char* fmt, ...);
  void Unnamed(int);
  uint32_t Length(void) const;
 private:
  void Secret();
};
class V8_EXPORT Object : public Value {
 public:
  void Call();
  Local<Value> Get(uint32_t index);
};
class Function : public Object {
 public:
  void Call();
};
class Empty : public Value {
};
#if defined(V8_ENABLE_CHECKS)
class Checked {
 public:
  void Check();
};
#endif
namespace internal {
class Internal {
 public:
  void Run();
};
}
}
"""


def _extract(source=SOURCE, **kwargs):
    stats = ExtractionStats()
    with ParseSession.from_bytes(source) as session:
        classes = extract_classes(session.root, "v8", stats, **kwargs)
    return classes, stats


class TestClassSelection(unittest.TestCase):
    """Test which classes of the namespace are extracted."""

    def setUp(self):
        self.classes, self.stats = _extract()
        self.by_name = {c.name: c for c in self.classes}

    def test_declaration_order(self):
        self.assertEqual(
            [c.name for c in self.classes],
            ["Value", "Object", "Function", "Empty", "Checked"],
        )

    def test_other_namespaces_ignored(self):
        self.assertNotIn("Foreign", self.by_name)
        self.assertNotIn("Internal", self.by_name)

    def test_forward_declaration_and_struct_skipped(self):
        self.assertNotIn("Context", self.by_name)
        self.assertNotIn("Config", self.by_name)

    def test_excluded_class_counted_silently(self):
        self.assertNotIn("Isolate", self.by_name)
        self.assertEqual(self.stats.classes_excluded, 1)
        self.assertFalse(any(d.class_name == "Isolate" for d in self.stats.dropped))

    def test_derived_class_without_methods_kept(self):
        self.assertEqual(self.by_name["Empty"].methods, ())

    def test_conditional_block_is_transparent(self):
        self.assertEqual([m.name for m in self.by_name["Checked"].methods], ["Check"])

    def test_stats(self):
        self.assertEqual(self.stats.classes_extracted, 5)
        self.assertEqual(
            self.stats.methods_extracted,
            sum(len(c.methods) for c in self.classes),
        )


class TestMethodFiltering(unittest.TestCase):
    """Test which methods of a selected class are kept."""

    def setUp(self):
        self.classes, self.stats = _extract()
        self.by_name = {c.name: c for c in self.classes}
        self.value_methods = [m.name for m in self.by_name["Value"].methods]

    def test_kept_methods_in_order(self):
        self.assertEqual(self.value_methods, ["IsString", "ToString", "Cast", "Length"])

    def test_operators_deprecated_deleted_private_skipped_silently(self):
        for name in ("operator==", "IsOld", "Hidden", "Secret"):
            self.assertNotIn(name, self.value_methods)
        reasons = {d.method.split("(")[0] for d in self.stats.dropped}
        for name in ("operator==", "IsOld", "Hidden", "Secret"):
            self.assertNotIn(name, reasons)

    def test_variadic_and_unnamed_arguments_dropped(self):
        dropped = {d.method.split("(")[0]: d for d in self.stats.dropped}
        self.assertIn("Format", dropped)
        self.assertIn("Unnamed", dropped)
        self.assertEqual(dropped["Unnamed"].class_name, "Value")
        self.assertEqual(dropped["Unnamed"].kind, "METHOD")
        self.assertEqual(dropped["Unnamed"].stage, "extract")
        self.assertEqual(self.stats.methods_dropped, 2)

    def test_variadic_method_is_never_partially_kept(self):
        source = (
            b"namespace v8 { class V8_EXPORT Value { public:"
            b" void Format(const char* fmt, ...); bool IsString() const; }; }"
        )
        classes, stats = _extract(source)
        self.assertEqual([m.name for m in classes[0].methods], ["IsString"])
        self.assertEqual(stats.methods_dropped, 1)
        self.assertEqual(stats.dropped[0].method, "Format(const char *, ...)")
        self.assertIn("variadic", stats.dropped[0].reason)

    def test_drop_is_logged(self):
        with self.assertLogs("extraction.extractor", level="WARNING") as captured:
            _extract()
        self.assertTrue(
            any("Could not translate method Value::Unnamed" in line for line in captured.output)
        )

    def test_method_exclusion_is_scoped_to_its_class(self):
        self.assertEqual([m.name for m in self.by_name["Object"].methods], ["Get"])
        self.assertEqual([m.name for m in self.by_name["Function"].methods], [])

    def test_static_flag_and_arguments(self):
        methods = {m.name: m for m in self.by_name["Value"].methods}
        self.assertTrue(methods["Cast"].is_static)
        self.assertFalse(methods["IsString"].is_static)
        self.assertEqual([a.name for a in methods["ToString"].args], ["context"])
        self.assertEqual(methods["Length"].args, ())

    def test_raw_types_are_copied_out(self):
        methods = {m.name: m for m in self.by_name["Value"].methods}
        to_string = methods["ToString"]
        self.assertEqual(to_string.result_type.kind, TypeKind.UNEXPOSED)
        self.assertEqual(to_string.args[0].type.display_name, "Local<v8::Context>")
        self.assertEqual(methods["IsString"].result_type.kind, TypeKind.BOOL)

    def test_custom_exclusions(self):
        classes, stats = _extract(
            excluded_classes=frozenset({"Object"}),
            excluded_methods=frozenset({"Value::Cast"}),
        )
        names = [c.name for c in classes]
        self.assertIn("Isolate", names)
        self.assertNotIn("Object", names)
        value = [c for c in classes if c.name == "Value"][0]
        self.assertNotIn("Cast", [m.name for m in value.methods])
        self.assertEqual(stats.classes_excluded, 1)


class TestExtractionStats(unittest.TestCase):
    def test_to_dict_and_str(self):
        stats = ExtractionStats()
        stats.classes_extracted = 3
        data = stats.to_dict()
        self.assertEqual(data["classes_extracted"], 3)
        self.assertEqual(data["methods_dropped"], 0)
        self.assertIn("classes=3", str(stats))


if __name__ == "__main__":
    unittest.main()
