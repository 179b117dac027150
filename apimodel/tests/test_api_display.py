"""Tests for the human-readable rendering of the API model."""

import unittest

from apimodel.api import Api, Arg, Class, Method
from apimodel.types import Arr, ClassType, Direct, Maybe, Prim, Ptr, Ref


class TestTypeDisplay(unittest.TestCase):
    def test_structural_types(self) -> None:
        self.assertEqual(str(Prim.U32), "u32")
        self.assertEqual(str(ClassType("Value")), "class Value")
        self.assertEqual(str(Ref(ClassType("Value"))), "&class Value")
        self.assertEqual(str(Ptr(Prim.CONST_CHAR)), "*const char")
        self.assertEqual(str(Arr(Prim.F64)), "[f64]")
        self.assertEqual(str(Maybe(Prim.BOOL)), "maybe bool")
        self.assertEqual(str(Direct(Prim.VOID)), "void")


class TestApiDisplay(unittest.TestCase):
    def setUp(self) -> None:
        self.set_index = Method(
            is_static=False,
            name="Set",
            mangled_name="Set_Index",
            args=(
                Arg("context", Ref(ClassType("Context"))),
                Arg("index", Prim.U32),
            ),
            ret_type=Maybe(Prim.BOOL),
        )
        self.new = Method(
            is_static=True,
            name="New",
            mangled_name="New",
            args=(Arg("isolate", Ptr(ClassType("Isolate"))),),
            ret_type=Direct(Ref(ClassType("Object"))),
        )

    def test_method_line(self) -> None:
        self.assertEqual(
            str(self.set_index),
            "Set(&class Context context, u32 index) -> maybe bool {Set_Index}",
        )
        self.assertEqual(
            str(self.new), "static New(*class Isolate isolate) -> &class Object"
        )

    def test_api_rendering(self) -> None:
        api = Api(classes=(Class("Object", (self.new, self.set_index)), Class("Empty")))
        self.assertEqual(
            str(api),
            "class Object\n"
            "  static New(*class Isolate isolate) -> &class Object\n"
            "  Set(&class Context context, u32 index) -> maybe bool {Set_Index}\n"
            "\n"
            "class Empty\n"
            "\n",
        )
        self.assertEqual(api.to_dict(), {"classes": 2, "methods": 2})
        self.assertEqual(len(api), 2)

    def test_values_are_comparable(self) -> None:
        self.assertEqual(Class("Empty"), Class("Empty"))
        self.assertNotEqual(self.new, self.set_index)


if __name__ == "__main__":
    unittest.main()
