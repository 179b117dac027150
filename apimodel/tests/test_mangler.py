"""Tests for overload disambiguation."""

import unittest

from apimodel.mangler import mangle
from apimodel.tables import METHOD_MANGLES, MethodMangle


class TestMangle(unittest.TestCase):
    def test_no_rule_keeps_name(self) -> None:
        self.assertEqual(mangle("IsString", []), "IsString")
        self.assertEqual(mangle("Set", ["context", "value"]), "Set")

    def test_index_and_key_overloads(self) -> None:
        self.assertEqual(mangle("Set", ["context", "index", "value"]), "Set_Index")
        self.assertEqual(mangle("Set", ["context", "key", "value"]), "Set_Key")
        self.assertEqual(mangle("Get", ["context", "index"]), "Get_Index")
        self.assertEqual(mangle("Has", ["context", "key"]), "Has_Key")

    def test_first_row_wins(self) -> None:
        self.assertEqual(mangle("Set", ["isolate", "index"]), "Set_Index")
        self.assertEqual(mangle("Set", ["isolate", "name"]), "Set_Raw")

    def test_argument_order_irrelevant(self) -> None:
        self.assertEqual(
            mangle("New", ["array_buffer", "isolate"]),
            mangle("New", ["isolate", "array_buffer"]),
        )

    def test_custom_table(self) -> None:
        table = (MethodMangle("Call", "recv", "Call_Recv"),)
        self.assertEqual(mangle("Call", ["recv"], table), "Call_Recv")
        self.assertEqual(mangle("Set", ["index"], table), "Set")

    def test_rule_mangles_are_unique(self) -> None:
        names = [row.mangle for row in METHOD_MANGLES]
        self.assertEqual(len(names), len(set(names)))


if __name__ == "__main__":
    unittest.main()
