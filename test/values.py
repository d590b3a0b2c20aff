"""
Values module behavioral tests (kinds, conversion, value boxes).

Scope
- Validate per-kind conversion rules and kind inference from defaults.
- Validate ArgValue set/append semantics: all-or-nothing arrays, append builds
  a new tuple, failures leave the previous value untouched.
- Validate freezing, equality and misuse errors.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argtree import ValueKind, ArgValue


class TestValueKind(TestCase):
    """Behavioral tests for ValueKind."""

    def testIntConversion(self):
        self.assertEqual(ValueKind.INT.convert("42"), 42)
        self.assertEqual(ValueKind.INT.convert(" -7 "), -7)
        with self.assertRaises(ValueError):
            ValueKind.INT.convert("4.5")
        with self.assertRaises(ValueError):
            ValueKind.INT.convert("0x10")
        for raw in ("1_000", "\u0661\u0662", "\uff11"):
            with self.assertRaises(ValueError, msg=raw):
                ValueKind.INT.convert(raw)

    def testFloatConversion(self):
        self.assertEqual(ValueKind.FLOAT.convert("1e3"), 1000.0)
        self.assertEqual(ValueKind.FLOAT_ARRAY.convert("2.5"), 2.5)
        with self.assertRaises(ValueError):
            ValueKind.FLOAT.convert("1,5")
        for raw in ("1_0.5", "1_000", "\u0661.5"):
            with self.assertRaises(ValueError, msg=raw):
                ValueKind.FLOAT.convert(raw)

    def testBoolConversionIsCaseInsensitive(self):
        for raw in ("true", "T", "y", "YES"):
            self.assertIs(ValueKind.BOOL.convert(raw), True)
        for raw in ("false", "F", "n", "No"):
            self.assertIs(ValueKind.BOOL.convert(raw), False)
        with self.assertRaises(ValueError):
            ValueKind.BOOL.convert("maybe")

    def testStringPassesThrough(self):
        self.assertEqual(ValueKind.STRING.convert(" spaced "), " spaced ")

    def testConvertRequiresString(self):
        with self.assertRaises(TypeError):
            ValueKind.INT.convert(3)

    def testElementsAndArrays(self):
        self.assertIs(ValueKind.INT_ARRAY.element, ValueKind.INT)
        self.assertIs(ValueKind.STRING.element, ValueKind.STRING)
        self.assertTrue(ValueKind.STRING_ARRAY.is_array)
        self.assertFalse(ValueKind.BOOL.is_array)
        self.assertEqual(ValueKind.FLOAT_ARRAY.label, "float[]")

    def testInfer(self):
        self.assertIs(ValueKind.infer(True), ValueKind.BOOL)
        self.assertIs(ValueKind.infer(3), ValueKind.INT)
        self.assertIs(ValueKind.infer(2.5), ValueKind.FLOAT)
        self.assertIs(ValueKind.infer("x"), ValueKind.STRING)
        self.assertIs(ValueKind.infer([1, 2]), ValueKind.INT_ARRAY)
        self.assertIs(ValueKind.infer(("a",)), ValueKind.STRING_ARRAY)

    def testInferRejectsAmbiguousDefaults(self):
        with self.assertRaises(TypeError):
            ValueKind.infer([])
        with self.assertRaises(TypeError):
            ValueKind.infer([1, "a"])
        with self.assertRaises(TypeError):
            ValueKind.infer(None)


class TestArgValue(TestCase):
    """Behavioral tests for ArgValue boxes."""

    def testNoDefaultHasNoValue(self):
        box = ArgValue(ValueKind.INT)
        self.assertFalse(box.has_value)
        self.assertIsNone(box.value)

    def testFalsyDefaultCountsAsValue(self):
        box = ArgValue(ValueKind.BOOL, False)
        self.assertTrue(box.has_value)
        self.assertIs(box.value, False)

    def testScalarSet(self):
        box = ArgValue(ValueKind.INT, 1)
        self.assertTrue(box.set("3"))
        self.assertEqual(box.value, 3)

    def testScalarSetFailureKeepsValue(self):
        box = ArgValue(ValueKind.INT, 1)
        self.assertFalse(box.set("three"))
        self.assertEqual(box.value, 1)

    def testArraySetIsAllOrNothing(self):
        box = ArgValue(ValueKind.INT_ARRAY)
        self.assertTrue(box.set(["1", "2"]))
        self.assertEqual(box.value, (1, 2))
        self.assertFalse(box.set(["3", "x"]))
        self.assertEqual(box.value, (1, 2))

    def testArrayDefaultsAreTuples(self):
        box = ArgValue(ValueKind.STRING_ARRAY, ["a", "b"])
        self.assertEqual(box.value, ("a", "b"))

    def testAppendBuildsNewTuple(self):
        box = ArgValue(ValueKind.STRING_ARRAY)
        self.assertTrue(box.append(["x"]))
        first = box.value
        self.assertTrue(box.append(["y", "z"]))
        self.assertEqual(box.value, ("x", "y", "z"))
        self.assertEqual(first, ("x",))

    def testAppendFailureKeepsValue(self):
        box = ArgValue(ValueKind.INT_ARRAY, (1,))
        self.assertFalse(box.append(["2", "nope"]))
        self.assertEqual(box.value, (1,))

    def testMisuseRaises(self):
        with self.assertRaises(TypeError):
            ArgValue(ValueKind.INT).set(["1"])
        with self.assertRaises(TypeError):
            ArgValue(ValueKind.INT_ARRAY).set("1")
        with self.assertRaises(TypeError):
            ArgValue(ValueKind.STRING).append(["a"])
        with self.assertRaises(TypeError):
            ArgValue(ValueKind.INT, "1")

    def testMarkStoresTypedValue(self):
        box = ArgValue(ValueKind.BOOL)
        box.mark(True)
        self.assertIs(box.value, True)
        with self.assertRaises(TypeError):
            box.mark("yes")

    def testFrozenIsReadOnly(self):
        box = ArgValue(ValueKind.INT, 1).freeze()
        self.assertTrue(box.frozen)
        with self.assertRaises(AttributeError):
            box.set("2")
        with self.assertRaises(AttributeError):
            box.mark(2)

    def testEquality(self):
        self.assertEqual(ArgValue(ValueKind.INT, 1), ArgValue(ValueKind.INT, 1))
        self.assertNotEqual(ArgValue(ValueKind.INT, 1), ArgValue(ValueKind.INT, 2))
        self.assertNotEqual(ArgValue(ValueKind.INT), ArgValue(ValueKind.INT_ARRAY))
        self.assertNotEqual(ArgValue(ValueKind.STRING), ArgValue(ValueKind.STRING, ""))

    def testNotHashable(self):
        with self.assertRaises(TypeError):
            hash(ArgValue(ValueKind.INT, 1))

    def testRepr(self):
        self.assertEqual(repr(ArgValue(ValueKind.INT, 3)), "arg-value(int, 3)")
        self.assertEqual(repr(ArgValue(ValueKind.STRING)), "arg-value(string, unset)")


if __name__ == "__main__":
    unittest.main()
