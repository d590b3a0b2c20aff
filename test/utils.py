"""
Utils module behavioral tests (sentinel and wording helpers).

Scope
- Validate the Unset sentinel: singleton, falsy, copy/pickle stable, sealed.
- Validate coalesce() only replaces Unset.
- Validate rename() in both call and decorator forms.
- Validate pluralize() and ordinal() wording used by diagnostics.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import pickle
import unittest
from unittest import TestCase

from argtree.utils import Unset, UnsetType, coalesce, rename, pluralize, ordinal


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyButNotNone(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testCopiesAreIdentical(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testSubclassingRejected(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})


class TestHelpers(TestCase):
    """Behavioral tests for coalesce, rename, pluralize and ordinal."""

    def testCoalesceReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testRenameCallForm(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testRenameDecoratorForm(self):
        @rename("__repr__")
        def function():
            pass

        self.assertEqual(function.__name__, "__repr__")

    def testRenameArgumentErrors(self):
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename()

    def testPluralize(self):
        self.assertEqual(pluralize("value", 1), "value")
        self.assertEqual(pluralize("argument", 2), "arguments")
        self.assertEqual(pluralize("argument", 0), "arguments")
        self.assertEqual(pluralize("box"), "boxes")
        self.assertEqual(pluralize("entry"), "entries")
        self.assertEqual(pluralize("day"), "days")

    def testOrdinalWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")


if __name__ == "__main__":
    unittest.main()
