"""
Utilities module tests (sentinel, property mirroring, padding, token coercion).

Scope
- Validate the Unset sentinel semantics and coalesce().
- Validate mirror() read-only properties and rename().
- Validate pad() and the strict literal coercers used by the option model.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import math
import unittest
from unittest import TestCase

from argsmith.utils import *


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(Unset, UnsetType())

    def testFalsyButNotNone(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertEqual(repr(Unset), "Unset")

    def testCopiesPreserveIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testSubclassingRejected(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):  # NOQA: F-841
                pass

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")


class TestHelpers(TestCase):
    """Behavioral tests for mirror(), rename() and pad()."""

    def testMirrorReturnsDetachedCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a", "b"]

        holder = Holder()
        self.assertEqual(holder.items, ("a", "b"))
        with self.assertRaises(AttributeError):
            holder.items = ()
        self.assertEqual(holder._items, ["a", "b"])

    def testMirrorRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            mirror(1)

    def testRenameBothForms(self):
        def work():
            pass

        self.assertIs(rename(work, "job"), work)
        self.assertEqual(work.__name__, "job")
        self.assertEqual(work.__qualname__, "job")

        @rename("task")
        def other():
            pass

        self.assertEqual(other.__name__, "task")

    def testRenameArity(self):
        with self.assertRaises(TypeError):
            rename()

    def testPad(self):
        self.assertEqual(pad("ab", 5), "ab   ")
        self.assertEqual(pad("abcdef", 3), "abcdef")
        self.assertEqual(pad("x", -1), "")
        self.assertEqual(pad("x", 3, "."), "x..")


class TestCoercion(TestCase):
    """Behavioral tests for the literal coercers."""

    def testIntegerLiterals(self):
        self.assertEqual(as_integer("23"), 23)
        self.assertEqual(as_integer("-5"), -5)
        self.assertEqual(as_integer("+7"), 7)
        self.assertEqual(as_integer(str(INT64_MAX)), INT64_MAX)
        self.assertEqual(as_integer(str(INT64_MIN)), INT64_MIN)

    def testIntegerRejections(self):
        for token in ("abc", "1_000", " 23", "1.5", "", str(INT64_MAX + 1)):
            with self.subTest(token=token), self.assertRaises(ValueError):
                as_integer(token)
        with self.assertRaises(TypeError):
            as_integer(23)

    def testDoubleLiterals(self):
        self.assertEqual(as_double("1.5"), 1.5)
        self.assertEqual(as_double("-2e3"), -2000.0)
        self.assertEqual(as_double(".5"), 0.5)
        self.assertEqual(as_double("5."), 5.0)
        self.assertEqual(as_double("16"), 16.0)
        self.assertTrue(math.isinf(as_double("-inf")))
        self.assertTrue(math.isnan(as_double("nan")))

    def testDoubleRejections(self):
        for token in ("abc", "1_0.0", " 1.5", "1e999", "", "."):
            with self.subTest(token=token), self.assertRaises(ValueError):
                as_double(token)

    def testNumeric(self):
        self.assertTrue(numeric("-5"))
        self.assertTrue(numeric("-1.5"))
        self.assertTrue(numeric("3e2"))
        self.assertFalse(numeric("-s"))
        self.assertFalse(numeric("--help"))
        self.assertFalse(numeric(""))

    def testTruthy(self):
        for token in ("true", "TRUE", "True", "1", "yes"):
            with self.subTest(token=token):
                self.assertTrue(truthy(token))
        for token in ("false", "0", "no", "abc", ""):
            with self.subTest(token=token):
                self.assertFalse(truthy(token))


if __name__ == "__main__":
    unittest.main()
