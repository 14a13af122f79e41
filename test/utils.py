"""
Utilities module behavioral tests (name rules and sentinels).

Scope
- kebabcase: camel/snake conversion, acronyms, idempotence.
- isvalidname: accepted alphabet, empty string.
- ordinal, Unset/coalesce, rename, mirror.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from reflectargs.utils import Unset, UnsetType, coalesce, isvalidname, kebabcase, mirror, ordinal, rename


class TestKebabCase(TestCase):
    """Behavioral tests for kebabcase()."""

    def testCamelCaseIsSplit(self):
        self.assertEqual(kebabcase("intArg"), "int-arg")
        self.assertEqual(kebabcase("remoteAdd"), "remote-add")

    def testSnakeCaseIsHyphenated(self):
        self.assertEqual(kebabcase("string_arg"), "string-arg")
        self.assertEqual(kebabcase("a__b"), "a-b")

    def testMixedSeparatorsDoNotDoubleHyphens(self):
        self.assertEqual(kebabcase("Remote_Add"), "remote-add")
        self.assertEqual(kebabcase("already-Kebab"), "already-kebab")

    def testAcronymsStayTogether(self):
        self.assertEqual(kebabcase("HTTPServer"), "httpserver")
        self.assertEqual(kebabcase("ID"), "id")

    def testEdgeUnderscoresAreDropped(self):
        self.assertEqual(kebabcase("_private_"), "private")
        self.assertEqual(kebabcase("__"), "")

    def testEmptyString(self):
        self.assertEqual(kebabcase(""), "")

    def testIdempotence(self):
        for text in ("intArg", "string_arg", "HTTPServer", "_Foo_Bar", "x-Y", "ao", "Remote_Add", "arg1Name"):
            with self.subTest(text=text):
                once = kebabcase(text)
                self.assertEqual(kebabcase(once), once)

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            kebabcase(3)


class TestIsValidName(TestCase):
    """Behavioral tests for isvalidname()."""

    def testAcceptedAlphabet(self):
        for text in ("git", "remote-add", "a_b1", "ABC", ""):
            with self.subTest(text=text):
                self.assertTrue(isvalidname(text))

    def testRejectedCharacters(self):
        for text in ("<lambda>", "a b", "a.b", "café", "--x="):
            with self.subTest(text=text):
                self.assertFalse(isvalidname(text))


class TestHelpers(TestCase):
    """Behavioral tests for small helpers."""

    def testOrdinalWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(103), "103rd")
        self.assertEqual(ordinal(112), "112th")

    def testUnsetIsFalseySingleton(self):
        self.assertFalse(Unset)
        self.assertIs(UnsetType(), Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testCoalescePreservesNone(self):
        self.assertEqual(coalesce(Unset, "x"), "x")
        self.assertIsNone(coalesce(None, "x"))
        self.assertEqual(coalesce(0, "x"), 0)

    def testRenameBothForms(self):
        def f():
            pass

        self.assertIs(rename(f, "g"), f)
        self.assertEqual(f.__name__, "g")

        @rename("h")
        def k():
            pass

        self.assertEqual(k.__qualname__, "h")

    def testMirrorReturnsCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [1, 2]

        holder = Holder()
        holder.items.append(3)
        self.assertEqual(holder.items, [1, 2])


if __name__ == "__main__":
    unittest.main()
