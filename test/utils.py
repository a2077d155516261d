# python
"""
Tests for the internal helpers (Unset sentinel, coalesce, naming helpers, metaclass).

This module verifies:
- Unset: singleton identity, falsy semantics, representation, copying,
  pickling, PEP 604 unions and finality.
- coalesce(): only Unset is replaced.
- kebabize() / ordinal(): derived names and position labels.
- IntrospectableType: type names, read-only mirrored fields and repr.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from commandant.utils import IntrospectableType, Unset, UnsetType, coalesce, kebabize, ordinal


class SampleRecord(metaclass=IntrospectableType):
    __introspectable__ = ("items", "labels", "title")
    __displayable__ = ("title", "items")

    def __init__(self, items, labels, title):
        self._items = items
        self._labels = labels
        self._title = title


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the module-level instance on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        """
        The sentinel is falsy but equal to no other falsy value.
        """
        self.assertFalse(Unset)
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        """
        copy() and deepcopy() preserve the identity of the singleton.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy({"value": Unset})["value"], Unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnions(self) -> None:
        """
        `str | Unset` and `Unset | str` both build a union usable with isinstance().
        """
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance(Unset, Unset | str)
        self.assertNotIsInstance(None, str | Unset)

    def testFinalClass(self) -> None:
        """
        The class is final: attempts to subclass must fail with TypeError.
        """
        with self.assertRaises(TypeError):
            type("UnsetSubtype", (UnsetType,), {})


class CoalesceTest(TestCase):
    """
    Test suite for `coalesce()`.
    """

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testKeepsFalsyValues(self) -> None:
        """
        None, 0 and empty containers are legitimate values and are kept.
        """
        for value in (None, 0, "", [], False):
            self.assertIs(coalesce(value, "fallback"), value)


class NamingTest(TestCase):
    """
    Test suite for `kebabize()` and `ordinal()`.
    """

    def testKebabize(self) -> None:
        self.assertEqual(kebabize("dry_run"), "dry-run")
        self.assertEqual(kebabize("BuildCommand"), "build-command")
        self.assertEqual(kebabize("HTTPServer"), "http-server")
        self.assertEqual(kebabize("_private_"), "private")

    def testKebabizeRejectsNonStrings(self) -> None:
        with self.assertRaises(TypeError):
            kebabize(1)

    def testOrdinalWords(self) -> None:
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self) -> None:
        """
        Past ten, numeric ordinals with English suffixes (teens always "th").
        """
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(113), "113th")


class IntrospectableTypeTest(TestCase):
    """
    Test suite for the `IntrospectableType` metaclass.
    """

    def setUp(self) -> None:
        self.record = SampleRecord([1, 2], {"a": 1}, "sample")

    def testTypename(self) -> None:
        self.assertEqual(SampleRecord.__typename__, "sample-record")

    def testFieldsAreReadOnlyViews(self) -> None:
        """
        Lists come back as tuples and mappings as read-only proxies.
        """
        self.assertEqual(self.record.items, (1, 2))
        with self.assertRaises(TypeError):
            self.record.labels["b"] = 2
        with self.assertRaises(AttributeError):
            self.record.title = "other"

    def testRepr(self) -> None:
        """
        repr() lists the displayable fields only, in their declared order.
        """
        self.assertEqual(repr(self.record), "sample-record(title='sample', items=(1, 2))")
        self.assertEqual(list(self.record.__rich_repr__()), [("title", "sample"), ("items", (1, 2))])


if __name__ == '__main__':
    unittest.main()
