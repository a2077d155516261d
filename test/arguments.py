# python
"""
Arguments module behavioral tests (markers, templates, resolution).

Scope
- Validate marker construction (Option, Argument, HelpOption, VersionOption, Remaining):
  template parsing, name overrides, metadata validation.
- Validate resolution against a member name and annotation: derived names, value
  type, arity, container, choices and per-arity defaults.
- Validate the descriptor behavior of markers on classes and instances.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

import enum
import unittest
from typing import Literal
from unittest import TestCase

from commandant import Argument, Arity, HelpOption, Kind, Option, Remaining, VersionOption


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class TestArity(TestCase):
    """Behavioral tests for the Arity enumeration."""

    def testAcceptsSymbols(self):
        self.assertIs(Arity("?"), Arity.OPTIONAL)
        self.assertIs(Arity("*"), Arity.MANY)

    def testAcceptsIntegers(self):
        self.assertIs(Arity(0), Arity.ZERO)
        self.assertIs(Arity(1), Arity.ONE)

    def testRejectsOtherIntegers(self):
        with self.assertRaises(ValueError):
            Arity(2)

    def testRejectsBooleans(self):
        with self.assertRaises(ValueError):
            Arity(True)


class TestOptionTemplate(TestCase):
    """Behavioral tests for Option templates and name overrides."""

    def testTemplateSplitsNamesAndPlaceholder(self):
        o = Option("-n|--name <NAME>")
        self.assertEqual(o.shorts, ("-n",))
        self.assertEqual(o.longs, ("--name",))
        self.assertEqual(o.metavar, "NAME")
        self.assertIs(o.__resolve__("name").arity, Arity.ONE)

    def testTemplateAcceptsWhitespaceSeparators(self):
        o = Option("-o --output")
        self.assertEqual(o.names, ("-o", "--output"))

    def testMultiCharacterShortNames(self):
        o = Option("-?|-h|--help")
        self.assertEqual(o.shorts, ("-?", "-h"))

    def testNameIsFirstLongName(self):
        self.assertEqual(Option("-n|--name|--nick").name, "--name")
        self.assertEqual(Option("-j <N>").name, "-j")

    def testTemplateRejectsInvalidParts(self):
        with self.assertRaises(ValueError):
            Option("name")

    def testTemplateRejectsDuplicates(self):
        with self.assertRaises(ValueError):
            Option("-x|--yy|-x")

    def testTemplateRequiresAName(self):
        with self.assertRaises(ValueError):
            Option("<VALUE>")

    def testTemplateMustBeString(self):
        with self.assertRaises(TypeError):
            Option(42)

    def testPlaceholderConflictsWithMetavar(self):
        with self.assertRaises(ValueError):
            Option("--name <NAME>", metavar="WHO")

    def testShortOverrideGoesFirst(self):
        o = Option("-x|--extra", short="e")
        self.assertEqual(o.shorts, ("-e", "-x"))

    def testLongOverrideAddsDashes(self):
        o = Option(long="colour")
        self.assertEqual(o.longs, ("--colour",))

    def testOverrideMustBeStringOrFalse(self):
        with self.assertRaises(TypeError):
            Option(short=True)


class TestOptionMetadata(TestCase):
    """Behavioral tests for Option metadata validation."""

    def testDescrDefaultsToNone(self):
        self.assertIsNone(Option().descr)

    def testDescrIsTrimmed(self):
        self.assertEqual(Option(descr="  who to greet ").descr, "who to greet")

    def testDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Option(descr=None)

    def testDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Option(descr="   ")

    def testTypeMustBeCallable(self):
        with self.assertRaises(TypeError):
            Option(type=1)

    def testArityMustBeKnown(self):
        with self.assertRaises(ValueError):
            Option(arity="+")

    def testChoicesRejectString(self):
        with self.assertRaises(TypeError):
            Option(choices="abc")

    def testChoicesRejectDuplicates(self):
        with self.assertRaises(ValueError):
            Option(choices=["a", "a"])

    def testChoicesAndMetavarAreExclusive(self):
        with self.assertRaises(TypeError):
            Option(metavar="MODE", choices=["fast", "safe"])

    def testRequiredIsCoerced(self):
        self.assertIs(Option(required=1).required, True)

    def testConstDefaultsToTrue(self):
        self.assertIs(Option(arity="?").const, True)
        self.assertEqual(Option(arity="?", const=2).const, 2)


class TestOptionResolution(TestCase):
    """Behavioral tests for Option.__resolve__."""

    def testBoolAnnotationMakesSwitch(self):
        o = Option().__resolve__("dry_run", bool)
        self.assertEqual(o.longs, ("--dry-run",))
        self.assertEqual(o.shorts, ("-d",))
        self.assertIs(o.arity, Arity.ZERO)
        self.assertIs(o.type, bool)
        self.assertIs(o.default, False)

    def testResolutionReturnsCopy(self):
        marker = Option()
        resolved = marker.__resolve__("name", str)
        self.assertIsNot(marker, resolved)
        self.assertFalse(marker.resolved)
        self.assertTrue(resolved.resolved)
        self.assertEqual(resolved.member, "name")

    def testResolvedWithPosition(self):
        self.assertTrue(Option().__resolve__("name", str, position=3).resolved)
        self.assertTrue(Argument().__resolve__("source", str).resolved)
        self.assertTrue(Remaining().__resolve__("rest").resolved)

    def testPlainAnnotationTakesOneValue(self):
        o = Option().__resolve__("count", int)
        self.assertIs(o.arity, Arity.ONE)
        self.assertIs(o.type, int)
        self.assertEqual(o.metavar, "COUNT")
        self.assertIsNone(o.default)

    def testMissingAnnotationDefaultsToString(self):
        o = Option().__resolve__("name")
        self.assertIs(o.type, str)
        self.assertIs(o.arity, Arity.ONE)

    def testOptionalAnnotationIsUnwrapped(self):
        o = Option().__resolve__("count", int | None)
        self.assertIs(o.type, int)
        self.assertIs(o.arity, Arity.ONE)

    def testListAnnotationMakesMany(self):
        o = Option().__resolve__("tags", list[str])
        self.assertIs(o.arity, Arity.MANY)
        self.assertIs(o.type, str)
        self.assertIs(o.container, list)
        self.assertEqual(o.default, [])
        self.assertIsNot(o.default, o.default)

    def testTupleAnnotationKeepsContainer(self):
        o = Option().__resolve__("sizes", tuple[int, ...])
        self.assertIs(o.container, tuple)
        self.assertIs(o.type, int)
        self.assertEqual(o.default, ())

    def testLiteralAnnotationGivesChoices(self):
        o = Option().__resolve__("mode", Literal["fast", "safe"])
        self.assertIs(o.type, str)
        self.assertEqual(o.choices, ("fast", "safe"))

    def testEnumAnnotationIsTheType(self):
        o = Option().__resolve__("color", Color)
        self.assertIs(o.type, Color)

    def testExplicitTypeWins(self):
        o = Option(type=float).__resolve__("ratio", int)
        self.assertIs(o.type, float)

    def testExplicitDefaultWins(self):
        o = Option(default=3).__resolve__("count", int)
        self.assertEqual(o.default, 3)

    def testDisabledShortNames(self):
        o = Option(short=False).__resolve__("verbose", bool)
        self.assertEqual(o.shorts, ())
        self.assertEqual(o.names, ("--verbose",))

    def testDisabledLongNamesStillDeriveShort(self):
        o = Option(long=False).__resolve__("verbose", bool)
        self.assertEqual(o.longs, ())
        self.assertEqual(o.names, ("-v",))

    def testTemplateNamesAreAuthoritative(self):
        o = Option("--colour").__resolve__("color", str)
        self.assertEqual(o.names, ("--colour",))

    def testPlaceholderTakesOneValue(self):
        self.assertIs(Option("-f <FLAG>").__resolve__("flag", bool).arity, Arity.ONE)
        self.assertIs(Option("-n <N>").__resolve__("count", int).arity, Arity.ONE)

    def testPlaceholderWithCollectionAnnotationTakesMany(self):
        o = Option("-x|--exclude <GLOB>").__resolve__("exclude", list[str])
        self.assertIs(o.arity, Arity.MANY)
        self.assertIs(o.container, list)
        self.assertEqual(o.metavar, "GLOB")
        self.assertEqual(o.default, [])

    def testExplicitArityBeatsPlaceholder(self):
        o = Option("-x <GLOB>", arity="1").__resolve__("exclude", list[str])
        self.assertIs(o.arity, Arity.ONE)

    def testBothKindsDisabledRejected(self):
        with self.assertRaises(TypeError):
            Option(short=False, long=False).__resolve__("verbose", bool)

    def testMemberMustBeIdentifier(self):
        with self.assertRaises(TypeError):
            Option().__resolve__("not an identifier", str)


class TestSwitches(TestCase):
    """Behavioral tests for HelpOption and VersionOption."""

    def testHelpDefaults(self):
        h = HelpOption()
        self.assertIs(h.kind, Kind.HELP)
        self.assertEqual(h.names, ("-?", "-h", "--help"))
        self.assertEqual(h.descr, "Show help information.")
        self.assertIs(h.arity, Arity.ZERO)

    def testHelpCustomTemplate(self):
        self.assertEqual(HelpOption("--aide").names, ("--aide",))

    def testVersionDefaults(self):
        v = VersionOption()
        self.assertIs(v.kind, Kind.VERSION)
        self.assertEqual(v.names, ("--version",))

    def testVersionAcceptsCallable(self):
        v = VersionOption(version=lambda: "1.0")
        self.assertEqual(v.version(), "1.0")

    def testVersionRejectsNumbers(self):
        with self.assertRaises(TypeError):
            VersionOption(version=3)


class TestArgument(TestCase):
    """Behavioral tests for Argument markers."""

    def testNameDefaultsToMember(self):
        a = Argument().__resolve__("source", str)
        self.assertEqual(a.name, "source")
        self.assertIs(a.kind, Kind.ARGUMENT)

    def testExplicitName(self):
        a = Argument(0, "FILE").__resolve__("source", str)
        self.assertEqual(a.name, "FILE")
        self.assertEqual(a.order, 0)

    def testListAnnotationIsVariadic(self):
        a = Argument().__resolve__("files", list[str])
        self.assertTrue(a.variadic)
        self.assertEqual(a.default, [])

    def testBoolArgumentTakesAWord(self):
        a = Argument().__resolve__("enabled", bool)
        self.assertIs(a.arity, Arity.ONE)
        self.assertIs(a.type, bool)

    def testOptionalArityRejected(self):
        with self.assertRaises(ValueError):
            Argument(arity="?")

    def testNegativeOrderRejected(self):
        with self.assertRaises(ValueError):
            Argument(-1)

    def testBooleanOrderRejected(self):
        with self.assertRaises(TypeError):
            Argument(True)

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            Argument(0, " ")


class TestDescriptors(TestCase):
    """Behavioral tests for markers used as class attributes."""

    def testClassAccessReturnsMarker(self):
        class Tool:
            name: str = Option()

        self.assertIsInstance(Tool.name, Option)
        self.assertEqual(Tool.name.member, "name")

    def testInstanceAccessReturnsDefault(self):
        class Tool:
            count: int = Option(default=3)
            tags: list[str] = Option(arity="*")

        tool = Tool()
        self.assertEqual(tool.count, 3)
        self.assertEqual(tool.tags, [])
        self.assertIsNot(tool.tags, Tool().tags)

    def testInstanceAttributeShadowsMarker(self):
        class Tool:
            name: str = Option()

        tool = Tool()
        tool.name = "Ada"
        self.assertEqual(tool.name, "Ada")

    def testRemainingDefaultsToEmptyList(self):
        class Tool:
            rest = Remaining()

        self.assertEqual(Tool().rest, [])
        self.assertIs(Tool.rest.kind, Kind.REMAINING)


if __name__ == "__main__":
    unittest.main()
