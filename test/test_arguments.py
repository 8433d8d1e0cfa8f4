# python
"""
Arguments module behavioral tests (construction, sanitization, introspection).

Scope
- Validate public specs (Flag, Argument): construction, normalization, defaults.
- Validate naming rules for long names and single-codepoint short names.
- Validate occurrence bounds, validators, defaults and the required switch.
- Validate read-only introspection and representation.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argspan import Flag, Argument


class TestNames(TestCase):
    """Behavioral tests for long and short name validation (shared by every spec)."""

    def testLongNameIsTrimmed(self):
        self.assertEqual(Flag("  verbose ").longname, "verbose")

    def testLongNameAcceptsHyphenatedSegments(self):
        self.assertEqual(Flag("dry-run").longname, "dry-run")
        self.assertEqual(Argument("log-level-2").longname, "log-level-2")

    def testLongNameAcceptsUnicodeLetters(self):
        self.assertEqual(Flag("été").longname, "été")

    def testLongNameRejectsMalformedNames(self):
        for name in ("v", "--verbose", "-verbose", "dry_run", "dry--run", "dry-", "2fast", "out=put", "dry run"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Flag(name)

    def testLongNameRejectsEmpty(self):
        with self.assertRaises(ValueError):
            Argument("   ")

    def testLongNameMustBeString(self):
        with self.assertRaises(TypeError):
            Flag(1)

    def testShortNameDefaultsToNone(self):
        self.assertIsNone(Flag("verbose").shortname)

    def testShortNameAcceptsAnyPrintableCodepoint(self):
        for name in ("v", "V", "7", "λ", "😀"):
            with self.subTest(name=name):
                self.assertEqual(Flag("verbose", name).shortname, name)

    def testShortNameRejectsSeveralCodepoints(self):
        with self.assertRaises(ValueError):
            Flag("verbose", "vv")

    def testShortNameRejectsReservedAndInvisibleCodepoints(self):
        for name in ("-", "=", " ", "\n", "\t", "\udcff"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                Flag("verbose", name)

    def testShortNameMustBeString(self):
        with self.assertRaises(TypeError):
            Argument("output", 111)


class TestFlag(TestCase):
    """Behavioral tests for Flag specifications."""

    def testDefaults(self):
        flag = Flag("verbose", "v")
        self.assertIsNone(flag.descr)
        self.assertEqual(flag.min, 0)
        self.assertIsNone(flag.max)

    def testDescrIsTrimmed(self):
        self.assertEqual(Flag("verbose", "v", "  talk more ").descr, "talk more")

    def testDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Flag("verbose", "v", "  ")

    def testDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Flag("verbose", descr=None)

    def testBounds(self):
        flag = Flag("verbose", "v", min=1, max=3)
        self.assertEqual((flag.min, flag.max), (1, 3))

    def testBoundsRejected(self):
        for options in ({"min": -1}, {"max": 0}, {"min": 3, "max": 2}):
            with self.subTest(options=options), self.assertRaises(ValueError):
                Flag("verbose", **options)

    def testBoundsMustBeIntegers(self):
        for options in ({"min": True}, {"min": 1.5}, {"max": "2"}, {"max": False}):
            with self.subTest(options=options), self.assertRaises(TypeError):
                Flag("verbose", **options)

    def testMatchesLongNameOrCodepoint(self):
        flag = Flag("verbose", "v")
        self.assertTrue(flag.matches("verbose"))
        self.assertTrue(flag.matches(ord("v")))
        self.assertFalse(flag.matches("v"))
        self.assertFalse(flag.matches(ord("V")))
        self.assertFalse(Flag("verbose").matches(ord("v")))

    def testFieldsAreReadOnly(self):
        flag = Flag("verbose", "v")
        with self.assertRaises(AttributeError):
            flag.longname = "quiet"

    def testRepr(self):
        self.assertEqual(
            repr(Flag("verbose", "v", max=2)),
            "flag(longname='verbose', shortname='v', descr=None, min=0, max=2)"
        )


class TestArgument(TestCase):
    """Behavioral tests for Argument specifications."""

    def testDefaults(self):
        argument = Argument("output", "o")
        self.assertIsNone(argument.metavar)
        self.assertIsNone(argument.validator)
        self.assertIsNone(argument.default)
        self.assertFalse(argument.has_default)
        self.assertFalse(argument.required)

    def testMetavarIsTrimmed(self):
        self.assertEqual(Argument("output", "o", " FILE ").metavar, "FILE")

    def testMetavarEmptyRejected(self):
        with self.assertRaises(ValueError):
            Argument("output", "o", "")

    def testRequiredFollowsMinimum(self):
        self.assertTrue(Argument("output", min=1).required)
        self.assertFalse(Argument("output", min=1, required=False).required)
        self.assertTrue(Argument("output", required=True).required)

    def testNoneIsALegitimateDefault(self):
        argument = Argument("output", default=None)
        self.assertTrue(argument.has_default)
        self.assertIsNone(argument.default)

    def testDefaultIsKept(self):
        argument = Argument("jobs", "j", default="4")
        self.assertTrue(argument.has_default)
        self.assertEqual(argument.default, "4")

    def testValidatorMustBeCallable(self):
        with self.assertRaises(TypeError):
            Argument("jobs", validator="digits")

    def testAcceptsWithoutValidator(self):
        self.assertTrue(Argument("jobs").accepts("anything"))

    def testAcceptsRunsValidator(self):
        argument = Argument("jobs", validator=str.isdigit)
        self.assertTrue(argument.accepts("12"))
        self.assertFalse(argument.accepts("twelve"))

    def testAcceptsTreatsConversionErrorsAsRejection(self):
        self.assertFalse(Argument("port", validator=int).accepts("http"))
        self.assertFalse(Argument("port", validator=lambda value: value + 1).accepts("80"))

    def testAcceptsTreatsNoneAsRejection(self):
        self.assertFalse(Argument("port", validator=lambda value: None).accepts("80"))

    def testOtherValidatorErrorsPropagate(self):
        def validator(value):
            raise LookupError(value)

        with self.assertRaises(LookupError):
            Argument("port", validator=validator).accepts("80")

    def testRepr(self):
        self.assertEqual(
            repr(Argument("output", "o", "FILE", default="-")),
            "argument(longname='output', shortname='o', metavar='FILE', min=0, max=None, default='-', required=False)"
        )


if __name__ == "__main__":
    unittest.main()
