"""
Faults module behavioral tests (codes, messages, relocation, rendering, trigger).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering is checked on a recording-free rich Console writing to a buffer.
"""

from __future__ import annotations

import io
import sys
import unittest
from contextlib import redirect_stderr
from unittest import TestCase, mock

from rich.console import Console

from argspan import (
    ErrorCode,
    ErrorType,
    ParseError,
    UnknownParameterError,
    FlagAssignmentError,
    RequiredArgumentError,
    OutOfBoundError,
    NoGlobalCommandError,
    trigger,
)
from argspan.faults import _ordinal


def _render(renderable, **options):
    console = Console(file=io.StringIO(), width=120, color_system=None, **options)
    console.print(renderable)
    return console.file.getvalue()


class TestErrorCode(TestCase):

    def testCodesAreStable(self):
        self.assertEqual(ErrorCode.BAD_STRING, 21101)
        self.assertEqual(ErrorCode.UNKNOWN_PARAMETER, 21121)
        self.assertEqual(ErrorCode.OUT_OF_BOUND, 21132)

    def testEverySubclassHasItsOwnCode(self):
        codes = [cls.code for cls in ParseError.__subclasses__()]
        self.assertEqual(len(codes), len(set(codes)))
        self.assertEqual(set(codes), set(ErrorCode))

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(ErrorCode.MISSING_VALUE.normalize(), "21123")

    def testNormalizeReadsHostLabels(self):
        main = sys.modules["__main__"]
        with mock.patch.object(main, "__codes__", {ErrorCode.MISSING_VALUE: "E-VALUE"}, create=True):
            self.assertEqual(ErrorCode.MISSING_VALUE.normalize(), "E-VALUE")
            self.assertEqual(ErrorCode.BAD_STRING.normalize(), "21101")


class TestOrdinal(TestCase):

    def testWords(self):
        self.assertEqual(_ordinal(1), "first")
        self.assertEqual(_ordinal(2), "second")
        self.assertEqual(_ordinal(10), "tenth")

    def testSuffixes(self):
        cases = {11: "11th", 12: "12th", 13: "13th", 21: "21st", 22: "22nd", 23: "23rd", 101: "101st", 111: "111th"}
        for number, label in cases.items():
            with self.subTest(number=number):
                self.assertEqual(_ordinal(number), label)


class TestParseError(TestCase):

    def testFields(self):
        fault = FlagAssignmentError("verbose", "1", type=ErrorType.FLAG, position=3)
        self.assertEqual(fault.argument, "verbose")
        self.assertEqual(fault.value, "1")
        self.assertEqual(fault.type, ErrorType.FLAG)
        self.assertEqual(fault.code, ErrorCode.FLAG_WITH_VALUE)
        self.assertEqual(fault.position, 3)
        self.assertEqual(fault.missing, ())

    def testTypeMustBeErrorType(self):
        with self.assertRaises(TypeError):
            UnknownParameterError("x", type="flag")

    def testRelocateShiftsPosition(self):
        fault = UnknownParameterError("nope", type=ErrorType.ARGUMENT, position=1)
        moved = fault.relocate(3)
        self.assertEqual(moved.position, 4)
        self.assertEqual(fault.position, 1)
        self.assertIsInstance(moved, UnknownParameterError)
        self.assertEqual((moved.argument, moved.type), ("nope", ErrorType.ARGUMENT))

    def testReplaceKeepsFieldsAndMergesOptions(self):
        fault = RequiredArgumentError("zone", type=ErrorType.ARGUMENT, missing=("zone", "region"), program="tool")
        copy = fault.__replace__(shell=True)
        self.assertEqual(copy, fault)
        self.assertEqual(dict(copy.options), {"program": "tool", "shell": True})

    def testEquality(self):
        self.assertEqual(UnknownParameterError("x", position=2), UnknownParameterError("x", position=2))
        self.assertNotEqual(UnknownParameterError("x", position=2), UnknownParameterError("x", position=3))
        self.assertNotEqual(UnknownParameterError("x"), FlagAssignmentError("x"))

    def testToString(self):
        fault = UnknownParameterError("nope", type=ErrorType.ARGUMENT, position=2)
        self.assertEqual(
            str(fault),
            "21121 | unknown option or flag: unknown option or flag 'nope' at second position"
        )

    def testRequiredMessageListsEveryMissingName(self):
        fault = RequiredArgumentError("zone", missing=("zone", "region"))
        self.assertIn("'zone', 'region'", fault.message)

    def testOutOfBoundMessageNamesCount(self):
        fault = OutOfBoundError("verbose", "5", type=ErrorType.FLAG)
        self.assertIn("5 times", fault.message)


class TestRendering(TestCase):

    def testPlainRendering(self):
        fault = UnknownParameterError("nope", position=2, program="/usr/bin/tool", colorful=False)
        output = _render(fault)
        self.assertIn("tool", output)
        self.assertNotIn("/usr/bin", output)
        self.assertIn("21121", output)
        self.assertIn("Unknown Option Or Flag", output)
        self.assertIn("check the spelling", output)

    def testFancyRendering(self):
        fault = NoGlobalCommandError(type=ErrorType.COMMAND, position=1, program="tool", fancy=True)
        output = _render(fault)
        self.assertIn("21111", output)
        self.assertIn("╭", output)

    def testHostProgramName(self):
        main = sys.modules["__main__"]
        with mock.patch.object(main, "__prog__", "host", create=True):
            output = _render(UnknownParameterError("nope", program="tool"))
        self.assertIn("host", output)


class TestTrigger(TestCase):

    def testTriggerRaisesWithOptions(self):
        with self.assertRaises(UnknownParameterError) as context:
            trigger(UnknownParameterError("nope", position=2), program="tool")
        self.assertEqual(context.exception.position, 2)
        self.assertEqual(context.exception.options["program"], "tool")

    def testTriggerInShellModeExits(self):
        with redirect_stderr(io.StringIO()) as stream, self.assertRaises(SystemExit) as context:
            trigger(UnknownParameterError("nope", position=2), program="tool", shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unknown option or flag 'nope'", stream.getvalue())

    def testTriggerRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


if __name__ == "__main__":
    unittest.main()
