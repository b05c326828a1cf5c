"""
Parser module behavioral tests (registration, matching, validation, shell mode).

Scope
- Validate registration: conflicts (including the reserved help switch),
  atomic batches, overrides and late registration.
- Validate the two matching passes: flagged options first, then positional
  binding over the positional subset in declared order.
- Validate requirement reporting (is_valid, invalid_options, strict, validate()).
- Validate help mode and the shell-mode exit statuses.

Conventions
- Test method names follow CamelCase per project convention.
- Help screens and shell-mode faults are captured by redirecting stdout/stderr.
"""

from __future__ import annotations

import contextlib
import io
import sys
import unittest
import warnings
from unittest import TestCase, mock

from argsmith import *


def render(argv=None, /, **options):
    """Build the parser used across these tests: two positionals and a flagged option."""
    parser = Parser(argv if argv is not None else ["render"], "render the current scene", **options)
    parser.add_options(
        integer("width", descr="output width"),
        integer("height", descr="output height"),
        integer("samples", "s", required=True, descr="render samples"),
    )
    return parser


class TestParsing(TestCase):
    """Behavioral tests for the two matching passes."""

    def testPositionalsAndFlag(self):
        parser = render(["render", "800", "600", "-s", "16"])
        self.assertEqual(dict(parser.parse()), {"width": 800, "height": 600, "samples": 16})
        self.assertTrue(parser.is_valid)
        self.assertEqual(parser.invalid_options, [])

    def testFlagBeforePositionals(self):
        parser = render(["render", "--samples", "16", "800", "600"])
        self.assertEqual(dict(parser.parse()), {"width": 800, "height": 600, "samples": 16})

    def testMissingPositionalIsReportedNotRaised(self):
        parser = render(["render", "800", "-s", "16"])
        values = parser.parse()
        self.assertEqual(dict(values), {"width": 800, "samples": 16})
        self.assertFalse(parser.is_valid)
        self.assertEqual([option.name for option in parser.invalid_options], ["height"])

    def testPositionalBindingSkipsFlaggedOptions(self):
        parser = Parser(["render", "1", "2"])
        parser.add_options(
            integer("width"),
            integer("samples", "s"),
            integer("height"),
        )
        self.assertEqual(dict(parser.parse()), {"width": 1, "height": 2})
        self.assertTrue(parser.get_option("samples").is_valid)

    def testNegativeNumberIsAValue(self):
        parser = Parser(["prog", "-o", "-5"])
        parser.add_option(integer("offset", "o"))
        self.assertEqual(parser.parse()["offset"], -5)

    def testNegativePositional(self):
        parser = Parser(["prog", "-2.5"])
        parser.add_option(double("ratio"))
        self.assertEqual(parser.parse()["ratio"], -2.5)

    def testLoneDashIsAValue(self):
        parser = Parser(["prog", "-o", "-"])
        parser.add_option(string("output", "o"))
        self.assertEqual(parser.parse()["output"], "-")

    def testFlagWithoutValueLeavesOptionUnset(self):
        parser = render(["render", "800", "600", "-s"])
        values = parser.parse()
        self.assertNotIn("samples", values)
        self.assertFalse(parser.get_option("samples").has_value)
        self.assertFalse(parser.is_valid)

    def testFlagDoesNotConsumeAnotherFlag(self):
        parser = Parser(["prog", "-o", "-d"])
        parser.add_options(string("output", "o"), boolean("debug", "d"))
        values = parser.parse()
        self.assertNotIn("output", values)
        self.assertIs(values["debug"], True)

    def testLongNameAndShortPrefixedName(self):
        parser = Parser(["prog", "-samples", "4"])
        parser.add_option(integer("samples", "s"))
        self.assertEqual(parser.parse()["samples"], 4)

    def testDefaultsInResult(self):
        parser = Parser(["prog"])
        parser.add_options(
            integer("samples", "s", default=10),
            string("name", "n"),
            boolean("debug", "d"),
        )
        self.assertEqual(dict(parser.parse()), {"samples": 10, "debug": False})

    def testResultIsReadOnly(self):
        parser = render(["render", "800", "600", "-s", "16"])
        values = parser.parse()
        with self.assertRaises(TypeError):
            values["width"] = 1
        self.assertIs(parser.result, values)

    def testPathValuesAreStrings(self):
        parser = Parser(["prog", "scenes/main.usd"])
        parser.add_option(path("scene"))
        value = parser.parse()["scene"]
        self.assertIsInstance(value, str)
        self.assertEqual(value, "scenes/main.usd")

    def testStringArgvIsSplit(self):
        parser = render('render 800 600 -s "16"')
        self.assertEqual(parser.name, "render")
        self.assertEqual(dict(parser.parse()), {"width": 800, "height": 600, "samples": 16})

    def testArgvGivenToParse(self):
        parser = render()
        self.assertEqual(parser.parse(["render", "1", "2", "-s", "3"])["samples"], 3)

    def testArgvFallsBackToSys(self):
        parser = Parser()
        parser.add_option(integer("width"))
        with mock.patch.object(sys, "argv", ["prog", "5"]):
            self.assertEqual(parser.parse()["width"], 5)
        self.assertEqual(parser.name, "prog")

    def testArgvMustHoldStrings(self):
        with self.assertRaises(TypeError):
            Parser(["prog", 5])

    def testNameWithoutArgv(self):
        self.assertEqual(Parser().name, "(none)")
        self.assertEqual(Parser([]).name, "(none)")

    def testReparseResetsValues(self):
        parser = render()
        parser.parse(["render", "1", "2", "-s", "16"])
        values = parser.parse(["render", "1", "2"])
        self.assertNotIn("samples", values)
        self.assertFalse(parser.get_option("samples").has_value)

    def testCustomPrefixes(self):
        parser = Parser(["prog", "+s", "16", "-5", "++name", "fred"], short_prefix="+", long_prefix="++")
        parser.add_options(
            integer("samples", "s", prefix="+"),
            string("name", "n", prefix="+"),
            integer("offset", prefix="+"),
        )
        self.assertEqual(dict(parser.parse()), {"samples": 16, "name": "fred", "offset": -5})

    def testPrefixMismatchRejected(self):
        parser = Parser(short_prefix="+", long_prefix="++")
        with self.assertRaises(ValueError):
            parser.add_option(integer("samples", "s"))

    def testInvalidPrefixes(self):
        with self.assertRaises(ValueError):
            Parser(short_prefix="", long_prefix="--")
        with self.assertRaises(ValueError):
            Parser(short_prefix="-", long_prefix="-")
        with self.assertRaises(TypeError):
            Parser(short_prefix=None)


class TestBooleans(TestCase):
    """Behavioral tests for bool switches."""

    def parser(self, *argv):
        parser = Parser(["prog", *argv])
        parser.add_options(boolean("debug", "d"), path("scene"))
        return parser

    def testPresenceSwitchesOn(self):
        self.assertIs(self.parser("-d").parse()["debug"], True)

    def testAbsenceIsFalse(self):
        parser = self.parser("scene.usd")
        self.assertIs(parser.parse()["debug"], False)
        self.assertFalse(parser.get_option("debug").has_value)
        self.assertTrue(parser.is_valid)

    def testExplicitLiteralConsumed(self):
        parser = self.parser("-d", "false", "scene.usd")
        values = parser.parse()
        self.assertIs(values["debug"], False)
        self.assertEqual(values["scene"], "scene.usd")

    def testNonLiteralLeftForPositionals(self):
        values = self.parser("-d", "scene.usd").parse()
        self.assertIs(values["debug"], True)
        self.assertEqual(values["scene"], "scene.usd")


class TestRegistration(TestCase):
    """Behavioral tests for add_option()/add_options()."""

    def testReservedHelpConflicts(self):
        parser = Parser()
        for option in (integer("height", "h"), boolean("help"), string("h")):
            with self.subTest(option=option.name), self.assertRaises(ConflictingOptionError):
                parser.add_option(option)
        self.assertEqual(parser.options, [])

    def testReservedHelpIgnoresCase(self):
        parser = Parser()
        for option in (integer("height", "H"), boolean("HELP"), string("--Help")):
            with self.subTest(option=option.name), self.assertRaises(ConflictingOptionError):
                parser.add_option(option)
        self.assertEqual(parser.options, [])
        parser.add_option(integer("height", "ht"))
        self.assertEqual(parser.parse(["prog", "-ht", "540"])["height"], 540)

    def testDuplicateNameOrFlag(self):
        parser = Parser()
        parser.add_option(integer("samples", "s"))
        with self.assertRaises(ConflictingOptionError) as context:
            parser.add_option(string("scene", "s"))
        self.assertEqual(context.exception.name, "scene")
        with self.assertRaises(ConflictingOptionError):
            parser.add_option(string("samples"))
        self.assertEqual([option.name for option in parser.options], ["samples"])

    def testSameOptionTwice(self):
        parser = Parser()
        option = parser.add_option(integer("samples", "s"))
        with self.assertRaises(ConflictingOptionError):
            parser.add_option(option)

    def testBatchIsAtomic(self):
        parser = Parser()
        with self.assertRaises(ConflictingOptionError):
            parser.add_options(integer("width"), integer("samples", "x"), integer("scale", "x"))
        self.assertEqual(parser.options, [])

    def testBatchReturnsOptions(self):
        parser = Parser()
        width, height = parser.add_options(integer("width"), integer("height"))
        self.assertEqual(parser.options, [width, height])
        self.assertEqual(parser.positional_options, [width, height])

    def testOnlyOptionsAccepted(self):
        with self.assertRaises(TypeError):
            Parser().add_option("width")

    def testOverrides(self):
        parser = Parser(["prog"])
        option = parser.add_option(integer("samples", "s"), required=True, default="10")
        self.assertTrue(option.required)
        self.assertEqual(option.default, 10)
        self.assertEqual(parser.required_options, [option])
        self.assertEqual(parser.parse()["samples"], 10)
        self.assertTrue(parser.is_valid)

    def testBadDefaultNotRegistered(self):
        parser = Parser()
        with self.assertRaises(ValueError):
            parser.add_option(integer("samples", "s"), default="many")
        with self.assertRaises(TypeError):
            parser.add_option(integer("samples", "s"), default=1.5)
        self.assertFalse(parser.has_option("samples"))

    def testLateRegistration(self):
        parser = render(["render", "1", "2", "-s", "3"])
        parser.parse()
        with self.assertRaises(LateRegistrationError):
            parser.add_option(boolean("debug", "d"))
        self.assertFalse(parser.has_option("debug"))

    def testQueries(self):
        parser = render()
        self.assertEqual([option.name for option in parser.optional_options], ["samples"])
        self.assertEqual([option.name for option in parser.positional_options], ["width", "height"])
        self.assertEqual(parser.get_option("--samples").name, "samples")
        self.assertEqual(parser.get_option("s").name, "samples")
        self.assertIs(parser.get_option("-h"), parser.helper)
        self.assertIsNone(parser.get_option("-x"))
        self.assertTrue(parser.has_option("width"))
        self.assertFalse(parser.has_option("depth"))
        with self.assertRaises(TypeError):
            parser.get_option(1)


class TestFaults(TestCase):
    """Behavioral tests for the parsing faults raised outside shell mode."""

    def testInvalidFlagValue(self):
        parser = render(["render", "800", "600", "-s", "abc"])
        with self.assertRaises(InvalidValueTypeError) as context:
            parser.parse()
        self.assertEqual(context.exception.option.name, "samples")
        self.assertEqual(context.exception.index, 4)

    def testInvalidPositionalValue(self):
        parser = render(["render", "wide", "600", "-s", "16"])
        with self.assertRaises(InvalidValueTypeError) as context:
            parser.parse()
        self.assertEqual(context.exception.option.name, "width")
        self.assertEqual(context.exception.index, 1)

    def testUnknownOption(self):
        parser = render(["render", "800", "600", "-x"])
        with self.assertRaises(UnknownOptionError) as context:
            parser.parse()
        self.assertEqual(context.exception.token, "-x")
        self.assertEqual(context.exception.index, 3)
        self.assertEqual(context.exception.status, 2)

    def testUnexpectedPositional(self):
        parser = render(["render", "800", "600", "400"])
        with self.assertRaises(UnexpectedPositionalError) as context:
            parser.parse()
        self.assertEqual(context.exception.token, "400")
        self.assertEqual(context.exception.index, 3)

    def testDuplicatedOptionWarns(self):
        parser = render(["render", "800", "600", "-s", "4", "--samples", "8"])
        with self.assertWarns(DuplicatedOptionWarning):
            values = parser.parse()
        self.assertEqual(values["samples"], 8)

    def testStrictRaisesMissing(self):
        parser = render(["render", "800"], strict=True)
        with self.assertRaises(MissingRequiredOptionsError) as context:
            parser.parse()
        self.assertEqual(context.exception.names, ("height", "samples"))

    def testValidateOnDemand(self):
        parser = render(["render", "800", "600"])
        parser.parse()
        with self.assertRaises(MissingRequiredOptionsError) as context:
            parser.validate()
        self.assertEqual(context.exception.names, ("samples",))
        self.assertIn("missing required option: samples", str(context.exception))

    def testValidateWhenValid(self):
        parser = render(["render", "800", "600", "-s", "1"])
        parser.parse()
        self.assertIsNone(parser.validate())

    def testFaultsCarryHostDocs(self):
        parser = render(["render", "-x"])
        docs = {FaultCode.UNKNOWN_OPTION: "flags are listed by --help"}
        with mock.patch.object(sys.modules["__main__"], "__docs__", docs, create=True):
            with self.assertRaises(UnknownOptionError) as context:
                parser.parse()
        self.assertEqual(context.exception.options["docs"], "flags are listed by --help")

    def testFaultsCarryParser(self):
        parser = render(["render", "-x"])
        with self.assertRaises(UnknownOptionError) as context:
            parser.parse()
        self.assertIs(context.exception.options["parser"], parser)
        self.assertIs(context.exception.options["shell"], False)


class TestHelp(TestCase):
    """Behavioral tests for help mode."""

    def testHelpFlag(self):
        for flag in ("-h", "--help", "-H", "--HELP"):
            with self.subTest(flag=flag):
                parser = render(["render", flag], colorful=False)
                stdout = io.StringIO()
                with contextlib.redirect_stdout(stdout):
                    values = parser.parse()
                self.assertEqual(dict(values), {})
                self.assertTrue(parser.help_mode)
                self.assertTrue(parser.is_valid)
                self.assertEqual(parser.invalid_options, [])
                self.assertIn("OVERVIEW:  render the current scene", stdout.getvalue())

    def testHelpStopsMatching(self):
        parser = render(["render", "-h", "-x", "abc"])
        with contextlib.redirect_stdout(io.StringIO()):
            self.assertEqual(dict(parser.parse()), {})

    def testHelpModeClearedOnReparse(self):
        parser = render(["render", "-h"])
        with contextlib.redirect_stdout(io.StringIO()):
            parser.parse()
        parser.parse(["render", "1"])
        self.assertFalse(parser.help_mode)
        self.assertFalse(parser.is_valid)


class TestShell(TestCase):
    """Behavioral tests for shell mode (render and exit instead of raising)."""

    def testParsingFaultExitsWithTwo(self):
        parser = render(["render", "800", "600", "-x"], shell=True, colorful=False)
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            parser.parse()
        self.assertEqual(context.exception.code, 2)
        self.assertIn("render <width> <height> -s <samples>", stderr.getvalue())
        self.assertIn("unknown option '-x' at index 3", stderr.getvalue())

    def testStrictExitsWithTwo(self):
        parser = render(["render"], shell=True, strict=True, colorful=False)
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as context:
            parser.parse()
        self.assertEqual(context.exception.code, 2)

    def testRegistrationFaultExitsWithOne(self):
        parser = Parser(shell=True, colorful=False)
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as context:
            parser.add_option(integer("height", "h"))
        self.assertEqual(context.exception.code, 1)

    def testHelpExitsWithZero(self):
        parser = render(["render", "--help"], shell=True, colorful=False)
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            parser.parse()
        self.assertEqual(context.exception.code, 0)
        self.assertIn("POSITIONAL ARGUMENTS:", stdout.getvalue())

    def testWarningsArePrinted(self):
        parser = render(["render", "1", "2", "-s", "4", "-s", "8"], shell=True, colorful=False)
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            values = parser.parse()
        self.assertEqual(caught, [])
        self.assertEqual(values["samples"], 8)
        self.assertIn("given more than once", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
