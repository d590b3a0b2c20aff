"""
Output module behavioral tests (callback and console sinks).

Scope
- Validate that Output hands each channel one string and that absent
  callbacks are no-ops.
- Validate that ConsoleOutput prints text as-is, renders faults through rich
  and sends warnings to stderr, for single faults and caught groups.
- Validate that a command tree reports through one sink.

Conventions
- Test method names follow CamelCase per project convention.
- Console output is captured by redirecting sys.stdout / sys.stderr, which rich
  resolves at print time.
"""

from __future__ import annotations

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import TestCase

from argtree import (
    ArgSpec,
    Command,
    CommandExit,
    ConsoleOutput,
    FaultCode,
    MissingPositionalError,
    OptionSpec,
    Output,
    UnknownOptionError,
    ValueKind,
)


class TestOutput(TestCase):
    """Behavioral tests for the callback sink."""

    def testChannelsReceiveStrings(self):
        messages, warnings = [], []
        output = Output(messages.append, warnings.append)
        output.write(UnknownOptionError("unknown option '--x' at first position"))
        output.warn("careful")
        self.assertEqual(messages, ["unknown option '--x' at first position"])
        self.assertEqual(warnings, ["careful"])

    def testAbsentCallbacksAreNoOps(self):
        output = Output()
        output.write("ignored")
        output.warn("ignored")

    def testCallbacksMustBeCallable(self):
        with self.assertRaises(TypeError):
            Output("print")

    def testOneSinkForTheWholeTree(self):
        messages, warnings = [], []
        root = Command("tool", output=Output(messages.append, warnings.append))
        child = Command("sub")
        child.add_positional(ArgSpec("name", ValueKind.STRING))
        root.add_subcommand(child)

        child.add_option(OptionSpec("-bad", ValueKind.INT))
        self.assertEqual(warnings, ["option name '-bad' is invalid"])

        self.assertFalse(root.parse(["tool", "sub"]))
        self.assertEqual(messages, ["missing positional argument 'name'", "usage: sub [--help|-h] NAME"])


class TestConsoleOutput(TestCase):
    """Behavioral tests for the rich console sink."""

    def testTextGoesToStdout(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            ConsoleOutput().write("usage: tool [--help|-h] [x]")
        self.assertEqual(buffer.getvalue(), "usage: tool [--help|-h] [x]\n")

    def testStderrFlag(self):
        buffer = io.StringIO()
        with redirect_stderr(buffer):
            ConsoleOutput(stderr=True).write("usage: tool")
        self.assertIn("usage: tool", buffer.getvalue())

    def testWarningsGoToStderr(self):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            ConsoleOutput().warn("option name '-bad' is invalid")
        self.assertEqual(out.getvalue(), "")
        self.assertIn("option name '-bad' is invalid", err.getvalue())

    def testFaultsRenderWithHeader(self):
        fault = UnknownOptionError(
            "unknown option '--x' at first position",
            code=FaultCode.UNKNOWN_OPTION,
            title="unknown option",
            route="tool",
        )
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            ConsoleOutput(colorful=False).write(fault)
        text = buffer.getvalue()
        self.assertIn("Unknown Option", text)
        self.assertIn("11111", text)
        self.assertIn("unknown option '--x' at first position", text)
        self.assertNotIn("colorful", fault.options)

    def testCaughtExitRendersEveryFault(self):
        group = CommandExit([
            UnknownOptionError("unknown option '--x' at first position", code=FaultCode.UNKNOWN_OPTION, route="tool"),
            MissingPositionalError("missing positional argument 'name'", code=FaultCode.MISSING_POSITIONAL, route="tool"),
        ])
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            ConsoleOutput(colorful=False, fancy=True).write(group)
        text = buffer.getvalue()
        self.assertEqual(text.count("\u256d"), 2)
        self.assertIn("missing positional argument 'name'", text)


if __name__ == "__main__":
    unittest.main()
