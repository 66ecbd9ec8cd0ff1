"""
Help module behavioral tests (usage line, option summary, banner and tail).

Scope
- Validate the plain-text layout produced by format_help().
- Validate the rendering of short, GNU and slash names with and without values.
- Validate the banner/tail buffers and the rich entry points.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Group
from rich.panel import Panel

from callopt import OptionParser
from callopt.help import render, format_help


class TestHelpLayout(TestCase):

    def setUp(self):
        self.parser = OptionParser("tool", colorful=False)
        self.parser.on("-v", "--verbose", descr="print every step", callback=lambda: None)
        self.parser.on("-o?", "--out=?", "/out:?", descr="set output file", callback=print)
        self.parser.on("--debug", "/debug", descr="debug mode", callback=lambda: None)

    def lines(self):
        return format_help(self.parser).splitlines()

    def option(self, prefix):
        return next(line for line in self.lines() if line.startswith(prefix))

    def testUsageLine(self):
        self.assertEqual(self.lines()[0], "usage: tool [-v] [-o<val>] [--debug, /debug] <args ...>")

    def testSectionHeader(self):
        lines = self.lines()
        self.assertEqual(lines[1], "")
        self.assertEqual(lines[2], "available options:")

    def testFlagRow(self):
        row = self.option("  -v")
        self.assertTrue(row.startswith("  -v --verbose "))
        self.assertTrue(row.endswith("print every step"))

    def testValueRow(self):
        row = self.option("  -o")
        self.assertTrue(row.startswith("  -o<val> --out=<val>, /out:<val> "))
        self.assertTrue(row.endswith("set output file"))

    def testLongOnlyRow(self):
        row = self.option("  --debug")
        self.assertTrue(row.startswith("  --debug, /debug "))

    def testDescriptionsAreAligned(self):
        columns = {self.option(prefix).index(descr) for prefix, descr in (
            ("  -v", "print every step"),
            ("  -o", "set output file"),
            ("  --debug", "debug mode"),
        )}
        self.assertEqual(len(columns), 1)

    def testRegistrationOrder(self):
        rows = [line for line in self.lines() if line.startswith("  ")]
        self.assertEqual([row.split()[0] for row in rows], ["-v", "-o<val>", "--debug,"])

    def testMultipleShortNames(self):
        parser = OptionParser("tool", colorful=False)
        parser.on("-I?", "-A?", "--include=?", descr="include path", callback=print)
        self.assertIn("[-I<val> -A<val>]", format_help(parser).splitlines()[0])

    def testTrailingNewline(self):
        self.assertTrue(format_help(self.parser).endswith("\n"))
        self.assertEqual(self.parser.help(), format_help(self.parser))


class TestBannerAndTail(TestCase):

    def setUp(self):
        self.parser = OptionParser("tool", colorful=False)
        self.parser.on("-v", descr="verbose", callback=lambda: None)

    def testBannerComesFirst(self):
        self.parser.banner.write("tool 1.0, a demo\n")
        lines = format_help(self.parser).splitlines()
        self.assertEqual(lines[0], "tool 1.0, a demo")
        self.assertTrue(lines[1].startswith("usage: tool"))

    def testTailComesLast(self):
        self.parser.tail.write("report bugs to nobody\n")
        lines = format_help(self.parser).splitlines()
        self.assertEqual(lines[-1], "report bugs to nobody")
        self.assertEqual(lines[-2], "")

    def testEmptyParser(self):
        parser = OptionParser("bare", colorful=False)
        self.assertEqual(format_help(parser), "usage: bare <args ...>\n")


class TestRichEntryPoints(TestCase):

    def setUp(self):
        self.parser = OptionParser("tool", fancy=True)
        self.parser.on("-v", descr="verbose", callback=lambda: None)

    def testFancyRendersPanel(self):
        self.assertIsInstance(render(self.parser), Panel)

    def testOverridesParserSettings(self):
        self.assertIsInstance(render(self.parser, fancy=False), Group)

    def testPlainTextIgnoresFancy(self):
        self.assertTrue(format_help(self.parser).startswith("usage: tool"))

    def testPrintHelpToFile(self):
        buffer = io.StringIO()
        self.parser.print_help(buffer)
        self.assertIn("usage: tool [-v] <args ...>", buffer.getvalue())


if __name__ == "__main__":
    unittest.main()
