"""
Help text for an OptionParser.

Layout
    <banner>
    usage: prog [-v] [-o<val>] <args ...>

    available options:
      -v --verbose                  print every step
      -o<val> --out=<val>, /out:<val>   set output file
    <tail>

- declarations render in registration order.
- short names of one declaration are joined with spaces; long names with ", ";
  GNU names render as --name[=<val>], slash names as /name[:<val>].
- a declaration without short names uses its long names in the usage line.

Palette keys (override through __styles__ in __main__)
- usage-label, program-name, section-label, option-name, metavar,
  description, banner, tail, panel-title
"""
import io
from collections import defaultdict

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .utils import Unset, coalesce

_METAVAR = "<val>"


def _styles():
    return defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "section-label": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "metavar": "bold #FFD600",
        "description": "#9CA3AF",
        "banner": "italic #A3A3A3",
        "tail": "#737373",
        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))


def render(parser, /, *, colorful=Unset, fancy=Unset):
    """
    Build the rich renderable for the parser's help.

    colorful/fancy default to the parser's own settings.
    """
    colorful = coalesce(colorful, parser.colorful)
    fancy = coalesce(fancy, parser.fancy)
    styles = _styles()

    def styler(style):
        return styles[style] if colorful else ""

    def name(prefix, label, separator="", needs_value=False):
        fragment = Text(prefix + label, styler("option-name"))
        if needs_value:
            fragment.append(separator + _METAVAR, styler("metavar"))
        return fragment

    def shorts(declaration):
        return Text(" ").join(
            name("-", short, "", declaration.needs_value) for short in declaration.shorts
        )

    def longs(declaration):
        return Text(", ").join(
            name("--", long.name, "=", declaration.needs_value) if long.gnu
            else name("/", long.name, ":", declaration.needs_value)
            for long in declaration.longs
        )

    renders = []

    if banner := parser.banner.getvalue().rstrip("\n"):
        renders.append(Text(banner, styler("banner")))

    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(parser.prog, styler("program-name"))
    for declaration in parser.declarations:
        usage.append(" [")
        usage.append_text(shorts(declaration) if declaration.shorts else longs(declaration))
        usage.append("]")
    usage.append(" <args ...>")
    renders.append(usage)

    if parser.declarations:
        renders.append(Text(""))
        renders.append(Text("available options:", styler("section-label")))
        table = Table.grid(padding=(0, 3))
        table.add_column(no_wrap=True)
        table.add_column()
        for declaration in parser.declarations:
            names = Text(" ").join(part for part in (shorts(declaration), longs(declaration)) if part)
            table.add_row(Text.assemble("  ", names), Text(declaration.descr, styler("description")))
        renders.append(table)

    if tail := parser.tail.getvalue().rstrip("\n"):
        renders.append(Text(""))
        renders.append(Text(tail, styler("tail")))

    if fancy:
        return Panel(Group(*renders), title=Text(parser.prog, styler("panel-title")), title_align="left")

    return Group(*renders)


def format_help(parser, /, *, width=100):
    """return the help as plain text (no colors, no panel chrome)."""
    console = Console(file=io.StringIO(), width=width, color_system=None, highlight=False)
    console.print(render(parser, colorful=False, fancy=False))
    return "\n".join(line.rstrip() for line in console.file.getvalue().splitlines()) + "\n"


def print_help(parser, /, *, file=None):
    """print the help through a rich console (stdout unless file is given)."""
    console = Console(file=file, highlight=False)
    console.print(render(parser))


__all__ = (
    "render",
    "format_help",
    "print_help",
)
