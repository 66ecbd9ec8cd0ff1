"""
Callopt faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue
  (errors and warnings), grouped by domain.
- OptionException / OptionWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased and actionable way.
- trigger(): central entry point to surface any fault (raise, or print and exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- DeclarationError: raised while registering declarations.
  • DeclarationSyntaxError: a form matches none of the short/GNU/slash grammars.
  • DeclarationConsistencyError: forms of one declaration disagree on the value marker.
- ParseError: raised while dispatching arguments; parsing halts at the token.
  • UnknownOptionError: no declaration matches and the unknown policy did not suppress it.
  • ValueNeededError: a value-bearing option has no value available.
- ValueConversionError: a Value could not be converted to the requested type.
- Warnings: ShadowedOptionWarning (name declared twice), IgnoredValueWarning (--flag=value).

Integration
- The declarations and parser layers raise faults directly; they never exit.
- invoke() (see callopt.parser) catches OptionException and calls trigger(fault, shell=True).
"""
import inspect
import os.path
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - dispatch (1111x)
      • UNKNOWN_OPTION, VALUE_NEEDED
    - declarations (1120x)
      • DECLARATION_SYNTAX, DECLARATION_CONSISTENCY
    - values (1130x)
      • VALUE_CONVERSION
    - warnings (12xxx)
      • IGNORED_VALUE, SHADOWED_OPTION

    the host application can remap codes to friendlier labels through a
    __codes__ mapping in __main__ (see normalize()).
    """
    # --- dispatch errors (11xxx) ---
    UNKNOWN_OPTION          = 11111
    VALUE_NEEDED            = 11112

    # --- declaration errors (11xxx) ---
    DECLARATION_SYNTAX      = 11201
    DECLARATION_CONSISTENCY = 11202

    # --- value errors (11xxx) ---
    VALUE_CONVERSION        = 11301

    # --- warnings (12xxx) ---
    IGNORED_VALUE           = 12111
    SHADOWED_OPTION         = 12201

    def normalize(self):
        """
        return a host-normalized string for this code.

        when __main__ defines no __codes__ mapping the numeric value is used.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    build the rich renderable shared by exceptions and warnings.

    layout
    - header: [ prog — code | title ]
    - body: message, then "→ hint" when a hint is available.
    - fancy=True wraps everything in a panel titled with the header.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = text(getattr(main, "__prog__", options.get("prog") or "callopt"), styler("prog-name"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "-", styler("code")),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), styler("title")),
        " ]"
    )
    message = text(fault.message, styler("message"))
    parts = [message]
    if hint := options.get("hint"):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*parts), title=header, title_align="left")

    return Group(header, *parts)


class OptionException(Exception):
    """
    base type of every fault raised by callopt.

    attributes
    - message: the lowercased, position-first message.
    - options: read-only mapping with rendering/context keys (code, title, hint,
      token, index, declaration, prog, colorful, fancy, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #F2F2F2",
            "code": "bold #FF5F5F",  # red for errors
            "title": "bold #FF4D94",
            "message": "#D0D0D0",
            "hint-arrow": "dim #7EE787",
            "hint": "italic #7EE787",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DeclarationError(OptionException): ...
class DeclarationSyntaxError(DeclarationError): ...
class DeclarationConsistencyError(DeclarationError): ...

class ParseError(OptionException): ...
class UnknownOptionError(ParseError): ...
class ValueNeededError(ParseError): ...

class ValueConversionError(OptionException, ValueError): ...


def _stacklevel():
    """
    warnings.warn stacklevel of the first frame outside the callopt package,
    counted from the function calling warnings.warn.
    """
    package = os.path.dirname(os.path.abspath(__file__))
    frame, level = inspect.currentframe().f_back, 1
    while frame is not None and os.path.dirname(os.path.abspath(frame.f_code.co_filename)) == package:
        frame, level = frame.f_back, level + 1
    return level


class OptionWarning(ABC, Warning):
    """
    base type of every warning emitted by callopt.

    outside shell mode warnings go through warnings.warn (so filters and
    assertWarns work); in shell mode they are printed to stderr.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #F2F2F2",
            "code": "bold #FFD600",  # amber for warnings
            "title": "bold #FFC2E0",
            "message": "#D0D0D0",
            "hint-arrow": "dim #7EE787",
            "hint": "italic #7EE787",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel") or _stacklevel())
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ShadowedOptionWarning(OptionWarning): ...
class IgnoredValueWarning(OptionWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - with shell=True errors are printed and the process exits with status 1;
      otherwise errors are raised and warnings are emitted through warnings.warn.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode; when no entry exists None is returned.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "OptionException",
    "DeclarationError",
    "DeclarationSyntaxError",
    "DeclarationConsistencyError",
    "ParseError",
    "UnknownOptionError",
    "ValueNeededError",
    "ValueConversionError",
    "OptionWarning",
    "ShadowedOptionWarning",
    "IgnoredValueWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
