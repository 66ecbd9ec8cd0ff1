"""
Callopt parser: walk raw arguments and dispatch declared options.

What this module provides
- OptionParser: owns a Registry of declarations, the early-stop predicates and
  the unknown-option policy, and turns a raw argument list into positionals
  while invoking option callbacks left to right.
- ParserState: the per-call cursor/positionals/stopped record handed to stop predicates.
- stop_after_positional: built-in predicate for pass-through (compiler-wrapper) tools.
- invoke(parser, arguments): shell-style runner; prints faults with rich and exits.

Dispatch rules (one argument at a time)
- early-stop predicates run first; once one returns True every remaining
  argument is recorded verbatim as a positional.
- a literal "--" stops option processing and is swallowed, unless a predicate
  already stopped the parse in the same step (then it is a plain positional).
- "--name" / "--name=value": long option, exact name match only.
- "-abc": bundled flags; if the first flag needs a value the rest of the token
  is that value ("-ofile.txt").
- "-o": a simple short option; a value-bearing one consumes the next argument
  unless that argument starts with "-".
- anything else (including "-" alone) is a positional.

Quick start
    from callopt import OptionParser

    parser = OptionParser("cc")
    parser.add_help()
    includes = []

    @parser.on("-v", "--verbose", descr="print every step")
    def verbose():
        ...

    parser.on("-I?", "--include=?", descr="add an include path", callback=includes.append)
    files = parser.parse(["-v", "-I", "lib", "main.c"])  # ["main.c"]
"""
import difflib
import functools
import io
import os.path
import shlex
import sys
from collections.abc import Iterable

from .declarations import Registry
from .faults import *
from .help import format_help, print_help
from .utils import *
from .values import Value


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class ParserState:
    """
    Mutable record of one parse call.

    attributes
    - arguments: tuple of the raw input (never modified during the call).
    - cursor: index of the argument being classified.
    - positionals: non-option arguments in the order they were met.
    - stopped: once True, every remaining argument is a positional.
    """

    def __init__(self, arguments, /):
        self.arguments = tuple(arguments)
        self.cursor = 0
        self.positionals = []
        self.stopped = False

    @property
    def current(self):
        """the argument under the cursor, or None once the input is exhausted."""
        if self.cursor < len(self.arguments):
            return self.arguments[self.cursor]
        return None

    @property
    def remaining(self):
        return self.arguments[self.cursor:]

    def __repr__(self):
        return "parser-state(cursor=%r, positionals=%r, stopped=%r)" % (
            self.cursor, self.positionals, self.stopped
        )


def stop_after_positional(state, /):
    """stop option processing as soon as one positional has been recorded."""
    return bool(state.positionals)


class OptionParser:
    """
    Callback-driven option parser.

    Parameters
    - prog: program name used in usage lines and fault headers
      (defaults to the basename of sys.argv[0]).
    - colorful: style help and faults with the package palette.
    - fancy: render help and faults inside rich panels.

    Attributes
    - registry: the Registry holding every declaration.
    - banner / tail: text buffers printed before / after the option summary.
    """

    def __init__(self, prog=Unset, /, *, colorful=True, fancy=False):
        if not isinstance(prog, str | Unset):
            raise TypeError("OptionParser() prog must be a string")
        if isinstance(prog, str) and not (prog := prog.strip()):
            raise ValueError("OptionParser() prog cannot be empty")
        self.prog = coalesce(prog, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "callopt")
        self.colorful = bool(colorful)
        self.fancy = bool(fancy)
        self.registry = Registry()
        self.banner = io.StringIO()
        self.tail = io.StringIO()
        self._stoppers = []
        self._unknown = None

    @property
    def declarations(self):
        return self.registry.declarations

    def register(self, forms, descr, callback, /):
        return self.registry.register(forms, descr, callback)

    def on(self, *forms, descr=None, callback=Unset):
        """
        Declare an option.

        Direct form
            parser.on("-o?", "--out=?", descr="output file", callback=handler)

        Decorator form
            @parser.on("-v", "--verbose", descr="more output")
            def verbose(): ...

        Both forms return the Declaration, which stays callable (it forwards to
        the callback) and can be extended with .alias(...).
        """
        if callback is not Unset:
            return self.register(forms, descr, callback)

        @rename("on")
        def wrapper(callback, /):
            return self.register(forms, descr, callback)

        return wrapper

    def on_unknown(self, predicate, /):
        """
        Install the unknown-option policy.

        The predicate receives the literal token ("-x", "--foo"); True keeps the
        UnknownOptionError, False drops the token and continues with the next argument.
        """
        if not callable(predicate):
            raise TypeError("on_unknown() argument must be callable")
        self._unknown = predicate
        return predicate

    def stop_if(self, predicate, /):
        """
        Register an early-stop predicate called with the ParserState before each argument.
        """
        if not callable(predicate):
            raise TypeError("stop_if() argument must be callable")
        self._stoppers.append(predicate)
        return predicate

    add_stop_predicate = stop_if

    def add_help(self, forms=("-h", "-?", "--help"), descr="show this help", /):
        """
        Opt in to a help option that prints the summary to stdout and exits with status 0.
        """
        @rename("help")
        def helper():
            self.print_help()
            sys.exit(0)

        return self.register(forms, descr, helper)

    def help(self):
        return format_help(self)

    def print_help(self, file=None):
        print_help(self, file=file)

    def _fault(self, cls, message, /, **options):
        return cls(message, prog=self.prog, colorful=self.colorful, fancy=self.fancy, **options)

    def _suggest(self, token):
        known = []
        for declaration in self.registry:
            known.extend("-" + short for short in declaration.shorts)
            known.extend("--" + long.name for long in declaration.longs)
        if suggestions := difflib.get_close_matches(token, known, 3):
            return "did you mean %r? run '%s --help' to see all options" % (suggestions[0], self.prog)
        return "run '%s --help' to see all available options" % self.prog

    def _unknown_option(self, state, token):
        if self._unknown is not None and not self._unknown(token):
            return
        raise self._fault(
            UnknownOptionError,
            "unknown option %r at %s position" % (token, _ordinal(state.cursor + 1)),
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            hint=self._suggest(token),
            token=token,
            index=state.cursor,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        )

    def _parse_long(self, state, argument):
        name, equals, value = argument[2:].partition("=")
        token = "--" + name

        if (match := self.registry.find_long(name)) is None:
            self._unknown_option(state, token)
        elif match.declaration.needs_value:
            if not equals:
                raise self._fault(
                    ValueNeededError,
                    "option %r at %s position requires a value" % (token, _ordinal(state.cursor + 1)),
                    title="value needed",
                    code=FaultCode.VALUE_NEEDED,
                    hint="use the inline form: %s=<value>" % token,
                    token=token,
                    index=state.cursor,
                    declaration=match.declaration,
                    docs=getdoc(FaultCode.VALUE_NEEDED),
                )
            match.declaration.callback(Value(value, option=token))
        else:
            if equals:
                trigger(self._fault(
                    IgnoredValueWarning,
                    "option %r at %s position takes no value; %r is ignored" % (
                        token, _ordinal(state.cursor + 1), value
                    ),
                    title="ignored value",
                    code=FaultCode.IGNORED_VALUE,
                    hint="remove everything from '=' (for example: %s)" % token,
                    token=token,
                    index=state.cursor,
                    declaration=match.declaration,
                    docs=getdoc(FaultCode.IGNORED_VALUE),
                ))
            match.declaration.callback()

        state.cursor += 1

    def _parse_bundle(self, state, argument):
        for offset, char in enumerate(argument[1:]):
            token = "-" + char
            if (match := self.registry.find_short(char)) is None:
                # the rest of the bundle is abandoned once the policy suppresses an unknown flag
                self._unknown_option(state, token)
                break
            if not match.declaration.needs_value:
                match.declaration.callback()
                continue
            if offset == 0:
                match.declaration.callback(Value(argument[2:], option=token))
                break
            raise self._fault(
                ValueNeededError,
                "option %r inside %r at %s position requires a value and cannot follow other flags" % (
                    token, argument, _ordinal(state.cursor + 1)
                ),
                title="value needed",
                code=FaultCode.VALUE_NEEDED,
                hint="move it to the front of the bundle or pass it alone (for example: %s <value>)" % token,
                token=token,
                index=state.cursor,
                declaration=match.declaration,
                docs=getdoc(FaultCode.VALUE_NEEDED),
            )

        state.cursor += 1

    def _parse_short(self, state, argument):
        if (match := self.registry.find_short(argument[1])) is None:
            self._unknown_option(state, argument)
            state.cursor += 1
            return

        if not match.declaration.needs_value:
            match.declaration.callback()
            state.cursor += 1
            return

        following = state.cursor + 1
        if following < len(state.arguments) and not state.arguments[following].startswith("-"):
            match.declaration.callback(Value(state.arguments[following], option=argument))
            state.cursor += 2
            return

        if following < len(state.arguments):
            message = "option %r at %s position requires a value, but %r looks like an option" % (
                argument, _ordinal(state.cursor + 1), state.arguments[following]
            )
            hint = "attach the value to the option (for example: %s%s)" % (argument, state.arguments[following])
        else:
            message = "option %r at %s position requires a value" % (argument, _ordinal(state.cursor + 1))
            hint = "pass the value after it (for example: %s <value> or %s<value>)" % (argument, argument)

        raise self._fault(
            ValueNeededError,
            message,
            title="value needed",
            code=FaultCode.VALUE_NEEDED,
            hint=hint,
            token=argument,
            index=state.cursor,
            declaration=match.declaration,
            docs=getdoc(FaultCode.VALUE_NEEDED),
        )

    @staticmethod
    def _tokenize(arguments, begin):
        if arguments is Unset:
            if not isinstance(begin, int) or begin < 0:
                raise ValueError("parse() begin must be a non-negative integer")
            return sys.argv[begin:]
        if isinstance(arguments, str):
            return shlex.split(arguments)
        if isinstance(arguments, Iterable):
            tokens = list(arguments)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() argument must be a string or an iterable of strings")
            return tokens
        raise TypeError("parse() argument must be a string or an iterable of strings")

    def parse(self, arguments=Unset, /, *, begin=1):
        """
        Classify every argument and return the positionals.

        Parameters
        - arguments:
          • Unset: read sys.argv[begin:].
          • str: shell-like string, split with shlex.split.
          • Iterable[str]: used as-is.
        - begin: start offset into sys.argv (only used when arguments is Unset).

        Raises
        - UnknownOptionError / ValueNeededError: at the offending token; no
          further arguments are processed.
        """
        state = ParserState(self._tokenize(arguments, begin))

        while (argument := state.current) is not None:
            if not state.stopped:
                for predicate in self._stoppers:
                    if predicate(state):
                        state.stopped = True
                        break
                else:
                    if argument == "--":
                        state.stopped = True
                        state.cursor += 1
                        continue

            if state.stopped:
                state.positionals.append(argument)
                state.cursor += 1
            elif argument.startswith("--"):
                self._parse_long(state, argument)
            elif argument.startswith("-") and len(argument) > 2:
                self._parse_bundle(state, argument)
            elif argument.startswith("-") and len(argument) == 2:
                self._parse_short(state, argument)
            else:
                state.positionals.append(argument)
                state.cursor += 1

        return list(state.positionals)

    def __repr__(self):
        return "option-parser(prog=%r, declarations=%d)" % (self.prog, len(self.registry))


def invoke(parser, arguments=Unset, /, *, begin=1):
    """
    Parse like a shell tool: on any fault print it to stderr and exit with status 1.

    Returns the positionals when parsing succeeds.
    """
    if not isinstance(parser, OptionParser):
        raise TypeError("invoke() first argument must be an option parser")
    try:
        return parser.parse(arguments, begin=begin)
    except OptionException as exception:
        trigger(exception, shell=True)


__all__ = (
    "OptionParser",
    "ParserState",
    "stop_after_positional",
    "invoke",
)
