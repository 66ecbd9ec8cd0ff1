r"""
Callopt declarations: option syntax grammar, callbacks and the registry.

Overview
- Forms
  • parse_form(text) turns one option-syntax string into a Form.
  • Three grammars are accepted:
      short  "-" <char> ["?"]        e.g. "-v", "-o?", "-?" and "-??" (both named '?', no value)
      gnu    "--" <name> ["=?"]      e.g. "--verbose", "--out=?"
      slash  "/" <name> [":?"]       e.g. "/verbose", "/out:?", "/?"
    <char> is a letter, a digit, or one of '?', '!', '#'; a slash name starts with one.
  • The trailing marker means "needs exactly one value". It must differ from the
    name character, so a short option named '?' never takes a value.

- Callbacks
  • FlagCallback wraps a function called with no argument.
  • ValueCallback wraps a function called with the extracted Value.
  The shape is picked at registration time from the value marker, so a declaration
  never holds both; calling the wrong shape fails with TypeError.

- Declarations
  • Declaration: short names, long names (with style), needs_value, descr, callback.
  • Declaration.alias(*forms) adds more forms to the same callback.

- Registry
  • register(forms, descr, callback) validates every form and appends atomically.
  • find_short(char) / find_long(name) scan in registration order; first match wins.

Quick example:
    >>> registry = Registry()
    >>> out = registry.register(("-o?", "--out=?"), "set output file", print)
    >>> registry.find_long("out").declaration is out
    True
    >>> out.alias("/out:?").longs
    (LongName(name='out', gnu=True), LongName(name='out', gnu=False))
"""
import re
from collections.abc import Iterable
from typing import NamedTuple

from .faults import *
from .utils import *

_SHORT = re.compile(r"-(?P<name>[^\W_]|[?!#])(?P<marker>\?)?")
_GNU = re.compile(r"--(?P<name>[^\s=:]+)(?P<marker>=\?)?")
_SLASH = re.compile(r"/(?P<name>(?:[^\W_]|[?!#])[^\s=:]*)(?P<marker>:\?)?")

_SYNTAX_HINT = "use one of -x, -x?, --name, --name=?, /name or /name:?"


class Form(NamedTuple):
    """one parsed option-syntax string."""
    text: str
    kind: str  # "short", "gnu" or "slash"
    name: str
    wants_value: bool


class LongName(NamedTuple):
    name: str
    gnu: bool


class Match(NamedTuple):
    """result of a registry lookup."""
    index: int
    declaration: "Declaration"


def parse_form(text, /):
    """
    Parse one option-syntax string.

    Classification is by prefix: "--" and "/" select the long grammars, a single
    "-" selects the short grammar. A string that fits none of them raises
    DeclarationSyntaxError naming it.
    """
    if not isinstance(text, str):
        raise TypeError("option forms must be strings")

    if text.startswith("--"):
        kind, pattern = "gnu", _GNU
    elif text.startswith("/"):
        kind, pattern = "slash", _SLASH
    elif text.startswith("-"):
        kind, pattern = "short", _SHORT
    else:
        kind, pattern = None, None

    if pattern is None or not (match := pattern.fullmatch(text)):
        raise DeclarationSyntaxError(
            "unparseable option syntax %r" % text,
            title="bad option syntax",
            code=FaultCode.DECLARATION_SYNTAX,
            hint=_SYNTAX_HINT,
            form=text,
            docs=getdoc(FaultCode.DECLARATION_SYNTAX),
        )

    wants_value = match["marker"] is not None
    if kind == "short" and match["name"] == "?":
        wants_value = False

    return Form(text, kind, match["name"], wants_value)


def _check_consistency(forms, needs_value=Unset, /):
    """
    Ensure every form agrees on the value marker (and with needs_value, when given).

    Returns the agreed needs_value.
    """
    if needs_value is not Unset:
        for form in forms:
            if form.wants_value == needs_value:
                continue
            raise DeclarationConsistencyError(
                "option %r %s a value, but the declaration it extends %s" % (
                    form.text,
                    "requires" if form.wants_value else "does not take",
                    "does not take one" if form.wants_value else "requires one",
                ),
                title="inconsistent option forms",
                code=FaultCode.DECLARATION_CONSISTENCY,
                hint="declare aliases with the same value marker as the existing forms",
                form=form.text,
                docs=getdoc(FaultCode.DECLARATION_CONSISTENCY),
            )
        return needs_value

    wanting = [form for form in forms if form.wants_value]
    lacking = [form for form in forms if not form.wants_value]

    if wanting and lacking:
        raise DeclarationConsistencyError(
            "option %r requires a value, but %r does not" % (wanting[0].text, lacking[0].text),
            title="inconsistent option forms",
            code=FaultCode.DECLARATION_CONSISTENCY,
            hint="mark every form as value-bearing (-x?, --name=?, /name:?) or none of them",
            forms=tuple(form.text for form in forms),
            docs=getdoc(FaultCode.DECLARATION_CONSISTENCY),
        )

    return bool(wanting)


class Callback:
    """
    Base of the two callback shapes; never instantiated directly.

    The wrapped function is available as .function.
    """
    __slots__ = ("function",)
    needs_value = False

    def __init__(self, function, /):
        if type(self) is Callback:
            raise TypeError("Callback cannot be instantiated directly; use FlagCallback or ValueCallback")
        if not callable(function):
            raise TypeError("%s() argument must be callable" % type(self).__name__)
        self.function = function

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.function)

    @staticmethod
    def wrap(function, needs_value, /):
        """build the callback shape matching needs_value (callbacks pass through when they match)."""
        shape = ValueCallback if needs_value else FlagCallback
        if isinstance(function, Callback):
            if not isinstance(function, shape):
                raise TypeError("%s cannot serve a declaration that %s" % (
                    type(function).__name__,
                    "requires a value" if needs_value else "takes no value",
                ))
            return function
        return shape(function)


class FlagCallback(Callback):
    __slots__ = ()
    needs_value = False

    def __call__(self):
        return self.function()


class ValueCallback(Callback):
    __slots__ = ()
    needs_value = True

    def __call__(self, value, /):
        return self.function(value)


class Declaration:
    """
    One registered option.

    Read-only attributes
    - shorts: tuple of short option characters, in declaration order.
    - longs: tuple of LongName(name, gnu) pairs, in declaration order.
    - forms: tuple of the syntax strings as declared.
    - needs_value: whether exactly one value is required.
    - descr: free-text description (used by the help formatter only).
    - callback: FlagCallback or ValueCallback.
    - index: registration index inside the owning registry.
    """
    shorts = mirror("shorts")
    longs = mirror("longs")
    forms = mirror("forms")
    needs_value = mirror("needs_value")
    descr = mirror("descr")
    callback = mirror("callback")
    index = mirror("index")

    def __init__(self, forms, descr, callback, /, *, needs_value, index, registry=None):
        self._shorts = []
        self._longs = []
        self._forms = []
        self._needs_value = needs_value
        self._descr = descr
        self._callback = callback
        self._index = index
        self._registry = registry
        self._extend(forms)

    def _extend(self, forms):
        for form in forms:
            if form.kind == "short":
                if form.name not in self._shorts:
                    self._shorts.append(form.name)
            elif (name := LongName(form.name, form.kind == "gnu")) not in self._longs:
                self._longs.append(name)
            self._forms.append(form.text)

    def matches_short(self, char, /):
        return char in self._shorts

    def matches_long(self, name, /):
        return any(long.name == name for long in self._longs)

    def alias(self, *forms):
        """
        Add further syntax forms that trigger the same callback.

        The new forms must carry the same value marker as the declaration;
        on any failure the declaration is left untouched.
        """
        if not forms:
            raise DeclarationSyntaxError(
                "alias() needs at least one option form",
                title="missing option forms",
                code=FaultCode.DECLARATION_SYNTAX,
                hint=_SYNTAX_HINT,
                docs=getdoc(FaultCode.DECLARATION_SYNTAX),
            )
        parsed = [parse_form(form) for form in forms]
        _check_consistency(parsed, self._needs_value)
        if self._registry is not None:
            self._registry._warn_shadowed(parsed, self)
        self._extend(parsed)
        return self

    def __call__(self, *args):
        return self._callback(*args)

    def __repr__(self):
        return "declaration(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "forms", self.forms
        yield "needs_value", self._needs_value
        yield "descr", self._descr


class Registry:
    """
    Ordered store of declarations.

    Declarations are addressed by registration index; lookups return
    Match(index, declaration) or None and never raise.
    """

    def __init__(self):
        self._declarations = []

    declarations = mirror("declarations")

    def register(self, forms, descr, callback, /):
        """
        Validate forms, wrap the callback in its shape and append a Declaration.

        Raises DeclarationSyntaxError / DeclarationConsistencyError without
        touching the registry when any form is invalid.
        """
        if isinstance(forms, str):
            forms = (forms,)
        if not isinstance(forms, Iterable):
            raise TypeError("register() forms must be a string or an iterable of strings")
        if not (parsed := [parse_form(form) for form in forms]):
            raise DeclarationSyntaxError(
                "a declaration needs at least one option form",
                title="missing option forms",
                code=FaultCode.DECLARATION_SYNTAX,
                hint=_SYNTAX_HINT,
                docs=getdoc(FaultCode.DECLARATION_SYNTAX),
            )
        if descr is not None and not isinstance(descr, str):
            raise TypeError("register() description must be a string")

        needs_value = _check_consistency(parsed)
        declaration = Declaration(
            parsed,
            descr or "",
            Callback.wrap(callback, needs_value),
            needs_value=needs_value,
            index=len(self._declarations),
            registry=self,
        )
        self._warn_shadowed(parsed, declaration)
        self._declarations.append(declaration)
        return declaration

    def _warn_shadowed(self, forms, owner, /):
        for form in forms:
            if form.kind == "short":
                match = self.find_short(form.name)
            else:
                match = self.find_long(form.name)
            if match is None or match.declaration is owner:
                continue
            trigger(ShadowedOptionWarning(
                "option %r is already declared by %r and will never match" % (
                    form.text, match.declaration.forms[0]
                ),
                title="shadowed option",
                code=FaultCode.SHADOWED_OPTION,
                hint="pick another name or extend the existing declaration with alias()",
                form=form.text,
                index=match.index,
                docs=getdoc(FaultCode.SHADOWED_OPTION),
            ))

    def find_short(self, char, /):
        for index, declaration in enumerate(self._declarations):
            if declaration.matches_short(char):
                return Match(index, declaration)
        return None

    def find_long(self, name, /):
        for index, declaration in enumerate(self._declarations):
            if declaration.matches_long(name):
                return Match(index, declaration)
        return None

    def __iter__(self):
        return iter(tuple(self._declarations))

    def __len__(self):
        return len(self._declarations)

    def __getitem__(self, index, /):
        return self._declarations[index]


__all__ = (
    "Form",
    "LongName",
    "Match",
    "parse_form",
    "Callback",
    "FlagCallback",
    "ValueCallback",
    "Declaration",
    "Registry",
)
