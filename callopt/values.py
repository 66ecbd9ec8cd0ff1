"""
Extracted option values.

A Value is the raw string an option received (from "--out=x", "-ox" or "-o x").
It *is* a str, so callbacks can use it directly, and it adds lossy typed
conversions that are only attempted on demand:

    >>> Value("42").integer()
    42
    >>> Value("0x1f").integer(0)
    31
    >>> Value("yes").boolean()
    True

Every conversion failure raises ValueConversionError, which is kept apart from
parse faults (it is also a ValueError).
"""
from .faults import FaultCode, ValueConversionError, getdoc

_TRUTHS = frozenset(("1", "true", "yes", "on", "y", "t"))
_FALSITIES = frozenset(("0", "false", "no", "off", "n", "f"))


class Value(str):
    """
    raw option value with on-demand conversions.

    attributes
    - option: the option token that produced the value (e.g. "--out" or "-o"),
      or None when the value was built by hand.
    """

    def __new__(cls, text, /, option=None):
        if not isinstance(text, str):
            raise TypeError("Value() argument must be a string")
        self = super().__new__(cls, text)
        self.option = option
        return self

    def __repr__(self):
        return "Value(%s)" % super().__repr__()

    def _fail(self, typename):
        subject = "value %r" % str(self) if self.option is None else "value %r of option %r" % (str(self), self.option)
        return ValueConversionError(
            "%s is not a valid %s" % (subject, typename),
            title="invalid value",
            code=FaultCode.VALUE_CONVERSION,
            hint="pass a %s (for example: %s)" % (typename, {
                "integer": "42", "number": "3.14", "boolean": "yes or no",
            }.get(typename, "a valid " + typename)),
            value=str(self),
            option=self.option,
            docs=getdoc(FaultCode.VALUE_CONVERSION),
        )

    def to(self, type, /):
        """
        convert with any callable taking a string.

        ValueError and TypeError raised by the converter become ValueConversionError.
        """
        if not callable(type):
            raise TypeError("to() argument must be callable")
        try:
            return type(str(self))
        except (ValueError, TypeError):
            raise self._fail(getattr(type, "__name__", "value")) from None

    def integer(self, base=10, /):
        try:
            return int(str(self).strip(), base)
        except ValueError:
            raise self._fail("integer") from None

    def number(self):
        try:
            return float(str(self).strip())
        except ValueError:
            raise self._fail("number") from None

    def boolean(self):
        if (lowered := str(self).strip().lower()) in _TRUTHS:
            return True
        if lowered in _FALSITIES:
            return False
        raise self._fail("boolean")


__all__ = (
    "Value",
)
