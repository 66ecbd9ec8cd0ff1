"""
Small helpers shared by the declarations, parser and help layers.

- Unset: "no argument given" marker, kept apart from None.
- coalesce(value, default): resolve Unset to a default.
- rename(callable, name) / @rename(name): give generated callables a readable name.
- mirror(attr): read-only property over self._attr, frozen for containers.

    >>> coalesce(Unset, "cc")
    'cc'
    >>> coalesce("", "cc")
    ''
"""
import builtins
import functools
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is exactly one instance. It is falsy, prints as "Unset", refuses
    subclasses and can take part in type unions (isinstance(x, str | Unset)).
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


def coalesce(object, default=None, /):
    """return default when object is Unset, otherwise object (None, 0 and "" included)."""
    return default if object is Unset else object


def rename(*parameters):
    """
    Name a callable.

    rename(function, name) updates __name__ and __qualname__ in place and
    returns the function; rename(name) returns a decorator doing the same.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("@rename() argument must be a string")
        return functools.partial(_rename, name=name)
    if len(parameters) == 2:
        function, name = parameters
        return _rename(function, name=name)
    raise TypeError("rename() takes 1 or 2 arguments (%d given)" % len(parameters))


def _rename(function, /, *, name):
    if not builtins.callable(function):
        raise TypeError("rename() needs a callable")
    if not isinstance(name, str):
        raise TypeError("rename() name must be a string")
    try:
        function.__name__ = function.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError("cannot rename %r" % function) from None
    return function


def _freeze(object):
    # lists become tuples, dicts read-only proxies, sets frozensets
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    read-only property returning a frozen view of self._<name>.

        class Declaration:
            shorts = mirror("shorts")  # backed by self._shorts
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(rename(getter, name))


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)
