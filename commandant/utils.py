"""
Commandant utilities shared by the metadata, model, parser and dispatcher layers.

Overview
- Unset: sentinel for "argument not given", distinct from None. Markers and
  @command() use it so that None stays available as a user value.
- coalesce(value, default): replace Unset (and only Unset) by a default.
- mirror(name): read-only property over "_{name}", handing out immutable views
  of containers.
- IntrospectableType: metaclass of the markers, nodes and parse results; it adds
  __typename__ (used in validation messages), the mirrored properties listed in
  __introspectable__, and __repr__/__rich_repr__.
- kebabize(name) / ordinal(number): naming helpers for derived option and command
  names and for position-first messages.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> kebabize("dry_run"), kebabize("BuildCommand")
    ('dry-run', 'build-command')
    >>> ordinal(2)
    'second'
"""
import functools
import re
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel (a falsey singleton that cannot be subclassed).

    Supports PEP 604 unions so that ``isinstance(value, str | Unset)`` reads like
    the annotation it checks.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    coalesce(Unset, d) -> d; any other value (None, 0, "" included) is returned as-is.
    """
    return default if object is Unset else object


def _freeze(object):
    # Read-only views: mappings are proxied, sets and lists are copied.
    match object:
        case Mapping():
            return MappingProxyType(object)
        case Set():
            return frozenset(object)
        case str() | tuple():
            return object
        case Sequence():
            return tuple(object)
    return object


def mirror(name, /):
    """
    Read-only property exposing the private attribute "_{name}".
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _freeze(getattr(self, "_" + name))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


class IntrospectableType(type):
    """
    Metaclass for commandant's metadata-carrying types.

    Class attributes read by the metaclass
    - __introspectable__: names exposed as read-only properties over "_{name}".
    - __displayable__: names shown by __repr__/__rich_repr__ (default: all of
      __introspectable__).

    Added to every class
    - __typename__: the class name split on case boundaries ("HelpOption" ->
      "help-option"), used in error messages.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        namespace = dict(namespace)
        namespace["__typename__"] = re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()
        for field in namespace.get("__introspectable__", ()):
            namespace[field] = mirror(field)
        self = super().__new__(cls, name, bases, namespace)

        def __rich_repr__(self):
            for field in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield field, getattr(self, field)

        def __repr__(self):
            fields = ", ".join(f"{field}={value!r}" for field, value in self.__rich_repr__())
            return f"{type(self).__typename__}({fields})"

        self.__rich_repr__ = __rich_repr__
        self.__repr__ = __repr__
        return self


@functools.cache
def kebabize(name, /):
    """
    Lowercase, hyphen-separated form of an identifier.

    - kebabize("dry_run")       -> "dry-run"
    - kebabize("BuildCommand")  -> "build-command"
    - kebabize("HTTPServer")    -> "http-server"
    """
    if not isinstance(name, str):
        raise TypeError("kebabize() argument must be a string")
    name = re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", name.strip("_"))
    return re.sub(r"_+", "-", name).lower()


_ORDINALS = (
    "first", "second", "third", "fourth", "fifth",
    "sixth", "seventh", "eighth", "ninth", "tenth",
)


@functools.cache
def ordinal(number, /):
    """
    Ordinal label of a 1-based position: words up to "tenth", then "11th", "21st", ...
    """
    if 1 <= number <= len(_ORDINALS):
        return _ORDINALS[number - 1]
    if 10 < number % 100 < 20:
        return f"{number}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


__all__ = (
    # Functions
    "coalesce",
    "mirror",
    "kebabize",
    "ordinal",

    # Types
    "UnsetType",
    "IntrospectableType",

    # Constants
    "Unset",
)
