"""
Commandant value parsers: turn raw token text into typed values.

A ValueParsers instance maps target types to converters. Lookup order for a
target type:
1. converters registered on the instance (custom parsers, inherited settings),
2. built-ins: str, int, float, bool, complex, pathlib paths, Enum subclasses,
3. the target itself when it is callable (e.g. ``type=lambda text: ...``).

Any failure (ValueError/TypeError from the converter, or a value outside the
declared choices) surfaces as a single InvalidValueFormatError naming the raw
text and the expected type.
"""
import enum
import pathlib
from types import MappingProxyType

from .faults import InvalidValueFormatError
from .utils import Unset, coalesce


_TRUTHY = frozenset({"true", "yes", "on", "1", "y"})
_FALSY = frozenset({"false", "no", "off", "0", "n"})


def parse_bool(text, /):
    """
    Accept the usual spellings of booleans, case-insensitively.
    """
    if (folded := text.strip().casefold()) in _TRUTHY:
        return True
    if folded in _FALSY:
        return False
    raise ValueError(f"invalid boolean literal {text!r}")


def parse_enum(target, text, /):
    """
    Resolve an Enum member by name (case-insensitive) or by value.
    """
    for member in target:
        if member.name.casefold() == text.casefold():
            return member
    for member in target:
        if str(member.value) == text:
            return member
    raise ValueError(f"{text!r} is not a member of {target.__name__}")


def describe(target, /):
    """
    Human label of a target type, used as 'expected ...' in messages.
    """
    if isinstance(target, type) and issubclass(target, enum.Enum):
        return "one of " + ", ".join(member.name.lower() for member in target)
    return getattr(target, "__name__", None) or repr(target)


_BUILTINS = MappingProxyType({
    str: str,
    int: int,
    float: float,
    complex: complex,
    bool: parse_bool,
    pathlib.Path: pathlib.Path,
    pathlib.PurePath: pathlib.PurePath,
})


class ValueParsers:
    """
    Registry of converters from raw text to typed values.

    Parameters
    - parsers: optional mapping of target type → callable(text) registered on top
      of the built-ins.
    - parent: optional ValueParsers consulted before the built-ins (subcommands
      inherit their parent's custom parsers).
    """

    def __init__(self, parsers=Unset, /, parent=Unset):
        self._parent = parent
        self._parsers = {}
        for target, parser in coalesce(parsers, {}).items():
            self.register(target, parser)

    def register(self, target, parser, /):
        if not callable(parser):
            raise TypeError("ValueParsers.register() second argument must be callable")
        self._parsers[target] = parser
        return parser

    def lookup(self, target, /):
        """
        Return the converter for target, or raise LookupError.
        """
        if (parser := self._parsers.get(target)) is not None:
            return parser
        if self._parent is not Unset:
            try:
                return self._parent.lookup(target)
            except LookupError:
                pass
        if (parser := _BUILTINS.get(target)) is not None:
            return parser
        if isinstance(target, type) and issubclass(target, enum.Enum):
            return lambda text: parse_enum(target, text)
        if callable(target):
            return target
        raise LookupError(f"no value parser for {target!r}")

    def convert(self, entry, raw, /, index=None, command=None):
        """
        Convert one raw value for the given option or argument entry.

        Raises
        - InvalidValueFormatError: conversion failed, or the value is not one of
          the entry's choices.
        """
        def fault():
            return InvalidValueFormatError(
                name=entry.name,
                raw=raw,
                target=describe(entry.type) if not entry.choices else "one of " + ", ".join(map(str, entry.choices)),
                index=index,
                command=command,
            )

        try:
            value = self.lookup(entry.type)(raw)
        except (ValueError, TypeError, LookupError, ArithmeticError):
            raise fault() from None
        if entry.choices and value not in entry.choices:
            raise fault()
        return value


__all__ = (
    "ValueParsers",
    "parse_bool",
    "parse_enum",
    "describe",
)
