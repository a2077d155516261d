r"""
Commandant metadata markers: declare options and arguments as class attributes.

Overview
- Markers
  • Option: named value (or presence switch), e.g. ``name = Option("-n|--name <NAME>")``.
  • Argument: positional value, ordered by ``order`` or by declaration.
  • HelpOption / VersionOption: short-circuit switches (help and version output).
  • Remaining: receives unrecognized tokens when a command collects them.

- Resolution
  Markers are declared without knowing the member they are assigned to. When a
  command class is scanned, every marker is resolved against its member name and
  annotation (see Entry.__resolve__), producing a fresh, complete copy:
  • names derived from the member ("dry_run" → "--dry-run" / "-d"),
  • value type, arity and allowed values derived from the annotation
    (bool → switch, list[T] → many, T | None → T, Literal[...] → choices),
  • defaults filled in per arity (False / fresh empty list / None).

- Introspection & representation
  • IntrospectableType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Templates
- ``"-s|--long <VALUE>"``: parts separated by "|" or whitespace.
  • "--x" is a long name, "-x" a short name (several characters allowed, e.g. "-?").
  • "<X>" is the value placeholder; it becomes the metavar and rules out a switch
    (one value, or many when the annotation is a collection).

Validation highlights (raised on construction)
- Names must look like shell options and be unique within a marker.
- Arity must be one of Arity's values; arguments cannot be switches.
- 'type' must be callable; 'choices' reject duplicates; 'metavar' and 'choices'
  cannot be combined.

Quick example:
    >>> class Greet:
    ...     name: str = Option("-n|--name <NAME>", "who to greet", required=True)
    ...     loud: bool = Option(descr="shout it")
    ...     files: list[str] = Argument(0, descr="input files")
"""
import builtins
import copy
import enum
import re
import types
import typing
from collections.abc import Iterable, Set

from .utils import *


class Arity(enum.StrEnum):
    """
    How many values a member takes.

    - ZERO ("0"): presence-only switch.
    - ONE ("1"): exactly one value.
    - OPTIONAL ("?"): a value only when given inline ("--level=3"), otherwise the const.
    - MANY ("*"): any number of values, accumulated across occurrences.
    """
    ZERO = "0"
    ONE = "1"
    OPTIONAL = "?"
    MANY = "*"

    @classmethod
    def _missing_(cls, value):
        # Accept 0 and 1 as integers.
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.__members__.get({0: "ZERO", 1: "ONE"}.get(value, ""))
        return None


class Kind(enum.StrEnum):
    OPTION = "option"
    ARGUMENT = "argument"
    HELP = "help"
    VERSION = "version"
    REMAINING = "remaining"


_SHORT = re.compile(r"-[^\s\-=:|<>][^\s=:|<>]*")
_LONG = re.compile(r"--[^\W_][\w-]*")


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by every marker.

    - descr: Unset | str (non-empty after trimming); Unset becomes None.
    - hidden: coerced to bool.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)
    metadata["hidden"] = bool(metadata["hidden"])


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: parse the template and the short/long overrides of option-like markers.

    Template grammar
    - parts separated by "|" or whitespace
    - "--name" → long name, "-n" → short name, "<VALUE>" → metavar

    Overrides
    - short/long: Unset (derive later from the member), False (disable), or a
      name with or without leading dashes ("n" / "-n", "name" / "--name").

    Effects on metadata
    - 'shorts' and 'longs': tuples (None when still to be derived).
    - 'metavar': filled from the template placeholder when not given explicitly.
    """
    shorts, longs = None, None

    if (template := metadata.pop("template")) is not Unset:
        if not isinstance(template, str):
            raise TypeError(f"{cls.__typename__} 'template' must be a string")
        elif not template.strip():
            raise ValueError(f"{cls.__typename__} 'template' cannot be empty")

        shorts, longs = [], []
        for part in filter(None, re.split(r"[\s|]+", template.strip())):
            if re.fullmatch(r"<[^<>\s]+>", part):
                if metadata["metavar"] is not Unset and metadata["metavar"] != part[1:-1]:
                    raise ValueError(f"{cls.__typename__} template placeholder conflicts with 'metavar'")
                metadata["metavar"] = part[1:-1]
                metadata["placeholder"] = True
            elif _LONG.fullmatch(part):
                longs.append(part)
            elif _SHORT.fullmatch(part):
                shorts.append(part)
            else:
                raise ValueError(f"{cls.__typename__} template part {part!r} is not a valid option name")
        if not shorts and not longs:
            raise ValueError(f"{cls.__typename__} template must declare at least one name")

    for key, prefix, pattern in (("short", "-", _SHORT), ("long", "--", _LONG)):
        if (value := metadata.pop(key)) is Unset:
            continue
        if value is False:
            names = []
        elif isinstance(value, str) and (value := value.strip()):
            value = value if value.startswith(prefix) else prefix + value.lstrip("-")
            if not pattern.fullmatch(value):
                raise ValueError(f"{cls.__typename__} {key} name {value!r} is not a valid option name")
            names = [value]
        else:
            raise TypeError(f"{cls.__typename__} '{key}' must be a non-empty string or False")
        # An explicit name goes first; False drops every name of that kind.
        if key == "short":
            shorts = names and names + [name for name in shorts or () if name not in names]
        else:
            longs = names and names + [name for name in longs or () if name not in names]

    for names in (shorts, longs):
        if names is not None and len(set(names)) != len(names):
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")

    metadata["shorts"] = None if shorts is None else tuple(shorts)
    metadata["longs"] = None if longs is None else tuple(longs)


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate value-related metadata (type, arity, choices, metavar).
    """
    if (type := metadata["type"]) is not Unset and not callable(type):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")

    if (arity := metadata["arity"]) is not Unset:
        try:
            metadata["arity"] = Arity(arity)
        except ValueError:
            raise ValueError(f"{cls.__typename__} 'arity' must be one of '0', '1', '?', or '*'") from None

    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = metavar

    if not isinstance(choices := metadata["choices"], Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be a non-string iterable")
    if not isinstance(choices, Set):
        sanitized = []
        for choice in choices:
            if choice in sanitized:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        choices = sanitized
    metadata["choices"] = tuple(choices)

    # Either a generic label or the concrete choices, never both.
    if metadata["choices"] and metavar is not Unset and not metadata.get("placeholder"):
        raise TypeError(f"{cls.__typename__} cannot have both 'metavar' and 'choices'")

    metadata["required"] = bool(metadata["required"])


_CONTAINERS = {list: list, tuple: tuple, set: set, frozenset: frozenset}


def _introspect(annotation, /):
    """
    Internal: read (type, arity, container, choices) hints out of an annotation.

    - bool               → (bool, ZERO, Unset, ())
    - list[T] / tuple[T, ...] / set[T] / Sequence[T] → (T, MANY, container, ...)
    - T | None           → hints of T
    - Literal["a", "b"]  → (str, Unset, Unset, ("a", "b"))
    - any other class    → (class, Unset, Unset, ())
    - Unset / unknown    → (Unset, Unset, Unset, ())
    """
    if annotation is Unset or annotation is typing.Any:
        return Unset, Unset, Unset, ()

    origin, args = typing.get_origin(annotation), typing.get_args(annotation)

    if origin is typing.Annotated:
        return _introspect(args[0])
    if origin in (typing.Union, types.UnionType):
        if len(members := [arg for arg in args if arg is not types.NoneType]) == 1:
            return _introspect(members[0])
        return Unset, Unset, Unset, ()
    if origin is typing.Literal:
        return type(args[0]), Unset, Unset, args
    if origin is not None and isinstance(origin, type) and issubclass(origin, Iterable) and not issubclass(origin, str):
        element = args[0] if args and args[0] is not Ellipsis else Unset
        type_, _, _, choices = _introspect(element)
        return type_, Arity.MANY, _CONTAINERS.get(origin, list), choices
    if annotation in _CONTAINERS:
        return Unset, Arity.MANY, _CONTAINERS[annotation], ()
    if annotation is bool:
        return bool, Arity.ZERO, Unset, ()
    if isinstance(annotation, type):
        return annotation, Unset, Unset, ()
    return Unset, Unset, Unset, ()


class Entry(metaclass=IntrospectableType):
    """
    Base class of every metadata marker.

    Markers are non-data descriptors: reading the member on the class returns
    the marker itself, reading it on an instance that was never bound returns a
    copy of the declared default.
    """
    kind = Unset
    _resolved = False

    __introspectable__ = (
        "member",
        "position",
        "descr",
        "hidden",
    )

    def __set_name__(self, owner, name):
        if self._member is Unset:
            self._member = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return copy.copy(self.default)

    @property
    def default(self):
        return None

    @property
    def resolved(self):
        """
        Whether names/types were already filled in for a concrete member.
        """
        return self._resolved

    def __resolve__(self, member, annotation=Unset, /, position=Unset):
        """
        Return a complete copy of this marker bound to the given member.

        Parameters
        - member: attribute name on the owning class.
        - annotation: the member's evaluated annotation (or Unset).
        - position: declaration index among the owner's markers.
        """
        if not isinstance(member, str) or not member.isidentifier():
            raise TypeError(f"{type(self).__typename__} member must be an identifier")
        self = copy.copy(self)
        self._member = member
        self._position = position
        self._resolved = True
        return self


class _Valued(Entry):
    """
    Shared resolution for markers that carry a typed value (options and arguments).
    """

    __introspectable__ = (
        "type",
        "arity",
        "container",
        "required",
        "choices",
        "metavar",
    )

    @property
    def default(self):
        if self._default is not Unset:
            return self._default
        match self._arity:
            case Arity.ZERO:
                return False
            case Arity.MANY:
                return coalesce(self._container, list)()
            case _:
                return None

    def __resolve__(self, member, annotation=Unset, /, position=Unset):
        self = super().__resolve__(member, annotation, position=position)
        hint, arity, container, choices = _introspect(annotation)

        self._arity = coalesce(self._arity, self._infer_arity(arity))
        self._type = bool if self._arity is Arity.ZERO else coalesce(self._type, coalesce(hint, str))
        self._choices = self._choices or tuple(choices)
        self._container = coalesce(container, list) if self._arity is Arity.MANY else None
        if self._metavar is Unset and self._arity is not Arity.ZERO:
            self._metavar = kebabize(member).upper()
        return self

    def _infer_arity(self, hint):
        return coalesce(hint, Arity.ONE)


class Option(_Valued):
    """
    Named option marker.

    Declaration
        name: str = Option("-n|--name <NAME>", "who to greet", required=True)
        verbose: bool = Option()                 # -v | --verbose switch
        level: int = Option(arity="?", const=1)  # --level or --level=3
        tags: list[str] = Option(short=False)    # --tags a b --tags c

    Parameters
    - template: Unset | str, "-s|--long <VALUE>" (names derived from the member when Unset).
    - descr: Unset | str, short description for help.
    - short / long: Unset | str | False, override or disable one kind of name.
    - type: Unset | callable, element converter (defaults from the annotation, else str).
    - arity: Unset | Arity | "0" | "1" | "?" | "*" | 0 | 1.
    - required: bool, a value must be supplied.
    - default: value bound when the option is absent (per-arity default when Unset).
    - const: value bound for an OPTIONAL option given without a value (True when Unset).
    - choices: iterable of allowed (converted) values.
    - metavar: Unset | str, value label in help.
    - hidden: bool, suppress from help.
    """
    kind = Kind.OPTION

    __introspectable__ = (
        "shorts",
        "longs",
    )

    __displayable__ = (
        "member",
        "shorts",
        "longs",
        "type",
        "arity",
        "required",
        "default",
        "choices",
    )

    def __init__(
            self,
            template=Unset,
            /,
            descr=Unset,
            *,
            short=Unset,
            long=Unset,
            type=Unset,
            arity=Unset,
            required=False,
            default=Unset,
            const=Unset,
            choices=(),
            metavar=Unset,
            hidden=False,
    ):
        metadata = {
            "template": template,
            "short": short,
            "long": long,
            "type": type,
            "arity": arity,
            "required": required,
            "choices": choices,
            "metavar": metavar,
            "descr": descr,
            "hidden": hidden,
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_named_metadata(builtins.type(self), metadata)
        _sanitize_valued_metadata(builtins.type(self), metadata)

        # A placeholder in the template implies a value, settled against the annotation.
        self._placeholder = metadata.pop("placeholder", False)

        self._member = Unset
        self._position = Unset
        self._default = default
        self._const = const
        self._container = Unset
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def const(self):
        return coalesce(self._const, True)

    @property
    def name(self):
        """
        Display name: the first long name, else the first short name.
        """
        return next(iter(self.longs or self.shorts or ()), None)

    @property
    def names(self):
        """
        Every name, short names first, in declaration order.
        """
        return (self.shorts or ()) + (self.longs or ())

    def _infer_arity(self, hint):
        # "<X>" rules out a switch; a collection annotation still makes it repeatable.
        if self._placeholder and hint is not Arity.MANY:
            return Arity.ONE
        return super()._infer_arity(hint)

    def __resolve__(self, member, annotation=Unset, /, position=Unset):
        self = super().__resolve__(member, annotation, position=position)
        if self._longs is None:
            self._longs = ("--" + kebabize(member),)
        if self._shorts is None:
            # Derived from the first long name (or the member when long names are disabled).
            source = next(iter(self._longs), "--" + kebabize(member))
            self._shorts = ("-" + source.lstrip("-")[0],)
        if not self._shorts and not self._longs:
            raise TypeError(f"{builtins.type(self).__typename__} {member!r} must keep at least one name")
        return self


class HelpOption(Option):
    """
    Switch that short-circuits parsing and prints the command's help.
    """
    kind = Kind.HELP

    def __init__(self, template="-?|-h|--help", /, descr="Show help information.", *, hidden=False):
        super().__init__(template, descr, type=bool, arity=Arity.ZERO, hidden=hidden)


class VersionOption(Option):
    """
    Switch that short-circuits parsing and prints the command's version.

    Parameters
    - version: Unset | str | callable returning str; when Unset the version given
      to @command(version=...) is used.
    """
    kind = Kind.VERSION

    __introspectable__ = (
        "version",
    )

    def __init__(self, template="--version", /, descr="Show version information.", *, version=Unset, hidden=False):
        if not isinstance(version, str | Unset) and not callable(version):
            raise TypeError(f"{builtins.type(self).__typename__} 'version' must be a string or a callable")
        super().__init__(template, descr, type=bool, arity=Arity.ZERO, hidden=hidden)
        self._version = version


class Argument(_Valued):
    """
    Positional argument marker.

    Declaration
        source: str = Argument(0, descr="file to read", required=True)
        rest: list[str] = Argument(1)            # variadic, must be last

    Parameters
    - order: Unset | int, explicit position (all arguments of a command must
      declare one, or none does and declaration order is used).
    - name: Unset | str, display name (the member name when Unset).
    - type / arity / required / default / choices / metavar / descr / hidden:
      as for Option; arity is "1" or "*" ("*" makes the argument variadic).
    """
    kind = Kind.ARGUMENT

    __introspectable__ = (
        "name",
        "order",
    )

    __displayable__ = (
        "member",
        "name",
        "order",
        "type",
        "arity",
        "required",
        "default",
        "choices",
    )

    def __init__(
            self,
            order=Unset,
            /,
            name=Unset,
            *,
            descr=Unset,
            type=Unset,
            arity=Unset,
            required=False,
            default=Unset,
            choices=(),
            metavar=Unset,
            hidden=False,
    ):
        if not isinstance(order, int | Unset) or isinstance(order, bool):
            raise TypeError(f"{builtins.type(self).__typename__} 'order' must be an integer")
        elif isinstance(order, int) and order < 0:
            raise ValueError(f"{builtins.type(self).__typename__} 'order' cannot be negative")
        if not isinstance(name, str | Unset):
            raise TypeError(f"{builtins.type(self).__typename__} 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError(f"{builtins.type(self).__typename__} 'name' cannot be empty")

        metadata = {
            "type": type,
            "arity": arity,
            "required": required,
            "choices": choices,
            "metavar": metavar,
            "descr": descr,
            "hidden": hidden,
        }
        _sanitize_metadata(builtins.type(self), metadata)
        _sanitize_valued_metadata(builtins.type(self), metadata)
        if metadata["arity"] in (Arity.ZERO, Arity.OPTIONAL):
            raise ValueError(f"{builtins.type(self).__typename__} 'arity' must be '1' or '*'")

        self._member = Unset
        self._position = Unset
        self._order = order
        self._name = name
        self._default = default
        self._const = Unset
        self._container = Unset
        for key, object in metadata.items():
            setattr(self, "_" + key, object)

    @property
    def variadic(self):
        return self._arity is Arity.MANY

    def _infer_arity(self, hint):
        # A bool annotation still takes a word ("true"/"false") when positional.
        return Arity.ONE if hint is Arity.ZERO else coalesce(hint, Arity.ONE)

    def __resolve__(self, member, annotation=Unset, /, position=Unset):
        self = super().__resolve__(member, annotation, position=position)
        self._name = coalesce(self._name, member)
        return self


class Remaining(Entry):
    """
    Member that receives the tokens a command collected instead of rejecting them.

    Only meaningful together with @command(unrecognized="collect"); the bound
    value is always a list of strings.
    """
    kind = Kind.REMAINING

    def __init__(self, descr=Unset, /):
        metadata = {"descr": descr, "hidden": True}
        _sanitize_metadata(builtins.type(self), metadata)
        self._member = Unset
        self._position = Unset
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def default(self):
        return []


__all__ = (
    # Enumerations
    "Arity",
    "Kind",

    # Markers
    "Entry",
    "Option",
    "HelpOption",
    "VersionOption",
    "Argument",
    "Remaining",
)
