"""
Commandant parser: one left-to-right pass over the argument vector.

The parser walks the tokens once, guided by a CommandModel, and produces a
ParseResult or raises a ParsingError. It performs no I/O and never touches the
user's classes.

Token classes
- "--" (when the command allows it): every later token is positional.
- option-like: starts with "-", is longer than one character and is not a
  negative number (unless an option is literally named like one).
  "--name=value" and "--name:value" carry an inline value.
- anything else is positional.

Options (by arity)
- ZERO: presence switch; an inline value is an arity violation; repeats are harmless.
- OPTIONAL: takes an inline value only, otherwise binds the option's const.
- ONE: takes the inline value or, failing that, the next token whatever it looks
  like; a missing value or a second occurrence is an arity violation.
- MANY: takes the inline value, then every following token up to the next
  option-like token, "--" or the end; values accumulate across occurrences.

Clusters
- "-abc" that is not itself an option name is read as several short options when
  the command allows clustering. The greedy reading (longest short name first,
  left to right) is tried first; a value-taking option swallows the rest of the
  token as its inline value, "=" and ":" included ("-oC:\\out"), one leading
  separator aside ("-vo=x"). When the greedy reading dead-ends, every reading
  is enumerated: a single one is used, several raise AmbiguousOptionError.
  A token with no reading is an unrecognized option, collected, stopped at or
  rejected like any other.

Positionals
- Before anything positional was bound on the current command, a token naming one
  of its subcommands selects it: parsing continues against the subcommand, whose
  options and arguments replace the parent's.
- Otherwise the token fills the next argument slot; a variadic argument absorbs
  every remaining positional token.
- Leftovers are rejected (UnrecognizedCommandError) or kept in
  ParseResult.remaining, depending on the command's "unrecognized" setting.

Short-circuits
- The help and version switches stop parsing immediately; required values are
  not checked and ParseResult.shortcut names the switch.

Completion
- Every required option and argument of every command on the selected path must
  have a value; the first missing one (root first, declaration order) raises
  MissingRequiredValueError.
"""
import logging
import re
from types import MappingProxyType

from .arguments import Arity, Kind
from .faults import (
    AmbiguousOptionError,
    ArityViolationError,
    MissingRequiredValueError,
    UnrecognizedCommandError,
    UnrecognizedOptionError,
)
from .utils import IntrospectableType

logger = logging.getLogger(__name__)

_NEGATIVE = re.compile(r"-(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")
_INLINE = re.compile(r"(-{1,2}[^=:]+)[=:](.*)", re.DOTALL)


def _rest(body, end):
    # "-vox", "-vo=x" and "-vo:x" all give -o the value "x".
    if (rest := body[end:])[:1] in ("=", ":"):
        return rest[1:]
    return rest or None


class ParseResult(metaclass=IntrospectableType):
    """
    Outcome of a successful parse.

    Read-only properties
    - options: mapping Option → value (lists become tuples)
    - arguments: mapping Argument → value, in declared order (root first)
    - path: names of the selected subcommands (empty for the root)
    - node: the selected CommandNode
    - remaining: collected unrecognized tokens
    - shortcut: the help/version switch that stopped parsing, or None
    """

    __introspectable__ = (
        "options",
        "arguments",
        "path",
        "node",
        "remaining",
        "shortcut",
    )

    __displayable__ = (
        "path",
        "options",
        "arguments",
        "remaining",
        "shortcut",
    )

    def __init__(self, options, arguments, path, node, remaining=(), shortcut=None):
        self._options = MappingProxyType(dict(options))
        self._arguments = MappingProxyType(dict(arguments))
        self._path = tuple(path)
        self._node = node
        self._remaining = tuple(remaining)
        self._shortcut = shortcut

    def __getitem__(self, member):
        """
        Value bound to the option or argument declared as member (KeyError if unbound).
        """
        for mapping in (self._options, self._arguments):
            for entry, value in mapping.items():
                if entry.member == member:
                    return value
        raise KeyError(member)

    def __contains__(self, member):
        try:
            self[member]
        except KeyError:
            return False
        return True


class Parser:
    """
    Single-use parser: holds the state of one pass over one token vector.

    Usage
        result = Parser(model).parse(["--name", "Ada"])
    """

    def __init__(self, model, /):
        self.model = model
        self._node = model.root
        self._path = []
        self._options = {}
        self._arguments = {}
        self._remaining = []
        self._slot = 0
        self._bound = False
        self._separated = False
        self._shortcut = None
        self._used = False

    # --- helpers -------------------------------------------------------------

    @property
    def _route(self):
        return self.model.route(self._node)

    def _optionlike(self, token):
        if len(token) < 2 or not token.startswith("-"):
            return False
        if _NEGATIVE.fullmatch(token) and self._node.lookup(token) is None:
            return False
        return True

    def _candidates(self):
        for option in self._node.options:
            if not option.hidden:
                yield from option.names

    def _short(self, name):
        # Only short names take part in clusters.
        if (option := self._node.lookup(name)) is None:
            return None
        key = self._node._key(name)
        return option if any(self._node._key(short) == key for short in option.shorts) else None

    def _convert(self, entry, raw, index):
        return self._node.parsers.convert(entry, raw, index=index, command=self._route)

    def _unrecognized(self, token, index):
        return UnrecognizedOptionError(
            token=token,
            candidates=tuple(self._candidates()),
            index=index,
            command=self._route,
            suggestions=self._node.settings.suggestions,
        )

    # --- options -------------------------------------------------------------

    def _apply(self, option, name, inline, index, tokens, cursor):
        """
        Bind one occurrence of option; return the new cursor.
        """
        def violation(expected, actual):
            return ArityViolationError(
                name=name,
                expected=expected,
                actual=actual,
                index=index,
                command=self._route,
            )

        if option.kind in (Kind.HELP, Kind.VERSION):
            if inline is not None:
                raise violation(0, 1)
            self._shortcut = option
            logger.debug("%s: %s short-circuits parsing at token %d", self._route, name, index)
            return cursor

        match option.arity:
            case Arity.ZERO:
                if inline is not None:
                    raise violation(0, 1)
                self._options[option] = True
            case Arity.OPTIONAL:
                if option in self._options:
                    raise violation(1, 2)
                self._options[option] = option.const if inline is None else self._convert(option, inline, index)
            case Arity.ONE:
                if option in self._options:
                    raise violation(1, 2)
                if inline is None:
                    if cursor >= len(tokens):
                        raise violation(1, 0)
                    inline, cursor = tokens[cursor], cursor + 1
                    index = cursor
                self._options[option] = self._convert(option, inline, index)
            case Arity.MANY:
                values = self._options.setdefault(option, [])
                if inline is not None:
                    values.append(self._convert(option, inline, index))
                while cursor < len(tokens) and not self._stops(tokens[cursor]):
                    values.append(self._convert(option, tokens[cursor], cursor + 1))
                    cursor += 1
        return cursor

    def _stops(self, token):
        if token == "--" and self._node.settings.separator:
            return True
        return self._optionlike(token)

    def _greedy(self, body):
        pieces, start = [], 0
        while start < len(body):
            for end in range(len(body), start, -1):
                if (option := self._short("-" + body[start:end])) is not None:
                    break
            else:
                return None
            if option.arity is not Arity.ZERO:
                pieces.append(("-" + body[start:end], _rest(body, end)))
                return pieces
            pieces.append(("-" + body[start:end], None))
            start = end
        return pieces

    def _readings(self, body):
        readings = []

        def walk(start, pieces):
            if start == len(body):
                readings.append(pieces)
                return
            for end in range(start + 1, len(body) + 1):
                if (option := self._short("-" + body[start:end])) is None:
                    continue
                if option.arity is not Arity.ZERO:
                    readings.append(pieces + [("-" + body[start:end], _rest(body, end))])
                else:
                    walk(end, pieces + [("-" + body[start:end], None)])

        walk(0, [])
        return readings

    def _read(self, token, body, index):
        # Pieces of the cluster body, or None when no reading exists.
        if (pieces := self._greedy(body)) is not None:
            return pieces
        match self._readings(body):
            case [reading]:
                return reading
            case []:
                return None
            case readings:
                raise AmbiguousOptionError(
                    token=token,
                    matches=[
                        [piece if value is None else f"{piece}={value}" for piece, value in reading]
                        for reading in readings
                    ],
                    index=index,
                    command=self._route,
                )

    def _cluster(self, token, name, inline, index, tokens, cursor):
        """
        Bind every piece of a short-option cluster; return the new cursor, or
        None when the token cannot be read as a cluster at all.
        """
        # A value-taking piece swallows the rest of the token, separators included.
        if (pieces := self._read(token, token[1:], index)) is None and inline is not None:
            if (pieces := self._read(token, name[1:], index)) is not None:
                pieces[-1] = (pieces[-1][0], inline)
        if pieces is None:
            return None
        logger.debug("%s: cluster %s read as %s", self._route, token, [piece for piece, _ in pieces])

        for piece, value in pieces:
            cursor = self._apply(self._short(piece), piece, value, index, tokens, cursor)
            if self._shortcut is not None:
                break
        return cursor

    def _reject(self, token, name, index, tokens, cursor):
        match self._node.settings.unrecognized:
            case "collect":
                self._remaining.append(token)
                return cursor
            case "stop":
                self._remaining.extend(tokens[index - 1:])
                return len(tokens)
        raise self._unrecognized(name, index)

    def _option(self, token, index, tokens, cursor):
        name, inline = token, None
        if (match := _INLINE.fullmatch(token)) is not None:
            name, inline = match[1], match[2]

        if (option := self._node.lookup(name)) is not None:
            return self._apply(option, name, inline, index, tokens, cursor)

        if not name.startswith("--") and len(name) > 2 and self._node.settings.cluster:
            if (position := self._cluster(token, name, inline, index, tokens, cursor)) is not None:
                return position
        return self._reject(token, name, index, tokens, cursor)

    # --- positionals ---------------------------------------------------------

    def _child(self, token):
        node = self._node
        if (child := node.children.get(token)) is not None:
            return child
        if not node.settings.case_sensitive:
            for name, child in node.children.items():
                if name.casefold() == token.casefold():
                    return child
        return None

    def _positional(self, token, index, tokens):
        node = self._node

        if not self._bound and not self._separated and (child := self._child(token)) is not None:
            self._node = child
            self._path.append(child.name)
            self._slot, self._bound = 0, False
            logger.debug("%s: selected subcommand %s", self.model.route(node), child.name)
            return None

        if self._slot < len(arguments := node.arguments):
            argument = arguments[self._slot]
            value = self._convert(argument, token, index)
            if argument.arity is Arity.MANY:
                self._arguments.setdefault(argument, []).append(value)
            else:
                self._arguments[argument] = value
                self._slot += 1
            self._bound = True
            return None

        match node.settings.unrecognized:
            case "collect":
                self._remaining.append(token)
                return None
            case "stop":
                self._remaining.extend(tokens[index - 1:])
                return len(tokens)
        raise UnrecognizedCommandError(
            token=token,
            candidates=tuple(node.children),
            index=index,
            command=self._route,
            suggestions=node.settings.suggestions,
        )

    # --- driver --------------------------------------------------------------

    def _check(self):
        for node in self.model.path(self._node):
            entries = sorted((*node.options, *node.arguments), key=lambda entry: entry.position)
            for entry in entries:
                if not entry.required:
                    continue
                if entry.kind is Kind.ARGUMENT:
                    value = self._arguments.get(entry)
                else:
                    value = self._options.get(entry)
                if value is None or (entry.arity is Arity.MANY and not value):
                    raise MissingRequiredValueError(
                        name=entry.name,
                        kind="argument" if entry.kind is Kind.ARGUMENT else "option",
                        command=self.model.route(node),
                    )

    def _result(self):
        def frozen(value):
            return tuple(value) if isinstance(value, list) else value

        arguments = {
            argument: frozen(self._arguments[argument])
            for node in self.model.path(self._node)
            for argument in node.arguments
            if argument in self._arguments
        }
        return ParseResult(
            {option: frozen(value) for option, value in self._options.items()},
            arguments,
            self._path,
            self._node,
            self._remaining,
            self._shortcut,
        )

    def parse(self, tokens, /):
        """
        Parse tokens against the model.

        Raises
        - ParsingError subclasses (see commandant.faults).
        """
        if self._used:
            raise RuntimeError("Parser instances are single-use")
        self._used = True

        tokens = tuple(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() tokens must be strings")

        cursor = 0
        while cursor < len(tokens):
            token = tokens[cursor]
            cursor += 1
            index = cursor

            if not self._separated and token == "--" and self._node.settings.separator:
                self._separated = True
                continue

            if not self._separated and self._optionlike(token):
                cursor = self._option(token, index, tokens, cursor)
                if self._shortcut is not None:
                    return self._result()
                continue

            if (jump := self._positional(token, index, tokens)) is not None:
                cursor = jump

        self._check()
        return self._result()


def parse(tokens, model, /):
    """
    Parse tokens against model and return a ParseResult.
    """
    return Parser(model).parse(tokens)


__all__ = (
    "ParseResult",
    "Parser",
    "parse",
)
