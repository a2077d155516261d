"""
Commandant faults (configuration and parsing errors) and their rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault. Codes are
  grouped by domain to keep logs and searches predictable.
- CommandException: base type carrying message + read-only options; supports
  copy.replace() and renders itself through rich (__rich__).
- ConfigurationError family: programmer mistakes found while building the
  command model (duplicate names, bad argument order, missing entry point, ...).
  These propagate to the host untouched.
- ParsingError family: user mistakes found while parsing the argument vector.
  The dispatcher renders them and maps them to the validation exit code.

Rendering contract (parsing errors)
- First line: the human-readable message.
- When a suggestion exists: a blank line, "Did you mean this?", and the
  suggested name indented by four spaces.

Messages
- Position-first where a position is known ("... at second position"), lowercased
  tone, single sentence.
"""
import functools
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .suggestions import suggest
from .utils import Unset, ordinal


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    groups
    - configuration (100xx)
      • DUPLICATE_OPTION_NAME, INVALID_ARGUMENT_ORDER, DUPLICATE_COMMAND_NAME,
        CYCLIC_COMMAND, MISSING_ENTRY_POINT, UNRESOLVABLE_PARAMETER, INVALID_CONTEXT
    - parsing (111xx)
      • UNRECOGNIZED_COMMAND, UNRECOGNIZED_OPTION, MISSING_REQUIRED_VALUE,
        INVALID_VALUE_FORMAT, ARITY_VIOLATION, AMBIGUOUS_OPTION

    The dispatcher logs parsing faults with their normalize()d code.
    """
    # --- configuration errors (10xxx) ---
    DUPLICATE_OPTION_NAME       = 10101
    INVALID_ARGUMENT_ORDER      = 10102
    DUPLICATE_COMMAND_NAME      = 10103
    CYCLIC_COMMAND              = 10104
    MISSING_ENTRY_POINT         = 10111
    UNRESOLVABLE_PARAMETER      = 10112
    INVALID_CONTEXT             = 10121

    # --- routing errors (111xx) ---
    UNRECOGNIZED_COMMAND        = 11101

    # --- option errors (111xx) ---
    UNRECOGNIZED_OPTION         = 11112
    AMBIGUOUS_OPTION            = 11113

    # --- value errors (111xx) ---
    MISSING_REQUIRED_VALUE      = 11121
    INVALID_VALUE_FORMAT        = 11122
    ARITY_VIOLATION             = 11123

    def normalize(self):
        """
        label of this code: __main__.__codes__[self] when the host defines that
        mapping, the numeric value otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base class of every commandant fault.

    Attributes
    - message: str, the human-readable one-line description.
    - options: read-only mapping with the structured context of the fault
      (token, index, command, ...). Subclasses expose the relevant entries as
      properties.
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self._explicit = message is not Unset
        if message is Unset:
            message = self._describe(options)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def _describe(self, options):
        # Message built from the options when none is given.
        return Unset

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __rich__(self):
        return Text(str(self))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        # A generated message is rebuilt from the new options.
        message = self.message if self._explicit else Unset
        return type(self)(message, **{**self.options, **overrides})


class ConfigurationError(CommandException):
    """
    A declaration that cannot be turned into a valid command model.

    Raised while the model is built (or while the entry method is being wired),
    before any user token is examined. Never caught by the dispatcher.
    """


class DuplicateOptionNameError(ConfigurationError):
    code = FaultCode.DUPLICATE_OPTION_NAME


class InvalidArgumentOrderError(ConfigurationError):
    code = FaultCode.INVALID_ARGUMENT_ORDER


class DuplicateCommandNameError(ConfigurationError):
    code = FaultCode.DUPLICATE_COMMAND_NAME


class CyclicCommandError(ConfigurationError):
    code = FaultCode.CYCLIC_COMMAND


class MissingEntryPointError(ConfigurationError):
    code = FaultCode.MISSING_ENTRY_POINT


class UnresolvableParameterError(ConfigurationError):
    code = FaultCode.UNRESOLVABLE_PARAMETER


class InvalidContextError(ConfigurationError):
    code = FaultCode.INVALID_CONTEXT


def _at(index):
    return "" if index is None else f" at {ordinal(index)} position"


class ParsingError(CommandException):
    """
    Base class for faults caused by the argument vector.

    Common options
    - index: 1-based token position (or None when the fault is not tied to a token).
    - command: route of the command node that was active ("tool build").
    """

    @property
    def index(self):
        return self.options.get("index")

    @property
    def command(self):
        return self.options.get("command")

    @property
    def nearest(self):
        """
        Suggested replacement for the offending token (None by default).
        """
        return None

    def __rich__(self):
        lines = [Text(str(self))]
        if (nearest := self.nearest) is not None:
            lines.extend((Text(""), Text("Did you mean this?"), Text("    " + nearest)))
        return Group(*lines)


class _SuggestingError(ParsingError):
    """
    Shared plumbing for faults that carry (token, candidates) and can suggest.
    """

    def __init__(self, message=Unset, /, **options):
        options["candidates"] = tuple(options.get("candidates", ()))
        super().__init__(message, **options)

    @property
    def token(self):
        return self.options["token"]

    @property
    def candidates(self):
        return self.options["candidates"]

    @functools.cached_property
    def nearest(self):
        if not self.options.get("suggestions", True):
            return None
        return suggest(self.token, self.candidates)


class UnrecognizedCommandError(_SuggestingError):
    """
    A positional token that neither selects a subcommand nor fills an argument slot.
    """
    code = FaultCode.UNRECOGNIZED_COMMAND

    def _describe(self, options):
        return f"unrecognized command or argument {options['token']!r}{_at(options.get('index'))}"


class UnrecognizedOptionError(_SuggestingError):
    """
    An option-like token that matches no option of the active command.
    """
    code = FaultCode.UNRECOGNIZED_OPTION

    def _describe(self, options):
        return f"unrecognized option {options['token']!r}{_at(options.get('index'))}"


class MissingRequiredValueError(ParsingError):
    """
    A required option or argument received no value.
    """
    code = FaultCode.MISSING_REQUIRED_VALUE

    def _describe(self, options):
        return f"missing required value for {options.get('kind', 'option')} {options['name']!r}"

    @property
    def name(self):
        return self.options["name"]


class InvalidValueFormatError(ParsingError):
    """
    A raw value that could not be converted (or is not an allowed choice).
    """
    code = FaultCode.INVALID_VALUE_FORMAT

    def _describe(self, options):
        return (
            f"invalid value {options['raw']!r} for {options['name']!r}{_at(options.get('index'))}: "
            f"expected {options['target']}"
        )

    @property
    def name(self):
        return self.options["name"]

    @property
    def raw(self):
        return self.options["raw"]

    @property
    def target(self):
        return self.options["target"]


class ArityViolationError(ParsingError):
    """
    An option received a different number of values than its arity allows.
    """
    code = FaultCode.ARITY_VIOLATION

    def _describe(self, options):
        expected = {0: "no value", 1: "exactly one value"}.get(options["expected"], f"{options['expected']} values")
        actual = options["actual"] or "none"
        return f"option {options['name']!r}{_at(options.get('index'))} expects {expected} but received {actual}"

    @property
    def name(self):
        return self.options["name"]

    @property
    def expected(self):
        return self.options["expected"]

    @property
    def actual(self):
        return self.options["actual"]


class AmbiguousOptionError(ParsingError):
    """
    A clustered short-option token that splits into more than one valid sequence.
    """
    code = FaultCode.AMBIGUOUS_OPTION

    def __init__(self, message=Unset, /, **options):
        options["matches"] = tuple(map(tuple, options.get("matches", ())))
        super().__init__(message, **options)

    def _describe(self, options):
        readings = " | ".join(" ".join(match) for match in options["matches"])
        return f"ambiguous option {options['token']!r}{_at(options.get('index'))} could mean: {readings}"

    @property
    def token(self):
        return self.options["token"]

    @property
    def matches(self):
        return self.options["matches"]


__all__ = (
    "FaultCode",
    "CommandException",
    "ConfigurationError",
    "DuplicateOptionNameError",
    "InvalidArgumentOrderError",
    "DuplicateCommandNameError",
    "CyclicCommandError",
    "MissingEntryPointError",
    "UnresolvableParameterError",
    "InvalidContextError",
    "ParsingError",
    "UnrecognizedCommandError",
    "UnrecognizedOptionError",
    "MissingRequiredValueError",
    "InvalidValueFormatError",
    "ArityViolationError",
    "AmbiguousOptionError",
)
