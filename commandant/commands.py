"""
Commandant command layer: declare commands and run them.

What this module provides
- command(...): class decorator attaching command-level metadata (name,
  description, version, subcommands, parsing settings, value parsers).
- execute(app, args) / execute_async(app, args): the dispatcher. It validates the
  execution context, builds the command model, parses the arguments and either
  runs the selected command, prints help/version text, or reports the parsing
  error.

Exit codes
- SUCCESS (0): help or version was shown, or the entry method returned nothing.
- VALIDATION_ERROR (1): the arguments could not be parsed, or a command group
  was run without selecting one of its subcommands.
- Any int returned by the entry method.

Quick start
    from commandant import Option, Argument, command, execute

    @command(version="1.0", descr="Print a greeting.")
    class Greet:
        name: str = Option(required=True)
        times: int = Option("-t|--times <N>", default=1)

        def on_execute(self, console):
            for _ in range(self.times):
                print(f"hello {self.name}", file=console.out)

    if __name__ == "__main__":
        raise SystemExit(execute(Greet))

Configuration errors (bad declarations) are never caught here: they propagate
to the caller before any argument is examined.
"""
import asyncio
import logging
import os
import shlex
import sys
from collections.abc import Iterable, Mapping

from .arguments import HelpOption
from .binding import Async, Binder, exit_code
from .console import Console, ExecutionContext, PhysicalConsole
from .conventions import ModelBuilder
from .faults import InvalidContextError, ParsingError
from .parser import parse
from .registry import CommandSpec
from .rendering import render_fault, render_help, render_shortcut
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

SUCCESS = 0
VALIDATION_ERROR = 1

_UNRECOGNIZED = ("throw", "collect", "stop")


def _sanitize_strings(options):
    for name in ("name", "descr", "usage", "epilog"):
        if not isinstance(value := options[name], str | Unset):
            raise TypeError(f"@command() {name!r} must be a string")
        elif isinstance(value, str) and not (value := value.strip()):
            raise ValueError(f"@command() {name!r} cannot be empty")
        options[name] = value
    if isinstance(name := options["name"], str) and len(name.split()) != 1:
        raise ValueError("@command() 'name' cannot contain whitespace")


def _sanitize_version(options):
    version = options["version"]
    if not isinstance(version, str | Unset) and not callable(version):
        raise TypeError("@command() 'version' must be a string or a callable")
    elif isinstance(version, str) and not (version := version.strip()):
        raise ValueError("@command() 'version' cannot be empty")
    options["version"] = version


def _sanitize_switches(options):
    if not isinstance(help := options["help"], bool | str | Unset):
        raise TypeError("@command() 'help' must be a boolean or an option template")
    if isinstance(help, str):
        # Validates the template.
        HelpOption(help)
    for name in ("version_option", "cluster", "separator", "suggestions", "case_sensitive"):
        if not isinstance(options[name], bool | Unset):
            raise TypeError(f"@command() {name!r} must be a boolean")
    if options["unrecognized"] is not Unset and options["unrecognized"] not in _UNRECOGNIZED:
        raise ValueError(f"@command() 'unrecognized' must be one of {', '.join(map(repr, _UNRECOGNIZED))}")


def _sanitize_collections(options):
    if (subcommands := options["subcommands"]) is not Unset:
        if isinstance(subcommands, str | type) or not isinstance(subcommands, Iterable):
            raise TypeError("@command() 'subcommands' must be an iterable of classes")
        subcommands = tuple(subcommands)
        for subcommand in subcommands:
            if not isinstance(subcommand, type):
                raise TypeError("@command() 'subcommands' must be an iterable of classes")
        options["subcommands"] = subcommands

    if (parsers := options["parsers"]) is not Unset:
        if not isinstance(parsers, Mapping):
            raise TypeError("@command() 'parsers' must be a mapping of types to callables")
        for target, parser in parsers.items():
            if not isinstance(target, type) or not callable(parser):
                raise TypeError("@command() 'parsers' must be a mapping of types to callables")
        options["parsers"] = dict(parsers)


def command(
        source=Unset,
        /,
        *,
        name=Unset,
        descr=Unset,
        usage=Unset,
        epilog=Unset,
        version=Unset,
        subcommands=Unset,
        help=Unset,
        version_option=Unset,
        cluster=Unset,
        separator=Unset,
        unrecognized=Unset,
        suggestions=Unset,
        case_sensitive=Unset,
        parsers=Unset,
):
    """
    Attach command-level metadata to a class.

    Invocation modes
    - @command: bare decorator, every field derived.
    - @command("name", ...): the first argument is the command name.
    - @command(name="name", ...): keyword form.

    Parameters
    - name: command name (default: the class name, kebab-cased, without a
      trailing "-command").
    - descr / usage / epilog: help text pieces (descr defaults to the first
      paragraph of the class docstring).
    - version: str or callable returning one; enables the implicit --version.
    - subcommands: iterable of command classes.
    - help: False to drop the implicit help switch, or a template replacing
      "-?|-h|--help".
    - version_option: False to drop the implicit --version.
    - cluster, separator, unrecognized, suggestions, case_sensitive: parsing
      settings, inherited by subcommands that leave them unset.
    - parsers: mapping type -> callable(str) used to convert values of that type,
      inherited by subcommands.

    Returns
    - the class itself (with __command__ set), or a decorator.
    """
    if isinstance(source, str):
        if name is not Unset:
            raise TypeError("@command() got the name twice")
        source, name = Unset, source

    options = dict(
        name=name,
        descr=descr,
        usage=usage,
        epilog=epilog,
        version=version,
        subcommands=subcommands,
        help=help,
        version_option=version_option,
        cluster=cluster,
        separator=separator,
        unrecognized=unrecognized,
        suggestions=suggestions,
        case_sensitive=case_sensitive,
        parsers=parsers,
    )
    _sanitize_strings(options)
    _sanitize_version(options)
    _sanitize_switches(options)
    _sanitize_collections(options)
    spec = CommandSpec(**options)

    def wrapper(owner, /):
        if not isinstance(owner, type):
            raise TypeError("@command() must be applied to a class")
        owner.__command__ = spec
        return owner

    return wrapper(source) if source is not Unset else wrapper


def _tokens(args):
    if args is Unset:
        return sys.argv[1:]
    elif isinstance(args, str):
        return shlex.split(args)
    elif isinstance(args, Iterable):
        tokens = list(args)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("execute() arguments must be a string or an iterable of strings")
        return tokens
    raise TypeError("execute() arguments must be a string or an iterable of strings")


def _context(args, console, context):
    if context is Unset:
        context = ExecutionContext(_tokens(args), os.getcwd(), coalesce(console, PhysicalConsole()))
    elif args is not Unset or console is not Unset:
        raise TypeError("execute() takes either a context or arguments and a console, not both")
    elif not isinstance(context, ExecutionContext):
        raise TypeError("execute() 'context' must be an ExecutionContext")

    for field in ExecutionContext.__slots__:
        if getattr(context, field) is None:
            raise InvalidContextError(f"execution context is missing its {field.replace('_', ' ')}", field=field)
    if not isinstance(context.console, Console):
        raise InvalidContextError("execution context console must be a Console", field="console")
    if any(not isinstance(token, str) for token in context.arguments):
        raise InvalidContextError("execution context arguments must be strings", field="arguments")
    return context


def _dispatch(app, args, console, context, factory, services):
    """
    Run every step up to (not including) the entry method.

    Returns
    - an exit code when the run ends without invoking anything;
    - otherwise a Binder holding the bound instances.
    """
    if not isinstance(app, type):
        raise TypeError("execute() first argument must be a command class")
    context = _context(args, console, context)
    model = ModelBuilder().build(app)

    try:
        result = parse(context.arguments, model)
    except ParsingError as fault:
        logger.info("%s: [%s] %s", model.route(model.root), fault.code.normalize(), fault)
        render_fault(fault, context.console.error)
        return VALIDATION_ERROR

    if result.shortcut is not None:
        render_shortcut(model, result, context.console.out)
        return SUCCESS

    if result.node.entry is None:
        logger.info("%s: no subcommand selected", model.route(result.node))
        render_help(model, result.node, context.console.out)
        return VALIDATION_ERROR

    binder = Binder(result, context, model, factory=factory, services=services)
    binder.bind()
    return binder


def execute(app, args=Unset, /, *, console=Unset, context=Unset, factory=Unset, services=Unset):
    """
    Run the command class app against args and return the exit code.

    Parameters
    - app: the root command class.
    - args:
      • Unset: read sys.argv[1:].
      • str: shell-like string, split with shlex.split.
      • Iterable[str]: tokens as-is.
    - console: Console receiving output (PhysicalConsole by default).
    - context: a complete ExecutionContext (instead of args and console).
    - factory: callable(owner) -> instance (owner() by default).
    - services: mapping of extra values for entry-method parameters.

    Asynchronous entry methods run to completion on a fresh event loop.

    Raises
    - ConfigurationError: the declarations of app are invalid.
    - Whatever the entry method raises.
    """
    match _dispatch(app, args, console, context, factory, services):
        case int(code):
            return code
        case binder:
            outcome = binder.invoke()
            if isinstance(binder.result.node.entry, Async):
                outcome = asyncio.run(outcome)
            return exit_code(outcome)


async def execute_async(app, args=Unset, /, *, console=Unset, context=Unset, factory=Unset, services=Unset):
    """
    Same as execute(), awaiting asynchronous entry methods on the running loop.
    """
    match _dispatch(app, args, console, context, factory, services):
        case int(code):
            return code
        case binder:
            outcome = binder.invoke()
            if isinstance(binder.result.node.entry, Async):
                outcome = await outcome
            return exit_code(outcome)


__all__ = (
    "SUCCESS",
    "VALIDATION_ERROR",
    "command",
    "execute",
    "execute_async",
)
