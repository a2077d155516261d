"""
Commandant conventions: the pipeline that turns declarations into a command model.

A convention is a callable ``convention(node, descriptor, context)`` applied to
every freshly created CommandNode. It reads the class Descriptor produced by the
Registry and may only add to the node (options, arguments, children, switches,
entry point). Conventions never examine user tokens; everything they raise is a
ConfigurationError.

Default pipeline (order matters)
1. OptionConvention         options, unique short/long names
2. ArgumentConvention       arguments, contiguous order, variadic last
3. SubcommandConvention     child commands, built recursively
4. HelpOptionConvention     explicit HelpOption or the implicit -?|-h|--help
5. VersionOptionConvention  explicit VersionOption or an implicit --version
6. RemainingConvention      member collecting unrecognized tokens
7. ExecutionConvention      on_execute_async / on_execute entry point

Usage
    model = ModelBuilder().build(Tool)
    model = ModelBuilder((*DEFAULT_CONVENTIONS, MyConvention())).build(Tool)
"""
import inspect
import logging
import re
from abc import ABC, abstractmethod

from .arguments import Arity, HelpOption, Kind, VersionOption
from .binding import Async, Sync
from .faults import (
    ConfigurationError,
    CyclicCommandError,
    DuplicateOptionNameError,
    InvalidArgumentOrderError,
    MissingEntryPointError,
)
from .model import CommandModel, CommandNode, Settings
from .registry import Registry
from .utils import Unset, UnsetType, coalesce, kebabize
from .values import ValueParsers

logger = logging.getLogger(__name__)


class Convention(ABC):
    """
    One step of the model-building pipeline.
    """

    @abstractmethod
    def __call__(self, node, descriptor, context, /):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}()"


def _entries(descriptor, kind):
    return [entry for entry in descriptor.entries if entry.kind is kind]


class OptionConvention(Convention):
    """
    Register every Option member, in declaration order.
    """

    def __call__(self, node, descriptor, context, /):
        for option in _entries(descriptor, Kind.OPTION):
            node.add_option(option)
            logger.debug("%s: option %s -> %s", node.name, " | ".join(option.names), option.member)


class ArgumentConvention(Convention):
    """
    Register every Argument member, by explicit order or declaration order.

    Rules
    - Either every argument declares an order or none does.
    - Explicit orders are unique and contiguous.
    - At most one argument is variadic, and it comes last.
    """

    def __call__(self, node, descriptor, context, /):
        arguments = _entries(descriptor, Kind.ARGUMENT)
        ordered = [argument for argument in arguments if argument.order is not Unset]

        if ordered and len(ordered) != len(arguments):
            raise InvalidArgumentOrderError(
                f"arguments of command {node.name!r} must all declare an order, or none of them",
                command=node.name,
            )
        if ordered:
            arguments.sort(key=lambda argument: argument.order)
            for previous, current in zip(arguments, arguments[1:]):
                if current.order == previous.order:
                    raise InvalidArgumentOrderError(
                        f"arguments {previous.member!r} and {current.member!r} of command "
                        f"{node.name!r} share order {current.order}",
                        command=node.name,
                    )
                if current.order != previous.order + 1:
                    raise InvalidArgumentOrderError(
                        f"argument orders of command {node.name!r} must be contiguous "
                        f"(gap between {previous.order} and {current.order})",
                        command=node.name,
                    )

        for index, argument in enumerate(arguments):
            if argument.arity is Arity.MANY and index != len(arguments) - 1:
                raise InvalidArgumentOrderError(
                    f"variadic argument {argument.member!r} of command {node.name!r} must be the last one",
                    command=node.name,
                )
            node.add_argument(argument)
            logger.debug("%s: argument #%d -> %s", node.name, index, argument.member)


class SubcommandConvention(Convention):
    """
    Build the subcommands declared with @command(subcommands=[...]).
    """

    def __call__(self, node, descriptor, context, /):
        for owner in coalesce(descriptor.spec.subcommands, ()):
            child = context.build(owner, node)
            logger.debug("%s: subcommand %s", node.name, child.name)


class HelpOptionConvention(Convention):
    """
    Attach the help switch.

    An explicit HelpOption member wins. Otherwise the implicit one (template from
    @command(help="...") or "-?|-h|--help") is added with whatever of its names
    are still free; @command(help=False) opts out.
    """

    def __call__(self, node, descriptor, context, /):
        explicit = _entries(descriptor, Kind.HELP)
        if len(explicit) > 1:
            raise DuplicateOptionNameError(
                f"command {node.name!r} declares more than one help option",
                command=node.name,
            )
        if explicit:
            node.set_help(explicit[0])
            return

        if (template := coalesce(descriptor.spec.help, True)) is False:
            return
        marker = HelpOption() if template is True else HelpOption(template)
        if not (names := [name for name in marker.names if not node.taken(name)]):
            logger.debug("%s: implicit help skipped, every name is taken", node.name)
            return
        node.set_help(HelpOption("|".join(names)).__resolve__("help", position=len(descriptor.entries)))
        logger.debug("%s: implicit help %s", node.name, " | ".join(names))


class VersionOptionConvention(Convention):
    """
    Attach the version switch.

    An explicit VersionOption member wins (its own version, else the command's).
    Otherwise an implicit --version is added when the command declares a version,
    unless @command(version_option=False).
    """

    def __call__(self, node, descriptor, context, /):
        explicit = _entries(descriptor, Kind.VERSION)
        if len(explicit) > 1:
            raise DuplicateOptionNameError(
                f"command {node.name!r} declares more than one version option",
                command=node.name,
            )
        if explicit:
            if explicit[0].version is Unset and node.version is None:
                raise ConfigurationError(
                    f"version option {explicit[0].member!r} of command {node.name!r} has no version to show",
                    command=node.name,
                )
            node.set_version_option(explicit[0])
            return

        if node.version is None or descriptor.spec.version_option is False:
            return
        if not (names := [name for name in VersionOption().names if not node.taken(name)]):
            logger.debug("%s: implicit version skipped, every name is taken", node.name)
            return
        node.set_version_option(VersionOption("|".join(names)).__resolve__("version", position=len(descriptor.entries)))


class RemainingConvention(Convention):
    """
    Attach the Remaining member, if declared.
    """

    def __call__(self, node, descriptor, context, /):
        match _entries(descriptor, Kind.REMAINING):
            case []:
                pass
            case [entry]:
                node.set_remaining(entry)
            case [_, *others]:
                raise ConfigurationError(
                    f"command {node.name!r} declares more than one remaining-arguments member",
                    command=node.name,
                )


class ExecutionConvention(Convention):
    """
    Resolve the entry point: on_execute_async (preferred) or on_execute.

    Either method may be a coroutine function; the entry point is then Async.
    A command without subcommands must define one of them.
    """
    names = ("on_execute_async", "on_execute")

    def __call__(self, node, descriptor, context, /):
        for name in self.names:
            if callable(method := getattr(descriptor.owner, name, None)):
                entry = Async(name) if inspect.iscoroutinefunction(method) else Sync(name)
                break
        else:
            if node.leaf:
                raise MissingEntryPointError(
                    f"command {node.name!r} ({descriptor.owner.__qualname__}) must define "
                    f"on_execute or on_execute_async",
                    command=node.name,
                )
            return
        if name == "on_execute_async" and isinstance(entry, Sync):
            raise MissingEntryPointError(
                f"{descriptor.owner.__qualname__}.on_execute_async must be a coroutine function",
                command=node.name,
            )
        node.set_entry(entry)
        logger.debug("%s: entry point %r", node.name, entry)


DEFAULT_CONVENTIONS = (
    OptionConvention(),
    ArgumentConvention(),
    SubcommandConvention(),
    HelpOptionConvention(),
    VersionOptionConvention(),
    RemainingConvention(),
    ExecutionConvention(),
)


def _derive_name(owner):
    # "BuildCommand" -> "build"
    name = kebabize(owner.__name__)
    return re.sub(r"-command$", "", name) or name


def _derive_descr(owner):
    if not (doc := vars(owner).get("__doc__")):
        return None
    return inspect.cleandoc(doc).split("\n\n")[0].strip() or None


class BuildContext:
    """
    State of one build: the model under construction and the chain of classes
    currently being built (used to detect cycles).
    """

    def __init__(self, builder, model, registry):
        self.builder = builder
        self.model = model
        self.registry = registry
        self.ancestry = ()

    def build(self, owner, parent=Unset, /):
        """
        Create the node for owner under parent and run every convention on it.
        """
        if not isinstance(owner, type):
            raise TypeError(f"command declarations must be classes, not {type(owner).__name__}")
        if owner in self.ancestry:
            raise CyclicCommandError(
                f"command class {owner.__qualname__} is its own subcommand "
                f"({' -> '.join(step.__qualname__ for step in (*self.ancestry, owner))})",
            )

        descriptor = self.registry.describe(owner)
        spec = descriptor.spec
        inherited = Settings() if parent is Unset else parent.settings
        settings = Settings(*(
            coalesce(getattr(spec, field), getattr(inherited, field)) for field in Settings._fields
        ))
        parsers = ValueParsers(
            coalesce(spec.parsers, {}),
            parent=Unset if parent is Unset else parent.parsers,
        )

        node = CommandNode(
            coalesce(spec.name, _derive_name(owner)),
            owner,
            descr=coalesce(spec.descr, _derive_descr(owner)),
            usage=coalesce(spec.usage, None),
            epilog=coalesce(spec.epilog, None),
            version=coalesce(spec.version, None),
            settings=settings,
            parsers=parsers,
        )
        self.model.add(node, parent)

        self.ancestry += (owner,)
        try:
            for convention in self.builder.conventions:
                convention(node, descriptor, self)
        finally:
            self.ancestry = self.ancestry[:-1]
        return node


class ModelBuilder:
    """
    Builds a CommandModel from a command class by running the conventions.

    Parameters
    - conventions: ordered conventions (DEFAULT_CONVENTIONS by default).
    - registry: Registry used to read declarations (a fresh one per build by default).

    Building is deterministic: the same declarations always produce structurally
    identical models.
    """

    def __init__(self, conventions=DEFAULT_CONVENTIONS, /, registry=Unset):
        conventions = tuple(conventions)
        for convention in conventions:
            if not callable(convention):
                raise TypeError("ModelBuilder() conventions must be callables")
        if not isinstance(registry, Registry | UnsetType):
            raise TypeError("ModelBuilder() 'registry' must be a Registry")
        self.conventions = conventions
        self.registry = registry

    def build(self, owner, /):
        model = CommandModel()
        context = BuildContext(self, model, Registry() if self.registry is Unset else self.registry)
        context.build(owner)
        logger.debug("built command model for %s: %d node(s)", owner.__qualname__, len(model))
        return model


__all__ = (
    "Convention",
    "OptionConvention",
    "ArgumentConvention",
    "SubcommandConvention",
    "HelpOptionConvention",
    "VersionOptionConvention",
    "RemainingConvention",
    "ExecutionConvention",
    "DEFAULT_CONVENTIONS",
    "BuildContext",
    "ModelBuilder",
)
