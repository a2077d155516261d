"""
Commandant binding: from a ParseResult to live objects and an exit code.

- EntryPoint / Sync / Async: tagged variant naming the method to run on the
  selected command (resolved once, when the model is built).
- ValueProvider: supplies the extra parameters of entry methods
  (``def on_execute(self, console, parent: Root)``).
- Binder: creates one instance per command on the selected path, assigns the
  parsed values to their members, and invokes the entry method.

Binding rules
- Parsed values are assigned as-is (variadic values in the member's container
  type, list by default).
- Members without a parsed value receive a fresh copy of their default, unless
  the instance already set the attribute itself (e.g. in __init__).
- The Remaining member receives the collected tokens as a list.

Exit codes
- An int returned by the entry method is the exit code (bool is not an exit code).
- Anything else, None included, maps to 0.
"""
import copy
import inspect
import logging

from .arguments import Arity, Kind
from .console import Console, ExecutionContext
from .faults import UnresolvableParameterError
from .model import CommandModel, CommandNode
from .parser import ParseResult
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class EntryPoint:
    """
    Name of the method to run on a command instance, tagged by calling convention.
    """
    __slots__ = ("name",)
    __match_args__ = ("name",)

    def __init__(self, name, /):
        if type(self) is EntryPoint:
            raise TypeError("EntryPoint is abstract, use Sync or Async")
        if not isinstance(name, str) or not name.isidentifier():
            raise TypeError(f"{type(self).__name__}() argument must be an identifier")
        self.name = name

    def __eq__(self, other):
        if not isinstance(other, EntryPoint):
            return NotImplemented
        return type(self) is type(other) and self.name == other.name

    def __hash__(self):
        return hash((type(self), self.name))

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


class Sync(EntryPoint):
    """Plain method; its return value is the outcome."""
    __slots__ = ()


class Async(EntryPoint):
    """Coroutine function; its awaited value is the outcome."""
    __slots__ = ()


def exit_code(outcome, /):
    """
    Map an entry method's outcome to a process exit code.
    """
    if isinstance(outcome, int) and not isinstance(outcome, bool):
        return outcome
    return 0


class ValueProvider:
    """
    Resolves entry-method parameters.

    Lookup order for a parameter
    1. by annotation: ExecutionContext, Console, CommandNode, CommandModel,
       ParseResult, or the class of a command on the selected path (nearest first);
    2. services mapping keyed by the annotation;
    3. by name: context, console, command, model, result, parent, remaining;
    4. services mapping keyed by the parameter name;
    5. the parameter's default.

    Raises
    - UnresolvableParameterError: none of the above applies.
    """

    def __init__(self, context, result, model, instances, /, services=Unset):
        self.context = context
        self.result = result
        self.model = model
        self.instances = tuple(instances)
        self.services = coalesce(services, {})

    def _by_annotation(self, annotation):
        if not isinstance(annotation, type):
            return Unset
        for kind, value in (
            (ExecutionContext, self.context),
            (Console, self.context.console),
            (CommandNode, self.result.node),
            (CommandModel, self.model),
            (ParseResult, self.result),
        ):
            if issubclass(annotation, kind):
                return value
        for instance in reversed(self.instances[:-1]):
            if isinstance(instance, annotation):
                return instance
        return self.services.get(annotation, Unset)

    def _by_name(self, name):
        match name:
            case "context":
                return self.context
            case "console":
                return self.context.console
            case "command":
                return self.result.node
            case "model":
                return self.model
            case "result":
                return self.result
            case "remaining":
                return list(self.result.remaining)
            case "parent" if len(self.instances) > 1:
                return self.instances[-2]
        return self.services.get(name, Unset)

    def resolve(self, parameter, owner, /):
        if (value := self._by_annotation(parameter.annotation)) is not Unset:
            return value
        if (value := self._by_name(parameter.name)) is not Unset:
            return value
        if parameter.default is not inspect.Parameter.empty:
            return parameter.default
        raise UnresolvableParameterError(
            f"cannot provide parameter {parameter.name!r} of "
            f"{owner.__qualname__}.{self.result.node.entry.name}",
            name=parameter.name,
            command=self.model.route(self.result.node),
        )


def _signature(method):
    try:
        return inspect.signature(method, eval_str=True)
    except NameError:
        return inspect.signature(method)


class Binder:
    """
    Creates the command instances for a ParseResult and runs the entry method.

    Parameters
    - result: ParseResult of a completed (not short-circuited) parse.
    - context: ExecutionContext of the run.
    - model: the CommandModel the result was parsed against.
    - factory: callable(owner) -> instance (owner() by default).
    - services: mapping of extra values for entry-method parameters.
    """

    def __init__(self, result, context, model, /, factory=Unset, services=Unset):
        if result.shortcut is not None:
            raise ValueError("Binder() cannot bind a short-circuited parse result")
        if factory is not Unset and not callable(factory):
            raise TypeError("Binder() 'factory' must be callable")
        self.result = result
        self.context = context
        self.model = model
        self.factory = coalesce(factory, lambda owner: owner())
        self.services = services
        self.instances = ()

    @staticmethod
    def _assign(instance, entry, present, value):
        if present:
            if entry.arity is Arity.MANY:
                value = entry.container(value)
        elif entry.member in getattr(instance, "__dict__", {}):
            return
        else:
            value = copy.copy(entry.default)
        setattr(instance, entry.member, value)

    def bind(self):
        """
        Create and populate one instance per command on the selected path.

        Returns
        - tuple of instances, root first.
        """
        instances = []
        for node in self.model.path(self.result.node):
            instance = self.factory(node.owner)
            for option in node.options:
                if option.kind is Kind.OPTION:
                    present = option in self.result.options
                    self._assign(instance, option, present, self.result.options.get(option))
            for argument in node.arguments:
                present = argument in self.result.arguments
                self._assign(instance, argument, present, self.result.arguments.get(argument))
            if node.remaining is not None:
                setattr(instance, node.remaining.member, list(self.result.remaining))
            instances.append(instance)
            logger.debug("bound %s", type(instance).__qualname__)
        self.instances = tuple(instances)
        return self.instances

    def invoke(self):
        """
        Call the selected command's entry method.

        Returns
        - Sync: the method's return value.
        - Async: the coroutine (to be awaited by the caller).
        """
        if not self.instances:
            self.bind()
        if (entry := self.result.node.entry) is None:
            raise ValueError(f"command {self.result.node.name!r} has no entry point")

        instance = self.instances[-1]
        method = getattr(instance, entry.name)
        provider = ValueProvider(self.context, self.result, self.model, self.instances, services=self.services)

        args, kwargs = [], {}
        for parameter in _signature(method).parameters.values():
            match parameter.kind:
                case inspect.Parameter.VAR_POSITIONAL | inspect.Parameter.VAR_KEYWORD:
                    continue
                case inspect.Parameter.POSITIONAL_ONLY:
                    args.append(provider.resolve(parameter, type(instance)))
                case _:
                    kwargs[parameter.name] = provider.resolve(parameter, type(instance))

        logger.debug("invoking %r on %s", entry, type(instance).__qualname__)
        return method(*args, **kwargs)


__all__ = (
    "EntryPoint",
    "Sync",
    "Async",
    "exit_code",
    "ValueProvider",
    "Binder",
)
