"""
Commandant command model: the runtime tree built from declarative metadata.

CommandNode
- One node per command class: ordered options, ordered arguments, named
  children, the help/version switches, the member collecting remaining tokens
  and the resolved entry point.
- Nodes only grow. The public surface offers add_*() and set-once set_*()
  operations; nothing can be removed or reordered once added.
- Uniqueness is enforced on insertion: short names and long names within a
  node, command names among siblings.

CommandModel
- The node table. Nodes refer to their parent by index into this table, never
  by holding the parent object.
- parent(node), path(node) and route(node) answer ancestry questions.
"""
from collections import namedtuple

from .arguments import Arity, Kind
from .faults import DuplicateCommandNameError, DuplicateOptionNameError
from .utils import IntrospectableType, Unset, coalesce


Settings = namedtuple("Settings", (
    "cluster",
    "separator",
    "unrecognized",
    "suggestions",
    "case_sensitive",
), defaults=(True, True, "throw", True, True))
Settings.__doc__ = """
Parsing behavior of one command (inherited by subcommands unless overridden).

- cluster: "-abc" may stand for "-a -b -c".
- separator: "--" ends option parsing; later tokens are positional.
- unrecognized: "throw" rejects unexpected tokens, "collect" keeps them,
  "stop" keeps them along with every token after the first one.
- suggestions: unrecognized names get a "Did you mean this?" hint.
- case_sensitive: option names are matched exactly (otherwise case-folded).
"""


class CommandNode(metaclass=IntrospectableType):
    """
    A command of the tree.

    Read-only properties
    - name, owner, descr, usage, epilog, version, settings, parsers
    - index: position in the model's node table
    - parent: index of the parent node (None for the root)
    - options / arguments: tuples in registration order
    - children: mapping name → child node, in registration order
    - help / version_option / remaining / entry: set-once slots (None when absent)
    """

    __introspectable__ = (
        "name",
        "owner",
        "descr",
        "usage",
        "epilog",
        "version",
        "settings",
        "parsers",
        "index",
        "parent",
        "options",
        "arguments",
        "children",
        "help",
        "version_option",
        "remaining",
        "entry",
    )

    __displayable__ = (
        "name",
        "owner",
        "parent",
        "options",
        "arguments",
        "children",
        "entry",
    )

    def __init__(
            self,
            name,
            owner,
            /,
            descr=None,
            usage=None,
            epilog=None,
            version=None,
            settings=Settings(),
            parsers=None,
    ):
        if not isinstance(name, str) or not name:
            raise TypeError(f"{type(self).__typename__} name must be a non-empty string")
        self._name = name
        self._owner = owner
        self._descr = descr
        self._usage = usage
        self._epilog = epilog
        self._version = version
        self._settings = settings
        self._parsers = parsers
        self._index = None
        self._parent = None
        self._options = []
        self._arguments = []
        self._children = {}
        self._names = {}
        self._help = None
        self._version_option = None
        self._remaining = None
        self._entry = None

    def _key(self, name):
        return name if self._settings.case_sensitive else name.casefold()

    def lookup(self, name, /):
        """
        Return the option (help and version switches included) named name, or None.
        """
        return self._names.get(self._key(name))

    def taken(self, name, /):
        return self._key(name) in self._names

    def add_option(self, option, /):
        """
        Register an option; every one of its names must still be free.

        Raises
        - DuplicateOptionNameError: one of the option's names is already used on this node.
        """
        if option.kind not in (Kind.OPTION, Kind.HELP, Kind.VERSION):
            raise TypeError(f"{type(self).__typename__}.add_option() argument must be an option")
        for name in option.names:
            if (other := self.lookup(name)) is not None:
                raise DuplicateOptionNameError(
                    f"option name {name!r} of {option.member!r} is already used by "
                    f"{other.member!r} on command {self._name!r}",
                    name=name,
                    command=self._name,
                )
        for name in option.names:
            self._names[self._key(name)] = option
        self._options.append(option)
        return option

    def add_argument(self, argument, /):
        if argument.kind is not Kind.ARGUMENT:
            raise TypeError(f"{type(self).__typename__}.add_argument() argument must be an argument")
        self._arguments.append(argument)
        return argument

    def add_child(self, child, /):
        """
        Register a subcommand node.

        Raises
        - DuplicateCommandNameError: a sibling already uses the child's name.
        """
        if child._parent != self._index:
            raise ValueError(f"{type(self).__typename__} child must point to this node as its parent")
        if child.name in self._children:
            raise DuplicateCommandNameError(
                f"command {self._name!r} already has a subcommand named {child.name!r}",
                name=child.name,
                command=self._name,
            )
        self._children[child.name] = child
        return child

    def _set_once(self, slot, value):
        if getattr(self, "_" + slot) is not None:
            raise ValueError(f"{type(self).__typename__} {slot!r} is already set on {self._name!r}")
        setattr(self, "_" + slot, value)
        return value

    def set_help(self, option, /):
        if option.kind is not Kind.HELP:
            raise TypeError(f"{type(self).__typename__}.set_help() argument must be a help option")
        return self._set_once("help", self.add_option(option))

    def set_version_option(self, option, /):
        if option.kind is not Kind.VERSION:
            raise TypeError(f"{type(self).__typename__}.set_version_option() argument must be a version option")
        return self._set_once("version_option", self.add_option(option))

    def set_remaining(self, entry, /):
        if entry.kind is not Kind.REMAINING:
            raise TypeError(f"{type(self).__typename__}.set_remaining() argument must be a remaining marker")
        return self._set_once("remaining", entry)

    def set_entry(self, entry, /):
        return self._set_once("entry", entry)

    @property
    def variadic(self):
        """
        The trailing variadic argument, if any.
        """
        if self._arguments and self._arguments[-1].arity is Arity.MANY:
            return self._arguments[-1]
        return None

    @property
    def leaf(self):
        return not self._children

    def structure(self):
        """
        Plain, comparable summary of this node and its subtree.

        Two builds of the same declarations produce equal structures.
        """
        return (
            self._name,
            tuple((option.kind, option.member, option.names, option.arity, option.required) for option in self._options),
            tuple((argument.member, argument.name, argument.arity, argument.required) for argument in self._arguments),
            None if self._entry is None else (type(self._entry).__name__, self._entry.name),
            tuple(child.structure() for child in self._children.values()),
        )


class CommandModel:
    """
    Node table of one command tree; the root is always at index 0.
    """

    def __init__(self):
        self._nodes = []

    def __len__(self):
        return len(self._nodes)

    def __iter__(self):
        return iter(self._nodes)

    def __getitem__(self, index):
        return self._nodes[index]

    @property
    def root(self):
        try:
            return self._nodes[0]
        except IndexError:
            raise LookupError("command model is empty") from None

    def add(self, node, /, parent=Unset):
        """
        Append node to the table, linking it under parent (a node) when given.
        """
        if node._index is not None:
            raise ValueError("command node already belongs to a model")
        node._index = len(self._nodes)
        node._parent = None if parent is Unset else parent.index
        if parent is not Unset:
            parent.add_child(node)
        self._nodes.append(node)
        return node

    def parent(self, node, /):
        return None if node.parent is None else self._nodes[node.parent]

    def path(self, node, /):
        """
        Nodes from the root to node, both included.
        """
        path = [node]
        while (node := self.parent(node)) is not None:
            path.append(node)
        return tuple(reversed(path))

    def route(self, node, /, prog=Unset):
        """
        Space-separated command names from the root to node.

        The root's name can be replaced by prog (e.g. the host's __prog__).
        """
        names = [step.name for step in self.path(node)]
        names[0] = coalesce(prog, names[0])
        return " ".join(names)

    def structure(self):
        return self.root.structure()


__all__ = (
    "Settings",
    "CommandNode",
    "CommandModel",
)
