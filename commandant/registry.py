"""
Commandant metadata registry.

The registry is the only place that looks at user classes. It turns a class
into a Descriptor: the command-level settings attached by @command(...) plus
every member marker (Option, Argument, HelpOption, VersionOption, Remaining),
resolved against its member name and annotation, in declaration order.

Markers are discovered by walking the class MRO from the most basic class to
the class itself, so inherited members come first and a subclass that
re-declares a member keeps the member's original position. Markers can also be
attached without touching the class body through Registry.register().

Nothing is cached across registries: each Registry instance scans afresh, and
the dispatcher creates one per execution.
"""
import inspect
import logging
from collections import defaultdict, namedtuple

from .arguments import Entry
from .utils import Unset

logger = logging.getLogger(__name__)


CommandSpec = namedtuple("CommandSpec", (
    "name",
    "descr",
    "usage",
    "epilog",
    "version",
    "subcommands",
    "help",
    "version_option",
    "cluster",
    "separator",
    "unrecognized",
    "suggestions",
    "case_sensitive",
    "parsers",
), defaults=(Unset,) * 14)
CommandSpec.__doc__ = """
Command-level metadata attached to a class by @command(...).

Unset fields fall back to derived values (name, descr) or to the parent
command's settings (cluster, separator, unrecognized, suggestions,
case_sensitive, parsers).
"""


Descriptor = namedtuple("Descriptor", ("owner", "spec", "entries"))
Descriptor.__doc__ = """
Everything the model builder needs to know about one command class.

- owner: the class itself.
- spec: its CommandSpec (all-Unset when the class was not decorated).
- entries: resolved markers, in declaration order.
"""


def _annotations(owner):
    try:
        return inspect.get_annotations(owner, eval_str=True)
    except (NameError, SyntaxError, TypeError):
        # Unresolvable forward references: keep what can be read as-is.
        return {
            name: annotation
            for name, annotation in inspect.get_annotations(owner).items()
            if not isinstance(annotation, str)
        }


class Registry:
    """
    Host-agnostic store of member metadata.

    Usage
        registry = Registry()
        registry.register(Tool, "name", Option("-n|--name <NAME>"), str)
        descriptor = registry.describe(Tool)
    """

    def __init__(self):
        self._explicit = defaultdict(dict)

    def register(self, owner, member, entry, annotation=Unset, /):
        """
        Attach a marker to owner.member without declaring it in the class body.

        Explicit registrations are ordered after the markers found in the class
        itself and override a class-level marker of the same member.
        """
        if not isinstance(owner, type):
            raise TypeError("Registry.register() first argument must be a class")
        if not isinstance(member, str) or not member.isidentifier():
            raise TypeError("Registry.register() second argument must be an identifier")
        if not isinstance(entry, Entry):
            raise TypeError("Registry.register() third argument must be an option or argument marker")
        self._explicit[owner][member] = (entry, annotation)
        return entry

    def scan(self, owner, /):
        """
        Return the resolved markers of owner, in declaration order.
        """
        if not isinstance(owner, type):
            raise TypeError("Registry.scan() argument must be a class")

        found = {}
        for base in reversed(owner.__mro__):
            if base is object:
                continue
            annotations = _annotations(base)
            for member, value in vars(base).items():
                if isinstance(value, Entry):
                    found[member] = (value, annotations.get(member, Unset))
                elif member in found:
                    # Shadowed by a plain attribute in a subclass.
                    del found[member]
            for member, (entry, annotation) in self._explicit.get(base, {}).items():
                found.pop(member, None)
                found[member] = (entry, annotation)

        entries = tuple(
            entry.__resolve__(member, annotation, position=position)
            for position, (member, (entry, annotation)) in enumerate(found.items())
        )
        logger.debug("scanned %s: %d member(s)", owner.__qualname__, len(entries))
        return entries

    def describe(self, owner, /):
        spec = vars(owner).get("__command__", Unset)
        if not isinstance(spec, CommandSpec):
            spec = CommandSpec()
        return Descriptor(owner, spec, self.scan(owner))


__all__ = (
    "CommandSpec",
    "Descriptor",
    "Registry",
)
