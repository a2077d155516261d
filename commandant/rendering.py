"""
Commandant rendering: help text, version text and diagnostics.

Everything is rendered with rich onto the execution context's streams, without
color, markup or emoji, so the output is plain text whatever the terminal.

Help layout
    usage: tool build [options] <source> [<rest>...] [command]

    Build the project.

    arguments:
      source          file to build
      rest            extra inputs

    options:
      -o | --output <OUTPUT>
                      where to write
      -? | -h | --help
                      Show help information.

    commands:
      clean           remove build outputs

    run 'tool build [command] --help' for more information about a command.

Host overrides (read from __main__)
- __prog__: replaces the root command name in usage, routes and version output.
"""
import enum

from rich.console import Console, Group
from rich.text import Text

from .arguments import Arity, Kind
from .utils import Unset, coalesce


def _printer(stream):
    return Console(
        file=stream,
        color_system=None,
        highlight=False,
        markup=False,
        emoji=False,
        soft_wrap=True,
    )


def _prog():
    return getattr(__import__("__main__"), "__prog__", Unset)


def _choices(entry):
    if entry.choices:
        return tuple(map(str, entry.choices))
    if isinstance(entry.type, type) and issubclass(entry.type, enum.Enum):
        return tuple(member.name.lower() for member in entry.type)
    return ()


def _metavar(entry):
    if choices := _choices(entry):
        label = "{" + ",".join(choices) + "}"
    else:
        label = f"<{entry.metavar}>"
    match entry.arity:
        case Arity.OPTIONAL:
            return f"[={label}]"
        case Arity.MANY:
            return f"{label}..."
        case _:
            return label


def _option_label(option):
    names = " | ".join(option.names)
    if option.arity is Arity.ZERO:
        return names
    separator = "" if option.arity is Arity.OPTIONAL else " "
    return names + separator + _metavar(option)


def _argument_label(argument):
    label = f"<{argument.name}>"
    if argument.arity is Arity.MANY:
        label += "..."
    return label if argument.required else f"[{label}]"


def usage(model, node, /):
    """
    One-line usage synopsis of node (without the "usage:" prefix).
    """
    if node.usage:
        return node.usage
    parts = [model.route(node, _prog())]
    if any(not option.hidden for option in node.options):
        parts.append("[options]")
    parts.extend(_argument_label(argument) for argument in node.arguments if not argument.hidden)
    if node.children:
        parts.append("[command]")
    return " ".join(parts)


def _section(title, rows, width, console):
    """
    Two-column block with hanging indents: names on the left, wrapped text on the right.
    """
    padding, indent = 2, 18
    section = Text(title + ":")
    for label, descr in rows:
        line = Text(" " * padding + label)
        if descr:
            if len(line) >= indent - 1:
                line.append("\n").append(" " * indent)
            else:
                line.append(" " * (indent - len(line)))
            wrapped = Text(descr).wrap(console, max(width - indent, 20))
            line.append(wrapped[0])
            for extra in wrapped[1:]:
                line.append("\n").append(" " * indent).append(extra)
        section.append("\n").append(line)
    return section


def help_text(model, node, /, console=Unset):
    """
    Build the help renderable of node.
    """
    if console is Unset:
        console = Console(color_system=None, highlight=False, markup=False)
    width = console.width
    renders = [Text(f"usage: {usage(model, node)}")]

    if node.descr:
        renders.append(Text(node.descr))

    arguments = [
        (argument.name, argument.descr)
        for argument in node.arguments if not argument.hidden
    ]
    if arguments:
        renders.append(_section("arguments", arguments, width, console))

    options = [
        (_option_label(option), option.descr)
        for option in node.options if not option.hidden
    ]
    if options:
        renders.append(_section("options", options, width, console))

    if node.children:
        commands = [(name, child.descr) for name, child in node.children.items()]
        renders.append(_section("commands", commands, width, console))
        route = model.route(node, _prog())
        if node.help is not None:
            renders.append(Text(
                f"run '{route} [command] {node.help.name}' for more information about a command."
            ))

    if node.epilog:
        renders.append(Text(node.epilog))

    # One blank line between blocks.
    blocks = [renders[0]]
    for render in renders[1:]:
        blocks.extend((Text(""), render))
    return Group(*blocks)


def version_text(model, node, /):
    """
    "<route> <version>" for the node's version switch.
    """
    version = Unset
    if node.version_option is not None:
        version = node.version_option.version
    version = coalesce(version, node.version)
    if callable(version):
        version = version()
    return Text(f"{model.route(node, _prog())} {version}")


def render_help(model, node, stream, /):
    printer = _printer(stream)
    printer.print(help_text(model, node, printer))


def render_version(model, node, stream, /):
    _printer(stream).print(version_text(model, node))


def render_shortcut(model, result, stream, /):
    """
    Print the output of the switch that short-circuited parsing.
    """
    match result.shortcut.kind:
        case Kind.HELP:
            render_help(model, result.node, stream)
        case Kind.VERSION:
            render_version(model, result.node, stream)
        case kind:
            raise ValueError(f"{kind!r} switches do not short-circuit")


def render_fault(fault, stream, /):
    """
    Print a fault (its __rich__ form) as a diagnostic.
    """
    _printer(stream).print(fault)


__all__ = (
    "usage",
    "help_text",
    "version_text",
    "render_help",
    "render_version",
    "render_shortcut",
    "render_fault",
)
