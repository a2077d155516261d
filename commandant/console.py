"""
Commandant console and execution context (the engine's view of the process).

- Console: a pair of writable text streams, ``out`` (help, version, user output)
  and ``error`` (diagnostics).
- PhysicalConsole: the process console; a singleton that resolves sys.stdout /
  sys.stderr at access time, so redirections made after import are honored.
- TextConsole: explicit streams (io.StringIO by default), handy for tests and
  embedding.
- ExecutionContext: arguments, working directory and console of one execution.
"""
import functools
import io
import sys
from abc import ABC, abstractmethod

from .utils import Unset


class Console(ABC):
    """
    Abstract pair of output streams.
    """

    @property
    @abstractmethod
    def out(self):
        raise NotImplementedError

    @property
    @abstractmethod
    def error(self):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(out={self.out!r}, error={self.error!r})"


class PhysicalConsole(Console):
    """
    Process-wide console bound to the standard streams.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    @property
    def out(self):
        return sys.stdout

    @property
    def error(self):
        return sys.stderr


class TextConsole(Console):
    """
    Console over explicit streams.

    Parameters
    - out / error: writable text streams (fresh io.StringIO when Unset).
    """

    def __init__(self, out=Unset, error=Unset):
        for name, stream in (("out", out), ("error", error)):
            if stream is not Unset and not callable(getattr(stream, "write", None)):
                raise TypeError(f"TextConsole() '{name}' must be a writable stream")
        self._out = io.StringIO() if out is Unset else out
        self._error = io.StringIO() if error is Unset else error

    @property
    def out(self):
        return self._out

    @property
    def error(self):
        return self._error


class ExecutionContext:
    """
    Everything one execution needs from its environment.

    Attributes
    - arguments: tuple of raw argument tokens (None when missing)
    - working_directory: directory the command runs in (None when missing)
    - console: Console receiving output (None when missing)

    Completeness is checked by the dispatcher, not here, so that an incomplete
    context surfaces as InvalidContextError at execution time.
    """

    __slots__ = ("arguments", "working_directory", "console")

    def __init__(self, arguments, working_directory, console):
        self.arguments = None if arguments is None else tuple(arguments)
        self.working_directory = working_directory
        self.console = console

    def __repr__(self):
        return (
            f"{type(self).__name__}(arguments={self.arguments!r}, "
            f"working_directory={self.working_directory!r}, console={self.console!r})"
        )


__all__ = (
    "Console",
    "PhysicalConsole",
    "TextConsole",
    "ExecutionContext",
)
