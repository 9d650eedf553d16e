from dataclasses import dataclass, field
from threading import Event
from typing import Callable, Dict, Iterable
import logging
import posixpath

from minish.errors import CommandNotFound
from minish.filesystem import FileSystem, MemoryFileSystem
from minish.shell.config import ShellConfig
from minish.shell.env import Environment
from minish.shell.streams import IOStream, InputText, OutputBuffer

# An invocable is called as `func(ctx, *args)`.
# Its return value is the exit status of the command.
Invocable = Callable[..., object]


@dataclass
class Context:
    """Everything a command can touch while it runs.
    """
    env: Environment
    stdin: IOStream = field(default_factory=InputText)
    stdout: IOStream = field(default_factory=OutputBuffer)
    fs: FileSystem = field(default_factory=MemoryFileSystem)
    registry: 'CommandRegistry' = None
    cancel: Event = field(default_factory=Event)
    config: ShellConfig = field(default_factory=ShellConfig)

    # run a line of text in the current session, e.g. for `sh`
    run: Callable[[str], str] = None

    def path(self, path: str) -> str:
        """Resolve `path` relative to the current working directory.
        """
        if path == '~' or path.startswith('~/'):
            path = self.env.get('HOME', '/') + path[1:]

        return posixpath.normpath(posixpath.join(self.env.cwd, path))

    def print(self, *args):
        self.stdout.writeln(' '.join(str(arg) for arg in args))


class CommandRegistry:
    """A mapping from command names to invocables.
    """

    def __init__(self, commands: Dict[str, Invocable] = None):
        self.commands: Dict[str, Invocable] = {}
        for name, func in (commands or {}).items():
            self.register(name, func)

    def register(self, name: str, func: Invocable):
        if name in self.commands:
            logging.debug(f'Override command: {name}')

        self.commands[name] = func

    def __contains__(self, name: str) -> bool:
        return name in self.commands

    def __iter__(self) -> Iterable[str]:
        return iter(sorted(self.commands))

    def resolve(self, name: str) -> Invocable:
        if name not in self.commands:
            raise CommandNotFound(name)

        return self.commands[name]


def default_registry() -> CommandRegistry:
    from minish.shell.builtins import Builtins, aliases

    registry = CommandRegistry({method.__name__: method for method in Builtins})
    for alias, name in aliases.items():
        registry.register(alias, registry.resolve(name))

    return registry
