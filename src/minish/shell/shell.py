from argparse import ArgumentParser, RawTextHelpFormatter
from asyncio import CancelledError
from threading import Event
from typing import List
import logging
import os
import sys

from minish.errors import ShellExit, ShellSyntaxError
from minish.filesystem import FileSystem, LocalFileSystem, MemoryFileSystem
from minish.io_util import bold, log, set_verbosity
from minish.shell.config import ShellConfig
from minish.shell.env import Environment
from minish.shell.executor import Executor
from minish.shell.grammer.literals import TRUE, is_success
from minish.shell.registry import CommandRegistry, default_registry
from minish.shell.script import ScriptResult, run_script
from minish.shell.streams import IOStream, TextStream

description = 'A small command language. If no arguments are given then an interactive shell is started.'
epilog = f"""
--------------------------------------------------------------------------------
{bold('Usage')}
    minish                      # interactive shell
    minish -c 'echo hi'         # run a command string
    minish script.sh            # run a script line by line

{bold('Variables')}
    a=10; echo $a $((a * 2))

{bold('Control Flow')}
    if [ $a -eq 10 ]; then echo yes; else echo no; fi
    for i in 1 2 3; do echo $i; done
    greet() {{ echo "hi, $1 !" }}; greet world

{bold('Pipes')}
    echo "a\\nb" | grep a
"""


class Shell:
    """A shell session.
    The session state is kept between calls to `run`.

    .. code-block:: python

        shell = Shell()
        shell.run('a=1')
        shell.run('echo $a')  # '1'
    """

    def __init__(self, config: ShellConfig = None, fs: FileSystem = None,
                 registry: CommandRegistry = None, stdin: IOStream = None):
        self.config = config or ShellConfig()
        self.fs = fs if fs is not None else default_filesystem(self.config)
        self.env = Environment(self.config.cwd, self.config.env)
        self.cancel = Event()
        self.executor = Executor(self.env, registry or default_registry(),
                                 self.config, self.fs, self.cancel, stdin)

    @property
    def status(self):
        return self.executor.status

    @property
    def success(self) -> bool:
        return is_success(self.status)

    def run(self, text: str) -> str:
        """Run `text` and return its output.
        Raise a ShellSyntaxError for invalid input.
        """
        try:
            return self.executor.run(text)
        except CancelledError:
            return self.cancelled()

    def run_script(self, path: str) -> ScriptResult:
        """Read a script through the filesystem and run it line by line.
        """
        text = self.fs.read(path)
        try:
            return run_script(self.executor, text)
        except CancelledError:
            self.cancelled()
            return ScriptResult()

    def interrupt(self):
        """Cancel the running statement.
        """
        self.cancel.set()

    def cancelled(self) -> str:
        logging.info('Cancelled')
        self.cancel.clear()
        self.executor.set_status(TRUE)
        return ''


def default_filesystem(config: ShellConfig) -> MemoryFileSystem:
    fs = MemoryFileSystem()
    fs.mkdir(config.cwd)
    fs.mkdir(config.env.get('HOME', '/'))
    return fs


def add_cli_args(parser: ArgumentParser):
    parser.add_argument('file', nargs='?',
                        help='Run the script in FILE')
    parser.add_argument('-c', dest='command', metavar='COMMAND',
                        help='Run COMMAND and exit')
    parser.add_argument('-v', '--verbose', default=0, action='count',
                        help='Increase the verbosity')


def main(argv: List[str] = None):
    parser = ArgumentParser(description=description, epilog=epilog,
                            formatter_class=RawTextHelpFormatter)
    add_cli_args(parser)
    args = parser.parse_args(argv)
    set_verbosity(args.verbose)
    logging.info(f'args: {args}')

    try:
        sys.exit(run(args))
    except ShellExit as e:
        sys.exit(e.code)


def run(args) -> int:
    """Run the cli and return an exit code.
    """
    if args.file is not None:
        config = ShellConfig(cwd=os.getcwd())
        shell = Shell(config, fs=LocalFileSystem(), stdin=TextStream(sys.stdin))
        result = shell.run_script(args.file)
        if str(result):
            print(result)
        return 0 if result.success else 1

    if args.command is not None:
        shell = Shell(stdin=TextStream(sys.stdin))
        try:
            result = shell.run(args.command)
        except ShellSyntaxError as e:
            log(e)
            return 1

        if result:
            print(result)
        return 0 if shell.success else 1

    from minish.shell.cmd2 import run_interactively
    return run_interactively(Shell())


if __name__ == '__main__':
    main()
