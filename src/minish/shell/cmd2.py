import cmd
import logging

from minish.errors import ShellExit, ShellSyntaxError
from minish.io_util import error_text, log
from minish.shell.script import depth_change, join_block

continuation_prompt = '> '


class Repl(cmd.Cmd):
    """An interactive loop on top of a Shell.

    Every line is passed to the shell, rather than to `do_*` methods.
    Lines that open a block are buffered until the block is closed.
    """

    intro = 'Enter a command, `help` for help or `exit` to quit.'

    def __init__(self, shell, *args, **kwds):
        super().__init__(*args, **kwds)
        self.shell = shell
        self.prompt = shell.config.prompt
        self.exit_code = 0

        self.block = []
        self.depth = 0

    def onecmd(self, line: str) -> bool:
        """Run `line` and return True to stop the loop.
        """
        if line == 'EOF':
            logging.debug('Aborting: received EOF')
            print()
            return True

        if not self.buffer(line):
            return False

        text = join_block(self.block)
        self.block = []
        self.depth = 0
        self.prompt = self.shell.config.prompt

        try:
            result = self.shell.run(text)
        except ShellSyntaxError as e:
            log(error_text(str(e)))
            return False
        except ShellExit as e:
            self.exit_code = e.code
            return True

        if result:
            print(result)

        return False

    def buffer(self, line: str) -> bool:
        """Add a line to the current block.
        Return True if the block is complete.
        """
        line = line.strip()
        if not line:
            return False

        self.depth += depth_change(line)

        self.block.append(line)
        if self.depth > 0:
            self.prompt = continuation_prompt
            return False

        return True

    def emptyline(self):
        pass


def run_interactively(shell) -> int:
    repl = Repl(shell)
    while True:
        try:
            repl.cmdloop()
            return repl.exit_code

        except KeyboardInterrupt:
            print('^C')
            shell.interrupt()
            shell.cancelled()
            repl.block = []
            repl.depth = 0
            repl.prompt = shell.config.prompt
            # do not print the intro again
            repl.intro = ''
