"""
The lexer, parser and executor of the command language.
"""

# explicit API exposure
# "noqa" suppresses linting errors (flake8)
from minish.errors import CommandNotFound, ShellError, ShellExit, ShellPipeError, ShellSyntaxError  # noqa
from minish.shell.config import ShellConfig  # noqa
from minish.shell.env import Environment  # noqa
from minish.shell.shell import Shell  # noqa
