"""Utils
- printing
- verbosity
- capturing output in tests
"""
from contextlib import redirect_stdout
from io import StringIO
from termcolor import colored
from typing import Callable
import functools
import logging
import sys


def bold(text: str) -> str:
    return colored(text, attrs=['bold'])


def error_text(text: str) -> str:
    return colored(text, 'red')


@functools.lru_cache(maxsize=1)
def verbosity(argv: tuple = None) -> int:
    """Infer the verbosity level from cli flags such as `-vv`.
    """
    if argv is None:
        argv = tuple(sys.argv)

    if '-vvv' in argv:
        return 3
    elif '-vv' in argv:
        return 2
    elif '-v' in argv:
        return 1

    return 0


def set_verbosity(v: int = None):
    verbosity.cache_clear()
    if v is None:
        v = verbosity()

    default_verbosity_level = 30
    verbosity_level = max(default_verbosity_level - v * 10, logging.DEBUG)

    logger = logging.getLogger()
    logger.setLevel(verbosity_level)


def log(*args, file=None, **kwds):
    """Print to stderr
    """
    if file is None:
        file = sys.stderr

    print(*args, file=file, **kwds)


def catch_output(arg: str, func: Callable, **func_kwds) -> str:
    """Run func while temporarily redirecting stdout.
    Then return the result from stdout.
    """
    out = StringIO()
    with redirect_stdout(out):
        func(arg, **func_kwds)
        result = out.getvalue()

    return result.rstrip('\n')
