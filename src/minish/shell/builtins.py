"""Built-in commands.

Each command is called as `command(ctx, *args)`, where `ctx` is a Context.
The return value is the exit status, see `literals.is_success`.
Output is written to `ctx.stdout`.
"""
from typing import Iterable, List
import logging
import posixpath
import re

from minish.errors import ShellError, ShellExit, ShellTypeError
from minish.shell.grammer.literals import FALSE, TRUE
from minish.util import is_callable, is_number, to_number

escapes = {'n': '\n', 't': '\t', '\\': '\\', 'r': '\r', '0': ''}
escape_pattern = re.compile(r'\\(.)')

# command names that are not valid python identifiers
aliases = {'[': 'bracket', '.': 'sh'}


class Meta(type):
    """Treat a class as a dict.

    .. code-block:: python

        # membership
        if key in Builtins:
            # key access
            Builtins[key](ctx)

        # iteration
        for method in Builtins:
            print(method.__name__)
    """
    def __iter__(cls):
        for key in dir(cls):
            if key.startswith('_'):
                continue

            method = getattr(cls, key)
            if is_callable(method):
                yield method

    def __contains__(cls, key):
        return not key.startswith('_') and key in dir(cls) and is_callable(getattr(cls, key))

    def __getitem__(cls, key):
        if key in cls:
            return getattr(cls, key)

        raise KeyError(f'{key} is not a builtin')


class Builtins(metaclass=Meta):
    """Wrapper for all built-in commands.
    """

    @staticmethod
    def true(ctx, *args):
        return 0

    @staticmethod
    def false(ctx, *args):
        return 1

    @staticmethod
    def test(ctx, *args):
        """Evaluate a condition.
        Usage: test [-z|-n|-f|-d|-e] VALUE, or test LEFT OP RIGHT
        """
        return TRUE if evaluate_test(ctx, list(args)) else FALSE

    @staticmethod
    def bracket(ctx, *args):
        if not args or args[-1] != ']':
            raise ShellError("[: missing `]'")

        return Builtins.test(ctx, *args[:-1])

    @staticmethod
    def echo(ctx, *args):
        newline = True
        if args and args[0] == '-n':
            newline = False
            args = args[1:]

        text = unescape(' '.join(args))
        ctx.stdout.write(text + '\n' if newline else text)

    @staticmethod
    def printf(ctx, fmt='', *args):
        """Format a string with %s and %d placeholders.
        """
        values = list(args)

        def substitute(match):
            if match.group(0) == '%%':
                return '%'

            value = values.pop(0) if values else ''
            if match.group(0) == '%d':
                return str(int(to_number(value))) if is_number(value) else '0'
            return value

        ctx.stdout.write(unescape(re.sub(r'%[sd%]', substitute, fmt)))

    @staticmethod
    def env(ctx, *args):
        for k, v in ctx.env.env.items():
            ctx.stdout.writeln(f'{k}={v}')

    @staticmethod
    def set(ctx, *args):
        """Show all variables and functions, or set a variable.
        Usage: set [NAME=VALUE | NAME = VALUE]
        """
        if not args:
            for k, v in ctx.env.variables.items():
                ctx.stdout.writeln(f'{k}={v}')
            for k, v in ctx.env.functions.items():
                ctx.stdout.writeln(f'{k}()={{{v}}}')
            return

        if len(args) == 3 and args[1] == '=':
            key, value = args[0], args[2]
        elif len(args) == 1 and '=' in args[0]:
            key, value = args[0].split('=', 1)
        else:
            raise ShellError('set: invalid arguments, expected: set NAME=VALUE')

        ctx.env[key] = value

    @staticmethod
    def unset(ctx, *names):
        for name in names:
            if name in ctx.env:
                del ctx.env[name]
            ctx.env.functions.pop(name, None)

    @staticmethod
    def export(ctx, *args):
        for arg in args:
            if '=' in arg:
                key, value = arg.split('=', 1)
                ctx.env.export(key, value)
            else:
                ctx.env.export(arg)

    @staticmethod
    def pwd(ctx, *args):
        ctx.stdout.writeln(ctx.env.cwd)

    @staticmethod
    def cd(ctx, path=None, *args):
        if path is None:
            path = ctx.env.get('HOME', '/')

        path = ctx.path(path)
        if not ctx.fs.isdir(path):
            raise ShellError(f'cd: no such directory: {path}')

        ctx.env.cwd = path

    @staticmethod
    def ls(ctx, *paths):
        for path in paths or ['.']:
            for name in ctx.fs.listdir(ctx.path(path)):
                ctx.stdout.writeln(name)

    @staticmethod
    def cat(ctx, *paths):
        if not paths:
            for line in ctx.stdin.lines():
                ctx.stdout.writeln(line)
            return

        for path in paths:
            ctx.stdout.write(ensure_newline(ctx.fs.read(ctx.path(path))))

    @staticmethod
    def mkdir(ctx, *args):
        """Usage: mkdir [-p] DIRECTORY..
        """
        flags, paths = parse_flags(args, 'p')
        if not paths:
            raise ShellError('mkdir: missing operand')

        for path in map(ctx.path, paths):
            if ctx.fs.exists(path):
                if 'p' in flags and ctx.fs.isdir(path):
                    continue
                raise ShellError(f'mkdir: cannot create directory {path}: File exists')

            parent = posixpath.dirname(path)
            if 'p' not in flags and not ctx.fs.isdir(parent):
                raise ShellError(f'mkdir: no such directory: {parent}')

            ctx.fs.mkdir(path)

    @staticmethod
    def touch(ctx, *paths):
        """Create empty files. Existing files are left unchanged.
        """
        if not paths:
            raise ShellError('touch: missing file operand')

        for path in map(ctx.path, paths):
            if not ctx.fs.exists(path):
                ctx.fs.write(path, '')

    @staticmethod
    def rm(ctx, *args):
        """Usage: rm [-r] PATH..
        """
        flags, paths = parse_flags(args, 'rf')
        if not paths:
            raise ShellError('rm: missing operand')

        for path in map(ctx.path, paths):
            if not ctx.fs.exists(path):
                if 'f' in flags:
                    continue
                raise ShellError(f'rm: no such file or directory: {path}')

            if ctx.fs.isdir(path) and 'r' not in flags:
                raise ShellError(f'rm: cannot remove {path}: Is a directory, use -r')

            ctx.fs.remove(path)

    @staticmethod
    def grep(ctx, *args):
        """Print lines that match a regex.
        Usage: grep [-v] [-i] PATTERN [FILE..]
        """
        flags, args = parse_flags(args, 'vic')
        if not args:
            raise ShellError('grep: missing pattern')

        pattern, *paths = args
        try:
            regex = re.compile(pattern, re.IGNORECASE if 'i' in flags else 0)
        except re.error as e:
            raise ShellError(f'grep: invalid pattern: {e}')

        matches = [line for line in input_lines(ctx, paths)
                   if bool(regex.search(line)) != ('v' in flags)]

        if 'c' in flags:
            ctx.print(len(matches))
        else:
            for line in matches:
                ctx.stdout.writeln(line)

        return 0 if matches else 1

    @staticmethod
    def sort(ctx, *args):
        """Usage: sort [-r] [-n] [FILE..]
        """
        flags, paths = parse_flags(args, 'rn')
        lines = list(input_lines(ctx, paths))

        if 'n' in flags:
            def key(line):
                return to_number(line) if is_number(line) else 0
        else:
            key = None

        for line in sorted(lines, key=key, reverse='r' in flags):
            ctx.stdout.writeln(line)

    @staticmethod
    def head(ctx, *args):
        """Usage: head [-n N | -N] [FILE..]
        """
        n = 10
        args = list(args)
        if args and args[0] == '-n' and len(args) > 1:
            if not args[1].isdigit():
                raise ShellError(f'head: invalid number of lines: {args[1]}')
            n = int(args[1])
            args = args[2:]
        elif args and re.fullmatch(r'-\d+', args[0]):
            n = int(args[0][1:])
            args = args[1:]

        for i, line in enumerate(input_lines(ctx, args)):
            if i >= n:
                break
            ctx.stdout.writeln(line)

    @staticmethod
    def wc(ctx, *args):
        """Usage: wc [-l] [FILE..]
        """
        flags, paths = parse_flags(args, 'lwc')
        lines = list(input_lines(ctx, paths))
        counts = {'l': len(lines),
                  'w': sum(len(line.split()) for line in lines),
                  'c': sum(len(line) + 1 for line in lines)}

        selected = [k for k in 'lwc' if k in flags] or 'lwc'
        ctx.print(*(counts[k] for k in selected))

    @staticmethod
    def read(ctx, *names):
        """Read a line from stdin and assign its words to variables.
        The last variable receives the remainder of the line.
        """
        line = ctx.stdin.readline()
        if line is None:
            return 1

        names = names or ('REPLY',)
        words = line.split(None, len(names) - 1)
        for i, name in enumerate(names):
            ctx.env[name] = words[i] if i < len(words) else ''

    @staticmethod
    def help(ctx, *args):
        ctx.stdout.writeln('Enter a command, or `exit` to quit.')
        ctx.stdout.writeln('Commands: ' + ' '.join(ctx.registry))

    @staticmethod
    def exit(ctx, code='0', *args):
        if not is_number(code):
            raise ShellTypeError(f'exit: numeric argument required: {code}')

        raise ShellExit(int(to_number(code)))

    @staticmethod
    def sh(ctx, *args):
        """Run a script file or a command string in the current session.
        Usage: sh FILE | sh -c COMMAND
        """
        if not args:
            raise ShellError('sh: missing script')

        if args[0] == '-c':
            text = ' '.join(args[1:])
        else:
            text = ctx.fs.read(ctx.path(args[0]))

        if ctx.run is None:
            raise ShellError('sh: no interpreter available')

        result = ctx.run(text)
        if result:
            ctx.stdout.writeln(result)


def evaluate_test(ctx, args: List[str]) -> bool:
    logging.debug(f'test: {args}')
    if not args:
        return False

    if args[0] == '!':
        return not evaluate_test(ctx, args[1:])

    if len(args) == 1:
        return args[0] != ''

    if len(args) == 2:
        option, value = args
        if option == '-z':
            return value == ''
        elif option == '-n':
            return value != ''
        elif option == '-e':
            return ctx.fs.exists(ctx.path(value))
        elif option == '-f':
            return ctx.fs.isfile(ctx.path(value))
        elif option == '-d':
            return ctx.fs.isdir(ctx.path(value))

        raise ShellError(f'test: unknown option: {option}')

    if len(args) == 3:
        return compare(*args)

    raise ShellError(f'test: too many arguments: {" ".join(args)}')


def compare(left: str, operator: str, right: str) -> bool:
    """Compare two values.
    Numbers are compared numerically, other values as strings.
    """
    if is_number(left) and is_number(right):
        left, right = to_number(left), to_number(right)

    if operator in ('=', '==', '-eq'):
        return left == right
    elif operator in ('!=', '-ne'):
        return left != right

    if type(left) != type(right):
        left, right = str(left), str(right)

    if operator in ('<', '-lt'):
        return left < right
    elif operator in ('>', '-gt'):
        return left > right
    elif operator in ('<=', '-le'):
        return left <= right
    elif operator in ('>=', '-ge'):
        return left >= right

    raise ShellError(f'unknown operator: {operator}')


def unescape(text: str) -> str:
    return escape_pattern.sub(lambda m: escapes.get(m.group(1), m.group(0)), text)


def ensure_newline(text: str) -> str:
    if text and not text.endswith('\n'):
        return text + '\n'
    return text


def parse_flags(args: Iterable[str], options: str):
    """Split leading flags such as `-v` or `-rn` from the other arguments.
    """
    flags = set()
    args = list(args)
    while args and re.fullmatch(f'-[{options}]+', args[0]):
        flags.update(args.pop(0)[1:])

    return flags, args


def input_lines(ctx, paths: List[str]) -> Iterable[str]:
    if not paths:
        yield from ctx.stdin.lines()
        return

    for path in paths:
        yield from ctx.fs.read(ctx.path(path)).splitlines()
