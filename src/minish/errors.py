class ShellError(RuntimeError):
    pass


class ShellTypeError(ShellError):
    pass


class ShellPipeError(ShellError):
    pass


class BrokenPipe(ShellPipeError):
    """Raised when writing to a pipe that was closed by its reader.
    """


class ShellSyntaxError(ShellError):
    pass


class ShellArithmeticError(ShellError):
    pass


class CommandNotFound(ShellError):
    def __init__(self, name: str):
        super().__init__(f'command not found: {name}')
        self.name = name


class ShellExit(Exception):
    """Raised by `exit` to end the current session.
    """

    def __init__(self, code=0):
        super().__init__(code)
        self.code = code
