"""Evaluate an abstract syntax tree.

Each statement yields a result string. Non-empty results are joined by newlines.
Each statement also sets a status, which is interpreted by `literals.is_success`.
"""
from asyncio import CancelledError
from threading import Event
from typing import List, Tuple
import logging
import re

from minish.errors import ShellError
from minish.filesystem import FileSystem, MemoryFileSystem
from minish.shell.builtins import compare
from minish.shell.ast import Assignment, CaseStatement, Command, ExpressionStatement, ForStatement, \
    FunctionCall, FunctionDefinition, IfStatement, Node, Program, WhileStatement
from minish.shell.config import ShellConfig
from minish.shell.env import Environment
from minish.shell.expansion import Expander
from minish.shell.grammer.literals import FALSE, TRUE, is_success
from minish.shell.grammer.parser import parse_text
from minish.shell.grammer.tokenizer import Token
from minish.shell.pipeline import run_pipeline
from minish.shell.registry import CommandRegistry, Context, default_registry
from minish.shell.script import run_script
from minish.shell.streams import InputText, IOStream, OutputBuffer
from minish.util import is_number, join_lines

LOOP_LIMIT_MESSAGE = 'Error: Maximum iteration limit reached'

name_pattern = re.compile(r'[a-zA-Z_][a-zA-Z_0-9]*')


class Executor:
    """A tree-walking interpreter.

    Parameters
    ----------
    env : Environment
        The state of the session. It is mutated by execution.
    registry : CommandRegistry
        Resolves command names to invocables.
    cancel : threading.Event
        When set, the running statement is aborted with a CancelledError.
    """

    def __init__(self, env: Environment = None, registry: CommandRegistry = None,
                 config: ShellConfig = None, fs: FileSystem = None,
                 cancel: Event = None, stdin: IOStream = None):
        self.config = config or ShellConfig()
        self.env = env if env is not None else Environment(
            self.config.cwd, self.config.env)
        self.registry = registry or default_registry()
        self.fs = fs if fs is not None else MemoryFileSystem()
        self.cancel = cancel or Event()
        self.stdin = stdin or InputText()

        self.expander = Expander(self.env, self.config)
        self.status = TRUE

    def fork(self, stdin: IOStream = None) -> 'Executor':
        """Return an executor with a private copy of the environment.
        """
        return Executor(self.env.copy(), self.registry, self.config,
                        self.fs, self.cancel, stdin or self.stdin)

    def check_cancelled(self):
        if self.cancel.is_set():
            raise CancelledError()

    ############################################################################
    # Entrypoints
    ############################################################################

    def run(self, text: str) -> str:
        """Parse and execute `text`.
        Raise a ShellSyntaxError for invalid input.
        """
        program = parse_text(text, self.config.max_block_iterations)
        return self.execute(program)

    def run_script(self, text: str) -> str:
        """Run `text` line by line. Lines that fail do not stop the script.
        """
        return str(run_script(self, text))

    def execute(self, node: Node) -> str:
        method = 'execute_' + snake_case(node.type)
        logging.debug(f'{method}: {node}')
        return getattr(self, method)(node)

    def execute_block(self, statements: Tuple[Node, ...]) -> str:
        results = []
        for statement in statements:
            results.append(self.execute_statement(statement))

        return join_lines(results)

    def execute_statement(self, node: Node) -> str:
        """Execute a statement and render runtime errors inline.
        """
        self.check_cancelled()
        try:
            return self.execute(node)
        except ShellError as e:
            logging.info(f'{type(e).__name__}: {e}')
            self.set_status(str(e))
            return self.render_error(e)

    def render_error(self, error) -> str:
        return f'{self.config.error_prefix}: {error}'

    def set_status(self, status):
        self.status = status
        self.env.variables['?'] = '0' if is_success(status) else '1'

    ############################################################################
    # Statements
    ############################################################################

    def execute_program(self, node: Program) -> str:
        return self.execute_block(node.body)

    def execute_assignment(self, node: Assignment) -> str:
        value = node.value
        if node.expand:
            value = self.expander.expand(value)

        self.env[node.id] = value
        self.set_status(TRUE)
        return ''

    def execute_expression_statement(self, node: ExpressionStatement) -> str:
        if node.operator in ('>', '<') and self.is_command(node.left):
            # e.g. `cat > file`
            args = (Token('REDIRECTION', node.operator, node.operator),
                    Token('IDENTIFIER', node.right, node.right))
            return self.execute_command(Command(node.left, args))

        left = self.resolve_operand(node.left)
        right = self.resolve_operand(node.right)
        result = compare(left, node.operator, right)
        self.set_status(TRUE if result else FALSE)

        if result:
            return f'true: "{left}" {node.operator} "{right}"'

        operator = '!=' if node.operator == '==' else node.operator
        return f'false: "{left}" {operator} "{right}"'

    def execute_if_statement(self, node: IfStatement) -> str:
        results = []
        if self.evaluate_condition(node.test, results):
            results.append(self.execute_block(node.consequent))
        elif node.alternate is not None:
            results.append(self.execute_block(node.alternate))
        else:
            self.set_status(TRUE)

        return join_lines(results)

    def execute_while_statement(self, node: WhileStatement) -> str:
        results = []
        i = 0
        while True:
            self.check_cancelled()
            if not self.evaluate_condition(node.test, results):
                break

            if i >= self.config.max_loop_iterations:
                results.append(LOOP_LIMIT_MESSAGE)
                self.set_status(LOOP_LIMIT_MESSAGE)
                return join_lines(results)

            results.append(self.execute_block(node.body))
            i += 1

        self.set_status(TRUE)
        return join_lines(results)

    def execute_for_statement(self, node: ForStatement) -> str:
        values = []
        for token in node.values:
            values.extend(self.expander.words(token))

        results = []
        for i, value in enumerate(values):
            self.check_cancelled()
            if i >= self.config.max_loop_iterations:
                results.append(LOOP_LIMIT_MESSAGE)
                self.set_status(LOOP_LIMIT_MESSAGE)
                return join_lines(results)

            self.env[node.name] = value
            results.append(self.execute_block(node.body))

        return join_lines(results)

    def execute_case_statement(self, node: CaseStatement) -> str:
        value = self.resolve_operand(node.discriminant)
        for case in node.cases:
            if self.expander.expand(case.pattern) == value:
                return self.execute_block(case.body)

        self.set_status(TRUE)
        return ''

    def execute_function_definition(self, node: FunctionDefinition) -> str:
        self.env.define(node.name, node.body)
        self.set_status(TRUE)
        return ''

    def execute_function_call(self, node: FunctionCall) -> str:
        if self.env.depth >= self.config.max_call_depth:
            raise ShellError(f'maximum call depth exceeded in `{node.name}`')

        body = self.env.functions[node.name]
        with self.env.local_scope():
            self.bind_positional_parameters(node.args)
            program = parse_text(body, self.config.max_block_iterations)
            result = self.execute_block(program.body)

        # the status of the last statement outlives the local scope
        self.set_status(self.status)
        return result

    def execute_command(self, node: Command) -> str:
        if node.is_pipeline:
            output, status, errors = run_pipeline(self, node.stages())
            self.set_status(status)
            return join_lines([output] + [self.render_error(e) for e in errors])

        stdout = OutputBuffer()
        status = self.run_command(node, self.stdin, stdout)
        self.set_status(status)

        output = str(stdout)
        if isinstance(status, str) and not is_success(status) and not is_number(status):
            # a message returned by an invocable
            output = join_lines([output, self.render_error(status)])

        return output

    ############################################################################
    # Commands
    ############################################################################

    def run_command(self, node: Command, stdin: IOStream, stdout: IOStream):
        """Run a single command with the given streams and return its status.
        Functions are run as well; their output is written to `stdout`.
        """
        self.check_cancelled()
        name = self.command_name(node)
        args, redirections = split_redirections(node.args)
        args = [self.expander.expand_token(arg) for arg in args]

        output = stdout
        append = False
        target = None
        for operator, token in redirections:
            path = self.context(stdin, stdout).path(
                self.expander.expand_token(token))
            if operator == '<':
                stdin = InputText(self.fs.read(path))
            else:
                target, append = path, operator == '>>'
                output = OutputBuffer()

        if name in self.env.functions:
            status = self.call_function(name, args, stdin, output)
        else:
            logging.debug(f'run: {name} {args}')
            func = self.registry.resolve(name)
            status = func(self.context(stdin, output), *args)

        if target is not None:
            self.fs.write(target, output.getvalue(), append=append)

        return status

    def call_function(self, name: str, args: List[str], stdin: IOStream, stdout: IOStream):
        stdin, self.stdin = self.stdin, stdin
        try:
            result = self.execute_function_call(FunctionCall(name, tuple(args)))
        finally:
            self.stdin = stdin

        if result:
            stdout.writeln(result)

        # errors in the body are already part of the result
        return self.status if is_success(self.status) else FALSE

    def context(self, stdin: IOStream, stdout: IOStream) -> Context:
        return Context(self.env, stdin, stdout, self.fs, self.registry,
                       self.cancel, self.config, run=self.run_script)

    def command_name(self, node: Command) -> str:
        if node.name.startswith('$'):
            return self.expander.expand(node.name)
        return node.name

    def is_command(self, name: str) -> bool:
        return name in self.registry or name in self.env.functions

    def evaluate_condition(self, test: Command, results: List[str]) -> bool:
        results.append(self.execute_statement(test))
        return is_success(self.status)

    def resolve_operand(self, text: str) -> str:
        """Resolve a reference, or a bare variable name, to its value.
        Fall back to the literal text.
        """
        if '$' in text:
            return self.expander.expand(text)

        if name_pattern.fullmatch(text) and text in self.env:
            return self.env[text]

        return text

    def bind_positional_parameters(self, args: Tuple[str, ...]):
        for key in list(self.env.variables):
            if key.isdigit() and key != '0':
                del self.env.variables[key]

        for i, arg in enumerate(args, 1):
            self.env[str(i)] = arg

        self.env['#'] = len(args)
        self.env['@'] = ' '.join(args)


def split_redirections(tokens: Tuple[Token, ...]) -> Tuple[List[Token], List[Tuple[str, Token]]]:
    """Separate the arguments of a command from its redirections.
    """
    args, redirections = [], []
    tokens = list(tokens)
    while tokens:
        token = tokens.pop(0)
        if token.type != 'REDIRECTION':
            args.append(token)
            continue

        if not tokens:
            raise ShellError(f'Syntax error: expected a file after `{token.value}`')

        redirections.append((token.value, tokens.pop(0)))

    return args, redirections


def snake_case(name: str) -> str:
    return re.sub(r'(?<!^)([A-Z])', r'_\1', name).lower()
