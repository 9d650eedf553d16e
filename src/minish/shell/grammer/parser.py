"""Parse tokens.
Tokens are defined in shell.grammer.tokenizer

Parsing rules;

.. code-block:: yaml

    program: a SEMICOLON-separated sequence of statement
    statement:
        - function_definition
        - if_statement
        - for_statement
        - while_statement
        - case_statement
        - expression_statement
        - assignment
        - command
    condition: command or `[ args ]`
    command: a flat run of tokens, optionally separated by PIPE

"""
from dataclasses import replace
from logging import getLogger
from typing import Iterable, List, Sequence, Tuple, Union

from minish.errors import ShellSyntaxError
from minish.shell.ast import Assignment, CaseClause, CaseStatement, Command, ExpressionStatement, ForStatement, \
    FunctionDefinition, IfStatement, Node, Program, WhileStatement
from minish.shell.grammer.literals import CASE, DO, DONE, ELIF, ELSE, ESAC, FI, FOR, FUNCTION, IF, IN, THEN, WHILE, \
    comparators, terminators
from minish.shell.grammer.tokenizer import Token, token_list

log = getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 100

# tokens that may start a comparison
OPERANDS = ('IDENTIFIER', 'NUMBER', 'DOUBLE_QUOTED_STRING',
            'SINGLE_QUOTED_STRING', 'VARIABLE')

CONTROL = ('KEYWORD', 'SEMICOLON', 'DOUBLE_SEMICOLON')


class Parser:
    """A recursive descent parser with a lookahead of three tokens.
    """

    def __init__(self, tokens: Sequence[Token], max_iterations=DEFAULT_MAX_ITERATIONS):
        self.tokens = list(tokens)
        self.pos = 0
        self.max_iterations = max_iterations

    def peek(self, offset=0) -> Union[Token, None]:
        i = self.pos + offset
        if i < len(self.tokens):
            return self.tokens[i]

    def consume(self) -> Token:
        token = self.peek()
        if token is None:
            raise ShellSyntaxError('Unexpected end of input')

        self.pos += 1
        return token

    def eof(self) -> bool:
        return self.pos >= len(self.tokens)

    def next_is(self, *values: str, offset=0) -> bool:
        """Check whether the next token is one of the control tokens `values`.
        Quoted strings never match.
        """
        token = self.peek(offset)
        return token is not None and token.type in CONTROL and token.value in values

    def next_type_is(self, *types: str, offset=0) -> bool:
        token = self.peek(offset)
        return token is not None and token.type in types

    def expect(self, value: str, msg: str) -> Token:
        if not self.next_is(value):
            raise ShellSyntaxError(f'Syntax error: {msg}')
        return self.consume()

    def skip_semicolons(self):
        while self.next_type_is('SEMICOLON'):
            self.consume()

    ############################################################################
    # Statements
    ############################################################################

    def parse(self) -> Program:
        statements = []
        while not self.eof():
            self.skip_semicolons()

            if not self.eof():
                statements.append(self.parse_statement())

        program = Program(tuple(statements))
        log.debug(f'ast: {program}')
        return program

    def parse_statement(self) -> Node:
        token = self.peek()

        if self.next_is(*terminators) or self.next_type_is('DOUBLE_SEMICOLON'):
            raise ShellSyntaxError(
                f'Syntax error: unexpected token `{token.value}`')

        if token.type == 'KEYWORD':
            if token.value == FUNCTION:
                return self.parse_function_definition()
            elif token.value == IF:
                return self.parse_if()
            elif token.value == FOR:
                return self.parse_for()
            elif token.value == WHILE:
                return self.parse_while()
            elif token.value == CASE:
                return self.parse_case()

        # f() { .. }
        if token.type == 'IDENTIFIER' and self.is_bracket('(', offset=1) \
                and self.is_bracket(')', offset=2):
            return self.parse_function_definition()

        if token.type in OPERANDS:
            start = self.pos
            self.consume()
            # commit only to a complete `operand comparator operand` statement,
            # s.t. `cat < in.txt | grep a` remains a command
            if self.is_comparator(self.peek()) and self.is_operand(self.peek(1)) \
                    and self.ends_statement(offset=2):
                self.pos = start
                return self.parse_expression()

            # rewind
            self.pos = start

        return self.parse_command()

    def parse_command(self) -> Node:
        tokens = []
        while not self.eof() and not self.at_terminator():
            tokens.append(self.consume())

        if not tokens:
            token = self.peek()
            found = 'end of input' if token is None else f'`{token.value}`'
            raise ShellSyntaxError(f'Syntax error: expected a command near {found}')

        if len(tokens) == 1 and tokens[0].type == 'ASSIGNMENT':
            return to_assignment(tokens[0])

        verify_pipes(tokens)
        if tokens[0].type == 'LBRACKET':
            tokens = [as_comparison(token) for token in tokens]

        head, *args = tokens
        return Command(head.text, tuple(args))

    def parse_expression(self) -> ExpressionStatement:
        left = self.consume().text
        operator = self.consume().value
        right = self.consume().text
        return ExpressionStatement(left, operator, right)

    def parse_condition(self, keyword: str) -> Command:
        """Parse either a command or the `[ args ]` form.
        The latter is rewritten to `test args`.
        """
        if self.next_type_is('LBRACKET'):
            self.consume()

            args = []
            while not self.eof() and not self.next_type_is('RBRACKET'):
                token = self.consume()
                if token.type != 'SEMICOLON':
                    args.append(as_comparison(token))

            if self.eof():
                raise ShellSyntaxError(
                    'Syntax error: expected "]" to close condition')

            self.consume()
            return Command('test', tuple(args))

        if self.eof() or self.at_terminator():
            raise ShellSyntaxError(
                f'Syntax error: expected a condition after "{keyword}"')

        condition = self.parse_command()
        if not isinstance(condition, Command):
            raise ShellSyntaxError(
                f'Syntax error: expected a command after "{keyword}"')

        return condition

    def parse_block(self, *end: str) -> Tuple[Node, ...]:
        """Parse statements until one of the tokens in `end` is found.
        The end token is not consumed.
        """
        body = []
        iterations = 0
        while not self.eof() and not self.next_is(*end):
            if self.next_type_is('SEMICOLON'):
                self.consume()
                continue

            if iterations >= self.max_iterations:
                raise ShellSyntaxError(
                    'Syntax error: possible infinite loop detected in block parsing')

            body.append(self.parse_statement())
            iterations += 1

        return tuple(body)

    ############################################################################
    # Compound statements
    ############################################################################

    def parse_if(self) -> IfStatement:
        keyword = self.consume().value
        test = self.parse_condition(keyword)
        self.skip_semicolons()
        self.expect(THEN, f'expected "then" after condition of "{keyword}"')

        consequent = self.parse_block(ELSE, ELIF, FI)

        if self.next_is(ELIF):
            # the nested statement consumes the final `fi`
            alternate = (self.parse_if(),)
            return IfStatement(test, consequent, alternate)

        alternate = None
        if self.next_is(ELSE):
            self.consume()
            alternate = self.parse_block(FI)

        self.expect(FI, 'expected "fi" to close if statement')
        return IfStatement(test, consequent, alternate)

    def parse_for(self) -> ForStatement:
        self.consume()

        if not self.next_type_is('IDENTIFIER', 'VARIABLE'):
            raise ShellSyntaxError('Syntax error: expected variable name after "for"')

        variable = self.consume().text

        self.skip_semicolons()
        self.expect(IN, 'expected "in" after variable name')

        values = []
        while not self.eof() and not self.next_is(DO):
            token = self.consume()
            if token.type != 'SEMICOLON':
                values.append(token)

        self.expect(DO, 'expected "do" after loop values')
        body = self.parse_block(DONE)
        self.expect(DONE, 'missing "done" keyword in for loop')
        return ForStatement(variable, tuple(values), body)

    def parse_while(self) -> WhileStatement:
        keyword = self.consume().value
        test = self.parse_condition(keyword)
        self.skip_semicolons()
        self.expect(DO, 'expected "do" after while condition')

        body = self.parse_block(DONE)
        self.expect(DONE, 'missing "done" keyword in while loop')
        return WhileStatement(test, body)

    def parse_case(self) -> CaseStatement:
        self.consume()
        if self.eof() or self.at_terminator():
            raise ShellSyntaxError('Syntax error: expected a value after "case"')

        discriminant = self.consume().text
        self.skip_semicolons()
        self.expect(IN, 'expected "in" after case value')
        self.skip_semicolons()

        cases = []
        while not self.eof() and not self.next_is(ESAC):
            if self.is_bracket('('):
                self.consume()

            pattern = self.consume().text
            if not self.is_bracket(')'):
                raise ShellSyntaxError(
                    f'Syntax error: expected ")" after case pattern `{pattern}`')
            self.consume()

            body = self.parse_block(';;', ESAC)
            if self.next_type_is('DOUBLE_SEMICOLON'):
                self.consume()

            cases.append(CaseClause(pattern, body))
            self.skip_semicolons()

        self.expect(ESAC, 'expected "esac" to close case statement')
        return CaseStatement(discriminant, tuple(cases))

    def parse_function_definition(self) -> FunctionDefinition:
        if self.next_is(FUNCTION):
            self.consume()

        if self.eof() or self.peek().type not in ('IDENTIFIER', 'KEYWORD'):
            raise ShellSyntaxError('Syntax error: expected a function name')

        name = self.consume().text

        if self.is_bracket('('):
            self.consume()
            if not self.is_bracket(')'):
                raise ShellSyntaxError(
                    f'Syntax error: expected ")" in definition of `{name}`')
            self.consume()

        self.skip_semicolons()
        if not self.next_type_is('FUNCTION_START'):
            raise ShellSyntaxError(
                f'Syntax error: expected "{{" to start the body of `{name}`')
        self.consume()

        depth = 1
        body = []
        while True:
            if self.eof():
                raise ShellSyntaxError(
                    f'Syntax error: expected "}}" to close the body of `{name}`')

            token = self.consume()
            if token.type == 'FUNCTION_START':
                depth += 1
            elif token.type == 'FUNCTION_END':
                depth -= 1
                if depth == 0:
                    break

            body.append(token)

        return FunctionDefinition(name, join_tokens(body))

    ############################################################################
    # Helpers
    ############################################################################

    def at_terminator(self) -> bool:
        return self.next_is(*terminators)

    def ends_statement(self, offset=0) -> bool:
        token = self.peek(offset)
        return token is None or (token.type in CONTROL and token.value in terminators)

    def is_bracket(self, value: str, offset=0) -> bool:
        token = self.peek(offset)
        return token is not None and token.type == 'BRACKET' and token.value == value

    def is_comparator(self, token: Token) -> bool:
        return token is not None and token.type in ('OPERATOR', 'REDIRECTION') \
            and token.value in comparators

    def is_operand(self, token: Token) -> bool:
        return token is not None and token.type not in CONTROL + ('PIPE',)


def to_assignment(token: Token) -> Assignment:
    _, value = token.raw.split('=', 1)
    literal = value.startswith("'")
    return Assignment(token.name, token.value, expand=not literal)


def as_comparison(token: Token) -> Token:
    """Inside `[ .. ]`, `<` and `>` compare values instead of redirecting.
    """
    if token.type == 'REDIRECTION' and token.value in ('<', '>'):
        return replace(token, type='OPERATOR')
    return token


def verify_pipes(tokens: List[Token]):
    """Reject empty pipeline stages.
    """
    previous = None
    for token in tokens:
        if token.type == 'PIPE' and (previous is None or previous.type == 'PIPE'):
            raise ShellSyntaxError('Syntax error: unexpected token `|`')
        previous = token

    if previous is not None and previous.type == 'PIPE':
        raise ShellSyntaxError('Syntax error: unexpected end of pipeline')


def join_tokens(tokens: Iterable[Token]) -> str:
    """Reconstruct source text from tokens.
    """
    return ' '.join(token.raw for token in tokens).strip()


def parse(tokens: Sequence[Token], max_iterations=DEFAULT_MAX_ITERATIONS) -> Program:
    return Parser(tokens, max_iterations).parse()


def parse_text(text: str, max_iterations=DEFAULT_MAX_ITERATIONS) -> Program:
    if not isinstance(text, str):
        raise ValueError(text)

    return parse(token_list(text), max_iterations)
