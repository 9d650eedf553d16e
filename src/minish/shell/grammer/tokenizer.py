from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator
import logging
import re
import ply.lex as lex
from ply.lex import TOKEN

from minish.shell.grammer.literals import keywords, word_chars

tokens = (
    'KEYWORD',  # if then else fi ..
    'NEWLINE',  # \n, emitted as SEMICOLON
    'DOUBLE_QUOTED_STRING',  # "a $b"
    'SINGLE_QUOTED_STRING',  # 'a $b'
    'ARITHMETIC',  # $(( 1 + 2 ))
    'VARIABLE',  # $x
    'ASSIGNMENT',  # x=1
    'DOUBLE_SEMICOLON',  # ;;
    'SEMICOLON',  # ;
    'PIPE',  # |
    'OPERATOR',  # == != <= >=
    'REDIRECTION',  # > >> <
    'LBRACKET',  # [
    'RBRACKET',  # ]
    'BRACKET',  # ( )
    'FUNCTION_START',  # {
    'FUNCTION_END',  # }
    'NUMBER',  # -12 3.14
    'IDENTIFIER',  # some-file.txt
    'UNKNOWN',
)

# a word must not continue after a keyword or number
boundary = f'(?![{word_chars}=$])'

arithmetic = r'\$\(\((?:[^()]|\([^()]*\))*\)\)'
assignment = re.compile(
    r'([a-zA-Z_][a-zA-Z_0-9]*)=("[^"]*"|\'[^\']*\'|' + arithmetic + r'|[^\s;|&<>]*)')
variable = re.compile(r'\$\{?([a-zA-Z_][a-zA-Z_0-9]*|\d+|[#@?])\}?')


@dataclass(frozen=True)
class Token:
    """A lexical unit.

    Properties
    ----------
    type : str
        The kind of token, e.g. KEYWORD or ASSIGNMENT.
    value : str
        The semantic value. Quotes are omitted from strings.
    raw : str
        The exact source text.
    name : str
        The extracted name of a variable or assignment.
    """
    type: str
    value: str
    raw: str = ''
    name: str = None
    pos: int = 0

    @property
    def text(self) -> str:
        """The value of the token as a command argument.
        """
        if self.type == 'ASSIGNMENT':
            return f'{self.name}={self.value}'
        return self.value

    @property
    def quoted(self) -> bool:
        return self.type in ('DOUBLE_QUOTED_STRING', 'SINGLE_QUOTED_STRING')


def main():
    """
    Token regexes are defined with the prefix `t_`.
    From ply docs:

    * functions are matched in order of definition
    * strings are sorted by regular expression length

    Only functions are used, s.t. the order of the rules is explicit.
    """

    t_ignore = ' \t\r'

    # keywords are matched before anything else
    @TOKEN('(?:' + '|'.join(keywords) + ')' + boundary)
    def t_KEYWORD(t):
        return t

    def t_COMMENT(t):
        r'\#[^\n]*'

    def t_NEWLINE(t):
        r'\n'
        t.lexer.lineno += 1
        t.type = 'SEMICOLON'
        t.value = ';'
        return t

    def t_DOUBLE_QUOTED_STRING(t):
        r'"(?:\\.|[^"\\])*"'
        t.value = t.value[1:-1].replace('\\"', '"')
        return t

    def t_SINGLE_QUOTED_STRING(t):
        r"'[^']*'"
        t.value = t.value[1:-1]
        return t

    @TOKEN(arithmetic)
    def t_ARITHMETIC(t):
        return t

    @TOKEN(r'(?:\$\{[a-zA-Z_][a-zA-Z_0-9]*\}|\$(?:[a-zA-Z_][a-zA-Z_0-9]*|\d+|[\#@?]))' + boundary)
    def t_VARIABLE(t):
        return t

    @TOKEN(assignment.pattern)
    def t_ASSIGNMENT(t):
        return t

    def t_DOUBLE_SEMICOLON(t):
        r';;'
        return t

    def t_SEMICOLON(t):
        r';'
        return t

    def t_PIPE(t):
        r'\|'
        return t

    def t_OPERATOR(t):
        r'==|!=|<=|>='
        return t

    def t_REDIRECTION(t):
        r'>>|>|<'
        return t

    def t_LBRACKET(t):
        r'\['
        return t

    def t_RBRACKET(t):
        r'\]'
        return t

    def t_BRACKET(t):
        r'[()]'
        return t

    def t_FUNCTION_START(t):
        r'\{'
        return t

    def t_FUNCTION_END(t):
        r'\}'
        return t

    @TOKEN(r'-?\d+(?:\.\d+)?' + boundary)
    def t_NUMBER(t):
        return t

    # a word may contain references, e.g. `$name.txt`
    @TOKEN(rf'(?:[{word_chars}]|\$\{{[a-zA-Z_0-9]+\}}|\$)+')
    def t_IDENTIFIER(t):
        return t

    def t_UNKNOWN(t):
        r'.'
        return t

    def t_error(t):
        t.type = 'UNKNOWN'
        t.value = t.value[0]
        t.lexer.skip(1)
        return t

    return lex.lex(reflags=0)


@lru_cache(maxsize=1)
def lexer():
    return main()


def tokenize(data: str) -> Iterator[Token]:
    """Convert `data` into a sequence of tokens.
    Any input is accepted: unrecognized characters become UNKNOWN tokens.
    """
    # clone the cached lexer to allow concurrent use
    tokenizer = lexer().clone()
    tokenizer.input(data)

    while True:
        t = tokenizer.token()
        if not t:
            break

        yield to_token(t)


def to_token(t) -> Token:
    raw = t.lexer.lexdata[t.lexpos:t.lexer.lexpos]
    value = t.value
    name = None

    if t.type == 'VARIABLE':
        name = variable.match(raw).group(1)
        value = f'${name}'

    elif t.type == 'ASSIGNMENT':
        name, value = assignment.match(raw).groups()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
            value = value[1:-1]

    return Token(t.type, value, raw, name, t.lexpos)


def token_list(data: str) -> list:
    tokens = list(tokenize(data))
    logging.debug(f'tokenize: {tokens}')
    return tokens
