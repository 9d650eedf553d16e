from typing import List, Union
import re

from minish.shell.arithmetic import ArithmeticEvaluator
from minish.shell.config import ShellConfig
from minish.shell.env import Environment
from minish.shell.grammer.tokenizer import Token, arithmetic

reference = re.compile(
    f'(?P<arithmetic>{arithmetic})'
    r'|\$\{(?P<braced>[a-zA-Z_][a-zA-Z_0-9]*|\d+|[#@?])\}'
    r'|\$(?P<name>[a-zA-Z_][a-zA-Z_0-9]*|\d+|[#@?])')


class Expander:
    """Resolve variable and arithmetic references in command arguments.

    Unresolved references are kept as literal text, unless the config option
    `expand_unset_to_empty` is enabled.
    """

    def __init__(self, env: Environment, config: ShellConfig = None):
        self.env = env
        self.config = config or ShellConfig()
        self.evaluator = ArithmeticEvaluator(self.lookup)

    def lookup(self, name: str) -> Union[str, None]:
        return self.env.get(name)

    def expand_token(self, token: Token) -> str:
        if token.type == 'SINGLE_QUOTED_STRING':
            return token.value

        if token.type == 'ASSIGNMENT' and token.raw.split('=', 1)[1].startswith("'"):
            return token.text

        if token.type == 'ARITHMETIC':
            return self.arithmetic(token.value)

        return self.expand(token.text)

    def expand(self, text: str) -> str:
        """Substitute each reference in `text`.
        A `$(( expr ))` form is evaluated as arithmetic.
        """
        if '$' not in text:
            return text

        return reference.sub(self._substitute, text)

    def arithmetic(self, expr: str) -> str:
        return self.evaluator.render(expr)

    def words(self, token: Token) -> List[str]:
        """Expand a token into a list of words, e.g. for loop values.
        Unquoted references are split on whitespace.
        """
        value = self.expand_token(token)
        if token.quoted or token.type not in ('VARIABLE', 'ARITHMETIC'):
            return [value]

        return value.split()

    def _substitute(self, match: re.Match) -> str:
        if match.group('arithmetic'):
            return self.arithmetic(match.group('arithmetic'))

        name = match.group('braced') or match.group('name')
        value = self.lookup(name)
        if value is not None:
            return value

        if self.config.expand_unset_to_empty:
            return ''

        return match.group(0)
