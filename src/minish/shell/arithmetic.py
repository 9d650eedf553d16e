"""Evaluate the body of `$(( expr ))`.

The expression is parsed with `ast` and only a whitelist of nodes is evaluated:
numbers, names, `+ - * /`, unary signs and parentheses.
"""
from typing import Callable, Union
import ast
import logging
import operator
import re

from minish.errors import ShellArithmeticError
from minish.util import crop, format_number, is_number, to_number

Number = Union[int, float]

BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}

UNARY_OPERATORS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

dollar_name = re.compile(r'\$\{?([a-zA-Z_][a-zA-Z_0-9]*|\d+)\}?')


def strip_delimiters(text: str) -> str:
    """Convert `$(( expr ))` to `expr`.
    """
    text = text.strip()
    if text.startswith('$((') and text.endswith('))'):
        return text[3:-2]
    return text


class ArithmeticEvaluator:
    """Safe arithmetic evaluator.

    Names are resolved with `lookup`; names that are unset or non-numeric
    evaluate to zero.
    """

    def __init__(self, lookup: Callable[[str], Union[str, None]] = None):
        self.lookup = lookup or (lambda name: None)

    def evaluate(self, expr: str) -> Number:
        expr = strip_delimiters(expr)

        # $name is equivalent to name
        expr = dollar_name.sub(lambda m: self.variable(m.group(1)), expr)

        if not expr.strip():
            return 0

        try:
            tree = ast.parse(expr.strip(), mode='eval')
        except (SyntaxError, ValueError):
            raise ShellArithmeticError(f'Invalid arithmetic expression: {crop(expr, 40)}')
        except (RecursionError, MemoryError):
            raise ShellArithmeticError('Arithmetic expression is too complex')

        try:
            return self.eval_node(tree.body)
        except (RecursionError, MemoryError):
            raise ShellArithmeticError('Arithmetic expression is too complex')
        except (OverflowError, ValueError) as e:
            raise ShellArithmeticError(f'Invalid arithmetic: {e}')

    def render(self, expr: str) -> str:
        result = self.evaluate(expr)
        logging.debug(f'arithmetic: {expr} -> {result}')
        return format_number(result)

    def variable(self, name: str) -> str:
        value = self.lookup(name)
        if value is None or not is_number(value):
            return '0'
        return str(value).strip()

    def eval_node(self, node: ast.AST) -> Number:
        if isinstance(node, ast.Constant) and type(node.value) in (int, float):
            return node.value

        if isinstance(node, ast.Name):
            return to_number(self.variable(node.id))

        if isinstance(node, ast.UnaryOp) and type(node.op) in UNARY_OPERATORS:
            return UNARY_OPERATORS[type(node.op)](self.eval_node(node.operand))

        if isinstance(node, ast.BinOp) and type(node.op) in BINARY_OPERATORS:
            left = self.eval_node(node.left)
            right = self.eval_node(node.right)
            if isinstance(node.op, ast.Div) and right == 0:
                raise ShellArithmeticError('Division by zero')

            return BINARY_OPERATORS[type(node.op)](left, right)

        raise ShellArithmeticError(
            f'Unsupported arithmetic: {ast.dump(node)}')


def evaluate(expr: str, lookup: Callable[[str], Union[str, None]] = None) -> str:
    return ArithmeticEvaluator(lookup).render(expr)
