"""Run a script line by line.

Multi-line blocks are reassembled into a single logical line:

.. code-block:: sh

    for i in 1 2 3; do
        echo $i
    done

becomes `for i in 1 2 3; do echo $i; done`.
A line that fails does not stop the script.
"""
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List
import logging

from minish.errors import ShellSyntaxError
from minish.shell.grammer.literals import CASE, DO, DONE, ELSE, ESAC, FI, FOR, IF, IN, THEN, WHILE, is_success
from minish.shell.grammer.tokenizer import token_list

openers = [IF, FOR, WHILE, CASE]
closers = [FI, DONE, ESAC]

# a line that ends with one of these words continues without a separator
# e.g. `do` in `for i in 1 2; do`
continuations = ('{', THEN, DO, ELSE, IN, '|')


@dataclass
class ScriptResult:
    output: List[str] = field(default_factory=list)
    success: bool = True
    error: str = None

    def __str__(self):
        return '\n'.join(line for line in self.output if line)


def depth_change(line: str) -> int:
    change = 0
    for token in token_list(line):
        if token.type == 'KEYWORD' and token.value in openers:
            change += 1
        elif token.type == 'KEYWORD' and token.value in closers:
            change -= 1
        elif token.type == 'FUNCTION_START':
            change += 1
        elif token.type == 'FUNCTION_END':
            change -= 1

    return change


def join_block(lines: List[str]) -> str:
    text = ''
    for i, line in enumerate(lines):
        text += line
        if i == len(lines) - 1:
            break

        if line.endswith((';', '{', '|')) or line.split()[-1] in continuations:
            text += ' '
        else:
            text += '; '

    return text


def logical_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield statements, where each block is joined into a single line.
    Blank lines and comments are skipped.
    """
    block = []
    depth = 0
    for line in lines:
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        block.append(line)
        depth += depth_change(line)
        if depth <= 0:
            yield join_block(block)
            block = []
            depth = 0

    if block:
        # an unterminated block is reported by the parser
        yield join_block(block)


def run_lines(executor, lines: Iterable[str]) -> ScriptResult:
    result = ScriptResult()
    for line in logical_lines(lines):
        logging.debug(f'script: {line}')
        try:
            output = executor.run(line)
            success = is_success(executor.status)
            error = None if success else str(executor.status)
        except ShellSyntaxError as e:
            output = executor.render_error(e)
            success = False
            error = str(e)

        result.output.append(output)
        if not success:
            result.success = False
            result.error = error

    return result


def run_script(executor, text: str) -> ScriptResult:
    return run_lines(executor, text.splitlines())
