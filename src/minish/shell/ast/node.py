"""
Node
----

A node of an abstract syntax tree (AST).
Nodes only hold data; they are evaluated by `minish.shell.executor.Executor`.

.. code-block:: bash

    Node
    ├── Program
    ├── Command
    ├── Assignment
    ├── ExpressionStatement
    ├── FunctionDefinition
    ├── FunctionCall
    └── Statement
        ├── IfStatement
        ├── ForStatement
        ├── WhileStatement
        └── CaseStatement
"""
from dataclasses import dataclass, field
from typing import Tuple

from minish.shell.grammer.tokenizer import Token


class Node:
    @property
    def type(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class Program(Node):
    body: Tuple[Node, ...] = ()

    def __iter__(self):
        return iter(self.body)

    def __len__(self):
        return len(self.body)


@dataclass(frozen=True)
class Command(Node):
    """A flat run of tokens. The arguments may contain PIPE tokens.

    .. code-block:: sh

        f args | g args
    """
    name: str
    args: Tuple[Token, ...] = ()

    @property
    def is_pipeline(self) -> bool:
        return any(arg.type == 'PIPE' for arg in self.args)

    def stages(self) -> Tuple['Command', ...]:
        """Split a pipeline into separate commands.
        """
        stages = []
        name, args = self.name, []
        for arg in self.args:
            if arg.type == 'PIPE':
                stages.append(Command(name, tuple(args)))
                name, args = None, []
            elif name is None:
                name = arg.text
            else:
                args.append(arg)

        stages.append(Command(name, tuple(args)))
        return tuple(stages)

    def __str__(self):
        return ' '.join([str(self.name)] + [arg.raw or arg.text for arg in self.args])


@dataclass(frozen=True)
class Assignment(Node):
    id: str
    value: str
    expand: bool = True


@dataclass(frozen=True)
class ExpressionStatement(Node):
    """A comparison, e.g. `$a == 10`
    """
    left: str
    operator: str
    right: str


@dataclass(frozen=True)
class FunctionDefinition(Node):
    """The body is stored as text and parsed when the function is called.
    """
    name: str
    body: str = ''


@dataclass(frozen=True)
class FunctionCall(Node):
    name: str
    args: Tuple[str, ...] = field(default_factory=tuple)
