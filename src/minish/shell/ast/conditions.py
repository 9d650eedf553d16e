from dataclasses import dataclass
from typing import Optional, Tuple

from minish.shell.ast.node import Command, Node
from minish.shell.grammer.tokenizer import Token


@dataclass(frozen=True)
class IfStatement(Node):
    test: Command
    consequent: Tuple[Node, ...] = ()
    alternate: Optional[Tuple[Node, ...]] = None


@dataclass(frozen=True)
class WhileStatement(Node):
    test: Command
    body: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class ForStatement(Node):
    variable: str
    values: Tuple[Token, ...] = ()
    body: Tuple[Node, ...] = ()

    @property
    def name(self) -> str:
        """The loop variable without a leading `$`.
        """
        return self.variable[1:] if self.variable.startswith('$') else self.variable


@dataclass(frozen=True)
class CaseClause:
    pattern: str
    body: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class CaseStatement(Node):
    discriminant: str
    cases: Tuple[CaseClause, ...] = ()
