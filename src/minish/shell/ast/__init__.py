from minish.shell.ast.conditions import CaseClause, CaseStatement, ForStatement, IfStatement, WhileStatement
from minish.shell.ast.node import Assignment, Command, ExpressionStatement, FunctionCall, FunctionDefinition, Node, Program
