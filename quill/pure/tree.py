"""Abstract syntax tree for the quill language.

```
<program>    ::= (<statement> ";"?)*
<statement>  ::= "let" <ident> ("=" <expr>)?
               | "return" <expr>?
               | <expr>
<block>      ::= "{" (<statement> ";"?)* "}"
<expr>       ::= <prefix_op> <expr>                       ; Prefix
               | <expr> <infix_op> <expr>                 ; Infix
               | "if" <expr> <block> ("else" (<if> | <block>))?
               | "fn" "(" (<ident> ("," <ident>)*)? ")" <block>
               | <expr> "(" (<expr> ("," <expr>)*)? ")"  ; Call
               | "(" <expr> ")"                           ; Group
               | <ident> | <number> | "true" | "false"
```

Nodes are frozen dataclasses and all child sequences are tuples: once the parser has built a tree, nothing mutates it.
str() of any node gives its canonical source form, with every Prefix/Infix fully parenthesised.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from quill.pure.tokens import format_number


def _block(statements):
    if not statements:
        return "{ }"
    return "{ " + "; ".join(str(statement) for statement in statements) + " }"


class Node:
    """Superclass of every statement and expression node."""


class Expression(Node):
    """Any node that evaluates to a value."""


class Statement(Node):
    """Any node that may appear directly in a program or block."""


@dataclass(frozen=True)
class Identifier(Expression):
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Num(Expression):
    value: float

    def __str__(self):
        return format_number(self.value)


@dataclass(frozen=True)
class Bool(Expression):
    value: bool

    def __str__(self):
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Prefix(Expression):
    """Unary "!" or "-"."""
    operator: str
    right: Expression

    def __str__(self):
        return f"({self.operator}{self.right})"


@dataclass(frozen=True)
class Infix(Expression):
    """Binary operator application. operator is the operator's source text."""
    left: Expression
    operator: str
    right: Expression

    def __str__(self):
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class If(Expression):
    """Conditional. alternate is empty without an else; an "else if" is a single ExpressionStmt holding another If."""
    condition: Expression
    outcome: Tuple[Statement, ...]
    alternate: Tuple[Statement, ...] = ()

    def __str__(self):
        result = f"if {self.condition} {_block(self.outcome)}"
        if self.alternate:
            result += f" else {_block(self.alternate)}"
        return result


@dataclass(frozen=True)
class Fn(Expression):
    """Function literal."""
    params: Tuple[str, ...]
    body: Tuple[Statement, ...]

    def __str__(self):
        return f"fn({', '.join(self.params)}) {_block(self.body)}"


@dataclass(frozen=True)
class Call(Expression):
    caller: Expression
    args: Tuple[Expression, ...] = ()

    def __str__(self):
        return f"{self.caller}({', '.join(str(arg) for arg in self.args)})"


@dataclass(frozen=True)
class Group(Expression):
    """Parenthesised expression. Only kept so the tree reflects the source; evaluates to inner."""
    inner: Expression

    def __str__(self):
        return str(self.inner)


@dataclass(frozen=True)
class Let(Statement):
    name: str
    value: Optional[Expression] = None

    def __str__(self):
        if self.value is None:
            return f"let {self.name}"
        return f"let {self.name} = {self.value}"


@dataclass(frozen=True)
class Return(Statement):
    value: Optional[Expression] = None

    def __str__(self):
        return "return" if self.value is None else f"return {self.value}"


@dataclass(frozen=True)
class ExpressionStmt(Statement):
    expression: Expression

    def __str__(self):
        return str(self.expression)


@dataclass
class Program:
    """Result of parsing one chunk of source: its statements and the ParseErrors found along the way."""
    statements: list
    errors: list

    def __str__(self):
        return "; ".join(str(statement) for statement in self.statements)
