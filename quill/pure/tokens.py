"""Token model for the quill language. Tokens are a closed set of kinds; only identifiers, numbers and illegal tokens
carry a payload.

```
<operator>    ::= "+" | "-" | "*" | "/" | "=" | "==" | "!=" | "!" | ">" | ">=" | "<" | "<="
<punctuation> ::= "," | ";" | "(" | ")" | "{" | "}" | "[" | "]"
<keyword>     ::= "let" | "fn" | "if" | "else" | "return" | "true" | "false"
<ident>       ::= <letter> (<letter> | <digit> | "_")*
<number>      ::= <digit> (<letter> | <digit> | ".")*   ; must also be a valid float, else illegal
```
"""

from dataclasses import dataclass, field
from enum import Enum


class TokenKind(Enum):
    """Every kind of token the lexer can produce. Values are the source text of fixed tokens."""
    EOF = "<eof>"
    ILLEGAL = "<illegal>"

    PLUS = "+"
    MINUS = "-"
    ASTERISK = "*"
    SLASH = "/"
    ASSIGN = "="
    EQ = "=="
    NOT_EQ = "!="
    BANG = "!"
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="

    COMMA = ","
    SEMICOLON = ";"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    LET = "let"
    FN = "fn"
    IF = "if"
    ELSE = "else"
    RETURN = "return"
    TRUE = "true"
    FALSE = "false"

    IDENT = "<ident>"
    NUM = "<num>"


KEYWORDS = {
    "let": TokenKind.LET,
    "fn": TokenKind.FN,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "return": TokenKind.RETURN,
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
}

# single-character tokens that never need lookahead
SINGLES = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.ASTERISK,
    "/": TokenKind.SLASH,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
}

# characters whose token depends on whether "=" follows: char: (single, double)
DOUBLES = {
    "=": (TokenKind.ASSIGN, TokenKind.EQ),
    "!": (TokenKind.BANG, TokenKind.NOT_EQ),
    ">": (TokenKind.GT, TokenKind.GTE),
    "<": (TokenKind.LT, TokenKind.LTE),
}


def format_number(num):
    """Shortest text for num: whole numbers drop their fractional part (5.0 -> "5"), others use repr."""
    num = float(num)
    if num.is_integer():
        return str(int(num))
    return repr(num)


@dataclass(frozen=True)
class Token:
    """A single lexical unit. start and end are source offsets, used for diagnostics only (not compared)."""
    kind: TokenKind
    value: object = None
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)

    @classmethod
    def ident(cls, name, start=0):
        return cls(TokenKind.IDENT, name, start, start + len(name))

    @classmethod
    def num(cls, literal, start=0):
        """Number token for literal (a str of source text or a number). Raises ValueError if it is not numeric."""
        return cls(TokenKind.NUM, float(literal), start, start + len(str(literal)))

    @property
    def literal(self):
        """Human readable text of this token, as used in error messages."""
        if self.kind is TokenKind.EOF:
            return "end of input"
        if self.kind is TokenKind.NUM:
            return format_number(self.value)
        if self.kind in (TokenKind.IDENT, TokenKind.ILLEGAL):
            return self.value
        return self.kind.value

    def __repr__(self):
        if self.value is None:
            return f"Token({self.kind.name})"
        return f"Token({self.kind.name}, {self.value!r})"
