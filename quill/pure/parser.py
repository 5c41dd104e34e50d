"""Recursive descent parser for the quill language. Statements are dispatched on their first token; expressions are
parsed by precedence climbing: a prefix production is resolved for the current token, then infix (and call)
productions are applied for as long as the lookahead token binds tighter than the precedence passed in.

Every parse method starts with self.cur_token on the first token of its production and leaves it on the last one.

Precedences, from loosest to tightest:

```
LOWEST
EQUALS       ; == !=
LESSGREATER  ; > >= < <=
SUM          ; + -
PRODUCT      ; * /
PREFIX       ; !x -x
CALL         ; f(x)
INDEX        ; a[i] (reserved: no index production exists)
```

A parse error only abandons the statement it occurs in: it is recorded in Program.errors and parsing resumes after
the next ";" (or at the next "let"/"return") that is not inside a block the statement opened, so one malformed
statement does not hide the rest of the program.
"""

from quill.lang.error import ParseError
from quill.pure.lexical import Lexer
from quill.pure.tokens import TokenKind
from quill.pure.tree import (
    Bool, Call, ExpressionStmt, Fn, Group, Identifier, If, Infix, Let, Num, Prefix, Program, Return
)

LOWEST, EQUALS, LESSGREATER, SUM, PRODUCT, PREFIX, CALL, INDEX = range(8)

PRECEDENCES = {
    TokenKind.EQ: EQUALS,
    TokenKind.NOT_EQ: EQUALS,
    TokenKind.GT: LESSGREATER,
    TokenKind.GTE: LESSGREATER,
    TokenKind.LT: LESSGREATER,
    TokenKind.LTE: LESSGREATER,
    TokenKind.PLUS: SUM,
    TokenKind.MINUS: SUM,
    TokenKind.ASTERISK: PRODUCT,
    TokenKind.SLASH: PRODUCT,
    TokenKind.LPAREN: CALL,
    TokenKind.LBRACKET: INDEX,
}

INFIX_OPERATORS = frozenset(kind for kind, precedence in PRECEDENCES.items() if precedence < CALL)

# tokens that may directly follow a bare "return"
RETURN_TERMINATORS = (TokenKind.SEMICOLON, TokenKind.RBRACE, TokenKind.EOF)


class Parser:
    """Builds a Program from the tokens of a Lexer."""

    def __init__(self, lexer):
        self.lexer = lexer
        self.source = lexer.source

        self.cur_token = lexer.next_token()
        self.peek_token = lexer.next_token()
        self._depth = 0  # braces opened before cur_token since the current statement started

        self._prefix_parsers = {
            TokenKind.IDENT: self._parse_identifier,
            TokenKind.NUM: self._parse_num,
            TokenKind.TRUE: self._parse_bool,
            TokenKind.FALSE: self._parse_bool,
            TokenKind.BANG: self._parse_prefix,
            TokenKind.MINUS: self._parse_prefix,
            TokenKind.LPAREN: self._parse_group,
            TokenKind.IF: self._parse_if,
            TokenKind.FN: self._parse_fn,
        }

    def next_token(self):
        if self.cur_token.kind is TokenKind.LBRACE:
            self._depth += 1
        elif self.cur_token.kind is TokenKind.RBRACE:
            self._depth -= 1
        self.cur_token, self.peek_token = self.peek_token, self.lexer.next_token()

    def parse_program(self):
        """Parses every statement in the source. Never raises ParseError: errors are collected in Program.errors."""
        program = Program([], [])

        while self.cur_token.kind is not TokenKind.EOF:
            if self.cur_token.kind is TokenKind.SEMICOLON:  # empty statement
                self.next_token()
                continue

            self._depth = 0
            try:
                program.statements.append(self._parse_statement())
            except ParseError as error:
                program.errors.append(error)
                self._synchronize()
                continue
            except RecursionError:
                error = ParseError("expression nested too deeply near '{}'", self.cur_token, self.source)
                program.errors.append(error)
                self._synchronize()
                continue

            self._end_statement()

        return program

    def _synchronize(self):
        """Skips past the token an error was raised on, then up to the start of the next statement. Tokens inside a
        block the failed statement opened belong to that statement, so only a ";", "let" or "return" outside of it ends
        the skip.
        """
        self.next_token()
        while self.cur_token.kind is not TokenKind.EOF:
            if self._depth > 0:
                self.next_token()
                continue
            if self.cur_token.kind is TokenKind.SEMICOLON:
                self.next_token()
                return
            if self.cur_token.kind in (TokenKind.LET, TokenKind.RETURN):
                return
            self.next_token()

    def _end_statement(self):
        """Moves from the last token of a statement to the first token of the next one, skipping an optional ";"."""
        if self.peek_token.kind is TokenKind.SEMICOLON:
            self.next_token()
        self.next_token()

    def _expect_peek(self, kind, expected):
        """Advances if the lookahead token is of kind, else raises a ParseError describing what was expected."""
        if self.peek_token.kind is not kind:
            exprs = [expected, self.peek_token.literal]
            raise ParseError("expected '{}', got '{}'", self.peek_token, self.source, exprs)
        self.next_token()

    def _peek_precedence(self):
        return PRECEDENCES.get(self.peek_token.kind, LOWEST)

    def _cur_precedence(self):
        return PRECEDENCES.get(self.cur_token.kind, LOWEST)

    # statements

    def _parse_statement(self):
        if self.cur_token.kind is TokenKind.LET:
            return self._parse_let()
        if self.cur_token.kind is TokenKind.RETURN:
            return self._parse_return()
        return ExpressionStmt(self._parse_expression(LOWEST))

    def _parse_let(self):
        """let <ident> [= <expr>]"""
        if self.peek_token.kind is not TokenKind.IDENT:
            msg = "expected identifier after 'let', got '{}'"
            raise ParseError(msg, self.peek_token, self.source)
        self.next_token()
        name = self.cur_token.value

        if self.peek_token.kind is not TokenKind.ASSIGN:
            return Let(name)

        self.next_token()
        self.next_token()
        return Let(name, self._parse_expression(LOWEST))

    def _parse_return(self):
        """return [<expr>]"""
        if self.peek_token.kind in RETURN_TERMINATORS:
            return Return()

        self.next_token()
        return Return(self._parse_expression(LOWEST))

    def _parse_block(self):
        """Parses "{ <statements> }" starting from the token before "{". Leaves self.cur_token on "}"."""
        self._expect_peek(TokenKind.LBRACE, "{")
        self.next_token()

        statements = []
        while self.cur_token.kind is not TokenKind.RBRACE:
            if self.cur_token.kind is TokenKind.EOF:
                raise ParseError("expected '{}', got '{}'", self.cur_token, self.source, ["}", self.cur_token.literal])
            if self.cur_token.kind is TokenKind.SEMICOLON:
                self.next_token()
                continue
            statements.append(self._parse_statement())
            self._end_statement()

        return tuple(statements)

    # expressions

    def _parse_expression(self, precedence):
        prefix = self._prefix_parsers.get(self.cur_token.kind)
        if prefix is None:
            raise self._no_prefix_error()
        left = prefix()

        while precedence < self._peek_precedence():
            kind = self.peek_token.kind
            if kind is TokenKind.LPAREN:
                self.next_token()
                left = self._parse_call(left)
            elif kind in INFIX_OPERATORS:
                self.next_token()
                left = self._parse_infix(left)
            else:
                return left

        return left

    def _no_prefix_error(self):
        token = self.cur_token
        if token.kind is TokenKind.ILLEGAL:
            return ParseError("illegal token '{}'", token, self.source)
        if token.kind is TokenKind.EOF:
            return ParseError("unexpected {}", token, self.source)
        return ParseError("unexpected token '{}'", token, self.source)

    def _parse_identifier(self):
        return Identifier(self.cur_token.value)

    def _parse_num(self):
        return Num(self.cur_token.value)

    def _parse_bool(self):
        return Bool(self.cur_token.kind is TokenKind.TRUE)

    def _parse_prefix(self):
        operator = self.cur_token.kind.value
        self.next_token()
        return Prefix(operator, self._parse_expression(PREFIX))

    def _parse_infix(self, left):
        operator = self.cur_token.kind.value
        precedence = self._cur_precedence()
        self.next_token()
        return Infix(left, operator, self._parse_expression(precedence))

    def _parse_group(self):
        self.next_token()
        inner = self._parse_expression(LOWEST)
        self._expect_peek(TokenKind.RPAREN, ")")
        return Group(inner)

    def _parse_if(self):
        """if [(] <expr> [)] { ... } [else (if ... | { ... })]. Parentheses around the condition belong to the if, so
        the condition is stored bare and nothing may follow the ")" but the block.
        """
        if self.peek_token.kind is TokenKind.LPAREN:
            self.next_token()
            self.next_token()
            condition = self._parse_expression(LOWEST)
            self._expect_peek(TokenKind.RPAREN, ")")
        else:
            self.next_token()
            condition = self._parse_expression(LOWEST)
        outcome = self._parse_block()

        alternate = ()
        if self.peek_token.kind is TokenKind.ELSE:
            self.next_token()
            if self.peek_token.kind is TokenKind.IF:
                self.next_token()
                alternate = (ExpressionStmt(self._parse_if()),)
            else:
                alternate = self._parse_block()

        return If(condition, outcome, alternate)

    def _parse_fn(self):
        """fn ( <ident>, ... ) { ... }"""
        self._expect_peek(TokenKind.LPAREN, "(")
        params = self._parse_params()
        return Fn(params, self._parse_block())

    def _parse_params(self):
        params = []
        if self.peek_token.kind is TokenKind.RPAREN:
            self.next_token()
            return tuple(params)

        while True:
            self._expect_peek(TokenKind.IDENT, "parameter name")
            if self.cur_token.value in params:
                raise ParseError("duplicate parameter '{}'", self.cur_token, self.source)
            params.append(self.cur_token.value)

            if self.peek_token.kind is not TokenKind.COMMA:
                break
            self.next_token()

        self._expect_peek(TokenKind.RPAREN, ")")
        return tuple(params)

    def _parse_call(self, caller):
        """Call production, entered with self.cur_token on "(". A trailing comma is an error."""
        args = []
        if self.peek_token.kind is TokenKind.RPAREN:
            self.next_token()
            return Call(caller, tuple(args))

        self.next_token()
        args.append(self._parse_expression(LOWEST))
        while self.peek_token.kind is TokenKind.COMMA:
            self.next_token()
            self.next_token()
            args.append(self._parse_expression(LOWEST))

        self._expect_peek(TokenKind.RPAREN, ")")
        return Call(caller, tuple(args))


def parse(source):
    """Parses source into a Program. Check Program.errors before evaluating it."""
    return Parser(Lexer(source)).parse_program()
