"""Lexical analysis for the quill language. Tokens are produced lazily, one per call to next_token, with a single
character of lookahead.

Numeric literals are read greedily: a leading digit consumes every following alphanumeric character and "." before
the text is converted. This means "12a" or "1.2.3" become a single illegal token rather than a number followed by an
identifier; the parser reports them when it reaches them.
"""

from quill.pure.tokens import DOUBLES, KEYWORDS, SINGLES, Token, TokenKind


class Lexer:
    """Converts source text into Tokens."""
    WHITESPACE = " \t\r\n"

    def __init__(self, source):
        self.source = source
        self.char = None    # current character (None at end of input)
        self.position = 0   # index of the character after self.char

        self._read_char()
        self._skip_whitespace()

    def next_token(self):
        """Returns the next Token. Once the source is exhausted, every call returns an EOF token."""
        start = self.position - 1 if self.char is not None else len(self.source)
        char = self.char

        if char is None:
            return Token(TokenKind.EOF, start=start, end=start)

        if char in SINGLES:
            token = Token(SINGLES[char], start=start, end=start + 1)

        elif char in DOUBLES:
            single, double = DOUBLES[char]
            if self._peek_char() == "=":
                self._read_char()
                token = Token(double, start=start, end=start + 2)
            else:
                token = Token(single, start=start, end=start + 1)

        elif "0" <= char <= "9":
            literal = self._read_while(lambda c: c.isalnum() or c == ".")
            try:
                token = Token.num(literal, start)
            except ValueError:
                token = Token(TokenKind.ILLEGAL, literal, start, start + len(literal))

        elif char.isascii() and char.isalpha():
            literal = self._read_while(lambda c: c.isalnum() or c == "_")
            if literal in KEYWORDS:
                token = Token(KEYWORDS[literal], start=start, end=start + len(literal))
            else:
                token = Token.ident(literal, start)

        else:
            token = Token(TokenKind.ILLEGAL, char, start, start + 1)

        self._read_char()
        self._skip_whitespace()
        return token

    def _read_char(self):
        """Advances to the next character of the source."""
        if self.position >= len(self.source):
            self.char = None
            self.position = len(self.source) + 1
        else:
            self.char = self.source[self.position]
            self.position += 1

    def _peek_char(self):
        """Returns the character after self.char without consuming it (None at end of input)."""
        if self.position >= len(self.source):
            return None
        return self.source[self.position]

    def _read_while(self, predicate):
        """Consumes characters while predicate holds for the next one. Leaves self.char on the last consumed
        character and returns the consumed text, which always includes self.char.
        """
        literal = self.char
        while self._peek_char() is not None and predicate(self._peek_char()):
            self._read_char()
            literal += self.char
        return literal

    def _skip_whitespace(self):
        while self.char is not None and self.char in Lexer.WHITESPACE:
            self._read_char()

    def __iter__(self):
        """Yields tokens up to (but not including) EOF."""
        token = self.next_token()
        while token.kind is not TokenKind.EOF:
            yield token
            token = self.next_token()
