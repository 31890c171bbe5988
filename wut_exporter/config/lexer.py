"""
Tokenizer for the nginx-like configuration syntax.

Recognizes:
- Identifiers (directive and block names)
- Quoted strings with backslash escapes
- Numbers and durations with a unit suffix (500ms, 30s, 2m, 1h)
- Booleans (on, off, true, false)
- Braces and semicolons
- '#' line comments and '/* */' block comments
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


class TokenType(Enum):
    """Token types produced by the lexer."""

    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    DURATION = auto()
    BOOLEAN = auto()

    LBRACE = auto()
    RBRACE = auto()
    SEMICOLON = auto()

    INCLUDE = auto()
    EOF = auto()


@dataclass
class Token:
    """A single token with its source position."""

    type: TokenType
    value: str | int | float | bool
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class LexerError(Exception):
    """Raised when the source cannot be tokenized."""

    def __init__(self, message: str, line: int, column: int):
        self.line = line
        self.column = column
        super().__init__(f"Line {line}, column {column}: {message}")


class Lexer:
    """
    Character-level scanner over a configuration source.

    Example:
        snmp {
            timeout 30s;
            retries 3;
        }

        target "10.0.0.5" { room "Kitchen"; }
    """

    BOOLEAN_KEYWORDS = {"on": True, "off": False, "true": True, "false": False}

    # Duration units in seconds
    DURATION_UNITS = {
        "ms": 0.001,
        "s": 1,
        "m": 60,
        "h": 3600,
    }

    ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\"}

    SINGLE_CHARS = {
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
        ";": TokenType.SEMICOLON,
    }

    def __init__(self, source: str, filename: str = "<string>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    def _current(self) -> str:
        return self.source[self.pos] if self.pos < len(self.source) else ""

    def _peek(self) -> str:
        pos = self.pos + 1
        return self.source[pos] if pos < len(self.source) else ""

    def _advance(self) -> str:
        char = self._current()
        if not char:
            return ""
        self.pos += 1
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def _skip_ignored(self) -> None:
        """Skip whitespace and both comment styles."""
        while True:
            char = self._current()
            if char and char in " \t\r\n":
                self._advance()
            elif char == "#":
                while self._current() and self._current() != "\n":
                    self._advance()
            elif char == "/" and self._peek() == "*":
                line, column = self.line, self.column
                self._advance()
                self._advance()
                while not (self._current() == "*" and self._peek() == "/"):
                    if not self._current():
                        raise LexerError("Unterminated block comment", line, column)
                    self._advance()
                self._advance()
                self._advance()
            else:
                return

    def _read_string(self) -> Token:
        line, column = self.line, self.column
        quote = self._advance()
        chars: list[str] = []

        while True:
            char = self._current()
            if not char or char == "\n":
                raise LexerError("Unterminated string literal", line, column)
            self._advance()
            if char == quote:
                break
            if char == "\\":
                escaped = self._advance()
                if not escaped:
                    raise LexerError("Unexpected end of string", self.line, self.column)
                chars.append(self.ESCAPES.get(escaped, escaped))
            else:
                chars.append(char)

        return Token(TokenType.STRING, "".join(chars), line, column)

    def _read_number(self) -> Token:
        line, column = self.line, self.column
        start = self.pos

        seen_dot = False
        while self._current().isdigit() or (self._current() == "." and not seen_dot):
            seen_dot = seen_dot or self._current() == "."
            self._advance()
        number_text = self.source[start:self.pos]

        unit_start = self.pos
        while self._current().isalpha():
            self._advance()
        unit = self.source[unit_start:self.pos].lower()

        try:
            number = float(number_text) if seen_dot else int(number_text)
        except ValueError:
            raise LexerError(f"Invalid number: {number_text}", line, column) from None

        if not unit:
            return Token(TokenType.NUMBER, number, line, column)

        if unit not in self.DURATION_UNITS:
            if not seen_dot:
                # Bare words starting with a digit, e.g. version 2c
                return Token(TokenType.IDENTIFIER, self.source[start:self.pos], line, column)
            raise LexerError(f"Unknown duration unit '{unit}'", line, column)
        return Token(TokenType.DURATION, number * self.DURATION_UNITS[unit], line, column)

    def _read_identifier(self) -> Token:
        line, column = self.line, self.column
        start = self.pos

        while self._current() and (self._current().isalnum() or self._current() in "_-"):
            self._advance()

        raw = self.source[start:self.pos]
        lowered = raw.lower()

        if lowered in self.BOOLEAN_KEYWORDS:
            return Token(TokenType.BOOLEAN, self.BOOLEAN_KEYWORDS[lowered], line, column)
        if lowered == "include":
            return Token(TokenType.INCLUDE, raw, line, column)
        return Token(TokenType.IDENTIFIER, raw, line, column)

    def next_token(self) -> Token:
        """Scan and return the next token."""
        self._skip_ignored()

        char = self._current()
        if not char:
            return Token(TokenType.EOF, "", self.line, self.column)

        if char in self.SINGLE_CHARS:
            token = Token(self.SINGLE_CHARS[char], char, self.line, self.column)
            self._advance()
            return token

        if char in "\"'":
            return self._read_string()

        if char.isdigit():
            return self._read_number()

        if char.isalpha() or char == "_":
            return self._read_identifier()

        raise LexerError(f"Unexpected character: {char!r}", self.line, self.column)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return


def tokenize(source: str, filename: str = "<string>") -> list[Token]:
    """Tokenize a whole source string."""
    return list(Lexer(source, filename))
