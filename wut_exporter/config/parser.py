"""
Recursive descent parser for the nginx-like configuration syntax.

Grammar:
    document    := (block | directive | include)*
    block       := IDENTIFIER [value] '{' (block | directive | include)* '}'
    directive   := IDENTIFIER value* ';'
    value       := STRING | NUMBER | DURATION | BOOLEAN | IDENTIFIER
    include     := 'include' STRING ';'
"""

import glob
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .lexer import Lexer, Token, TokenType


VALUE_TOKENS = (
    TokenType.STRING,
    TokenType.NUMBER,
    TokenType.DURATION,
    TokenType.BOOLEAN,
    TokenType.IDENTIFIER,
)


class ParseError(Exception):
    """Raised for syntax errors in the configuration."""

    def __init__(self, message: str, token: Token | None = None):
        self.token = token
        if token:
            super().__init__(f"Line {token.line}, column {token.column}: {message}")
        else:
            super().__init__(message)


@dataclass
class Directive:
    """
    A directive with its values.

    Examples:
        community "public";   -> Directive("community", ["public"])
        timeout 30s;          -> Directive("timeout", [30])
    """

    name: str
    values: list[Any] = field(default_factory=list)
    line: int = 0

    @property
    def value(self) -> Any:
        """First value or None."""
        return self.values[0] if self.values else None


@dataclass
class Block:
    """
    A block with a type, an optional name, and nested contents.

    Examples:
        snmp { ... }              -> Block("snmp", None, ...)
        target "10.0.0.5" { ... } -> Block("target", "10.0.0.5", ...)
    """

    type: str
    name: str | None = None
    directives: list[Directive] = field(default_factory=list)
    blocks: list["Block"] = field(default_factory=list)
    line: int = 0

    def get_directive(self, name: str) -> Directive | None:
        for directive in self.directives:
            if directive.name == name:
                return directive
        return None

    def get_value(self, name: str, default: Any = None) -> Any:
        directive = self.get_directive(name)
        if directive is None or directive.value is None:
            return default
        return directive.value


@dataclass
class ConfigDocument:
    """Root of a parsed configuration file."""

    blocks: list[Block] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    filename: str = "<string>"

    def get_block(self, type_name: str) -> Block | None:
        for block in self.blocks:
            if block.type == type_name:
                return block
        return None

    def get_blocks(self, type_name: str) -> list[Block]:
        return [block for block in self.blocks if block.type == type_name]

    def get_value(self, name: str, default: Any = None) -> Any:
        for directive in self.directives:
            if directive.name == name and directive.values:
                return directive.value
        return default

    def merge(self, other: "ConfigDocument") -> None:
        """Append another document's contents (used for includes)."""
        self.blocks.extend(other.blocks)
        self.directives.extend(other.directives)


class ConfigParser:
    """Parses a token stream into a ConfigDocument."""

    def __init__(
        self,
        source: str,
        filename: str = "<string>",
        base_path: Path | None = None,
        included_files: frozenset[str] = frozenset(),
    ):
        self.lexer = Lexer(source, filename)
        self.filename = filename
        self.base_path = base_path or Path.cwd()
        self.included_files = included_files
        self.current: Token = self.lexer.next_token()

    def _advance(self) -> Token:
        previous = self.current
        self.current = self.lexer.next_token()
        return previous

    def _check(self, token_type: TokenType) -> bool:
        return self.current.type == token_type

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if not self._check(token_type):
            raise ParseError(message, self.current)
        return self._advance()

    def parse(self) -> ConfigDocument:
        document = ConfigDocument(filename=self.filename)
        self._parse_contents(document.blocks, document.directives, closing=TokenType.EOF)
        return document

    def _parse_contents(
        self,
        blocks: list[Block],
        directives: list[Directive],
        closing: TokenType,
    ) -> None:
        while not self._check(closing):
            if self._check(TokenType.EOF):
                raise ParseError("Unexpected end of file, missing '}'", self.current)

            if self._check(TokenType.INCLUDE):
                included = self._parse_include()
                blocks.extend(included.blocks)
                directives.extend(included.directives)
            elif self._check(TokenType.IDENTIFIER):
                item = self._parse_statement()
                if isinstance(item, Block):
                    blocks.append(item)
                else:
                    directives.append(item)
            else:
                raise ParseError(
                    f"Expected directive or block, got {self.current.type.name}",
                    self.current,
                )

    def _parse_statement(self) -> Block | Directive:
        name_token = self._advance()
        name = str(name_token.value)

        values: list[Any] = []
        while self.current.type in VALUE_TOKENS:
            values.append(self._advance().value)

        if self._check(TokenType.SEMICOLON):
            self._advance()
            return Directive(name=name, values=values, line=name_token.line)

        if not self._check(TokenType.LBRACE):
            raise ParseError(f"Expected '{{' or ';' after '{name}'", self.current)

        if len(values) > 1:
            raise ParseError(f"Block '{name}' takes at most one name", self.current)

        self._advance()
        block = Block(
            type=name,
            name=str(values[0]) if values else None,
            line=name_token.line,
        )
        self._parse_contents(block.blocks, block.directives, closing=TokenType.RBRACE)
        self._advance()
        return block

    def _parse_include(self) -> ConfigDocument:
        include_token = self._advance()
        path_token = self._expect(TokenType.STRING, "Expected file path after 'include'")
        self._expect(TokenType.SEMICOLON, "Expected ';' after include path")

        pattern = str(path_token.value)
        if not Path(pattern).is_absolute():
            pattern = str(self.base_path / pattern)

        merged = ConfigDocument()
        for path in sorted(glob.glob(pattern)):
            resolved = str(Path(path).resolve())
            if resolved in self.included_files:
                raise ParseError(f"Circular include detected: {path}", include_token)

            parser = ConfigParser(
                Path(path).read_text(),
                filename=path,
                base_path=Path(path).parent,
                included_files=self.included_files | {resolved},
            )
            merged.merge(parser.parse())

        return merged


def parse_config(
    source: str,
    filename: str = "<string>",
    base_path: Path | None = None,
) -> ConfigDocument:
    """Parse a configuration string."""
    return ConfigParser(source, filename, base_path).parse()


def parse_config_file(path: str | Path) -> ConfigDocument:
    """Parse a configuration file; includes resolve relative to its directory."""
    path = Path(path)
    return ConfigParser(
        path.read_text(),
        filename=str(path),
        base_path=path.parent,
        included_files=frozenset({str(path.resolve())}),
    ).parse()
