# SPDX-License-Identifier: MIT
"""Import-only parsing of Go source files.

Only the leading section of a file is read: the package clause followed by
its import declarations. Scanning stops at the first token that does not
start another import declaration, so the body of the file is never examined.

Example:
    >>> parse_imports('package main\\n\\nimport (\\n\\t"fmt"\\n\\tlog "github.com/sirupsen/logrus"\\n)\\n')
    ['fmt', 'github.com/sirupsen/logrus']
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .errors import ParseError

IDENT = "ident"
STRING = "string"
LPAREN = "("
RPAREN = ")"
SEMI = ";"
DOT = "."
OTHER = "other"
EOF = "EOF"

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
}

_ESCAPE_RE = re.compile(
    r"\\(?:([abfnrtv\\\"])|x([0-9A-Fa-f]{2})|([0-7]{3})|u([0-9A-Fa-f]{4})|U([0-9A-Fa-f]{8})|(.))",
    re.DOTALL,
)


@dataclass
class _Token:
    kind: str
    value: str
    line: int

    def describe(self) -> str:
        if self.kind == EOF:
            return "EOF"
        if self.kind == SEMI and self.value == "\n":
            return "newline"
        return repr(self.value)


class _Scanner:
    """Lazy tokenizer implementing Go's automatic semicolon insertion."""

    def __init__(self, source: str, filename: str) -> None:
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        # Set after tokens that end a statement when followed by a newline
        self.insert_semi = False

    def error(self, message: str, line: int | None = None) -> ParseError:
        return ParseError(self.filename, message, line if line is not None else self.line)

    def next(self) -> _Token:
        src = self.source
        while True:
            while self.pos < len(src) and src[self.pos] in " \t\r":
                self.pos += 1

            if self.pos >= len(src):
                if self.insert_semi:
                    self.insert_semi = False
                    return _Token(SEMI, "\n", self.line)
                return _Token(EOF, "", self.line)

            ch = src[self.pos]
            if ch == "\n":
                line = self.line
                self.pos += 1
                self.line += 1
                if self.insert_semi:
                    self.insert_semi = False
                    return _Token(SEMI, "\n", line)
                continue

            if src.startswith("//", self.pos):
                end = src.find("\n", self.pos)
                self.pos = len(src) if end == -1 else end
                continue

            if src.startswith("/*", self.pos):
                end = src.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("comment not terminated")
                newlines = src.count("\n", self.pos, end)
                line = self.line
                self.pos = end + 2
                if newlines:
                    self.line += newlines
                    if self.insert_semi:
                        self.insert_semi = False
                        return _Token(SEMI, "\n", line)
                continue

            break

        line = self.line
        if ch.isalpha() or ch == "_":
            start = self.pos
            while self.pos < len(src) and (src[self.pos].isalnum() or src[self.pos] == "_"):
                self.pos += 1
            self.insert_semi = True
            return _Token(IDENT, src[start : self.pos], line)

        if ch == '"':
            self.insert_semi = True
            return _Token(STRING, self._interpreted_string(), line)

        if ch == "`":
            self.insert_semi = True
            return _Token(STRING, self._raw_string(), line)

        self.pos += 1
        if ch == ")":
            self.insert_semi = True
            return _Token(RPAREN, ch, line)

        self.insert_semi = False
        if ch == "(":
            return _Token(LPAREN, ch, line)
        if ch == ";":
            return _Token(SEMI, ch, line)
        if ch == ".":
            return _Token(DOT, ch, line)
        return _Token(OTHER, ch, line)

    def _interpreted_string(self) -> str:
        src = self.source
        start = self.pos + 1
        i = start
        while i < len(src):
            ch = src[i]
            if ch == '"':
                self.pos = i + 1
                return self._unescape(src[start:i])
            if ch == "\n":
                break
            i += 2 if ch == "\\" else 1
        raise self.error("string literal not terminated")

    def _raw_string(self) -> str:
        src = self.source
        end = src.find("`", self.pos + 1)
        if end == -1:
            raise self.error("raw string literal not terminated")
        body = src[self.pos + 1 : end]
        self.line += body.count("\n")
        self.pos = end + 1
        return body.replace("\r", "")

    def _unescape(self, body: str) -> str:
        def replace(match: re.Match[str]) -> str:
            simple, hex2, octal, hex4, hex8, unknown = match.groups()
            if simple:
                return _SIMPLE_ESCAPES[simple]
            if unknown is not None:
                raise self.error("unknown escape sequence")
            if octal:
                value = int(octal, 8)
                if value > 0xFF:
                    raise self.error("octal escape value > 255")
                return chr(value)
            if hex2:
                return chr(int(hex2, 16))
            value = int(hex4 or hex8, 16)
            if value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
                raise self.error("escape sequence is invalid Unicode code point")
            return chr(value)

        return _ESCAPE_RE.sub(replace, body)


def _import_spec(scanner: _Scanner, tok: _Token) -> str:
    """Parse one import spec starting at tok: an optional name then the path."""
    if tok.kind in (DOT, IDENT):
        tok = scanner.next()

    if tok.kind != STRING:
        raise scanner.error(f"missing import path, found {tok.describe()}", tok.line)
    if not tok.value:
        raise scanner.error("invalid import path: empty string", tok.line)
    return tok.value


def parse_imports(source: str, filename: str = "<source>") -> list[str]:
    """Parse the import declarations at the top of a Go source file.

    Args:
        source: File contents
        filename: Name used in error messages

    Returns:
        Import paths in declaration order

    Raises:
        ParseError: If the package clause or an import declaration is malformed
    """
    if source.startswith("\ufeff"):
        source = source[1:]

    scanner = _Scanner(source, filename)

    tok = scanner.next()
    if tok.kind != IDENT or tok.value != "package":
        raise scanner.error(f"expected 'package', found {tok.describe()}", tok.line)

    tok = scanner.next()
    if tok.kind != IDENT:
        raise scanner.error(f"expected package name, found {tok.describe()}", tok.line)
    if tok.value == "_":
        raise scanner.error("invalid package name _", tok.line)

    tok = scanner.next()
    if tok.kind == SEMI:
        tok = scanner.next()
    elif tok.kind != EOF:
        raise scanner.error(f"expected ';', found {tok.describe()}", tok.line)

    imports: list[str] = []
    while tok.kind == IDENT and tok.value == "import":
        tok = scanner.next()
        if tok.kind == LPAREN:
            tok = scanner.next()
            while tok.kind != RPAREN:
                if tok.kind == SEMI:
                    tok = scanner.next()
                    continue
                if tok.kind == EOF:
                    raise scanner.error("expected ')', found EOF", tok.line)
                imports.append(_import_spec(scanner, tok))
                tok = scanner.next()
                if tok.kind == SEMI:
                    tok = scanner.next()
                elif tok.kind != RPAREN:
                    raise scanner.error(f"expected ';', found {tok.describe()}", tok.line)
        else:
            imports.append(_import_spec(scanner, tok))

        tok = scanner.next()
        if tok.kind == SEMI:
            tok = scanner.next()
        elif tok.kind != EOF:
            raise scanner.error(f"expected ';', found {tok.describe()}", tok.line)

    return imports


def source_file_imports(path: str | Path) -> list[str]:
    """Read a source file and return the import paths it declares.

    Raises:
        ParseError: If the file cannot be read, decoded, or parsed
    """
    path = Path(path)
    try:
        source = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(str(path), f"invalid UTF-8 encoding: {e}") from e
    except OSError as e:
        raise ParseError(str(path), f"could not read file: {e.strerror or e}") from e

    return parse_imports(source, str(path))
