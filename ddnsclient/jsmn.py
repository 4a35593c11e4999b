"""Minimal JSON tokenizer producing flat token spans over the input text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

_WHITESPACE = "\t\r\n "
_ESCAPES = '"/\\bfrnt'
_HEX_DIGITS = "0123456789ABCDEFabcdef"
_STRICT_PRIMITIVE_START = "-0123456789tfn"


class TokenType(IntEnum):
    """Kind of a JSON token."""

    UNDEFINED = 0
    OBJECT = 1
    ARRAY = 2
    STRING = 3
    PRIMITIVE = 4


@dataclass
class Token:
    """A span ``js[start:end]`` of the input and its number of children."""

    type: TokenType = TokenType.UNDEFINED
    start: int = -1
    end: int = -1
    size: int = 0


class JsmnError(ValueError):
    """Base class for tokenizer errors; ``position`` is where it happened."""

    def __init__(self, message, position=-1):
        super().__init__(message)
        self.position = position


class JsmnNoMemory(JsmnError):
    """More tokens are needed than were allowed."""


class JsmnInvalid(JsmnError):
    """The input holds an invalid character or structure."""


class JsmnPartial(JsmnError):
    """The input is not a complete JSON document."""


class _Parser:
    """Single-pass tokenizer; with ``tokens`` set to None it only counts."""

    def __init__(self, js, tokens, max_tokens, strict):
        self.js = js
        self.length = len(js)
        self.tokens = tokens
        self.max_tokens = max_tokens
        self.strict = strict
        self.pos = 0
        self.toknext = 0
        self.toksuper = -1

    def _more(self):
        return self.pos < self.length and self.js[self.pos] != "\0"

    def _alloc(self, start):
        if self.max_tokens is not None and self.toknext >= self.max_tokens:
            self.pos = start
            raise JsmnNoMemory("not enough tokens", start)
        token = Token()
        self.tokens.append(token)
        self.toknext += 1
        return token

    def _parse_primitive(self):
        js = self.js
        start = self.pos
        delimiters = ",]}" + _WHITESPACE + ("" if self.strict else ":")
        found = False
        while self._more():
            c = js[self.pos]
            if c in delimiters:
                found = True
                break
            if ord(c) < 32 or ord(c) >= 127:
                self.pos = start
                raise JsmnInvalid("invalid character in primitive", start)
            self.pos += 1
        if not found and self.strict:
            self.pos = start
            raise JsmnPartial("primitive not terminated", start)
        if self.tokens is not None:
            token = self._alloc(start)
            token.type = TokenType.PRIMITIVE
            token.start = start
            token.end = self.pos
            token.size = 0
        self.pos -= 1

    def _parse_string(self):
        js = self.js
        start = self.pos
        self.pos += 1
        while self._more():
            c = js[self.pos]
            if c == '"':
                if self.tokens is not None:
                    token = self._alloc(start)
                    token.type = TokenType.STRING
                    token.start = start + 1
                    token.end = self.pos
                    token.size = 0
                return
            if c == "\\" and self.pos + 1 < self.length:
                self.pos += 1
                escaped = js[self.pos]
                if escaped == "u":
                    self.pos += 1
                    digits = 0
                    while digits < 4 and self._more():
                        if js[self.pos] not in _HEX_DIGITS:
                            self.pos = start
                            raise JsmnInvalid("invalid unicode escape", start)
                        self.pos += 1
                        digits += 1
                    self.pos -= 1
                elif escaped not in _ESCAPES:
                    self.pos = start
                    raise JsmnInvalid("invalid escape sequence", start)
            self.pos += 1
        self.pos = start
        raise JsmnPartial("string not terminated", start)

    def _bump_parent(self):
        if self.toksuper != -1 and self.tokens is not None:
            self.tokens[self.toksuper].size += 1

    def _open(self, c):
        token = self._alloc(self.pos)
        if self.toksuper != -1:
            parent = self.tokens[self.toksuper]
            if self.strict and parent.type == TokenType.OBJECT:
                raise JsmnInvalid("object or array used as a key", self.pos)
            parent.size += 1
        token.type = TokenType.OBJECT if c == "{" else TokenType.ARRAY
        token.start = self.pos
        self.toksuper = self.toknext - 1

    def _close(self, c):
        tokens = self.tokens
        wanted = TokenType.OBJECT if c == "}" else TokenType.ARRAY
        index = self.toknext - 1
        while index >= 0:
            token = tokens[index]
            if token.start != -1 and token.end == -1:
                if token.type != wanted:
                    raise JsmnInvalid("mismatched closing bracket", self.pos)
                self.toksuper = -1
                token.end = self.pos + 1
                break
            index -= 1
        if index == -1:
            raise JsmnInvalid("unmatched closing bracket", self.pos)
        while index >= 0:
            token = tokens[index]
            if token.start != -1 and token.end == -1:
                self.toksuper = index
                break
            index -= 1

    def _comma(self):
        tokens = self.tokens
        if tokens is None or self.toksuper == -1:
            return
        if tokens[self.toksuper].type in (TokenType.ARRAY, TokenType.OBJECT):
            return
        for index in range(self.toknext - 1, -1, -1):
            token = tokens[index]
            if (token.type in (TokenType.ARRAY, TokenType.OBJECT)
                    and token.start != -1 and token.end == -1):
                self.toksuper = index
                break

    def _check_primitive_position(self):
        if self.tokens is None or self.toksuper == -1:
            return
        parent = self.tokens[self.toksuper]
        if parent.type == TokenType.OBJECT or (
                parent.type == TokenType.STRING and parent.size != 0):
            raise JsmnInvalid("primitive in key position", self.pos)

    def run(self):
        count = self.toknext
        while self._more():
            c = self.js[self.pos]
            if c in "{[":
                count += 1
                if self.tokens is not None:
                    self._open(c)
            elif c in "}]":
                if self.tokens is not None:
                    self._close(c)
            elif c == '"':
                self._parse_string()
                count += 1
                self._bump_parent()
            elif c in _WHITESPACE:
                pass
            elif c == ":":
                self.toksuper = self.toknext - 1
            elif c == ",":
                self._comma()
            elif not self.strict or c in _STRICT_PRIMITIVE_START:
                if self.strict:
                    self._check_primitive_position()
                self._parse_primitive()
                count += 1
                self._bump_parent()
            else:
                raise JsmnInvalid(f"unexpected character {c!r}", self.pos)
            self.pos += 1

        if self.tokens is not None:
            for token in reversed(self.tokens):
                if token.start != -1 and token.end == -1:
                    raise JsmnPartial("unclosed object or array", token.start)
        return count


def _as_text(js):
    if isinstance(js, (bytes, bytearray)):
        return bytes(js).decode("latin-1")
    return js


def count_tokens(js, strict=True):
    """Return how many tokens *js* needs, without checking bracket balance."""
    return _Parser(_as_text(js), None, None, strict).run()


def tokenize(js, max_tokens=None, strict=True):
    """Split *js* into a list of tokens.

    Raises JsmnNoMemory when more than *max_tokens* tokens are needed,
    JsmnInvalid for malformed input and JsmnPartial for incomplete input.
    """
    tokens = []
    _Parser(_as_text(js), tokens, max_tokens, strict).run()
    return tokens