"""Helpers for reading values out of tokenized JSON responses."""

from __future__ import annotations

from .jsmn import TokenType, count_tokens, tokenize


def parse_json(text):
    """Tokenize *text* in strict mode and return the list of tokens.

    Raises a JsmnError subclass for malformed JSON and ValueError when the
    text holds no JSON at all.
    """
    num_tokens = count_tokens(text)
    if num_tokens == 0:
        raise ValueError("no JSON found in string")
    return tokenize(text, num_tokens)


def jsoneq(text, token, expected):
    """Return True if *token* is a string token whose text equals *expected*."""
    return (token.type == TokenType.STRING
            and text[token.start:token.end] == expected)


def json_bool(text, token):
    """Return the truth value of a primitive token.

    Raises ValueError when *token* is not a primitive.
    """
    if token.type != TokenType.PRIMITIVE:
        raise ValueError("token is not a primitive")
    return text[token.start] == "t"