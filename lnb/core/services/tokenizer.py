"""
Shell tokenizer — split a command string into argument tokens.

This is deliberately not ``shlex``: quote characters are kept in the
token text, because the normalizer needs to know how each argument was
quoted in order to write it back the same way. ``Token`` is the parsed
form of one argument (unquoted value + the quote character, if any).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

QUOTES = ("'", '"')
WHITESPACE = (" ", "\t")


def split_command(raw: str) -> list[str]:
    """Split ``raw`` on unquoted whitespace, keeping quote characters.

    If the whole string names an existing filesystem entry (a path with
    spaces such as ``/Applications/Visual Studio Code.app``) it is
    returned as a single token without any splitting.

    An unterminated quote is not an error: whatever was accumulated is
    emitted as the last token.
    """
    if raw and os.path.exists(raw):
        return [raw]

    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None

    for char in raw:
        if char in QUOTES:
            if quote is None:
                quote = char
            elif char == quote:
                quote = None
            current.append(char)
        elif char in WHITESPACE and quote is None:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))
    return tokens


def join_command(tokens: list[str]) -> str:
    return " ".join(tokens)


@dataclass
class Token:
    """One argument with a single layer of matching quotes peeled off."""

    value: str
    quote: str = ""

    @classmethod
    def parse(cls, text: str) -> Token:
        if len(text) >= 2 and text[0] in QUOTES and text[-1] == text[0]:
            return cls(value=text[1:-1], quote=text[0])
        return cls(value=text)

    @property
    def quoted(self) -> bool:
        return bool(self.quote)

    def with_value(self, value: str) -> Token:
        """Replace the value, keeping the original quoting.

        An unquoted value that now contains whitespace gets double
        quotes so it stays a single argument.
        """
        quote = self.quote
        if not quote and any(ws in value for ws in WHITESPACE):
            quote = '"'
        return Token(value=value, quote=quote)

    def render(self) -> str:
        return f"{self.quote}{self.value}{self.quote}"


def tokenize(raw: str) -> list[Token]:
    return [Token.parse(text) for text in split_command(raw)]
