import re
from typing import Iterator, Optional, Type

import shellforms.tokens as t
from shellforms.types import Location

_DELIMITER_TOKEN_CLASSES = {
    "(": t.OpenParen,
    ")": t.CloseParen,
    "[": t.OpenBracket,
    "]": t.CloseBracket,
    "{": t.OpenBrace,
    "}": t.CloseBrace,
}

_INTEGER = re.compile(r"[-+]?[0-9]+")
_RATIO = re.compile(r"[-+]?[0-9]+/[0-9]+")


def _is_whitespace(c: Optional[str]) -> bool:
    # Commas are whitespace, as in most lisps.
    return c in (" ", "\n", "\t", "\r", ",")


def _is_word_continue(c: Optional[str]) -> bool:
    if c is None:
        return False
    if _is_whitespace(c):
        return False
    if c in _DELIMITER_TOKEN_CLASSES:
        return False
    return c not in ('"', ";")


def _word_class(word: str) -> Type[t.Token]:
    if _INTEGER.fullmatch(word):
        return t.Integer
    if _RATIO.fullmatch(word):
        return t.Ratio
    if word == "nil":
        return t.Nil
    if word.startswith(":") and len(word) > 1:
        return t.Keyword
    return t.Symbol


class _Tokenizer:
    def __init__(self, string: str):
        self._string = string
        self._cursor = 0
        self._lineno = 0
        self._column = 0

    def _peek(self) -> Optional[str]:
        if self._cursor >= len(self._string):
            return None
        return self._string[self._cursor]

    def _bump(self) -> str:
        assert self._cursor < len(self._string)
        curr = self._string[self._cursor]
        self._cursor += 1
        if curr == "\n":
            self._lineno += 1
            self._column = 0
        else:
            self._column += 1
        return curr

    def _location(self) -> Location:
        return Location(
            offset=self._cursor, lineno=self._lineno, column=self._column
        )

    def _next_class(self) -> Type[t.Token]:
        curr = self._bump()

        if _is_whitespace(curr):
            while _is_whitespace(self._peek()):
                self._bump()
            return t.Whitespace

        if curr == ";":
            # Consume everything up to the end of the line.
            while self._peek() not in ("\n", None):
                self._bump()
            return t.Comment

        if curr == '"':
            while True:
                if self._peek() is None:
                    return t.Unknown
                curr = self._bump()
                if curr == "\\":
                    if self._peek() is None:
                        return t.Unknown
                    self._bump()
                elif curr == '"':
                    return t.String

        if curr in _DELIMITER_TOKEN_CLASSES:
            return _DELIMITER_TOKEN_CLASSES[curr]

        word = curr
        while _is_word_continue(self._peek()):
            word += self._bump()
        return _word_class(word)

    def next_token(self) -> t.Token:
        start = self._location()
        token_class = self._next_class()
        end = self._location()

        return token_class(
            text=self._string[start.offset : end.offset], start=start, end=end
        )

    def is_eof(self) -> bool:
        return self._cursor >= len(self._string)


def tokenize(string: str) -> Iterator[t.Token]:
    tokenizer = _Tokenizer(string)

    while not tokenizer.is_eof():
        yield tokenizer.next_token()
