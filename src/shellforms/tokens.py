from dataclasses import dataclass

from shellforms.types import Location


@dataclass(frozen=True)
class Token:
    text: str
    start: Location
    end: Location

    #: How the token is referred to in parse errors.
    description = "token"

    def __repr__(self) -> str:
        return f"t.{type(self).__name__}({self.text!r})"


# --- Trivia ---


class Whitespace(Token):
    description = "whitespace"


class Comment(Token):
    description = "comment"


class Unknown(Token):
    description = "unknown"


# --- Delimiters ---


class OpenParen(Token):
    description = "'('"


class CloseParen(Token):
    description = "')'"


class OpenBracket(Token):
    description = "'['"


class CloseBracket(Token):
    description = "']'"


class OpenBrace(Token):
    description = "'{'"


class CloseBrace(Token):
    description = "'}'"


# --- Atoms ---


class String(Token):
    description = "string"


class Integer(Token):
    description = "integer"


class Ratio(Token):
    description = "ratio"


class Keyword(Token):
    description = "keyword"


class Nil(Token):
    description = "nil"


class Symbol(Token):
    description = "symbol"
