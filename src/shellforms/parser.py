from fractions import Fraction
from typing import Any, Callable, Iterable, List, Optional, Tuple

import lalr

import shellforms.nodes as n
import shellforms.tokens as t
from shellforms.errors import ParseError
from shellforms.lexer import tokenize

_Forms = List[n.Node]
_Script = Tuple[n.Node, ...]

_productions: list[lalr.Production] = []
_actions: dict[lalr.Production, Callable] = {}


def _register(
    name: Any, symbols: list[Any]
) -> Callable[[Callable], Callable]:
    def _decorator(action: Callable) -> Callable:
        production = lalr.Production(name, tuple(symbols))
        _productions.append(production)
        _actions[production] = action
        return action

    return _decorator


def _parse_string(raw: str) -> str:
    raw = raw[1:-1]
    out = []
    chars = iter(raw)
    for char in chars:
        if char == "\\":
            char = next(chars)
            char = {
                "a": "\a",
                "b": "\b",
                "f": "\f",
                "n": "\n",
                "r": "\r",
                "t": "\t",
                "v": "\v",
            }.get(char, char)
        out.append(char)
    return "".join(out)


# === Atoms ====================================================================


@_register(n.Node, [t.Integer])
def _integer(token: t.Token) -> n.Node:
    return n.IntegerLiteral(int(token.text), location=token.start)


@_register(n.Node, [t.Ratio])
def _ratio(token: t.Token) -> n.Node:
    try:
        value = Fraction(token.text)
    except ZeroDivisionError as exc:
        raise ParseError(
            f"invalid ratio {token.text!r}", line=token.start.lineno + 1
        ) from exc
    return n.RatioLiteral(value, location=token.start)


@_register(n.Node, [t.String])
def _string(token: t.Token) -> n.Node:
    return n.StringLiteral(_parse_string(token.text), location=token.start)


@_register(n.Node, [t.Keyword])
def _keyword(token: t.Token) -> n.Node:
    return n.KeywordLiteral(token.text[1:], location=token.start)


@_register(n.Node, [t.Nil])
def _nil(token: t.Token) -> n.Node:
    return n.NilLiteral(location=token.start)


@_register(n.Node, [t.Symbol])
def _symbol(token: t.Token) -> n.Node:
    return n.SymbolLiteral(token.text, location=token.start)


# === Collections ==============================================================


_register(n.Node, [n.FormSequence])(lambda node: node)
_register(n.Node, [n.VectorLiteral])(lambda node: node)
_register(n.Node, [n.MapLiteral])(lambda node: node)


@_register(_Forms, [n.Node])
def _forms_first(node: n.Node) -> _Forms:
    return [node]


@_register(_Forms, [_Forms, n.Node])
def _forms_subsequent(prev: _Forms, node: n.Node) -> _Forms:
    return prev + [node]


@_register(n.FormSequence, [t.OpenParen, t.CloseParen])
def _empty_form(opening: t.Token, closing: t.Token) -> n.FormSequence:
    return n.FormSequence((), location=opening.start)


@_register(n.FormSequence, [t.OpenParen, _Forms, t.CloseParen])
def _form(
    opening: t.Token, items: _Forms, closing: t.Token
) -> n.FormSequence:
    return n.FormSequence(items, location=opening.start)


@_register(n.VectorLiteral, [t.OpenBracket, t.CloseBracket])
def _empty_vector(opening: t.Token, closing: t.Token) -> n.VectorLiteral:
    return n.VectorLiteral((), location=opening.start)


@_register(n.VectorLiteral, [t.OpenBracket, _Forms, t.CloseBracket])
def _vector(
    opening: t.Token, items: _Forms, closing: t.Token
) -> n.VectorLiteral:
    return n.VectorLiteral(items, location=opening.start)


@_register(n.MapLiteral, [t.OpenBrace, t.CloseBrace])
def _empty_map(opening: t.Token, closing: t.Token) -> n.MapLiteral:
    return n.MapLiteral((), location=opening.start)


@_register(n.MapLiteral, [t.OpenBrace, _Forms, t.CloseBrace])
def _map(opening: t.Token, items: _Forms, closing: t.Token) -> n.MapLiteral:
    line = opening.start.lineno + 1
    if len(items) % 2:
        raise ParseError(
            "map literal must contain an even number of forms", line=line
        )

    entries = list(zip(items[0::2], items[1::2]))
    try:
        return n.MapLiteral(entries, location=opening.start)
    except ValueError as exc:
        raise ParseError(str(exc), line=line) from exc


@_register(_Script, [_Forms])
def _script(forms: _Forms) -> _Script:
    return tuple(forms)


_grammar = lalr.Grammar(_productions, precedence_sets=[])
_parse_table = lalr.ParseTable(_grammar, _Script)


# === Parsing ==================================================================


def _describe(symbol: Any) -> str:
    if isinstance(symbol, type) and issubclass(symbol, t.Token):
        return symbol.description
    return "end of input"


def _or_list(values: Iterable[str]) -> str:
    names = sorted(set(values))
    if not names:
        return "nothing"
    if len(names) > 1:
        return ", ".join(names[:-1]) + " or " + names[-1]
    return names[0]


def _filter_tokens(
    tokens: Iterable[t.Token], *, file: Optional[str]
) -> Iterable[t.Token]:
    for token in tokens:
        if isinstance(token, (t.Whitespace, t.Comment)):
            continue

        if isinstance(token, t.Unknown):
            raise ParseError(
                f"unterminated string {token.text!r}",
                file=file,
                line=token.start.lineno + 1,
            )

        yield token


def _action(production: lalr.Production, *values: Any) -> Any:
    return _actions[production](*values)


def parse(
    tokens: Iterable[t.Token], *, file: Optional[str] = None
) -> _Script:
    tokens = list(_filter_tokens(tokens, file=file))
    if not tokens:
        return ()

    try:
        forms = lalr.parse(
            _parse_table,
            tokens,
            action=_action,
            token_symbol=type,
            token_value=lambda token: token,
        )
    except lalr.exceptions.ParseError as exc:
        lookahead_token = exc.lookahead_token
        expected = _or_list(_describe(sym) for sym in exc.expected_symbols)

        if lookahead_token is None:
            raise ParseError(
                f"expected {expected} before end of input", file=file
            ) from exc

        raise ParseError(
            f"expected {expected} before {lookahead_token.text!r}",
            file=file,
            line=lookahead_token.start.lineno + 1,
        ) from exc
    except ParseError as exc:
        if exc.file is None:
            exc.file = file
        raise

    assert isinstance(forms, tuple)
    return forms


def read(source: str, *, file: Optional[str] = None) -> _Script:
    """
    Read every form in `source`.

    For example:

    ...python::

        read('(if (== a b) (echo "ok"))')
    """
    return parse(tokenize(source), file=file)
