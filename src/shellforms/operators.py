from typing import Callable

INFIX_OPERATORS = frozenset(
    {
        "+", "-", "/", "*", "%",
        "==", "=", "<", ">", "<=", ">=", "!=",
        "<<", ">>", "<<<", ">>>",
        "&", "|", "&&", "||",
        "and", "or",
    }
)  # fmt: skip

#: Operators that make up test expressions.  Infix forms built from these are
#: grouped with escaped parentheses so that `test` sees them.
LOGICAL_OPERATORS = frozenset(
    {
        "==", "=", "<", ">", "<=", ">=", "!=",
        "<<", ">>", "<<<", ">>>",
        "&", "|", "&&", "||",
        "file-exists?", "directory?", "symlink?",
        "readable?", "writeable?", "empty?",
        "not", "and", "or",
    }
)  # fmt: skip

#: Operators whose operands are double quoted, unless they already look like
#: a sub-expression.
QUOTED_OPERATORS = LOGICAL_OPERATORS - {"file-exists?", "directory?", "empty?"}

PREDICATE_FLAGS = {
    "file-exists?": "-e",
    "directory?": "-d",
    "symlink?": "-h",
    "readable?": "-r",
    "writeable?": "-w",
    "empty?": "-z",
}

#: Spellings understood by `test`.
INFIX_CONVERSIONS = {
    "&&": "-a",
    "and": "-a",
    "||": "-o",
    "or": "-o",
    "<": "\\<",
    ">": "\\>",
    "=": "==",
}

_SUBEXPRESSION_PREFIXES = ("\\(", "!", "-", "@")


def is_infix_operator(name: str) -> bool:
    return name in INFIX_OPERATORS


def is_logical_operator(name: str) -> bool:
    return name in LOGICAL_OPERATORS


def is_quoted_operator(name: str) -> bool:
    return name in QUOTED_OPERATORS


def add_quotes(text: str) -> str:
    return f'"{text}"'


def quote_unless_subexpression(
    text: str, quote: Callable[[str], str] = add_quotes
) -> str:
    # Anything that starts like a nested test, a negation, a flag or an
    # array expansion is passed through as is.
    if text.startswith(_SUBEXPRESSION_PREFIXES):
        return text
    return quote(text)


def infix(operator: str, left: str, right: str) -> str:
    """
    Join two rendered operands with `operator`.

    Logical operators are wrapped in `\\( ... \\)` and have their operands
    quoted, arithmetic ones are wrapped in plain parentheses.
    """
    if is_logical_operator(operator):
        opening, closing = "\\( ", " \\)"
    else:
        opening, closing = "(", ")"

    if is_quoted_operator(operator):
        left = quote_unless_subexpression(left)
        right = quote_unless_subexpression(right)

    symbol = INFIX_CONVERSIONS.get(operator, operator)
    return f"{opening}{left} {symbol} {right}{closing}"
