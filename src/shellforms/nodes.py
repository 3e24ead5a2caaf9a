from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from shellforms.types import Location


@dataclass(frozen=True)
class Node:
    #: Where the node started in the text it was read from, if it was read
    #: from text at all.  Only used to enrich error messages.
    location: Optional[Location] = field(
        default=None, compare=False, repr=False, kw_only=True
    )


# === Literals =================================================================


@dataclass(frozen=True)
class NilLiteral(Node):
    pass


@dataclass(frozen=True)
class IntegerLiteral(Node):
    value: int


@dataclass(frozen=True)
class RatioLiteral(Node):
    value: Fraction


@dataclass(frozen=True)
class StringLiteral(Node):
    text: str


@dataclass(frozen=True)
class KeywordLiteral(Node):
    name: str


@dataclass(frozen=True)
class SymbolLiteral(Node):
    name: str


@dataclass(frozen=True)
class EmptySplice(Node):
    """
    Stands in for a spliced sequence that turned out to be empty.  Unlike an
    empty string, it disappears completely from the enclosing form.
    """

    pass


@dataclass(frozen=True)
class Descriptor(Node):
    """
    An opaque reference to a capability owned by the host program.  Used as
    the head of a form, it hands the call over to the resolver.
    """

    value: Any


NIL = NilLiteral()
EMPTY_SPLICE = EmptySplice()


# === Collections ==============================================================


@dataclass(frozen=True)
class FormSequence(Node):
    """
    An ordered list of nodes.  The first item decides how the rest are
    interpreted: as a special form, an infix operator, a method call or a
    plain command invocation.
    """

    items: Tuple[Node, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def head(self) -> Optional[Node]:
        if not self.items:
            return None
        return self.items[0]

    @property
    def tail(self) -> Tuple[Node, ...]:
        return self.items[1:]


@dataclass(frozen=True)
class VectorLiteral(Node):
    items: Tuple[Node, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class MapLiteral(Node):
    entries: Tuple[Tuple[Node, Node], ...]

    def __post_init__(self) -> None:
        pairs: Iterable[Tuple[Node, Node]] = self.entries
        if isinstance(pairs, Mapping):
            pairs = pairs.items()
        entries = tuple((key, value) for key, value in pairs)

        # Descriptor keys may wrap unhashable values.
        seen: List[Node] = []
        for key, _ in entries:
            if key in seen:
                raise ValueError(f"duplicate key {key!r} in map literal")
            seen.append(key)

        object.__setattr__(self, "entries", entries)


# === Helpers ==================================================================


def symbol(name: str) -> SymbolLiteral:
    return SymbolLiteral(name)


def form(*items: Node) -> FormSequence:
    return FormSequence(items)


def is_form(node: Optional[Node], *names: str) -> bool:
    """
    True if `node` is a sequence headed by a symbol with one of `names`.
    """
    if not isinstance(node, FormSequence):
        return False
    head = node.head
    return isinstance(head, SymbolLiteral) and head.name in names
