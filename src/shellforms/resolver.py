from __future__ import annotations

import contextlib
import contextvars
from typing import TYPE_CHECKING, Callable, Iterator, Optional, Sequence

from shellforms import nodes as n

if TYPE_CHECKING:
    from shellforms.compiler import Context


class Resolver:
    """
    Renders calls whose head is not a bare name, for example a map or a
    `Descriptor` that refers to a function registered by the host program.
    """

    def resolve(
        self,
        descriptor: n.Node,
        args: Sequence[n.Node],
        context: Context,
        /,
    ) -> Optional[str]:
        raise NotImplementedError()


class NoopResolver(Resolver):
    def resolve(
        self,
        descriptor: n.Node,
        args: Sequence[n.Node],
        context: Context,
        /,
    ) -> Optional[str]:
        return None


class FunctionResolver(Resolver):
    def __init__(
        self,
        function: Callable[[n.Node, Sequence[n.Node], Context], Optional[str]],
        /,
    ) -> None:
        self.__function = function

    def resolve(
        self,
        descriptor: n.Node,
        args: Sequence[n.Node],
        context: Context,
        /,
    ) -> Optional[str]:
        return self.__function(descriptor, args, context)


_current_resolver: contextvars.ContextVar[Resolver] = contextvars.ContextVar(
    "shellforms_resolver", default=NoopResolver()
)


def current_resolver() -> Resolver:
    return _current_resolver.get()


@contextlib.contextmanager
def using_resolver(resolver: Resolver) -> Iterator[Resolver]:
    """
    Make `resolver` the default for contexts created inside the block.  The
    override is local to the current thread or task.
    """
    token = _current_resolver.set(resolver)
    try:
        yield resolver
    finally:
        _current_resolver.reset(token)
