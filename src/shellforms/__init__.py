from typing import Optional

from shellforms.combinators import (
    chain,
    checked,
    map_to_arg_string,
    option_args,
    sequence,
)
from shellforms.compiler import (
    Context,
    chained_script,
    checked_script,
    render,
    splice,
)
from shellforms.errors import (
    CompileError,
    ExtensionResolutionError,
    InvalidIdentifier,
    ParseError,
    StructuralError,
)
from shellforms.parser import read
from shellforms.resolver import (
    FunctionResolver,
    NoopResolver,
    Resolver,
    using_resolver,
)

__all__ = [
    "CompileError",
    "Context",
    "ExtensionResolutionError",
    "FunctionResolver",
    "InvalidIdentifier",
    "NoopResolver",
    "ParseError",
    "Resolver",
    "StructuralError",
    "chain",
    "chained_script",
    "checked",
    "checked_script",
    "compile_source",
    "map_to_arg_string",
    "option_args",
    "read",
    "render",
    "sequence",
    "splice",
    "using_resolver",
]


def compile_source(
    source: str,
    /,
    *,
    file: Optional[str] = None,
    resolver: Optional[Resolver] = None,
) -> str:
    forms = read(source, file=file)

    if resolver is None:
        context = Context(file=file)
    else:
        context = Context(resolver=resolver, file=file)

    return render(*forms, context=context)
