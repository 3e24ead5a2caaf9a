from __future__ import annotations

import dataclasses
import logging
from functools import singledispatch
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from shellforms import nodes as n
from shellforms import operators as ops
from shellforms.combinators import chain, checked
from shellforms.errors import (
    CompileError,
    ExtensionResolutionError,
    InvalidIdentifier,
    StructuralError,
)
from shellforms.resolver import Resolver, current_resolver

logger = logging.getLogger(__name__)

STATEMENT_SEPARATOR = "\n"


@dataclasses.dataclass(frozen=True)
class Context:
    #: Renders calls whose head is a map or a descriptor rather than a name.
    resolver: Resolver = dataclasses.field(default_factory=current_resolver)

    #: Where the forms being rendered came from.  Only used in error messages.
    file: Optional[str] = None
    line: Optional[int] = None

    def error(
        self,
        cls: type[CompileError],
        message: str,
        node: Optional[n.Node] = None,
    ) -> CompileError:
        line = self.line
        if node is not None and node.location is not None:
            line = node.location.lineno + 1
        return cls(message, file=self.file, line=line)


def _is_blank(text: str) -> bool:
    return not text.strip()


def _arg(args: Sequence[n.Node], index: int) -> n.Node:
    if index < len(args):
        return args[index]
    return n.NIL


def _drop_empty_splices(nodes: Iterable[n.Node]) -> List[n.Node]:
    return [node for node in nodes if not isinstance(node, n.EmptySplice)]


def comma_list(texts: Iterable[str]) -> str:
    return "(" + ", ".join(texts) + ")"


def statement(text: str) -> str:
    """
    Terminate `text` with exactly one statement separator.
    """
    if text and not text.endswith(STATEMENT_SEPARATOR):
        return text + STATEMENT_SEPARATOR
    return text


def emit_statements(nodes: Iterable[n.Node], *, context: Context) -> str:
    return "".join(
        statement(emit(node, context=context))
        for node in _drop_empty_splices(nodes)
    )


# === Literals =================================================================


@singledispatch
def emit(node: object, *, context: Context) -> str:
    return str(node)


@emit.register(n.NilLiteral)
def emit_nil(node: n.NilLiteral, *, context: Context) -> str:
    return "null"


@emit.register(n.IntegerLiteral)
def emit_integer(node: n.IntegerLiteral, *, context: Context) -> str:
    return str(node.value)


@emit.register(n.RatioLiteral)
def emit_ratio(node: n.RatioLiteral, *, context: Context) -> str:
    return str(float(node.value))


@emit.register(n.StringLiteral)
def emit_string(node: n.StringLiteral, *, context: Context) -> str:
    return node.text


@emit.register(n.KeywordLiteral)
def emit_keyword(node: n.KeywordLiteral, *, context: Context) -> str:
    return node.name


@emit.register(n.SymbolLiteral)
def emit_symbol(node: n.SymbolLiteral, *, context: Context) -> str:
    return node.name


@emit.register(n.EmptySplice)
def emit_empty_splice(node: n.EmptySplice, *, context: Context) -> str:
    return ""


@emit.register(n.Descriptor)
def emit_descriptor(node: n.Descriptor, *, context: Context) -> str:
    return str(node.value)


# === Collections ==============================================================


@emit.register(n.VectorLiteral)
def emit_vector(node: n.VectorLiteral, *, context: Context) -> str:
    items = (emit(item, context=context) for item in node.items)
    return "(" + " ".join(items) + ")"


@emit.register(n.MapLiteral)
def emit_map(node: n.MapLiteral, *, context: Context) -> str:
    assignments = (
        f"[{emit(key, context=context)}]={emit(value, context=context)}"
        for key, value in node.entries
    )
    return "(" + " ".join(assignments) + ")"


@emit.register(n.FormSequence)
def emit_form_sequence(expr: n.FormSequence, *, context: Context) -> str:
    head = expr.head
    if head is None:
        return ""

    if isinstance(head, n.SymbolLiteral):
        name = head.name
        if name.startswith(".") and len(name) > 1:
            return emit_method_call(expr, context=context)
        if name in _SPECIAL_FORMS:
            return _SPECIAL_FORMS[name](expr, context=context)
        if ops.is_infix_operator(name):
            return emit_infix(expr, context=context)
        return emit_invocation(expr, context=context)

    if isinstance(head, (n.MapLiteral, n.Descriptor)):
        return emit_invocation(expr, context=context)

    parts = (emit(item, context=context) for item in expr.items)
    return " ".join(part for part in parts if not _is_blank(part))


# === Invocation ===============================================================


def _resolve(
    descriptor: n.Node,
    args: Sequence[n.Node],
    *,
    expr: n.FormSequence,
    context: Context,
) -> str:
    logger.debug("resolving %r with %d argument(s)", descriptor, len(args))
    try:
        text = context.resolver.resolve(descriptor, args, context)
    except (TypeError, ValueError) as exc:
        raise context.error(
            ExtensionResolutionError,
            f"Invalid arguments for {descriptor!r}",
            expr,
        ) from exc

    if text is None:
        return ""
    return text


def emit_invocation(expr: n.FormSequence, *, context: Context) -> str:
    head = expr.head
    assert head is not None
    args = _drop_empty_splices(expr.tail)

    if isinstance(head, (n.MapLiteral, n.Descriptor)):
        return _resolve(head, args, expr=expr, context=context)

    logger.debug("invoking %r with %d argument(s)", head, len(args))
    rendered = [emit(arg, context=context) for arg in args]
    rendered = [text for text in rendered if not _is_blank(text)]

    name = emit(head, context=context)
    if rendered:
        return name + " " + " ".join(rendered)
    return name


def emit_method_call(expr: n.FormSequence, *, context: Context) -> str:
    head = expr.head
    assert isinstance(head, n.SymbolLiteral)
    method = head.name[1:]
    obj = _arg(expr.tail, 0)
    args = (emit(arg, context=context) for arg in expr.tail[1:])
    return emit(obj, context=context) + "." + method + comma_list(args)


def emit_infix(expr: n.FormSequence, *, context: Context) -> str:
    head = expr.head
    assert isinstance(head, n.SymbolLiteral)
    args = expr.tail
    if len(args) < 2:
        raise context.error(
            StructuralError,
            f"infix operator {head.name!r} needs two operands, "
            f"got {len(args)}",
            expr,
        )

    left = emit(args[0], context=context)
    right = emit(args[1], context=context)
    return ops.infix(head.name, left, right)


# === Special Forms ============================================================


_SpecialForm = Callable[..., str]
_SPECIAL_FORMS: Dict[str, _SpecialForm] = {}


def _special_form(*names: str) -> Callable[[_SpecialForm], _SpecialForm]:
    def _register(function: _SpecialForm) -> _SpecialForm:
        for name in names:
            _SPECIAL_FORMS[name] = function
        return function

    return _register


def is_special_form(name: str) -> bool:
    return name in _SPECIAL_FORMS


def _form_name(expr: n.FormSequence) -> str:
    head = expr.head
    assert isinstance(head, n.SymbolLiteral)
    return head.name


def _is_logical_test(test: n.Node) -> bool:
    if not isinstance(test, n.FormSequence):
        return False
    head = test.head
    if not isinstance(head, n.SymbolLiteral):
        return False
    return ops.is_infix_operator(head.name) or ops.is_logical_operator(
        head.name
    )


def _emit_test(
    test: n.Node, *, negate: bool = False, context: Context
) -> str:
    text = emit(test, context=context)
    if _is_logical_test(test):
        if negate:
            return f"[ ! {text} ]"
        return f"[ {text} ]"
    if negate:
        return f"! {text}"
    return text


def _emit_branch(node: n.Node, *, context: Context) -> str:
    text = emit(node, context=context)
    if n.is_form(node, "do", "if") or "\n" in text:
        return "\n" + text.strip() + "\n"
    return " " + text + ";"


def check_identifier(
    name: str, *, node: Optional[n.Node] = None, context: Context
) -> str:
    if "-" in name:
        raise context.error(
            InvalidIdentifier, f"Invalid bash symbol {name}", node
        )
    return name


# --- Predicates ---


@_special_form(*ops.PREDICATE_FLAGS)
def emit_predicate(expr: n.FormSequence, *, context: Context) -> str:
    flag = ops.PREDICATE_FLAGS[_form_name(expr)]
    return flag + " " + emit(_arg(expr.tail, 0), context=context)


@_special_form("not")
def emit_not(expr: n.FormSequence, *, context: Context) -> str:
    return "! " + emit(_arg(expr.tail, 0), context=context)


# --- Control flow ---


@_special_form("if", "if-not")
def emit_if(expr: n.FormSequence, *, context: Context) -> str:
    args = expr.tail
    test, then, otherwise = _arg(args, 0), _arg(args, 1), _arg(args, 2)
    negate = _form_name(expr) == "if-not"

    out = "if " + _emit_test(test, negate=negate, context=context)
    out += "; then" + _emit_branch(then, context=context)
    if not isinstance(otherwise, n.NilLiteral):
        out += "else" + _emit_branch(otherwise, context=context)
    return out + "fi"


@_special_form("when")
def emit_when(expr: n.FormSequence, *, context: Context) -> str:
    test, body = _arg(expr.tail, 0), expr.tail[1:]
    return (
        "if "
        + _emit_test(test, context=context)
        + "; then\n"
        + emit_statements(body, context=context).strip()
        + "\nfi"
    )


@_special_form("while")
def emit_while(expr: n.FormSequence, *, context: Context) -> str:
    test, body = _arg(expr.tail, 0), expr.tail[1:]
    return (
        "while "
        + _emit_test(test, context=context)
        + "; do\n"
        + emit_statements(body, context=context)
        + "done\n"
    )


@_special_form("doseq")
def emit_doseq(expr: n.FormSequence, *, context: Context) -> str:
    binding, body = _arg(expr.tail, 0), expr.tail[1:]
    if not isinstance(binding, n.VectorLiteral):
        raise context.error(
            StructuralError, "doseq expects a [name values] binding", expr
        )

    name, values = _arg(binding.items, 0), _arg(binding.items, 1)
    if isinstance(values, n.VectorLiteral):
        words = " ".join(
            emit(value, context=context) for value in values.items
        )
    elif isinstance(values, n.NilLiteral):
        words = ""
    else:
        words = emit(values, context=context)

    return (
        "for "
        + emit(name, context=context)
        + " in "
        + words
        + "; do\n"
        + emit_statements(body, context=context)
        + "done"
    )


@_special_form("case")
def emit_case(expr: n.FormSequence, *, context: Context) -> str:
    test, clauses = _arg(expr.tail, 0), expr.tail[1:]
    # An unpaired trailing clause is ignored.
    branches = [
        emit(clauses[index], context=context)
        + ")\n"
        + emit(clauses[index + 1], context=context)
        for index in range(0, len(clauses) - 1, 2)
    ]
    return (
        "case "
        + emit(test, context=context)
        + " in\n"
        + ";;\n".join(branches)
        + ";;\nesac"
    )


@_special_form("do")
def emit_do(expr: n.FormSequence, *, context: Context) -> str:
    return emit_statements(expr.tail, context=context)


@_special_form("group")
def emit_group(expr: n.FormSequence, *, context: Context) -> str:
    commands = (emit(arg, context=context) for arg in expr.tail)
    return "{ " + "; ".join(commands) + "; }"


_JOINERS = {"pipe": " | ", "chain-or": " || ", "chain-and": " && "}


@_special_form(*_JOINERS)
def emit_joined(expr: n.FormSequence, *, context: Context) -> str:
    joiner = _JOINERS[_form_name(expr)]
    return joiner.join(emit(arg, context=context) for arg in expr.tail)


@_special_form("return")
def emit_return(expr: n.FormSequence, *, context: Context) -> str:
    return "return " + emit(_arg(expr.tail, 0), context=context)


# --- Variables ---


@_special_form("local")
def emit_local(expr: n.FormSequence, *, context: Context) -> str:
    name, value = _arg(expr.tail, 0), _arg(expr.tail, 1)
    target = check_identifier(
        emit(name, context=context), node=expr, context=context
    )
    return "local " + target + "=" + emit(value, context=context)


@_special_form("var")
def emit_var(expr: n.FormSequence, *, context: Context) -> str:
    name, value = _arg(expr.tail, 0), _arg(expr.tail, 1)
    if isinstance(value, n.MapLiteral):
        return _set_map_values(name, value, context=context)

    target = check_identifier(
        emit(name, context=context), node=expr, context=context
    )
    return target + "=" + emit(value, context=context)


@_special_form("set!")
def emit_set(expr: n.FormSequence, *, context: Context) -> str:
    name, value = _arg(expr.tail, 0), _arg(expr.tail, 1)
    target = check_identifier(
        emit(name, context=context), node=expr, context=context
    )
    return target + "=" + emit(value, context=context)


@_special_form("defvar")
def emit_defvar(expr: n.FormSequence, *, context: Context) -> str:
    name, value = _arg(expr.tail, 0), _arg(expr.tail, 1)
    return emit(name, context=context) + "=" + emit(value, context=context)


@_special_form("let")
def emit_let(expr: n.FormSequence, *, context: Context) -> str:
    name, value = _arg(expr.tail, 0), _arg(expr.tail, 1)
    return (
        "let "
        + emit(name, context=context)
        + "="
        + emit(value, context=context)
    )


@_special_form("alias")
def emit_alias(expr: n.FormSequence, *, context: Context) -> str:
    name, value = _arg(expr.tail, 0), _arg(expr.tail, 1)
    return (
        "alias "
        + emit(name, context=context)
        + "='"
        + emit(value, context=context)
        + "'"
    )


# --- Strings and output ---


@_special_form("str")
def emit_str(expr: n.FormSequence, *, context: Context) -> str:
    return "".join(emit(arg, context=context) for arg in expr.tail)


@_special_form("quoted")
def emit_quoted(expr: n.FormSequence, *, context: Context) -> str:
    return ops.add_quotes(emit(_arg(expr.tail, 0), context=context))


@_special_form("println", "print")
def emit_println(expr: n.FormSequence, *, context: Context) -> str:
    command = "echo " if _form_name(expr) == "println" else "echo -n "
    # The arguments are rendered together, as a sequence of their own.
    args = n.FormSequence(expr.tail, location=expr.location)
    return command + emit(args, context=context)


@_special_form("deref")
def emit_deref(expr: n.FormSequence, *, context: Context) -> str:
    target = _arg(expr.tail, 0)
    if isinstance(target, n.FormSequence):
        return "$(" + emit(target, context=context) + ")"
    return "${" + emit(target, context=context) + "}"


# --- Arrays and objects ---


@_special_form("new")
def emit_new(expr: n.FormSequence, *, context: Context) -> str:
    cls, args = _arg(expr.tail, 0), expr.tail[1:]
    return (
        "new "
        + emit(cls, context=context)
        + comma_list(emit(arg, context=context) for arg in args)
    )


@_special_form("aget")
def emit_aget(expr: n.FormSequence, *, context: Context) -> str:
    name, index = _arg(expr.tail, 0), _arg(expr.tail, 1)
    return (
        "${"
        + emit(name, context=context)
        + "["
        + emit(index, context=context)
        + "]}"
    )


@_special_form("aset")
def emit_aset(expr: n.FormSequence, *, context: Context) -> str:
    args = expr.tail
    name, index, value = _arg(args, 0), _arg(args, 1), _arg(args, 2)
    return (
        emit(name, context=context)
        + "["
        + emit(index, context=context)
        + "]="
        + emit(value, context=context)
    )


# --- Associative arrays ---


def mangle(name: str) -> str:
    """
    Turn a logical map or key name into a valid shell identifier.
    """
    name = name.replace("-", "__")
    name = name.replace(".", "_DOT_")
    name = name.replace("/", "_SLASH_")
    return name


def _set_map_values(
    name: n.Node, mapping: n.MapLiteral, *, context: Context
) -> str:
    array = mangle(emit(name, context=context))
    calls = "".join(
        f"hash_set {array} {mangle(emit(key, context=context))} "
        f"{emit(value, context=context)}; "
        for key, value in mapping.entries
    )
    return "{ " + calls + " }"


@_special_form("get")
def emit_get(expr: n.FormSequence, *, context: Context) -> str:
    name, key = _arg(expr.tail, 0), _arg(expr.tail, 1)
    array = mangle(emit(name, context=context))
    return f"$(hash_echo {array} {mangle(emit(key, context=context))} -n )"


@_special_form("merge!")
def emit_merge(expr: n.FormSequence, *, context: Context) -> str:
    name, mapping = _arg(expr.tail, 0), _arg(expr.tail, 1)
    if not isinstance(mapping, n.MapLiteral):
        raise context.error(StructuralError, "merge! expects a map", expr)
    return _set_map_values(name, mapping, context=context)


@_special_form("assoc!")
def emit_assoc(expr: n.FormSequence, *, context: Context) -> str:
    args = expr.tail
    name, key, value = _arg(args, 0), _arg(args, 1), _arg(args, 2)
    array = mangle(emit(name, context=context))
    return (
        f"hash_set {array} {mangle(emit(key, context=context))} "
        f"{emit(value, context=context)}"
    )


# --- Functions ---


@_special_form("apply")
def emit_apply(expr: n.FormSequence, *, context: Context) -> str:
    args = expr.tail
    if not args:
        return ""

    spread = args[-1]
    if isinstance(spread, (n.VectorLiteral, n.FormSequence)):
        trailing = spread.items
    elif isinstance(spread, n.NilLiteral):
        trailing = ()
    else:
        raise context.error(
            StructuralError,
            "apply expects a sequence as its last argument",
            expr,
        )

    call = n.FormSequence(args[:-1] + trailing, location=expr.location)
    return emit(call, context=context)


@_special_form("defn")
def emit_defn(expr: n.FormSequence, *, context: Context) -> str:
    args = expr.tail
    name: Optional[str] = None
    if isinstance(_arg(args, 0), n.SymbolLiteral):
        name = emit(args[0], context=context)
        args = args[1:]

    signature, body = _arg(args, 0), args[1:]
    if not isinstance(signature, n.VectorLiteral):
        raise context.error(
            StructuralError, "defn expects a vector of parameters", expr
        )

    out = "function " + (name or "") + "() {\n"
    if signature.items:
        out += "\n".join(
            f"{emit(param, context=context)}=${position}"
            for position, param in enumerate(signature.items, start=1)
        )
        out += "\n"
    out += emit_statements(body, context=context)
    return out + " }\n"


# === Entry Points =============================================================


def render(*forms: n.Node, context: Optional[Context] = None) -> str:
    """
    Render one or more forms to shell script.  Several forms are treated as a
    sequence of statements.
    """
    if context is None:
        context = Context()

    if len(forms) > 1:
        return emit_statements(forms, context=context)
    if not forms:
        return ""
    return emit(forms[0], context=context)


def splice(
    values: Sequence[n.Node], *, context: Optional[Context] = None
) -> n.Node:
    """
    Render `values` as a single space separated word list, or as an empty
    splice that vanishes from the enclosing form if there are none.
    """
    if not values:
        return n.EMPTY_SPLICE
    if context is None:
        context = Context()
    return n.StringLiteral(
        " ".join(emit(value, context=context) for value in values)
    )


def chained_script(*forms: n.Node, context: Optional[Context] = None) -> str:
    return chain([render(form, context=context) for form in forms])


def checked_script(
    message: str, *forms: n.Node, context: Optional[Context] = None
) -> str:
    return checked(message, [render(form, context=context) for form in forms])
