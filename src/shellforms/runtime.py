import functools
import importlib.resources

from shellforms import nodes as n

_HASH_FORMS = frozenset({"get", "assoc!", "merge!"})


@functools.lru_cache(maxsize=None)
def hashlib() -> str:
    """
    Shell functions emulating associative arrays.  Scripts that use `get`,
    `assoc!`, `merge!` or `var` with a map need this prepended.
    """
    resource = importlib.resources.files("shellforms") / "hashlib.bash"
    return resource.read_text(encoding="utf-8")


def uses_hashes(node: n.Node) -> bool:
    if isinstance(node, n.FormSequence):
        if n.is_form(node, *_HASH_FORMS):
            return True
        items = node.items
        if n.is_form(node, "var") and len(items) > 2:
            if isinstance(items[2], n.MapLiteral):
                return True
        return any(uses_hashes(item) for item in items)

    if isinstance(node, n.VectorLiteral):
        return any(uses_hashes(item) for item in node.items)

    if isinstance(node, n.MapLiteral):
        return any(
            uses_hashes(key) or uses_hashes(value)
            for key, value in node.entries
        )

    return False
