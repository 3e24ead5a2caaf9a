import argparse
import logging
import sys
from typing import Optional, Sequence

from shellforms import runtime
from shellforms.combinators import sequence
from shellforms.compiler import Context, checked_script, render, statement
from shellforms.errors import CompileError
from shellforms.parser import read

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Compile shell forms into a shell script"
    )
    parser.add_argument(
        "script", nargs="?", type=argparse.FileType("r"), default=sys.stdin
    )

    parser.add_argument(
        "--hashlib",
        action="store_true",
        help="prepend the associative array helpers if the script uses them",
    )
    parser.add_argument(
        "--checked",
        metavar="MESSAGE",
        default=None,
        help="run the forms as a block that reports MESSAGE and exits on "
        "failure",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log how forms are rendered",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    source = args.script.read()
    file = getattr(args.script, "name", None)

    try:
        forms = read(source, file=file)
        logger.debug("read %d form(s) from %s", len(forms), file)

        context = Context(file=file)
        if args.checked is not None:
            script = checked_script(args.checked, *forms, context=context)
        else:
            script = statement(render(*forms, context=context))
    except CompileError as exc:
        parser.exit(1, f"{parser.prog}: error: {exc}\n")

    if args.hashlib and any(runtime.uses_hashes(form) for form in forms):
        script = sequence([runtime.hashlib(), script])

    sys.stdout.write(script)
