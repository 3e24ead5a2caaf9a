from typing import Iterable, List, Mapping, Optional


def _trimmed(scripts: Iterable[Optional[str]]) -> List[str]:
    trimmed = (script.strip() for script in scripts if script is not None)
    return [script for script in trimmed if script]


def sequence(scripts: Iterable[Optional[str]]) -> str:
    """
    Concatenate rendered scripts, one per line.
    """
    return "\n".join(_trimmed(scripts)) + "\n"


def chain(scripts: Iterable[Optional[str]]) -> str:
    """
    Chain rendered commands together with `&&`.
    """
    return " && ".join(_trimmed(scripts))


def checked(message: str, scripts: Iterable[Optional[str]]) -> str:
    """
    Chain `scripts` and wrap them in a block that reports `message`, and
    exits the shell with status 1 if any of the commands fail.
    """
    commands = chain(scripts)
    if not commands:
        return ""

    return (
        f'echo "{message}..."\n'
        f'{{ {commands}; }} || {{ echo "{message}" failed; exit 1; }} >&2\n'
        'echo "...done"\n'
    )


# === Command Line Arguments ===================================================


def arg_string(
    option: str,
    argument: object,
    *,
    underscore: bool = False,
    assign: bool = False,
    dash: str = "--",
) -> Optional[str]:
    if argument is None or argument is False:
        return None

    name = option.replace("-", "_") if underscore else option
    if argument is True:
        value = ""
    elif len(name) > 1 and assign:
        value = f'="{argument}"'
    else:
        value = f' "{argument}"'

    if len(name) > 1:
        return f"{dash}{name}{value}"
    return f"-{name}{value}"


def map_to_arg_string(
    options: Optional[Mapping[str, object]],
    *,
    underscore: bool = False,
    assign: bool = False,
    dash: str = "--",
) -> str:
    """
    Render a mapping of option names to values as command line switches.

    Options whose value is `None` or `False` are skipped, options whose value is `True`
    become bare flags.  Single letter options always use a single dash.
    """
    if options is None:
        return ""

    args = (
        arg_string(
            option, argument, underscore=underscore, assign=assign, dash=dash
        )
        for option, argument in options.items()
    )
    return " ".join(arg for arg in args if arg is not None)


def option_args(
    *, assign: bool = False, underscore: bool = False, **options: object
) -> str:
    return map_to_arg_string(options, assign=assign, underscore=underscore)
