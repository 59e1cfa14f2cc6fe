"""
Command line reconstruction for generated-file headers.
"""

from collections.abc import Iterator
from pathlib import Path

import click

PROGRAM = "rnc_to_code"


def _display(value) -> str:
    """Existing paths are shown by file name so headers do not depend on the checkout location."""
    if isinstance(value, (str, Path)) and Path(str(value)).exists():
        return Path(str(value)).name
    return str(value)


def _option_tokens(option: click.Option, value) -> Iterator[str]:
    if value == option.default:
        return
    flag = option.opts[0] if option.opts else f"--{option.name}"
    if option.is_flag:
        yield flag
        return
    for item in value if option.multiple else (value,):
        yield flag
        yield _display(item)


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Rebuild the invocation of ``click_command`` from the active click context.

    Positional arguments come first, then options that differ from their
    defaults, in declaration order.

    Args:
        click_command: Command whose parameters are read from the context

    Returns:
        The command line, or just the program name outside a click invocation
    """
    try:
        ctx = click.get_current_context()
    except RuntimeError:
        return PROGRAM

    words = [PROGRAM]
    if ctx.parent is not None and ctx.info_name:
        words.append(ctx.info_name)

    arguments: list[str] = []
    options: list[str] = []
    for param in click_command.params:
        value = ctx.params.get(param.name)
        if not value:
            continue
        if isinstance(param, click.Argument):
            items = value if param.nargs != 1 else (value,)
            arguments.extend(_display(item) for item in items)
        elif isinstance(param, click.Option):
            options.extend(_option_tokens(param, value))

    return " ".join(words + arguments + options)
