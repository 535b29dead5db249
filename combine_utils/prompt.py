from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from combine_utils.errors import SelectionCancelled

# -----------------------------
# Multi-select prompt
# -----------------------------
HELP_TEXT = (
    "Enter numbers or ranges to toggle (e.g. '1, 3-5'), "
    "'a' = all, 'n' = none, 'q' = cancel, Enter = confirm"
)


def parse_toggle(text: str, count: int) -> list[int]:
    """
    Parse a selection string such as "1, 3-5 7" into 0-based indices.
    Numbers are 1-based and must lie within 1..count.
    Raises ValueError on malformed tokens or out-of-range numbers.
    """
    indices = []
    for token in text.replace(",", " ").split():
        if "-" in token:
            start_str, _, end_str = token.partition("-")
            if not start_str.isdigit() or not end_str.isdigit():
                raise ValueError(f"Invalid range: '{token}'")
            start, end = int(start_str), int(end_str)
            if start > end:
                start, end = end, start
        elif token.isdigit():
            start = end = int(token)
        else:
            raise ValueError(f"Invalid selection: '{token}'")

        if start < 1 or end > count:
            raise ValueError(f"Out of range: '{token}' (valid: 1-{count})")
        indices.extend(range(start - 1, end))
    return indices


def _render(console: Console, items: list[str], checked: list[bool], prompt: str):
    table = Table(title=prompt, show_header=False, box=None)
    table.add_column(justify="right", style="cyan")
    table.add_column()
    table.add_column()
    for i, (item, mark) in enumerate(zip(items, checked), start=1):
        table.add_row(f"{i}", "[green]\\[x][/green]" if mark else "\\[ ]", escape(item))
    console.print(table)


def present_choices(
    items: list[str],
    defaults: Optional[list[bool]] = None,
    prompt: str = "Select files to combine",
    console: Optional[Console] = None,
) -> list[int]:
    """
    Show `items` as a checklist and let the user toggle entries until they
    confirm with an empty line.

    Returns the indices of the checked items in ascending order.
    Raises SelectionCancelled if the user quits or interrupts the prompt.
    """
    console = console or Console()
    checked = list(defaults) if defaults is not None else [False] * len(items)
    if len(checked) != len(items):
        raise ValueError("defaults must have one entry per item")

    while True:
        _render(console, items, checked, prompt)
        try:
            answer = Prompt.ask(HELP_TEXT, default="", show_default=False, console=console)
        except (KeyboardInterrupt, EOFError) as e:
            raise SelectionCancelled("Selection cancelled by user") from e

        answer = answer.strip().lower()
        if not answer:
            return [i for i, mark in enumerate(checked) if mark]
        if answer == "q":
            raise SelectionCancelled("Selection cancelled by user")
        if answer == "a":
            checked = [True] * len(items)
            continue
        if answer == "n":
            checked = [False] * len(items)
            continue

        try:
            toggled = parse_toggle(answer, len(items))
        except ValueError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            continue
        for i in toggled:
            checked[i] = not checked[i]
