import json
import os
from typing import Any, List, Sequence, Tuple

from rich.console import Console
from rich.table import Table

# Environment variable that controls CLI output: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def print_records(records: List[Any], columns: Sequence[Tuple[str, str]], *, title: str, empty_message: str) -> None:
    """Print records in the current output mode.

    ``columns`` pairs an attribute name with its header.
    - plain: one ``value | value | ...`` line per record
    - json: array of objects keyed by attribute name
    - rich: Rich table
    """
    mode = get_output_mode()

    if not records:
        print(empty_message)
        return

    if mode == "json":
        payload = [{attr: getattr(r, attr, None) for attr, _ in columns} for r in records]
        print(json.dumps(payload, ensure_ascii=False, default=str))
    elif mode == "rich":
        table = Table(title=title, show_lines=True, header_style="bold cyan")
        for _, header in columns:
            table.add_column(header)
        for r in records:
            table.add_row(*(_cell(getattr(r, attr, None)) for attr, _ in columns))
        _console.print(table)
    else:
        for r in records:
            print(" | ".join(_cell(getattr(r, attr, None)) for attr, _ in columns))


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.2f}"
    if hasattr(value, "value"):  # enums
        return str(value.value)
    return str(value)
