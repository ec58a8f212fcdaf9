"""
Tabular rendering of read-back records.

Builds a rich Table with one column per collection field and a row-count
footer in the style of psql:

    ┏━━━━━━━━━━┳━━━━━━━━━━━━━━━━━━━┓
    ┃ username ┃ email             ┃
    ┡━━━━━━━━━━╇━━━━━━━━━━━━━━━━━━━┩
    │ alice    │ alice@example.com │
    └──────────┴───────────────────┘
    (1 row)

Exports:
    build_table: Rich table of records plus the row count
    print_table: Print records to a console (stdout by default)
    render_table: Records as plain text, no terminal styling
    format_value: Display form of a single value
"""

import io
import sys
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from rich.console import Console
from rich.table import Table
from rich.text import Text

# Wide enough that captured tables never wrap
RENDER_WIDTH = 200


def format_value(value: Any) -> str:
    """NULL renders empty, like psql."""
    if value is None:
        return ""
    return str(value)


def row_count_footer(count: int) -> str:
    return f"({count} row{'' if count == 1 else 's'})"


def build_table(fields: Sequence[str], records: Iterable[Dict[str, Any]]) -> Tuple[Table, int]:
    """
    Build the table for `fields`, consuming `records` once.

    A generator from record_reader.report() can be passed directly.
    Missing keys render as empty cells. Cell values are plain Text, so
    brackets in data are never read as console markup.
    """
    table = Table(show_header=True, header_style="bold", border_style="dim")
    for name in fields:
        table.add_column(name, no_wrap=True)

    count = 0
    for record in records:
        table.add_row(*[Text(format_value(record.get(name))) for name in fields])
        count += 1
    return table, count


def print_table(
    fields: Sequence[str],
    records: Iterable[Dict[str, Any]],
    console: Optional[Console] = None
) -> int:
    """Print the table and its footer; returns the number of rows printed."""
    console = console or Console(file=sys.stdout)
    table, count = build_table(fields, records)
    console.print(table)
    console.print(row_count_footer(count), markup=False, highlight=False)
    return count


def render_table(fields: Sequence[str], records: Iterable[Dict[str, Any]]) -> str:
    """Plain-text form of print_table, for logs and tests."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=RENDER_WIDTH, color_system=None, force_terminal=False)
    print_table(fields, records, console=console)
    return buffer.getvalue().rstrip("\n")
