"""
Utilization report sinks.

Rows are written in the order given (node id order when they come from
``BatchScheduler.utilization_report``) with fixed-precision percentages.
"""

import csv
import io
from pathlib import Path
from typing import Iterable, Sequence

from rich import box
from rich.table import Table

from .types import UtilizationRow

CSV_HEADER = ("NodeID", "CPU Utilization (%)", "Memory Utilization (%)")


def _write_rows(handle, rows: Iterable[UtilizationRow], precision: int):
    writer = csv.writer(handle, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow([
            row.node_id,
            f"{row.cpu_utilization_pct:.{precision}f}",
            f"{row.memory_utilization_pct:.{precision}f}",
        ])


def format_utilization_csv(rows: Iterable[UtilizationRow], precision: int = 2) -> str:
    """Render rows as CSV text."""
    buffer = io.StringIO()
    _write_rows(buffer, rows, precision)
    return buffer.getvalue()


def write_utilization_csv(rows: Iterable[UtilizationRow], path, precision: int = 2) -> Path:
    """Write rows to a CSV file, creating parent directories. Returns the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="") as f:
        _write_rows(f, rows, precision)

    return path


def render_utilization_table(rows: Sequence[UtilizationRow], precision: int = 2,
                             title: str = "Node Utilization") -> Table:
    """Build a rich table of utilization rows for console output."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Node", style="bold", justify="right")
    table.add_column("CPU (%)", justify="right")
    table.add_column("Memory (%)", justify="right")

    for row in rows:
        table.add_row(
            str(row.node_id),
            f"{row.cpu_utilization_pct:.{precision}f}",
            f"{row.memory_utilization_pct:.{precision}f}",
        )

    return table
