"""Tests for utilization report sinks."""

from rich.console import Console

from batchsched.report import (
    CSV_HEADER,
    format_utilization_csv,
    render_utilization_table,
    write_utilization_csv,
)
from batchsched.types import UtilizationRow

ROWS = [
    UtilizationRow(node_id=0, cpu_utilization_pct=75.0, memory_utilization_pct=81.25),
    UtilizationRow(node_id=1, cpu_utilization_pct=100 / 3, memory_utilization_pct=0.0),
]


class TestCSV:
    def test_header_and_precision(self):
        lines = format_utilization_csv(ROWS).splitlines()
        assert lines[0] == ",".join(CSV_HEADER)
        assert lines[1] == "0,75.00,81.25"
        assert lines[2] == "1,33.33,0.00"

    def test_custom_precision(self):
        lines = format_utilization_csv(ROWS, precision=0).splitlines()
        assert lines[2] == "1,33,0"

    def test_empty_rows_still_have_header(self):
        assert format_utilization_csv([]) == ",".join(CSV_HEADER) + "\n"

    def test_write_creates_parents(self, tmp_path):
        target = tmp_path / "reports" / "out.csv"
        written = write_utilization_csv(ROWS, target)
        assert written == target
        assert target.read_text() == format_utilization_csv(ROWS)


class TestTable:
    def test_renders_rows(self):
        table = render_utilization_table(ROWS)
        assert table.row_count == 2

        console = Console(record=True, width=80)
        console.print(table)
        text = console.export_text()
        assert "Node Utilization" in text
        assert "81.25" in text
