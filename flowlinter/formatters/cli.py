"""
CLI output formatter for human-readable results.
"""

import io
import sys
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from flowlinter.core.models import SEVERITIES, IssueRecord, ScanReport, ScanResult


SEVERITY_STYLES = {
    "error": "red",
    "warning": "yellow",
    "note": "blue",
}

COLUMNS = ("rule", "type", "name", "severity")


def supports_color() -> bool:
    """Check if the terminal supports color output."""
    if not hasattr(sys.stdout, "isatty"):
        return False
    return sys.stdout.isatty()


def group_by_flow(issues: List[IssueRecord]) -> Dict[str, List[IssueRecord]]:
    """Group issues by flow label, keeping first-seen order."""
    grouped: Dict[str, List[IssueRecord]] = {}
    for issue in issues:
        grouped.setdefault(issue.flow_name, []).append(issue)
    return grouped


def find_scan_result(scan_results: List[ScanResult], label: str) -> Optional[ScanResult]:
    for scan_result in scan_results:
        if scan_result.flow.label == label:
            return scan_result
    return None


class CLIFormatter:
    """
    Formats a scan report as one table per flow followed by totals.
    """

    def __init__(self, use_color: bool = True, width: int = 120):
        self.use_color = use_color and supports_color()
        self.width = width

    def _console(self, buffer: io.StringIO) -> Console:
        return Console(
            file=buffer,
            width=self.width,
            force_terminal=self.use_color,
            no_color=not self.use_color,
            color_system="standard" if self.use_color else None,
            highlight=False,
        )

    def _header(self, console: Console, header: Text) -> None:
        console.print(header, style="bold")
        console.print("=" * len(header.plain), style="dim")

    def _flow_block(self, console: Console, label: str, issues: List[IssueRecord],
                    scan_result: Optional[ScanResult]) -> None:
        api_name = scan_result.flow.api_name if scan_result else issues[0].flow_api_name
        flow_type = scan_result.flow.type if scan_result else issues[0].flow_type

        self._header(console, Text.assemble(
            "Flow: ",
            (label, "yellow"),
            " ",
            (f"({api_name})", "black on yellow"),
            " ",
            (f"({len(issues)} results)", "red"),
        ))
        console.print(Text(f"Type: {flow_type}", style="italic"))
        console.print()

        table = Table(show_header=True, header_style="bold")
        for column in COLUMNS:
            table.add_column(column)
        for issue in issues:
            table.add_row(
                Text(issue.rule),
                Text(issue.type),
                Text(issue.name),
                Text(issue.severity, style=SEVERITY_STYLES.get(issue.severity, "")),
            )
        console.print(table)
        console.print()

    def format_result(self, report: ScanReport) -> str:
        """Format a complete scan report."""
        buffer = io.StringIO()
        console = self._console(buffer)

        for label, issues in group_by_flow(report.results).items():
            self._flow_block(console, label, issues, find_scan_result(report.scan_results, label))

        self._header(console, Text.assemble(
            "Total: ",
            (f"{report.summary.results} Results", "red"),
            " in ",
            (f"{report.summary.flows_number} Flows", "yellow"),
            ".",
        ))
        for severity in SEVERITIES:
            console.print(f"- {severity}: {report.tally[severity]}")

        return buffer.getvalue()
