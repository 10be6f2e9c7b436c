# src/kubeadmit/cli/formatter.py
from typing import Any, Dict, List, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from kubeadmit.core.models import Violation

# Initialize the Rich console for high-quality terminal output
console = Console()


class AdmitFormatter:
    """
    AdmitFormatter: the visual side of the CLI.
    Renders canonical documents, violations, warnings and the final report.
    """

    def __init__(self, out: Console = console):
        self.console = out

    def show_document(self, document: str, title: str):
        syntax = Syntax(document.rstrip(), "yaml", theme="monokai", line_numbers=True)
        self.console.print(Panel(syntax, title=f"[bold green]{title}[/bold green]", border_style="green"))

    def show_violations(self, violations: Sequence[Violation], title: str = "Violations"):
        if not violations:
            return
        table = Table(title=title, show_header=True, header_style="bold red")
        table.add_column("Field", style="cyan")
        table.add_column("Violation", style="bold")
        table.add_column("Message")
        for v in violations:
            table.add_row(v.path, v.kind.value, v.message)
        self.console.print(table)

    def show_warnings(self, warnings: List[str]):
        for warning in warnings:
            self.console.print(f"[bold yellow]⚠  Dropped:[/bold yellow] {warning}")

    def show_syntax_error(self, report: Dict[str, Any]):
        location = f"L{report.get('line')}:C{report.get('column')} " if report.get("line") else ""
        self.console.print(f"[bold red]Syntax error in {report['file_path']}:[/bold red] {location}{report.get('error')}")

    def print_final_table(self, reports: List[Dict[str, Any]], summary: Dict[str, Any]):
        """
        Builds the summary table shown at the very end of a check.
        """
        table = Table(title="KubeAdmit Admission Report", show_lines=True, header_style="bold magenta")
        table.add_column("File Path", style="cyan")
        table.add_column("Kind")
        table.add_column("Status", style="bold")
        table.add_column("Violations", justify="right")
        table.add_column("Result", justify="center")

        for r in reports:
            success = r.get("success", False)
            status_color = "green" if success else "yellow" if r.get("status") == "REJECTED" else "red"
            table.add_row(
                str(r.get("file_path")),
                str(r.get("kind", "Unknown")),
                f"[{status_color}]{r.get('status')}[/{status_color}]",
                str(len(r.get("violations", []))),
                "✅" if success else "❌",
            )

        self.console.print(table)
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Total Files:    {summary['total_files']}\n"
            f"Accepted:       [green]{summary['accepted']}[/green]\n"
            f"Rejected:       [yellow]{summary['rejected']}[/yellow]\n"
            f"Syntax Errors:  [red]{summary['syntax_errors']}[/red]\n"
            f"System Errors:  [red]{summary['system_errors']}[/red]",
            border_style="dim"
        ))
