#!/usr/bin/env python3
"""
KUBEADMIT CLI
-------------
Command-line front for the admission engine.

    kubeadmit check PATH        admit YAML manifests (file or directory)
    kubeadmit render --set ...  build a manifest from discrete fields
    kubeadmit template          print the CoreUI starter template

Author: KubeAdmit Team
Date: 2026-10-18
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn

from kubeadmit.cli.formatter import AdmitFormatter
from kubeadmit.core.config import EngineConfig
from kubeadmit.core.engine import AdmissionEngine
from kubeadmit.core.errors import RegistryError
from kubeadmit.schema.coreui import COREUI, DEFAULT_TEMPLATE
from kubeadmit.schema.registry import SchemaRegistry

VERSION = "kubeadmit v1.0.0"

# Global console for consistent styling across the application
console = Console()


class KubeAdmitCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self, out: Console = console):
        self.console = out
        self.formatter = AdmitFormatter(out)
        self.parser = argparse.ArgumentParser(
            prog="kubeadmit",
            description="KubeAdmit - admission & normalization for CoreUI resources",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-v", "--version", action="version", version=VERSION)
        self.parser.add_argument("--log-level", default="WARNING",
                                 choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity")
        self.parser.add_argument("--catalog", help="Extra JSON catalog of resource kinds to register")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        check_parser = subparsers.add_parser("check", help="Admit YAML manifests and report violations")
        check_parser.add_argument("path", help="Path to a YAML file or directory")
        check_parser.add_argument("--ext", default=".yaml", help="File extension filter (default: .yaml)")
        check_parser.add_argument("--max-depth", default=10, help="Directory depth limit (default: 10)")
        check_parser.add_argument("--show", action="store_true", help="Print canonical documents of accepted files")

        render_parser = subparsers.add_parser("render", help="Build a manifest from discrete fields")
        render_parser.add_argument("--set", dest="fields", action="append", default=[], metavar="PATH=VALUE",
                                   help="Field value, e.g. --set metadata.name=web --set service.port=8080")
        render_parser.add_argument("--kind", help="Resource kind to render (default: CoreUI)")
        render_parser.add_argument("--json", action="store_true", help="Emit JSON instead of YAML")
        render_parser.add_argument("-o", "--output", help="Write the document to this file")

        template_parser = subparsers.add_parser("template", help="Print the CoreUI starter template")
        template_parser.add_argument("-o", "--output", help="Write the template to this file")

    def _build_engine(self, args: argparse.Namespace) -> AdmissionEngine:
        registry = SchemaRegistry([COREUI])
        if args.catalog:
            registry.load_catalog(args.catalog)
        config = EngineConfig(
            extension=getattr(args, "ext", ".yaml"),
            max_depth=getattr(args, "max_depth", 10),
        )
        return AdmissionEngine(registry=registry, config=config)

    def _run_check(self, args: argparse.Namespace, engine: AdmissionEngine) -> int:
        input_path = Path(args.path).resolve()
        if not input_path.exists():
            self.console.print(f"[bold red]Error:[/bold red] Path '{args.path}' not found.")
            return 2

        if input_path.is_file():
            reports = [engine.admit_file(input_path)]
            reports[0]["file_path"] = input_path.name
        else:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(bar_width=40),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                console=self.console,
                transient=True,
            ) as progress:
                task_id = progress.add_task("Admitting manifests...", total=None)

                def advance(done: int, total: int):
                    progress.update(task_id, completed=done, total=total)

                reports = engine.scan_directory(input_path, args.ext, progress_callback=advance)

        if not reports:
            self.console.print("\n[bold yellow]⚠️  No matching YAML files found.[/bold yellow]")
            return 0

        for r in reports:
            if r["status"] == "SYNTAX_ERROR":
                self.formatter.show_syntax_error(r)
            elif r["status"] in ("ENGINE_ERROR", "FILE_NOT_FOUND"):
                self.console.print(f"[bold red]Error in {r['file_path']}:[/bold red] {r.get('error')}")
            self.formatter.show_warnings(r.get("warnings", []))
            self.formatter.show_violations(r.get("violations", []), title=f"Violations: {r['file_path']}")
            if args.show and r.get("document"):
                self.formatter.show_document(r["document"], title=f"CANONICAL: {r['file_path']}")

        summary = engine.generate_summary(reports)
        self.formatter.print_final_table(reports, summary)
        return 0 if summary["accepted"] == summary["total_files"] else 1

    def _run_render(self, args: argparse.Namespace, engine: AdmissionEngine) -> int:
        fields = {}
        for item in args.fields:
            path, sep, value = item.partition("=")
            if not sep or not path:
                self.console.print(f"[bold red]Error:[/bold red] Expected PATH=VALUE, got '{item}'.")
                return 2
            fields[path.strip()] = value

        result, draft = engine.admit_form(fields, args.kind)
        self.formatter.show_warnings(draft.warnings)
        if not result.accepted:
            self.formatter.show_violations(result.violations)
            return 1

        if args.json:
            document = engine.serializer.to_json(result.record) + "\n"
        else:
            document = engine.serialize(result.record)
        return self._emit(document, args.output, title="Rendered Resource", lexer="json" if args.json else "yaml")

    def _emit(self, document: str, output: Optional[str], title: str, lexer: str = "yaml") -> int:
        if output:
            Path(output).write_text(document, encoding="utf-8")
            self.console.print(f"[green]Wrote {output}[/green]")
        elif lexer == "yaml":
            self.formatter.show_document(document, title=title)
        else:
            self.console.print_json(document)
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(level=getattr(logging, args.log_level))

        if args.command is None:
            self.console.print(Panel.fit("[bold cyan]KubeAdmit v1.0.0[/bold cyan]", border_style="cyan"))
            self.parser.print_help()
            return 0
        if args.command == "template":
            return self._emit(DEFAULT_TEMPLATE, args.output, title="CoreUI Template")

        try:
            engine = self._build_engine(args)
            if args.command == "check":
                return self._run_check(args, engine)
            return self._run_render(args, engine)
        except RegistryError as e:
            self.console.print(f"[bold red]CRITICAL ERROR:[/bold red] {e}")
            return 2


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point with interrupt handling."""
    try:
        return KubeAdmitCLI().run(argv)
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
