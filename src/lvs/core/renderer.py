import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from ..utils import schema
from .aggregator import classify_severity
from .cwe import describe_cwe

# Set up logging
logger = logging.getLogger(__name__)

# Terminal colors for the severity buckets
SEVERITY_COLORS = {
    schema.Severity.CRITICAL: "red",
    schema.Severity.HIGH: "yellow",
    schema.Severity.LOW: "green",
}

SEPARATOR = "\n" + "-" * 60 + "\n"

# rich Console default
DEFAULT_TAB_SIZE = 8


class Sink(ABC):
    """Destination for rendered lines."""

    @abstractmethod
    def emit(self, text: Text) -> None:
        raise NotImplementedError


class ConsoleSink(Sink):
    """Prints each line to a rich Console, keeping its styles."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def emit(self, text: Text) -> None:
        self.console.print(text, soft_wrap=True)


class BufferSink(Sink):
    """
    Collects the plain text of each line.

    ``getvalue()`` joins the lines with newlines, which is exactly what a
    ConsoleSink shows, minus colors. Tabs are expanded the way the console
    expands them.
    """

    def __init__(self, tab_size: int = DEFAULT_TAB_SIZE):
        self.tab_size = tab_size
        self.lines: List[str] = []

    def emit(self, text: Text) -> None:
        line = text.copy()
        line.expand_tabs(self.tab_size)
        self.lines.append(line.plain)

    def getvalue(self) -> str:
        return "\n".join(self.lines)

    def write_to(self, output_path: Path) -> None:
        output_path.write_text(self.getvalue(), encoding="utf-8")


def _markup(template: str) -> Text:
    return Text.from_markup(template, emoji=False)


class Renderer(ABC):
    """Turns an AggregateResult into lines on a Sink."""

    @abstractmethod
    def render(self, result: schema.AggregateResult, sink: Sink) -> None:
        raise NotImplementedError


class JsonRenderer(Renderer):
    """Serializes the whole result as indented JSON."""

    def render(self, result: schema.AggregateResult, sink: Sink) -> None:
        sink.emit(Text(result.model_dump_json(indent=2)))


class PrettyRenderer(Renderer):
    """
    Renders one block per report with a numbered entry per vulnerability.

    Scores are colored by severity bucket. npm entries list their CWEs
    with descriptions and an `npm audit fix` command; PyPI entries list
    their CVEs next to the advisory details.
    """

    def render(self, result: schema.AggregateResult, sink: Sink) -> None:
        for report in result.reports:
            self._render_report(report, sink)

    def _render_report(self, report: schema.ScanReport, sink: Sink) -> None:
        sink.emit(_markup(f"[bold cyan]📂 Root: {escape(report.root)}[/bold cyan]"))
        sink.emit(_markup(f"🔹 Vulnerabilities found: [yellow]{report.amount}[/yellow]"))

        if not report.vulnerabilities:
            sink.emit(_markup("[green]No vulnerabilities found.[/green]"))
            sink.emit(Text(SEPARATOR))
            return

        for i, vuln in enumerate(report.vulnerabilities, 1):
            color = SEVERITY_COLORS[classify_severity(vuln)]
            score = "N/A" if vuln.score is None else vuln.score
            version = vuln.version or ""

            sink.emit(
                _markup(
                    f"\n {i}. [{color}]⚡ {escape(vuln.name)} {escape(str(version))} "
                    f"(score: {escape(str(score))})[/{color}]"
                )
            )
            sink.emit(Text(f"    Source: {vuln.source or 'N/A'}"))
            sink.emit(Text(f"    Advisory: {vuln.advisory_url or 'N/A'}"))

            if isinstance(vuln, schema.NpmVulnerability):
                sink.emit(Text(f"    CWE:{_format_cwes(vuln.cwe)}"))
                fix = f"cd {vuln.root} && npm audit fix {vuln.name}"
            else:
                cves = "".join(f"\n      • {cve} - {vuln.details}" for cve in vuln.cve)
                sink.emit(Text(f"    CVE:{cves}"))
                fix = f"Update {vuln.name} to a fixed version"

            sink.emit(Text(f"    Fix: {fix if vuln.fix_available else 'N/A'}"))

        sink.emit(Text(SEPARATOR))


def _format_cwes(cwes: List[str]) -> str:
    if not cwes:
        return " N/A"
    return "".join(f"\n      • {cwe} - {describe_cwe(cwe)}" for cwe in cwes)


RENDERERS = {
    schema.OutputFormat.PRETTY: PrettyRenderer,
    schema.OutputFormat.JSON: JsonRenderer,
}


def get_renderer(output_format: schema.OutputFormat) -> Renderer:
    return RENDERERS[schema.OutputFormat(output_format)]()


def emit_result(
    result: schema.AggregateResult,
    output_format: schema.OutputFormat = schema.OutputFormat.PRETTY,
    output_file: Optional[Path] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render the result to the terminal, or to ``output_file`` when given.

    A result without vulnerabilities produces a single confirmation line
    instead of either format.
    """
    console = console or Console()

    if not result.has_vulnerabilities:
        message = f"✅ No vulnerabilities found in {result.target or 'N/A'}!"
        if output_file:
            output_file.write_text(message + "\n", encoding="utf-8")
            console.print(Text(f"✅ Results saved to {output_file}"), soft_wrap=True)
        else:
            ConsoleSink(console).emit(Text(message))
        return

    renderer = get_renderer(output_format)

    if output_file:
        sink = BufferSink()
        renderer.render(result, sink)
        sink.write_to(output_file)
        label = "Pretty results" if isinstance(renderer, PrettyRenderer) else "Results"
        console.print(Text(f"✅ {label} saved to {output_file}"), soft_wrap=True)
        logger.debug(f"Wrote {len(sink.lines)} line(s) to {output_file}")
    else:
        renderer.render(result, ConsoleSink(console))
