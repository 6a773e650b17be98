"""Output formatting for analysis and upgrade results."""

import json
from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from upshift.models import MatchRecord, UpgradeResult


def summarize(result: UpgradeResult, analyze_only: bool = False) -> str:
  """One-line summary of a result."""
  count = len(result.records)
  if not count:
    return "No issues found."

  files = len({r.file for r in result.records})
  summary = (
    f"Found {count} issue{'s' if count != 1 else ''} "
    f"in {files} file{'s' if files != 1 else ''}."
  )
  if analyze_only:
    return summary

  fixed = len(result.changed_files)
  summary += f" Updated {fixed} file{'s' if fixed != 1 else ''}"
  summary += f", {len(result.unresolved)} issue(s) need manual review."
  return summary


def _is_fixed(record: MatchRecord, result: UpgradeResult) -> bool:
  return record not in result.unresolved


class OutputFormatter(ABC):
  """Base output formatter."""

  @abstractmethod
  def format(self, result: UpgradeResult, analyze_only: bool = False) -> str:
    """Format a result for output."""
    ...


class TerminalFormatter(OutputFormatter):
  """Rich terminal output formatter."""

  def __init__(self, console: Console | None = None):
    self.console = console or Console()

  def format(self, result: UpgradeResult, analyze_only: bool = False) -> str:
    self._print_summary(result, analyze_only)
    self._print_records(result, analyze_only)
    self._print_changed(result, analyze_only)
    return ""

  def _print_summary(self, result: UpgradeResult, analyze_only: bool) -> None:
    title = "Analysis" if analyze_only else "Upgrade"
    self.console.print()
    self.console.print(Panel(
      summarize(result, analyze_only),
      title=f"[bold]upshift {title}[/bold]",
      border_style="blue",
    ))

  def _print_records(self, result: UpgradeResult, analyze_only: bool) -> None:
    if not result.records:
      self.console.print("\n[green]No issues found.[/green]")
      return

    table = Table(show_header=True, header_style="bold")
    table.add_column("File", width=40)
    table.add_column("Issue", min_width=40)
    if not analyze_only:
      table.add_column("Status", width=8)

    for record in result.records:
      row = [Text(record.file), Text(record.message)]
      if not analyze_only:
        fixed = _is_fixed(record, result)
        row.append(Text("fixed" if fixed else "open", style="green" if fixed else "yellow"))
      table.add_row(*row)

    self.console.print()
    self.console.print(table)

  def _print_changed(self, result: UpgradeResult, analyze_only: bool) -> None:
    if analyze_only:
      return
    if not result.changed_files:
      self.console.print("\n[dim]No files were changed.[/dim]")
      return
    self.console.print("\n[bold]Updated files:[/bold]")
    for path in result.changed_files:
      self.console.print(f"  [green]{path}[/green]")


class JsonFormatter(OutputFormatter):
  """JSON output formatter."""

  def format(self, result: UpgradeResult, analyze_only: bool = False) -> str:
    data: dict = {
      "summary": summarize(result, analyze_only),
      "issues": [
        {
          "file": r.file,
          "message": r.message,
          "pattern": r.pattern_source,
          **({} if analyze_only else {"fixed": _is_fixed(r, result)}),
        }
        for r in result.records
      ],
    }
    if not analyze_only:
      data["changed_files"] = list(result.changed_files)
    return json.dumps(data, indent=2)


class MarkdownFormatter(OutputFormatter):
  """Markdown output formatter."""

  def format(self, result: UpgradeResult, analyze_only: bool = False) -> str:
    lines = [
      "# upshift " + ("Analysis" if analyze_only else "Upgrade"),
      "",
      "## Summary",
      "",
      summarize(result, analyze_only),
      "",
      "## Issues",
      "",
    ]

    if result.records:
      for record in result.records:
        status = "" if analyze_only else (" (fixed)" if _is_fixed(record, result) else " (open)")
        lines.append(f"- `{record.file}`: {record.message}{status}")
      lines.append("")
    else:
      lines.extend(["No issues found.", ""])

    if not analyze_only and result.changed_files:
      lines.extend(["## Updated files", ""])
      lines.extend(f"- `{path}`" for path in result.changed_files)
      lines.append("")

    return "\n".join(lines)


def get_formatter(format_type: str) -> OutputFormatter:
  """Get formatter by type name."""
  formatters = {
    "terminal": TerminalFormatter,
    "json": JsonFormatter,
    "markdown": MarkdownFormatter,
  }
  formatter_class = formatters.get(format_type)
  if not formatter_class:
    raise ValueError(f"Unknown format: {format_type}")
  return formatter_class()
