"""Output formatting for review results."""

import json
from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from reviewgate.models import ReviewResult


class OutputFormatter(ABC):
  """Base output formatter."""

  @abstractmethod
  def format(self, result: ReviewResult) -> str:
    """Format review result for output."""
    ...


class TerminalFormatter(OutputFormatter):
  """Rich terminal output formatter."""

  def __init__(self, console: Console | None = None):
    self.console = console or Console()

  def format(self, result: ReviewResult) -> str:
    self._print_summary(result)
    self._print_files(result)
    return ""

  def _print_summary(self, result: ReviewResult) -> None:
    duration = result.metadata.get("duration_ms")
    lines = [
      f"Provider: {result.provider_name} ({result.provider_kind.value})",
      f"Prompt: {result.prompt_name}",
      f"Files: {len(result.reviewed_files)}",
    ]
    if duration is not None:
      lines.append(f"Duration: {duration}ms")
    self.console.print()
    self.console.print(Panel("\n".join(lines), title="[bold]Code Review[/bold]", border_style="blue"))

  def _print_files(self, result: ReviewResult) -> None:
    if not result.reviewed_files:
      self.console.print("\n[dim]No files reviewed.[/dim]")
      return

    for reviewed in result.reviewed_files:
      syntax = Syntax(
        reviewed.content,
        reviewed.language or "text",
        line_numbers=True,
        word_wrap=True,
      )
      self.console.print()
      self.console.print(Panel(syntax, title=reviewed.name, border_style="green"))


class JsonFormatter(OutputFormatter):
  """JSON output formatter."""

  def format(self, result: ReviewResult) -> str:
    data = result.to_dict()
    data["metadata"] = result.metadata
    return json.dumps(data, indent=2)


class MarkdownFormatter(OutputFormatter):
  """Markdown output formatter."""

  def format(self, result: ReviewResult) -> str:
    lines = [
      "# Code Review",
      "",
      f"**Provider:** {result.provider_name} ({result.provider_kind.value})",
      "",
      f"**Prompt:** {result.prompt_name}",
      "",
    ]

    if not result.reviewed_files:
      lines.extend(["No files reviewed.", ""])
      return "\n".join(lines)

    for reviewed in result.reviewed_files:
      fence = "````" if "```" in reviewed.content else "```"
      lines.append(f"## {reviewed.name}")
      lines.append("")
      lines.append(f"{fence}{reviewed.language}")
      lines.append(reviewed.content)
      lines.append(fence)
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
