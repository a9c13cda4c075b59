"""Tests for output formatters."""

import io
import json

import pytest
from rich.console import Console
from reviewgate.models import ProviderKind, ReviewedFile, ReviewResult
from reviewgate.output.formatter import (
  JsonFormatter,
  MarkdownFormatter,
  TerminalFormatter,
  get_formatter,
)


@pytest.fixture
def review_result() -> ReviewResult:
  return ReviewResult(
    reviewed_files=[
      ReviewedFile(name="A.java", language="java", content="class A {} // fine"),
      ReviewedFile(name="q.sql", language="sql", content="select 1; -- ok"),
    ],
    provider_kind=ProviderKind.GEMINI,
    provider_name="Team Gemini",
    provider_id="p-1",
    prompt_id="java",
    prompt_name="Java review",
    metadata={"duration_ms": 42},
  )


def _empty_result() -> ReviewResult:
  return ReviewResult(
    reviewed_files=[],
    provider_kind=ProviderKind.ANTHROPIC,
    provider_name="Claude",
    prompt_id="p",
    prompt_name="Prompt",
  )


class TestJsonFormatter:
  def test_format(self, review_result: ReviewResult) -> None:
    data = json.loads(JsonFormatter().format(review_result))

    assert data["provider"] == "gemini"
    assert data["providerName"] == "Team Gemini"
    assert data["promptId"] == "java"
    assert data["promptName"] == "Java review"
    assert [f["name"] for f in data["reviewedFiles"]] == ["A.java", "q.sql"]
    assert data["reviewedFiles"][1]["content"] == "select 1; -- ok"
    assert data["metadata"]["duration_ms"] == 42

  def test_format_empty_result(self) -> None:
    data = json.loads(JsonFormatter().format(_empty_result()))
    assert data["reviewedFiles"] == []


class TestMarkdownFormatter:
  def test_format(self, review_result: ReviewResult) -> None:
    output = MarkdownFormatter().format(review_result)

    assert "# Code Review" in output
    assert "**Provider:** Team Gemini (gemini)" in output
    assert "## A.java" in output
    assert "```java\nclass A {} // fine\n```" in output
    assert output.index("## A.java") < output.index("## q.sql")

  def test_content_with_fences(self) -> None:
    result = ReviewResult(
      reviewed_files=[ReviewedFile(name="README.md", language="markdown", content="```\nx\n```")],
      provider_kind=ProviderKind.GEMINI,
      provider_name="G",
      prompt_id="p",
      prompt_name="P",
    )
    output = MarkdownFormatter().format(result)
    assert "````markdown\n```\nx\n```\n````" in output

  def test_format_empty_result(self) -> None:
    assert "No files reviewed." in MarkdownFormatter().format(_empty_result())


class TestTerminalFormatter:
  def test_prints_files(self, review_result: ReviewResult) -> None:
    buffer = io.StringIO()
    formatter = TerminalFormatter(Console(file=buffer, width=100, color_system=None))

    assert formatter.format(review_result) == ""
    printed = buffer.getvalue()
    assert "Team Gemini" in printed
    assert "A.java" in printed
    assert "select 1; -- ok" in printed
    assert "42ms" in printed


class TestGetFormatter:
  @pytest.mark.parametrize("name,expected", [
    ("terminal", TerminalFormatter),
    ("json", JsonFormatter),
    ("markdown", MarkdownFormatter),
  ])
  def test_known_formats(self, name: str, expected: type) -> None:
    assert isinstance(get_formatter(name), expected)

  def test_unknown_format(self) -> None:
    with pytest.raises(ValueError, match="Unknown format"):
      get_formatter("github")
