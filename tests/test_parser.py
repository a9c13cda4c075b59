"""Tests for response parsing and message construction."""

import pytest
from reviewgate.clients.parser import MAX_RESPONSE_LENGTH, extract_code
from reviewgate.clients.prompt import build_review_message
from reviewgate.models import CodeFile


class TestExtractCode:
  def test_first_fenced_block_with_language(self) -> None:
    raw = "intro text\n```java\nclass X {}\n```\ntrailing"
    assert extract_code(raw) == "class X {}"

  def test_no_fenced_block_returns_trimmed_response(self) -> None:
    assert extract_code("  just some code\n\n") == "just some code"

  def test_fence_without_language(self) -> None:
    assert extract_code("```\nselect 1;\n```") == "select 1;"

  def test_only_first_block_is_used(self) -> None:
    raw = "```python\nfirst()\n```\nmore\n```python\nsecond()\n```"
    assert extract_code(raw) == "first()"

  def test_block_interior_is_trimmed(self) -> None:
    raw = "```ts\n\n  const a = 1;\n\n```"
    assert extract_code(raw) == "const a = 1;"

  def test_language_tags_with_symbols(self) -> None:
    assert extract_code("```c++\nint x;\n```") == "int x;"
    assert extract_code("```c#\nvar x = 1;\n```") == "var x = 1;"

  def test_crlf_line_endings(self) -> None:
    assert extract_code("```java\r\nclass Y {}\r\n```") == "class Y {}"

  def test_unterminated_fence_returns_whole_response(self) -> None:
    raw = "```java\nclass Z {}"
    assert extract_code(raw) == raw

  def test_empty_response(self) -> None:
    assert extract_code("") == ""

  def test_oversized_response_rejected(self) -> None:
    with pytest.raises(ValueError, match="too large"):
      extract_code("x" * (MAX_RESPONSE_LENGTH + 1))


class TestBuildReviewMessage:
  def test_contains_prompt_header_and_fenced_content(self) -> None:
    file = CodeFile(name="Main.java", language="java", content="class Main {}")
    message = build_review_message("  Review carefully.  ", file)

    assert message.startswith("Review carefully.")
    assert "File: Main.java" in message
    assert "Language: java" in message
    assert "```java\nclass Main {}\n```" in message
    assert message.index("Review carefully.") < message.index("File: Main.java")

  def test_unknown_language(self) -> None:
    file = CodeFile(name="notes", content="text")
    message = build_review_message("Review.", file)

    assert "Language: unknown" in message
    assert "```\ntext\n```" in message
