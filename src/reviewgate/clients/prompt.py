"""Shared message construction for review clients."""

from reviewgate.models import CodeFile


def build_review_message(system_prompt: str, file: CodeFile) -> str:
  """Combine the review prompt and one file into a single message."""
  return f"""{system_prompt.strip()}

---

File: {file.name}
Language: {file.language or "unknown"}

```{file.language}
{file.content}
```"""
