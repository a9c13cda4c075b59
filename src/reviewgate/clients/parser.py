"""Shared response parsing utilities."""

import re

MAX_RESPONSE_LENGTH = 1_000_000  # 1MB limit for regex processing

# Opening fence with optional language tag, then the body up to the next fence.
_CODE_BLOCK = re.compile(r"```[\w+#.-]*[ \t]*\r?\n(.*?)```", re.DOTALL)


def extract_code(text: str) -> str:
  """Extract reviewed code from an LLM response.

  Returns the trimmed body of the first fenced code block, or the whole
  trimmed response when there is none.
  """
  text = text.strip()

  if len(text) > MAX_RESPONSE_LENGTH:
    raise ValueError(f"Response too large ({len(text)} bytes), max {MAX_RESPONSE_LENGTH}")

  match = _CODE_BLOCK.search(text)
  if match:
    return match.group(1).strip()
  return text
