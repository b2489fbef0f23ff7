"""Helpers for redacting provider credentials from log output."""

from __future__ import annotations

import re

REDACTED = "[REDACTED]"

_KEY_VALUE_SECRET_RE = re.compile(
    r"""(?ix)
    \b
    (
      appid|
      api[_-]?key|
      token|
      secret|
      authorization
    )
    (\s*[:=]\s*)
    ([^\s,;&"']+)
    """
)


def sanitize_text(text: str) -> str:
    """Redact credentials embedded in plain text or request URLs."""
    return _KEY_VALUE_SECRET_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}{REDACTED}", text)
