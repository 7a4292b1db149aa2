"""Secret masking shared by logging, Sentry and upstream error bodies.

Two passes:
  - mapping keys that name a credential have their value replaced outright;
  - free text is scanned for GitHub token prefixes, 40-hex OAuth codes,
    ``Bearer`` credentials and PEM private-key blocks.
"""

from __future__ import annotations

import re
from typing import Any

MASK = "***"

_SENSITIVE_KEYS = frozenset(
    {
        "access_token",
        "authorization",
        "client_secret",
        "code",
        "code_verifier",
        "password",
        "private_key",
        "refresh_token",
        "secret",
        "token",
    }
)

_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(
            r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----",
            re.DOTALL,
        ),
        "[REDACTED PRIVATE KEY]",
    ),
    (re.compile(r"\b(gh[opusr])_[A-Za-z0-9_]+"), r"\1_" + MASK),
    (re.compile(r"\b(github_pat)_[A-Za-z0-9_]+"), r"\1_" + MASK),
    (re.compile(r"(Bearer\s+)[^\s\"',]+", re.IGNORECASE), r"\1" + MASK),
    (re.compile(r"\b[a-f0-9]{40}\b"), MASK),
)


def is_sensitive_key(key: str) -> bool:
    return key.lower() in _SENSITIVE_KEYS


def mask_text(text: str) -> str:
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def redact(value: Any) -> Any:
    """Return a copy of *value* with secrets masked.

    Dicts, lists and tuples are walked recursively; other objects are
    returned untouched.
    """
    if isinstance(value, str):
        return mask_text(value)
    if isinstance(value, dict):
        return {
            k: (MASK if isinstance(k, str) and is_sensitive_key(k) else redact(v))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(redact(v) for v in value)
    return value


def truncate(text: str, limit: int = 200) -> str:
    """Mask and shorten an upstream body before it reaches a caller or log."""
    masked = mask_text(text)
    if len(masked) <= limit:
        return masked
    return masked[:limit] + "..."
