"""Reply text helpers."""
from __future__ import annotations

import re

_FENCED = re.compile(r"^(`{3,})[^\n`]*\n(?P<body>.*?)\n?\1\s*$", re.DOTALL)
_FENCED_INLINE = re.compile(r"^(`{3,})(?P<body>[^\n]*?)\1$")


def strip_code_fences(text: str | None) -> str:
    """Trim ``text`` and unwrap it when the whole reply is one fenced block.

    >>> strip_code_fences("```markdown\\nBe kind to yourself.\\n```")
    'Be kind to yourself.'
    >>> strip_code_fences("```Be kind to yourself.```")
    'Be kind to yourself.'
    """

    if not text:
        return ""
    cleaned = text.strip()
    match = _FENCED.match(cleaned) or _FENCED_INLINE.match(cleaned)
    if match:
        return match.group("body").strip()
    return cleaned
