"""Naming-convention layer: PascalCase member names to underscore wire keys.

WHY: The OneSky API speaks ``lower_case_with_underscores`` everywhere,
while argument structures and mapping keys built by callers may use
capitalized words (``SourceFileName``). One conversion rule keeps request
encoding and response decoding consistent.

HOW: A single left-to-right scan over the characters. Every uppercase
letter is lowercased; an underscore is inserted before the first letter
of each uppercase run except at position 0. When a run is followed by a
lowercase letter, its last capital starts the next word instead.

RULES:
- "SourceFileName" → "source_file_name"
- "Id" → "id"
- "HTTPStatus" → "http_status" (one underscore per acronym run, not per letter)
- Names already in underscore form pass through unchanged
"""

from __future__ import annotations


def to_underscore(name: str) -> str:
    """Convert a capitalized-word identifier to its underscore wire key."""
    out: list[str] = []
    last = len(name) - 1
    for i, ch in enumerate(name):
        if not ch.isupper():
            out.append(ch)
            continue
        if i > 0:
            prev_upper = name[i - 1].isupper()
            next_lower = i < last and name[i + 1].islower()
            if not prev_upper or next_lower:
                out.append("_")
        out.append(ch.lower())
    return "".join(out)
