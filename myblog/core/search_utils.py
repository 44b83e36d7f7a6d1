import re

SNIPPET_LENGTH = 120
SNIPPET_LEAD = 30


def escape_for_like(value: str) -> str:
    """Escape LIKE wildcards (\\ % _) so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def highlight_segments(text: str, query: str) -> list[tuple[str, bool]]:
    """
    Split text into (segment, matched) pairs, matching query case-insensitively.
    """
    if not query.strip():
        return [(text, False)]

    pattern = re.compile(f"({re.escape(query)})", re.IGNORECASE)
    parts = pattern.split(text)

    # re.split with one capture group alternates plain / matched parts
    return [(part, i % 2 == 1) for i, part in enumerate(parts) if part]


def snippet(text: str, query: str, length: int = SNIPPET_LENGTH) -> str:
    plain = re.sub(r"\s+", " ", text).strip()
    if len(plain) <= length:
        return plain

    idx = plain.lower().find(query.lower()) if query else -1
    start = max(0, idx - SNIPPET_LEAD) if idx >= 0 else 0
    piece = plain[start:start + length]

    prefix = "…" if start > 0 else ""
    suffix = "…" if start + length < len(plain) else ""
    return f"{prefix}{piece}{suffix}"
