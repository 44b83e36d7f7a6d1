import re

SLUG_MAX_LENGTH = 100

# word characters, whitespace, Hangul syllables and hyphens survive
_DISALLOWED = re.compile(r"[^\w\s가-힣-]")
_WHITESPACE = re.compile(r"\s+")


def generate_slug(title: str) -> str:
    """Turn a post title into a URL friendly slug."""
    slug = title.lower().strip()
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    return slug[:SLUG_MAX_LENGTH]
