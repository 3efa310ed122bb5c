import re
from pathlib import Path

FILENAME_LENGTH = 100

# Windows reserved names (case-insensitive)
RESERVED_NAMES = frozenset(
    {
        "con",
        "prn",
        "aux",
        "nul",
        *(f"com{i}" for i in range(1, 10)),
        *(f"lpt{i}" for i in range(1, 10)),
    }
)

DISALLOWED_CHARS_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def save_file(file_path: Path, content: str | bytes) -> None:
    """Save content to a file, creating parent directories as needed."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        with file_path.open("wb") as file:
            file.write(content)
    elif isinstance(content, str):
        with file_path.open("w", encoding="utf-8") as file:
            file.write(content)
    else:
        msg = "Content must be either a string or bytes."
        raise TypeError(msg)


def sanitize_filename(title: str, max_length: int = FILENAME_LENGTH) -> str:
    """Turn a page title into a lower-case, hyphenated file name stem.

    Args:
        title: The page title.
        max_length: Maximum length of the returned stem.

    Returns:
        A name safe on common filesystems, ``untitled`` if nothing is left.

    Examples:
        "Release Notes: v2.0" -> "release-notes-v2.0"
        "  What's  new?  " -> "what's-new"
    """
    sanitized = DISALLOWED_CHARS_RE.sub("", title.lower())
    sanitized = re.sub(r"\s+", "-", sanitized.strip())
    sanitized = re.sub(r"-{2,}", "-", sanitized)
    sanitized = sanitized.strip("-.")[:max_length].rstrip("-.")

    if not sanitized:
        return "untitled"
    if sanitized.split(".")[0] in RESERVED_NAMES:
        sanitized = f"{sanitized}_"
    return sanitized


def page_filename(title: str) -> str:
    return f"{sanitize_filename(title)}.md"
