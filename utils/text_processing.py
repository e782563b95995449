# utils/text_processing.py


def split_nonblank_lines(text: str | None) -> list[str]:
    """Split text on newlines, dropping lines that are empty or whitespace-only.

    Kept lines are returned as-is; callers decide whether to strip them.
    """
    if not text:
        return []
    return [line for line in text.split("\n") if line.strip()]


def first_line(text: str | None) -> str:
    """Return the first line of `text`, stripped, or an empty string."""
    if not text:
        return ""
    return text.split("\n", 1)[0].strip()


def truncate_for_log(s: str, limit: int = 300) -> str:
    """Return a truncated string for logging purposes."""
    if not isinstance(s, str):
        return ""
    return s if len(s) <= limit else s[:limit] + "..."
