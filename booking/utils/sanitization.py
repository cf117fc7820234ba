import html
from typing import Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def strip_control_characters(value: str) -> str:
    """Drop non-printable characters (keeps newlines and tabs)"""
    return "".join(ch for ch in value if ch.isprintable() or ch in "\n\t")
