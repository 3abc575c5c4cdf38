"""Path utilities for cross-platform file operations."""

import re
import string


def sanitize_for_filesystem(name: str, replacement: str = "_") -> str:
    """Sanitize a string to be safe for use as a filename."""
    if not name:
        return "unnamed"

    valid_chars = set(string.ascii_letters + string.digits + "_-")
    sanitized = "".join(c if c in valid_chars else replacement for c in name)

    if replacement in sanitized:
        pattern = re.escape(replacement) + "+"
        sanitized = re.sub(pattern, replacement, sanitized)

    sanitized = sanitized.strip(replacement)

    if not sanitized:
        sanitized = "unnamed"

    # Leave room for the suffix and extension
    if len(sanitized) > 200:
        sanitized = sanitized[:200].rstrip(replacement)

    return sanitized


def create_graph_filename(binary_name: str, suffix: str = "classes") -> str:
    """Create a safe DOT filename for the class graph of a binary.

    ``libfoo.so.1`` becomes ``libfoo_so_1_classes.dot``.
    """
    base_name = sanitize_for_filesystem(binary_name)
    if suffix:
        base_name = f"{base_name}_{sanitize_for_filesystem(suffix)}"

    return f"{base_name}.dot"
