"""
Text processing utilities for formatting, display and reply scanning.
"""

import re
from typing import Optional, Tuple


def find_balanced_span(
    text: str,
    open_char: str = "{",
    close_char: str = "}",
    quote_char: str = '"',
    escape_char: str = "\\",
) -> Optional[Tuple[int, int]]:
    """
    Locate the first balanced delimiter span in text.

    Scans from the first opening delimiter, counting nested delimiters and
    ignoring delimiters that appear inside quoted strings (with escapes), so
    JSON such as {"a": "}"} is matched as a whole.

    Args:
        text: Text that may contain a delimited span
        open_char: Opening delimiter character (default: '{')
        close_char: Closing delimiter character (default: '}')
        quote_char: String quote character (default: '"')
        escape_char: Character used for escaping inside strings (default: '\\')

    Returns:
        (start, end) such that text[start:end] is the span including both
        delimiters, or None if no opening delimiter is ever closed.

    Example:
        >>> text = 'Here you go: {"a": {"b": 1}} trailing'
        >>> start, end = find_balanced_span(text)
        >>> text[start:end]
        '{"a": {"b": 1}}'
    """
    search_from = 0
    while True:
        start = text.find(open_char, search_from)
        if start == -1:
            return None

        depth = 0
        in_string = False
        pos = start
        while pos < len(text):
            char = text[pos]
            if in_string:
                if char == escape_char:
                    pos += 2
                    continue
                if char == quote_char:
                    in_string = False
            elif char == quote_char:
                in_string = True
            elif char == open_char:
                depth += 1
            elif char == close_char:
                depth -= 1
                if depth == 0:
                    return start, pos + 1
            pos += 1

        # This opener was never closed; a later one might be
        search_from = start + 1


def truncate_display(text: str, max_len: int) -> str:
    """
    Shorten text to at most max_len characters, marking the cut with "...".

        >>> truncate_display("Senior Data Engineer", 12)
        'Senior Da...'
    """
    if len(text) <= max_len:
        return text
    return text[: max(max_len - 3, 0)] + "..."


def tail(text: str, max_len: int) -> str:
    """Return the last max_len characters of text."""
    return text[-max_len:] if len(text) > max_len else text


# A run of two or more line breaks with only spaces or tabs between them
_BLANK_RUN = re.compile(r"\n(?:[ \t]*\n)+")


def set_max_consecutive_blank_lines(content: str, max_consecutive: int = 1) -> str:
    """
    Collapse runs of blank lines (whitespace-only lines count) to at most
    max_consecutive. Rendered templates use 1; 0 removes blank lines entirely.
    """
    limit = max_consecutive + 1

    def collapse(match: "re.Match") -> str:
        breaks = match.group(0).count("\n")
        return match.group(0) if breaks <= limit else "\n" * limit

    return _BLANK_RUN.sub(collapse, content)
