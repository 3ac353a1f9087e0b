"""
LaTeX escaping for free-text resume values.

escape_latex() is total: any input produces a string that is safe to drop
into a LaTeX argument or paragraph.
"""

import re
import unicodedata
from typing import Any

_UNICODE_SPACES = re.compile(r"[\u00a0\u1680\u180e\u2000-\u200b\u202f\u205f\u3000\ufeff]")
_DASHES = re.compile(r"[\u2013\u2014]")
_SINGLE_QUOTES = re.compile(r"[\u2018\u2019]")
_DOUBLE_QUOTES = re.compile(r"[\u201c\u201d]")
_BULLETS = re.compile(r"[\u2022\u2023\u25e6\u2043\u2219]")
_CONTROL_CHARS = re.compile(r"[\u0000-\u001f\u007f-\u009f]")
_WHITESPACE = re.compile(r"\s+")

# Single-pass replacement so the braces of \textbackslash{} are never re-escaped
LATEX_SPECIAL_CHARS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}
_LATEX_SPECIAL = re.compile("|".join(re.escape(char) for char in LATEX_SPECIAL_CHARS))


def _normalize_unicode(text: str) -> str:
    """Decompose to NFKD and drop the combining marks pdflatex cannot typeset."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def escape_latex(value: Any) -> str:
    """
    Escape a free-text value for LaTeX.

    Steps, in order:
        1. Unicode NFKD normalization (combining marks dropped)
        2. Unicode space variants -> ASCII space
        3. En/em dashes -> "-"
        4. Curly quotes -> straight quotes
        5. Bullet glyphs -> "* "
        6. C0/C1 control characters removed
        7. LaTeX specials escaped (backslash, & % $ # _ { }, ~ and ^)
        8-9. Newlines and whitespace runs collapsed to one space
        10. Trimmed

    Args:
        value: Any value; None renders as an empty string

    Returns:
        Escaped single-line string

    Example:
        >>> escape_latex("50% of $100")
        '50\\\\% of \\\\$100'
    """
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)

    text = _normalize_unicode(text)
    text = _UNICODE_SPACES.sub(" ", text)
    text = _DASHES.sub("-", text)
    text = _SINGLE_QUOTES.sub("'", text)
    text = _DOUBLE_QUOTES.sub('"', text)
    text = _BULLETS.sub("* ", text)
    text = _CONTROL_CHARS.sub("", text)
    text = _LATEX_SPECIAL.sub(lambda match: LATEX_SPECIAL_CHARS[match.group(0)], text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()
