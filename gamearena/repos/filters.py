"""
Shared query filter helpers
"""

LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """
    LIKE pattern matching term as a literal substring; use with
    escape=LIKE_ESCAPE so % and _ in user input match themselves.
    """
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
