import re

LEADING_INSERT_RE = re.compile(r"^(\s*)INSERT\s+INTO\b", re.IGNORECASE)


def to_replace_into(text: str) -> str:
    """
    Turn a statement starting with INSERT INTO into REPLACE INTO.

    Only the leading keyword pair is touched; anything else, including
    "INSERT INTO" appearing inside the row data, is left alone.
    """
    return LEADING_INSERT_RE.sub(r"\1REPLACE INTO", text, count=1)
