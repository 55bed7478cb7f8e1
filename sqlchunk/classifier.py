"""
Line-oriented classification of mysqldump output.

This is a lexical scanner, not a SQL parser. A statement ends on the first
line whose last non-whitespace character is a semicolon, so a semicolon at
the end of a line inside a quoted string literal will end the statement early.
"""

import re

from .types import Action, Classification, ParserMode

INSERT_RE = re.compile(r"^\s*INSERT\s+INTO\b", re.IGNORECASE)
REPLACE_RE = re.compile(r"^\s*REPLACE\s+INTO\b", re.IGNORECASE)
LOCK_RE = re.compile(r"^\s*LOCK\s+TABLES\b", re.IGNORECASE)
UNLOCK_RE = re.compile(r"^\s*UNLOCK\s+TABLES\b", re.IGNORECASE)
CREATE_TABLE_RE = re.compile(
    r"^\s*CREATE\s+(?:TEMPORARY\s+)?TABLE\b", re.IGNORECASE
)
DDL_RE = re.compile(r"^\s*(?:CREATE|ALTER|DROP)\b", re.IGNORECASE)
COMMENT_RE = re.compile(r"^\s*(?:--|#)")


def ends_statement(line: str) -> bool:
    return line.rstrip().endswith(";")


def is_comment_or_blank(line: str) -> bool:
    return line.strip() == "" or COMMENT_RE.match(line) is not None


def line_classification(line: str) -> Classification:
    """
    Classify a line as if it were the first line of a statement.
    """
    if is_comment_or_blank(line):
        return "COMMENT_OR_BLANK"
    if INSERT_RE.match(line):
        return "INSERT"
    if REPLACE_RE.match(line):
        return "REPLACE"
    if LOCK_RE.match(line):
        return "LOCK_TABLES"
    if UNLOCK_RE.match(line):
        return "UNLOCK_TABLES"
    if CREATE_TABLE_RE.match(line):
        return "CREATE_TABLE"
    if DDL_RE.match(line):
        return "OTHER_DDL"
    return "UNRECOGNIZED"


def classify(line: str, state: ParserMode, keep_unrecognized: bool = False) -> Action:
    """
    Decide what to do with the next physical line given the parser state.

    While a statement is open every line belongs to it, comments and blanks
    included, until a line ends with a semicolon. While idle, INSERT/REPLACE
    and DDL open a statement, LOCK/UNLOCK TABLES and comments pass straight
    through, and anything else is dropped unless `keep_unrecognized` is set.
    """
    if state == "inside-statement":
        return Action("end" if ends_statement(line) else "continue", None)

    classification = line_classification(line)
    if classification in ("INSERT", "REPLACE", "CREATE_TABLE", "OTHER_DDL"):
        return Action("start", classification, complete=ends_statement(line))
    if classification in ("LOCK_TABLES", "UNLOCK_TABLES", "COMMENT_OR_BLANK"):
        return Action("passthrough", classification)
    if keep_unrecognized:
        return Action("passthrough", classification)
    return Action("drop", classification)
