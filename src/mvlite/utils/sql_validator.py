"""SQL Query Validator for mvlite.

A defining query is spliced into ``INSERT INTO ... SELECT * FROM (<query>)``,
so it must be exactly one read statement.
"""

import re
from typing import Tuple, Optional
from enum import Enum


class SQLOperation(Enum):
    """Statement kinds allowed as a defining query."""

    SELECT = "SELECT"
    WITH = "WITH"
    VALUES = "VALUES"


# Keywords that turn a WITH clause into a write
WRITE_KEYWORDS = ("INSERT", "UPDATE", "DELETE", "REPLACE")

_STATEMENT_KEYWORDS = ("SELECT", "VALUES") + WRITE_KEYWORDS
_TOKEN = re.compile(r"[()]|\w+")

_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")
_QUOTED_IDENTIFIER = re.compile(r'"(?:[^"]|"")*"')


class SQLValidationError(Exception):
    """Raised when SQL query validation fails."""

    pass


def normalize_query(query: str) -> str:
    """Strip surrounding whitespace and trailing semicolons from a query."""
    normalized = query.strip()
    while normalized.endswith(";"):
        normalized = normalized[:-1].rstrip()
    return normalized


def _mask(query: str) -> str:
    """Blank out comments, literals and quoted identifiers for keyword scans."""
    masked = re.sub(r"--.*$", " ", query, flags=re.MULTILINE)
    masked = re.sub(r"/\*[\s\S]*?\*/", " ", masked)
    masked = _STRING_LITERAL.sub("''", masked)
    masked = _QUOTED_IDENTIFIER.sub('""', masked)
    masked = re.sub(r"\s+", " ", masked)
    return masked.strip().upper()


def _main_statement(masked: str) -> Optional[str]:
    """Return the keyword of the statement that follows a WITH clause's CTE list.

    CTE bodies sit inside parentheses, so the main statement is the first
    statement keyword found at nesting depth zero.
    """
    depth = 0
    for token in _TOKEN.findall(masked):
        if token == "(":
            depth += 1
        elif token == ")":
            depth -= 1
        elif depth == 0 and token in _STATEMENT_KEYWORDS:
            return token
    return None


def validate_sql_query(
    query: str,
) -> Tuple[bool, Optional[str], Optional[SQLOperation]]:
    """Validate that a query is a single read statement.

    Args:
        query: The SQL query to validate

    Returns:
        Tuple of (is_valid, error_message, operation)
    """
    if not query or not query.strip():
        return False, "Query cannot be empty", None

    masked = _mask(normalize_query(query))
    if not masked:
        return False, "Query cannot be empty after removing comments", None

    if ";" in masked:
        return (
            False,
            "Multiple statements are not allowed in a view definition.",
            None,
        )

    first_word = masked.split()[0].split("(")[0]
    try:
        operation = SQLOperation(first_word)
    except ValueError:
        return (
            False,
            f"{first_word} statements cannot define a view. "
            f"Only SELECT, WITH and VALUES queries are permitted.",
            None,
        )

    if operation is SQLOperation.WITH:
        keyword = _main_statement(masked)
        if keyword in WRITE_KEYWORDS:
            return (
                False,
                f"CTE (WITH clause) containing {keyword} is not allowed.",
                None,
            )

    return True, None, operation


def validate_query_safe(query: str) -> str:
    """Validate a defining query and return its normalized text.

    Raises:
        SQLValidationError: If the query is invalid
    """
    is_valid, error_message, _ = validate_sql_query(query)
    if not is_valid:
        raise SQLValidationError(error_message)
    return normalize_query(query)
