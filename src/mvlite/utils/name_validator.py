"""Identifier validation and quoting for mvlite.

View names arrive from callers and become physical table names, while column
names arrive from query metadata. The former are held to a strict allow-list;
the latter are quoted wherever they are spliced into SQL.
"""

import re


# View/registry names: no hyphens, must start with a letter
VALID_TABLE_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*[a-z0-9]$|^[a-z]$")

MAX_NAME_LENGTH = 63

# SQLite keeps its own catalog under this prefix
RESERVED_PREFIXES = ("sqlite_",)


class InvalidNameError(ValueError):
    """Raised when a name doesn't meet validation requirements."""

    pass


def validate_name(name: str, entity_type: str = "view") -> None:
    """Validate that a name can be used as a view or registry table name.

    Valid names must:
    - Contain only lowercase letters (a-z), numbers (0-9) and underscore (_)
    - Start with a letter and end with a letter or number
    - Not exceed 63 characters
    - Not use SQLite's reserved ``sqlite_`` prefix
    - Not contain consecutive underscores

    Args:
        name: The name to validate
        entity_type: Type of entity (view, table) for error messages

    Raises:
        InvalidNameError: If the name is invalid
    """
    if not name:
        raise InvalidNameError(f"{entity_type.capitalize()} name cannot be empty")

    if len(name) > MAX_NAME_LENGTH:
        raise InvalidNameError(
            f"{entity_type.capitalize()} name cannot exceed {MAX_NAME_LENGTH} characters"
        )

    # Check for null bytes and other control characters
    if "\x00" in name or any(ord(c) < 32 for c in name):
        raise InvalidNameError(
            f"Security violation: {entity_type} name contains invalid control characters"
        )

    if name != name.lower():
        raise InvalidNameError(
            f"{entity_type.capitalize()} name must be lowercase. "
            f"Use '{name.lower()}' instead of '{name}'"
        )

    if not VALID_TABLE_NAME_PATTERN.match(name):
        raise InvalidNameError(
            f"Invalid {entity_type} name '{name}'. "
            f"{entity_type.capitalize()} names must contain only lowercase letters (a-z), "
            f"numbers (0-9), and underscore (_). "
            f"Names must start with a letter and end with a letter or number."
        )

    if "__" in name:
        raise InvalidNameError(
            f"Invalid {entity_type} name '{name}'. "
            f"Names cannot contain consecutive underscores."
        )

    if name.startswith(RESERVED_PREFIXES):
        raise InvalidNameError(
            f"'{name}' uses a reserved prefix and cannot be used as a {entity_type} name"
        )


def is_valid_name(name: str) -> bool:
    """Check if a name is valid without raising an exception.

    Args:
        name: The name to check

    Returns:
        True if valid, False otherwise
    """
    try:
        validate_name(name)
        return True
    except InvalidNameError:
        return False


def quote_identifier(name: str) -> str:
    """Quote an identifier for use in SQLite DDL/DML.

    Embedded double quotes are doubled, so any column name reported by a
    result set (``COUNT(*)``, ``a "b"``, ``select``) yields a single valid
    identifier token.

    Raises:
        InvalidNameError: If the name is empty or contains a NUL byte
    """
    if not name:
        raise InvalidNameError("Identifier cannot be empty")
    if "\x00" in name:
        raise InvalidNameError("Identifier contains a NUL byte")
    return '"' + name.replace('"', '""') + '"'
