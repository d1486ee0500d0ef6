"""Type utilities for mapping result-set column types to storage types."""

from typing import Any, Optional

SEMANTIC_TYPES = ("INTEGER", "REAL", "TEXT", "BLOB")

DEFAULT_TYPE = "TEXT"

# Exact names, checked before the family rules below
TYPE_MAPPING = {
    "INTEGER": "INTEGER",
    "INT": "INTEGER",
    "BIGINT": "INTEGER",
    "BOOLEAN": "INTEGER",
    "BOOL": "INTEGER",
    "REAL": "REAL",
    "FLOAT": "REAL",
    "DOUBLE": "REAL",
    "NUMERIC": "REAL",
    "NUM": "REAL",
    "TEXT": "TEXT",
    "STRING": "TEXT",
    "BLOB": "BLOB",
    "BINARY": "BLOB",
    "BYTES": "BLOB",
}

# Substring families, in SQLite's affinity order
TYPE_FAMILIES = (
    ("INT", "INTEGER"),
    ("CHAR", "TEXT"),
    ("CLOB", "TEXT"),
    ("TEXT", "TEXT"),
    ("BLOB", "BLOB"),
    ("BINARY", "BLOB"),
    ("REAL", "REAL"),
    ("FLOA", "REAL"),
    ("DOUB", "REAL"),
    ("DECIMAL", "REAL"),
)


def semantic_type(native_type: Optional[str]) -> str:
    """
    Map a native column type name to one of INTEGER, REAL, TEXT, BLOB.

    Unknown or empty names map to TEXT, so this never raises.

    Args:
        native_type: Declared type as reported by the store, e.g. ``VARCHAR(20)``

    Returns:
        The semantic storage type
    """
    if not native_type:
        return DEFAULT_TYPE

    normalized = native_type.strip().upper()
    if normalized in TYPE_MAPPING:
        return TYPE_MAPPING[normalized]

    for marker, mapped in TYPE_FAMILIES:
        if marker in normalized:
            return mapped

    return DEFAULT_TYPE


def storage_class(value: Any) -> Optional[str]:
    """
    Return the SQLite storage class name for a Python value.

    Args:
        value: A value read from a result set

    Returns:
        INTEGER, REAL, TEXT or BLOB, or None for NULL
    """
    if value is None:
        return None
    # bool is an int subclass; SQLite stores it as 0/1
    if isinstance(value, int):
        return "INTEGER"
    if isinstance(value, float):
        return "REAL"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "BLOB"
    return "TEXT"
