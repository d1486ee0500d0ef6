"""Error taxonomy for materialized view operations."""

from typing import Optional


class MaterializedViewError(Exception):
    """Base class for all mvlite errors.

    Attributes:
        statement: The SQL statement that failed, when there is one
    """

    def __init__(self, message: str, statement: Optional[str] = None):
        super().__init__(message)
        self.statement = statement

    def __str__(self) -> str:
        message = super().__str__()
        if self.__cause__ is not None:
            message = f"{message}: {self.__cause__}"
        return message


class StoreError(MaterializedViewError):
    """Raised when the registry's own storage cannot be prepared or read."""

    pass


class QueryError(MaterializedViewError):
    """Raised when a defining query fails to execute or be introspected."""

    pass


class DDLError(MaterializedViewError):
    """Raised when a backing table cannot be created."""

    pass


class SchemaDriftError(DDLError):
    """Raised when a backing table's columns no longer match its query."""

    pass


class TransactionError(MaterializedViewError):
    """Raised when the register/truncate/insert phase fails and is rolled back."""

    pass


class NotFoundError(MaterializedViewError, LookupError):
    """Raised when no active definition exists for a view name."""

    pass
